"""Small numeric helpers shared by the colony engine."""

from __future__ import annotations

import math


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into ``[lower, upper]``."""
    return max(lower, min(upper, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def non_negative(value: float) -> float:
    """Return ``value`` or zero for negative and NaN inputs."""
    if value != value or value < 0.0:
        return 0.0
    return float(value)


def saturating(value: float, half_saturation: float) -> float:
    """Michaelis-Menten style curve in ``[0, 1)``; reaches 0.5 at ``half_saturation``."""
    denominator = value + half_saturation
    if denominator <= 0.0:
        return 0.0
    return value / denominator


def asymptotic_uplift(value: float, scale: float) -> float:
    """Return ``1 - e^(-value/scale)``, rising from 0 towards 1."""
    return 1.0 - math.exp(-value / max(scale, 0.0001))


def gaussian(value: float, centre: float, sigma: float) -> float:
    """Unnormalised bell curve peaking at 1.0 when ``value == centre``."""
    width = max(sigma, 0.0001)
    return math.exp(-((value - centre) ** 2) / (2.0 * width * width))
