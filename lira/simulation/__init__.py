"""Simulation package: colony state, tuning, engine and the wall-clock driver."""

from __future__ import annotations

__all__ = [
    "bootstrap",
    "catalog",
    "clock",
    "engine",
    "loop",
    "planning",
    "state",
    "tuning",
]
