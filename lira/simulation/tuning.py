"""Tuning knobs for the colony engine.

Every rate, curve parameter and policy threshold the engine reads lives on
:class:`SimTuning`. Instances are frozen; swap in a different snapshot with
:meth:`SimTuning.with_updates` or :func:`load_tuning` rather than editing
the defaults.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger("lira.tuning")


@dataclass(frozen=True)
class SimTuning:
    # Passive progress, earned even with zero health metrics
    passive_exploration_km_per_day: float = 0.15
    passive_science_points_per_day: float = 1.5
    base_build_points_per_day: float = 3.0

    # Exploration
    exploration_passive_scale: float = 0.5
    step_length_km_per_step: float = 0.0007
    exploration_from_steps_scale: float = 0.6
    exploration_tech_multiplier_per_level: float = 0.03

    # Sunlight -> crops; zero daylight never penalises
    sunlight_multiplier_alpha: float = 0.6
    sunlight_half_saturation_minutes: float = 120.0

    # Construction
    build_per_sqrt_exercise: float = 0.7
    build_tech_bonus_per_level: float = 0.08

    # Science
    science_per_sleep_quality: float = 1.0
    sleep_optimal_hours: float = 7.5
    sleep_sigma: float = 1.2
    daylight_science_per_hour: float = 0.2
    daylight_science_cap_per_day: float = 0.8
    science_tech_bonus_per_level: float = 0.05
    science_breakthrough_threshold: float = 30.0

    # Food
    ration_per_person_per_day: float = 1.0
    base_yield_per_greenhouse: float = 3.0
    yield_tech_bonus_per_level: float = 0.05
    crop_variety_max_uplift: float = 0.5
    crop_variety_radius_scale_km: float = 10.0
    food_buffer_target_days: float = 1.3
    food_soft_cap_start_days: float = 10.0
    food_soft_cap_strength: float = 0.6

    # Population
    base_population_growth_rate: float = 0.15
    births_comfort_bonus_max: float = 0.25
    births_comfort_at_days: float = 12.0

    # Planning guards
    housing_overbuild_beds: float = 6.0
    greenhouses_per_capita_target: float = 2.0
    students_per_school: float = 12.0

    def with_updates(self, overrides: Dict[str, Any]) -> "SimTuning":
        merged = asdict(self)
        merged.update(overrides)
        _validate_tuning_dict(merged)
        return SimTuning(**merged)


DEFAULT_TUNING = SimTuning()


def _validate_tuning_dict(values: Dict[str, Any]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Tuning field {key} must be numeric, got {value!r}")
        if value < 0:
            raise ValueError(f"Tuning field {key} cannot be negative, got {value}")
        values[key] = float(value)
    if values["science_breakthrough_threshold"] <= 0:
        raise ValueError("science_breakthrough_threshold must be positive")


def load_tuning(path: Path | str | None, base: SimTuning = DEFAULT_TUNING) -> SimTuning:
    """Return ``base`` with the overrides found in the YAML file at ``path``."""
    if not path:
        return base
    tuning_path = Path(path).expanduser()
    if not tuning_path.exists():
        raise FileNotFoundError(f"Tuning file not found: {tuning_path}")
    with tuning_path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as error:
            raise ValueError(f"Invalid YAML in tuning file {tuning_path}") from error
    if not isinstance(data, dict):
        raise ValueError(f"Tuning file {tuning_path} must define a mapping")
    valid_fields = set(SimTuning.__dataclass_fields__.keys())
    overrides: Dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key).lower()
        if key not in valid_fields:
            raise ValueError(f"Unknown tuning field: {raw_key}")
        overrides[key] = value
    logger.info("Loaded %d tuning overrides from %s", len(overrides), tuning_path)
    return base.with_updates(overrides)
