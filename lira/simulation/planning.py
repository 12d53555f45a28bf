"""Choose what the builders should queue next."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from .catalog import BuildingSpec, unlocked
from .state import BuildKind, SimulationState
from .tuning import SimTuning


def desired_build_kind(
    state: SimulationState,
    catalog: Sequence[BuildingSpec],
    tuning: SimTuning,
) -> Optional[BuildKind]:
    """Return the first kind whose guard holds, or ``None`` when builders may idle.

    Guards are checked in priority order: food security, then beds, then
    schooling. A kind only qualifies when the catalog has an entry unlocked
    at the colony's current technology level.
    """
    eligible_kinds = {spec.kind for spec in unlocked(catalog, state.technology_level)}
    effective_pop = max(1.0, math.floor(state.population))
    daily_consumption = max(effective_pop * tuning.ration_per_person_per_day, 0.0001)
    buffer_days = state.food_stock_rations / daily_consumption
    free_beds = math.floor(state.housing_capacity - effective_pop)

    if (
        buffer_days < tuning.food_buffer_target_days
        and state.greenhouse_count < tuning.greenhouses_per_capita_target * effective_pop
        and BuildKind.GREENHOUSE in eligible_kinds
    ):
        return BuildKind.GREENHOUSE

    overbuild_guard = state.housing_capacity < effective_pop + tuning.housing_overbuild_beds
    if free_beds < 2 and overbuild_guard and BuildKind.HOUSE in eligible_kinds:
        return BuildKind.HOUSE

    target_schools = math.floor(effective_pop / max(1.0, tuning.students_per_school))
    if state.school_count < target_schools and BuildKind.SCHOOL in eligible_kinds:
        return BuildKind.SCHOOL

    return None


def best_spec_for(
    kind: BuildKind,
    catalog: Sequence[BuildingSpec],
    technology_level: float,
) -> Optional[BuildingSpec]:
    """Highest-tier unlocked catalog entry of ``kind``."""
    candidates = [spec for spec in unlocked(catalog, technology_level) if spec.kind is kind]
    if not candidates:
        return None
    return max(candidates, key=lambda spec: spec.min_tech_level)
