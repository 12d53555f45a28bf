"""Colony statistics aggregation helpers."""

from __future__ import annotations

import math
from typing import Dict

from ..simulation.state import SimulationState
from ..simulation.tuning import DEFAULT_TUNING, SimTuning


def collect_colony_stats(state: SimulationState, tuning: SimTuning = DEFAULT_TUNING) -> Dict[str, object]:
    """Return derived figures for presentation; never mutates ``state``."""

    whole_population = int(math.floor(state.population))
    effective_pop = max(1, whole_population)
    daily_consumption = max(effective_pop * tuning.ration_per_person_per_day, 0.0001)

    stats: Dict[str, object] = {
        "day": state.current_day_index,
        "population": whole_population,
        "housing_capacity": int(math.floor(state.housing_capacity)),
        "free_beds": int(math.floor(state.housing_capacity - effective_pop)),
        "food_stock": round(state.food_stock_rations, 2),
        "buffer_days": state.food_stock_rations / daily_consumption,
        "rations_per_capita": state.food_stock_rations / effective_pop,
        "greenhouses": int(state.greenhouse_count),
        "greenhouses_per_capita": state.greenhouse_count / effective_pop,
        "schools": int(state.school_count),
        "school_target": int(math.floor(effective_pop / max(1.0, tuning.students_per_school))),
        "technology_level": state.technology_level,
        "explored_km": state.explored_radius_km,
        "build_points": state.build_points,
        "science_points": state.science_points,
        "science_progress": state.science_points / max(tuning.science_breakthrough_threshold, 0.0001),
        "queue": [building.display_name for building in state.build_queue],
        "active_build": None,
        "active_build_percent": 0,
        "log_entries": len(state.event_log),
    }

    if state.active_build is not None:
        total = max(1, state.active_build_total_days)
        done = total - state.active_build_days_remaining
        stats["active_build"] = state.active_build.display_name
        stats["active_build_percent"] = int(round(100 * done / total))

    return stats
