"""Constant values for the colony simulation."""

from __future__ import annotations

SECONDS_PER_DAY = 86_400.0
DEV_TICK_INTERVAL_SECONDS = 3.0

MAX_LOG_LINES = 500

# Fresh colony on touchdown.
STARTING_COLONY = {
    "current_day_index": 1,
    "population": 8.0,
    "food_stock_rations": 55.0,
    "housing_capacity": 12.0,
    "science_points": 0.0,
    "explored_radius_km": 0.0,
    "technology_level": 0.0,
    "greenhouse_count": 1.0,
    "school_count": 0.0,
    "build_points": 10.0,
}
