"""Tick-based transition function for the colony."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Dict, Optional, Sequence

from ..systems.events import EventGenerator
from ..utils.math_utils import asymptotic_uplift, clamp, clamp01, gaussian, non_negative, saturating
from .catalog import BUILDING_CATALOG, BuildingSpec
from .planning import best_spec_for, desired_build_kind
from .state import BuildKind, DailyHealthMetrics, HealthContributions, SimulationState
from .tuning import DEFAULT_TUNING, SimTuning

logger = logging.getLogger("lira.engine")

PROGRESS_MARKS = (0.25, 0.5, 0.75)
FOOD_EVENT_THRESHOLD = 2.0


@dataclass
class EngineProgress:
    """Carry-over between calls; belongs to exactly one state."""

    build_day_accumulator: float = 0.0
    day_progress: float = 0.0
    explored_today_km: float = 0.0
    todays_contributions: HealthContributions = field(default_factory=HealthContributions)

    def to_dict(self) -> Dict[str, object]:
        return {
            "build_day_accumulator": self.build_day_accumulator,
            "day_progress": self.day_progress,
            "explored_today_km": self.explored_today_km,
            "todays_contributions": asdict(self.todays_contributions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "EngineProgress":
        return cls(
            build_day_accumulator=float(data.get("build_day_accumulator", 0.0)),
            day_progress=float(data.get("day_progress", 0.0)),
            explored_today_km=float(data.get("explored_today_km", 0.0)),
            todays_contributions=HealthContributions.from_dict(dict(data.get("todays_contributions", {}))),
        )


def _sanitize(metrics: Optional[DailyHealthMetrics]) -> DailyHealthMetrics:
    if metrics is None:
        return DailyHealthMetrics.zero()
    cleaned = DailyHealthMetrics(
        steps=non_negative(metrics.steps),
        daylight_minutes=non_negative(metrics.daylight_minutes),
        exercise_minutes=non_negative(metrics.exercise_minutes),
        sleep_hours=non_negative(metrics.sleep_hours),
    )
    if cleaned != metrics:
        logger.warning("Negative or invalid health metrics clamped: %s", metrics)
    return cleaned


class SimulationEngine:
    """Advance a :class:`SimulationState` by fractions of an in-game day.

    The engine is pure apart from :attr:`progress`, which must stay paired
    with the one state it advances. Call :meth:`reset` before driving a
    different state.
    """

    def __init__(
        self,
        tuning: SimTuning = DEFAULT_TUNING,
        *,
        catalog: Sequence[BuildingSpec] = BUILDING_CATALOG,
        events: Optional[EventGenerator] = None,
        progress: Optional[EngineProgress] = None,
    ) -> None:
        self.tuning = tuning
        self.catalog = tuple(catalog)
        self.events = events or EventGenerator()
        self.progress = progress or EngineProgress()

    def reset(self) -> None:
        self.progress = EngineProgress()

    def advance_one_day(self, state: SimulationState, health: Optional[DailyHealthMetrics] = None) -> None:
        """Simulate one full in-game day; ``health`` holds whole-day totals."""
        self.advance_fraction_of_day(state, health, 1.0, emit_daily_summary=True)

    def advance_fraction_of_day(
        self,
        state: SimulationState,
        health_deltas: Optional[DailyHealthMetrics] = None,
        fraction_of_day: float = 1.0,
        *,
        emit_daily_summary: bool = False,
    ) -> None:
        """Advance ``state`` by ``fraction_of_day`` using activity since the last call.

        Steps, daylight and exercise in ``health_deltas`` are deltas since the
        previous call; sleep is last night's full value and only counts once
        per in-game day. The day closes when ``emit_daily_summary`` is set or
        once the accumulated fraction reaches a whole day.
        """
        fraction = clamp01(fraction_of_day) if fraction_of_day == fraction_of_day else 0.0
        if fraction != fraction_of_day:
            logger.warning("Fraction of day %s clamped to %s", fraction_of_day, fraction)
        if fraction == 0.0:
            return
        metrics = _sanitize(health_deltas)
        tuning = self.tuning
        contributions = HealthContributions()
        day = state.current_day_index

        # Exploration
        previous_explored = state.explored_radius_km
        steps_km = tuning.exploration_from_steps_scale * tuning.step_length_km_per_step * metrics.steps
        passive_km = tuning.passive_exploration_km_per_day * tuning.exploration_passive_scale * fraction
        contributions.steps_exploration_km = steps_km
        contributions.passive_exploration_km = passive_km
        tech_scale = 1.0 + tuning.exploration_tech_multiplier_per_level * state.technology_level
        state.explored_radius_km += (steps_km + passive_km) * tech_scale
        self._exploration_events(state, day, previous_explored)

        # Food
        effective_pop = math.floor(state.population)
        effective_beds = math.floor(state.housing_capacity)
        sunlight = max(
            1.0,
            1.0 + tuning.sunlight_multiplier_alpha
            * saturating(metrics.daylight_minutes, tuning.sunlight_half_saturation_minutes),
        )
        contributions.sunlight_yield_multiplier = sunlight
        yield_per_day = self._food_yield(state, effective_pop, sunlight)
        consumption_per_day = effective_pop * tuning.ration_per_person_per_day

        previous_food = state.food_stock_rations
        state.food_stock_rations = max(0.0, previous_food + (yield_per_day - consumption_per_day) * fraction)
        shortage = state.food_stock_rations == 0.0
        if shortage and previous_food > 0.0:
            self.events.growth_paused_for_food(state, day)
        net_food = (yield_per_day - consumption_per_day) * fraction
        if net_food > FOOD_EVENT_THRESHOLD:
            self.events.food_surplus(state, day, int(round(net_food)))
        elif net_food < -FOOD_EVENT_THRESHOLD:
            self.events.food_deficit(state, day, int(round(-net_food)))
        surplus_ratio = clamp(
            (yield_per_day - consumption_per_day) / max(consumption_per_day, 1.0), -1.0, 1.0
        )

        # Construction
        if not state.build_queue:
            self._plan_next_build(state, day)
        exercise_points = tuning.build_per_sqrt_exercise * math.sqrt(metrics.exercise_minutes)
        passive_points = tuning.base_build_points_per_day * fraction
        contributions.exercise_build_points = exercise_points
        contributions.passive_build_points = passive_points
        build_scale = 1.0 + tuning.build_tech_bonus_per_level * state.technology_level
        state.build_points += (passive_points + exercise_points) * build_scale
        self._advance_construction(state, day, fraction)

        # Science
        todays = self.progress.todays_contributions
        if metrics.sleep_hours > 0.0 and todays.sleep_science == 0.0:
            contributions.sleep_science = tuning.science_per_sleep_quality * gaussian(
                metrics.sleep_hours, tuning.sleep_optimal_hours, tuning.sleep_sigma
            )
        daylight_cap_left = max(0.0, tuning.daylight_science_cap_per_day - todays.daylight_science)
        contributions.daylight_science = min(
            daylight_cap_left, tuning.daylight_science_per_hour * metrics.daylight_minutes / 60.0
        )
        contributions.passive_science = tuning.passive_science_points_per_day * fraction
        science_scale = 1.0 + tuning.science_tech_bonus_per_level * state.technology_level
        state.science_points += (
            contributions.passive_science + contributions.sleep_science + contributions.daylight_science
        ) * science_scale
        threshold = max(tuning.science_breakthrough_threshold, 0.0001)
        if state.science_points >= threshold:
            state.science_points -= threshold
            state.technology_level += 1.0
            logger.info("Day %d breakthrough, technology level %.1f", day, state.technology_level)
            self.events.breakthrough(state, day, int(state.technology_level))

        # Population
        self._grow_population(state, day, effective_pop, effective_beds, surplus_ratio, shortage, fraction)

        self.progress.explored_today_km += state.explored_radius_km - previous_explored
        self._close_day_if_due(state, contributions, fraction, emit_daily_summary)

    # Steps ------------------------------------------------------------

    def _exploration_events(self, state: SimulationState, day: int, previous_explored: float) -> None:
        previous_km = math.floor(previous_explored)
        new_km = math.floor(state.explored_radius_km)
        for km in range(previous_km + 1, new_km + 1):
            self.events.exploration_milestone(state, day, km)
        delta_km = max(0.0, state.explored_radius_km - previous_explored)
        if int(delta_km) >= 1:
            self.events.exploration_daily(state, day, delta_km, state.explored_radius_km)

    def _food_yield(self, state: SimulationState, effective_pop: int, sunlight: float) -> float:
        tuning = self.tuning
        variety = 1.0 + tuning.crop_variety_max_uplift * asymptotic_uplift(
            state.explored_radius_km, tuning.crop_variety_radius_scale_km
        )
        tech_bonus = 1.0 + tuning.yield_tech_bonus_per_level * state.technology_level
        buffer_per_capita = state.food_stock_rations / effective_pop if effective_pop > 0 else state.food_stock_rations
        start = max(1.0, tuning.food_soft_cap_start_days)
        if buffer_per_capita <= start:
            soft_cap = 1.0
        else:
            soft_cap = max(0.5, 1.0 / (1.0 + tuning.food_soft_cap_strength * ((buffer_per_capita - start) / start)))
        return state.greenhouse_count * tuning.base_yield_per_greenhouse * tech_bonus * variety * sunlight * soft_cap

    def _plan_next_build(self, state: SimulationState, day: int) -> None:
        kind = desired_build_kind(state, self.catalog, self.tuning)
        if kind is None:
            self.events.idle_builders(state, day)
            return
        spec = best_spec_for(kind, self.catalog, state.technology_level)
        if spec is None:
            self.events.idle_builders(state, day)
            return
        state.build_queue.append(spec.instantiate())
        logger.debug("Day %d planned %s", day, spec.display_name)
        self.events.construction_planned(state, day, spec.display_name)

    def _advance_construction(self, state: SimulationState, day: int, fraction: float) -> None:
        active = state.active_build
        if active is None:
            if state.build_queue and state.build_points >= state.build_queue[0].cost_points:
                upcoming = state.build_queue.pop(0)
                state.build_points -= upcoming.cost_points
                total_days = int(max(1.0, upcoming.min_tech_level))
                state.active_build = upcoming
                state.active_build_total_days = total_days
                state.active_build_days_remaining = total_days
                self.progress.build_day_accumulator = 0.0
                logger.info("Day %d started %s (%d days)", day, upcoming.display_name, total_days)
                self.events.construction_started(state, day, upcoming.display_name, total_days)
            return

        total = max(1, state.active_build_total_days)
        before = state.active_build_days_remaining
        remaining = before
        self.progress.build_day_accumulator += fraction
        while self.progress.build_day_accumulator >= 1.0 and remaining > 0:
            remaining -= 1
            self.progress.build_day_accumulator -= 1.0
        state.active_build_days_remaining = max(0, remaining)

        done_before = 1.0 - before / total
        done_after = 1.0 - state.active_build_days_remaining / total
        for mark in PROGRESS_MARKS:
            if done_before < mark <= done_after:
                self.events.construction_progress(state, day, active.display_name, int(mark * 100))

        if state.active_build_days_remaining > 0:
            return
        if active.kind is BuildKind.HOUSE:
            beds = 4.0 * (1.0 + active.min_tech_level)
            state.housing_capacity += beds
            self.events.built_house(state, day, active.display_name, int(beds))
        elif active.kind is BuildKind.GREENHOUSE:
            state.greenhouse_count += 1.0
            self.events.built_greenhouse(state, day, active.display_name)
        else:
            state.technology_level += 0.5
            state.school_count += 1.0
            self.events.opened_school(state, day, active.display_name)
            if state.school_count == 1.0:
                self.events.celebrate(state, day, "First lessons held, the colony has a school")
        logger.info("Day %d completed %s", day, active.display_name)
        state.active_build = None
        state.active_build_total_days = 0

    def _grow_population(
        self,
        state: SimulationState,
        day: int,
        effective_pop: int,
        effective_beds: int,
        surplus_ratio: float,
        shortage: bool,
        fraction: float,
    ) -> None:
        tuning = self.tuning
        capacity_factor = clamp01((effective_beds - effective_pop) / max(effective_pop, 1))
        food_factor = clamp01(0.55 + 0.45 * surplus_ratio)
        base_births = tuning.base_population_growth_rate * (state.population / 2.0) * capacity_factor * food_factor

        if effective_pop > 0:
            buffer_days = state.food_stock_rations / max(effective_pop * tuning.ration_per_person_per_day, 0.0001)
        else:
            buffer_days = 0.0
        target = tuning.food_buffer_target_days
        comfort_at = max(target + 0.1, tuning.births_comfort_at_days)
        comfort = 1.0 + tuning.births_comfort_bonus_max * clamp01((buffer_days - target) / (comfort_at - target))

        births = 0.0 if shortage else base_births * comfort * fraction
        previous_population = state.population
        state.population = max(0.0, state.population + births)
        arrived = math.floor(state.population) - math.floor(previous_population)
        if arrived > 0:
            self.events.arrivals(state, day, int(arrived))

    def _close_day_if_due(
        self,
        state: SimulationState,
        contributions: HealthContributions,
        fraction: float,
        emit_daily_summary: bool,
    ) -> None:
        progress = self.progress
        progress.todays_contributions.accumulate(contributions)
        progress.day_progress += fraction
        if not emit_daily_summary and progress.day_progress < 1.0 - 1e-9:
            state.last_contributions = progress.todays_contributions.copy()
            return

        day = state.current_day_index
        self.events.exploration_daily(state, day, progress.explored_today_km, state.explored_radius_km)
        if math.floor(state.housing_capacity) - math.floor(state.population) <= 0:
            self.events.population_cap_reached(state, day)
        self.events.auto_daily(state, day)
        state.current_day_index += 1
        logger.debug("Closed day %d (population %.2f, food %.2f)", day, state.population, state.food_stock_rations)

        state.last_contributions = progress.todays_contributions
        progress.todays_contributions = HealthContributions()
        progress.explored_today_km = 0.0
        progress.day_progress = 0.0 if emit_daily_summary else max(0.0, progress.day_progress - 1.0)
