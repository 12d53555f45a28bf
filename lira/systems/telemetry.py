"""Runtime telemetry helpers for colony diagnostics."""

from __future__ import annotations

import json
import os
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from ..config import settings
from ..simulation.state import SimulationState


@dataclass(slots=True)
class DailySample:
    day: int
    population: float
    housing_capacity: float
    food_stock_rations: float
    greenhouse_count: float
    school_count: float
    technology_level: float
    explored_radius_km: float
    build_points: float
    science_points: float
    queue_length: int
    active_build: Optional[str]
    active_build_days_remaining: int
    steps_exploration_km: float
    exercise_build_points: float
    sleep_science: float
    daylight_science: float
    sunlight_yield_multiplier: float


class TelemetrySink:
    """Buffered JSONL telemetry writer."""

    def __init__(self, kind: str, *, directory: Optional[Path] = None, flush_interval: int = 32) -> None:
        base = directory or Path(settings.LOG_DIRECTORY) / "telemetry"
        base.mkdir(parents=True, exist_ok=True)
        # Timestamped name so runs never overwrite each other
        timestamp = int(time.time())
        self.path = base / f"{kind}_{timestamp}.jsonl"
        self._buffer: list[dict] = []
        self._lock = threading.Lock()
        self._flush_interval = max(1, flush_interval)
        self._counter = 0

    def write(self, payload: DailySample) -> None:
        with self._lock:
            self._buffer.append(asdict(payload))
            self._counter += 1
            if self._counter >= self._flush_interval:
                self._flush_locked()

    def flush(self) -> None:
        with self._lock:
            self._flush_locked()

    def _flush_locked(self) -> None:
        if not self._buffer:
            self._counter = 0
            return
        with self.path.open("a", encoding="utf-8") as handle:
            for row in self._buffer:
                handle.write(json.dumps(row, ensure_ascii=False) + os.linesep)
        self._buffer.clear()
        self._counter = 0


_daily_sink: Optional[TelemetrySink] = None


def enable_telemetry(*, directory: Optional[Path] = None, flush_interval: int = 32) -> TelemetrySink:
    global _daily_sink
    if _daily_sink is None:
        _daily_sink = TelemetrySink("daily", directory=directory, flush_interval=flush_interval)
    return _daily_sink


def disable_telemetry() -> None:
    global _daily_sink
    if _daily_sink is not None:
        _daily_sink.flush()
    _daily_sink = None


def daily_sample(state: SimulationState) -> None:
    if _daily_sink is None:
        return
    contributions = state.last_contributions
    sample = DailySample(
        day=state.current_day_index,
        population=state.population,
        housing_capacity=state.housing_capacity,
        food_stock_rations=state.food_stock_rations,
        greenhouse_count=state.greenhouse_count,
        school_count=state.school_count,
        technology_level=state.technology_level,
        explored_radius_km=state.explored_radius_km,
        build_points=state.build_points,
        science_points=state.science_points,
        queue_length=len(state.build_queue),
        active_build=None if state.active_build is None else state.active_build.display_name,
        active_build_days_remaining=state.active_build_days_remaining,
        steps_exploration_km=contributions.steps_exploration_km,
        exercise_build_points=contributions.exercise_build_points,
        sleep_science=contributions.sleep_science,
        daylight_science=contributions.daylight_science,
        sunlight_yield_multiplier=contributions.sunlight_yield_multiplier,
    )
    _daily_sink.write(sample)


def flush_all() -> None:
    if _daily_sink:
        _daily_sink.flush()
