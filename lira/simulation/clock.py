"""Wall-clock driver that turns elapsed real time into engine calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Dict, Optional

from ..config.constants import SECONDS_PER_DAY
from ..utils.math_utils import clamp01
from .engine import EngineProgress, SimulationEngine
from .state import DailyHealthMetrics, SimulationState

logger = logging.getLogger("lira.clock")


@dataclass
class ClockMeta:
    """Driver bookkeeping persisted next to the colony state."""

    last_update: datetime
    steps_baseline: float = 0.0
    exercise_baseline: float = 0.0
    daylight_baseline: float = 0.0
    engine_progress: EngineProgress = field(default_factory=EngineProgress)

    def to_dict(self) -> Dict[str, object]:
        return {
            "last_update": self.last_update.isoformat(),
            "steps_baseline": self.steps_baseline,
            "exercise_baseline": self.exercise_baseline,
            "daylight_baseline": self.daylight_baseline,
            "engine_progress": self.engine_progress.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "ClockMeta":
        return cls(
            last_update=datetime.fromisoformat(str(data["last_update"])),
            steps_baseline=float(data.get("steps_baseline", 0.0)),
            exercise_baseline=float(data.get("exercise_baseline", 0.0)),
            daylight_baseline=float(data.get("daylight_baseline", 0.0)),
            engine_progress=EngineProgress.from_dict(dict(data.get("engine_progress", {}))),
        )


def _next_midnight(moment: datetime) -> datetime:
    return datetime.combine(moment.date() + timedelta(days=1), time.min, tzinfo=moment.tzinfo)


class ColonyClock:
    """Advance one colony from wall-clock time and cumulative daily metrics.

    Health metrics passed to :meth:`tick` are the running totals for the
    current calendar day (steps so far today, and so on) plus last night's
    sleep. The clock subtracts its baselines to hand the engine deltas, and
    resets the baselines at every local midnight it crosses.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        state: SimulationState,
        meta: Optional[ClockMeta] = None,
        *,
        now: Optional[datetime] = None,
        seconds_per_day: float = SECONDS_PER_DAY,
    ) -> None:
        self.engine = engine
        self.state = state
        self.seconds_per_day = seconds_per_day
        if meta is None:
            meta = ClockMeta(last_update=now or datetime.now(), engine_progress=engine.progress)
        else:
            engine.progress = meta.engine_progress
        self.meta = meta

    def tick(self, now: datetime, metrics: Optional[DailyHealthMetrics] = None) -> int:
        """Catch the colony up to ``now``; returns the number of midnights closed."""
        metrics = metrics or DailyHealthMetrics.zero()
        cursor = self.meta.last_update
        if now <= cursor:
            return 0

        closed = 0
        while cursor.date() != now.date():
            midnight = _next_midnight(cursor)
            fraction = clamp01((midnight - cursor).total_seconds() / self.seconds_per_day)
            # No history for the hours before midnight, only last night's sleep.
            passive = DailyHealthMetrics(sleep_hours=metrics.sleep_hours)
            self.engine.advance_fraction_of_day(self.state, passive, fraction, emit_daily_summary=True)
            self.meta.steps_baseline = 0.0
            self.meta.exercise_baseline = 0.0
            self.meta.daylight_baseline = 0.0
            cursor = midnight
            closed += 1

        elapsed = (now - cursor).total_seconds()
        if elapsed > 0:
            deltas = DailyHealthMetrics(
                steps=max(0.0, metrics.steps - self.meta.steps_baseline),
                daylight_minutes=max(0.0, metrics.daylight_minutes - self.meta.daylight_baseline),
                exercise_minutes=max(0.0, metrics.exercise_minutes - self.meta.exercise_baseline),
                sleep_hours=metrics.sleep_hours,
            )
            self.engine.advance_fraction_of_day(self.state, deltas, min(1.0, elapsed / self.seconds_per_day))
            self.meta.steps_baseline = metrics.steps
            self.meta.exercise_baseline = metrics.exercise_minutes
            self.meta.daylight_baseline = metrics.daylight_minutes

        if closed:
            logger.info("Caught up %d day(s), colony now on day %d", closed, self.state.current_day_index)
        self.meta.last_update = now
        self.meta.engine_progress = self.engine.progress
        return closed

    def advance_dev_day(self, metrics: Optional[DailyHealthMetrics] = None, *, now: Optional[datetime] = None) -> None:
        """Fast-forward mode: one full in-game day per call, metrics are whole-day totals."""
        self.engine.advance_one_day(self.state, metrics)
        self.meta.last_update = now or datetime.now()
        self.meta.engine_progress = self.engine.progress
