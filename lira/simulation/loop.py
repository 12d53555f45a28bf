"""Headless run loop for the colony simulation."""

from __future__ import annotations

import logging
import random
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config import settings
from ..config.settings import SimulationSettings
from ..persistence.storage import load_meta, load_state, save_meta, save_state
from ..systems import telemetry
from ..systems.events import EventGenerator
from .clock import ColonyClock
from .engine import SimulationEngine
from .state import DailyHealthMetrics, SimulationState
from .tuning import load_tuning


def _initialise_logger(runtime: SimulationSettings) -> logging.Logger:
    log_dir = runtime.LOG_DIRECTORY
    if not isinstance(log_dir, Path):
        log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / runtime.DEBUG_LOG_FILE

    logger = logging.getLogger("lira")
    if logger.handlers:
        return logger

    level_name = str(runtime.DEBUG_LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)

    file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    file_handler.setLevel(level)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    logger.propagate = False

    logger.info("Debug logging initialised at %s", log_path)
    return logger


def _configured_metrics(runtime: SimulationSettings) -> DailyHealthMetrics:
    return DailyHealthMetrics(
        steps=runtime.STEPS,
        daylight_minutes=runtime.DAYLIGHT_MINUTES,
        exercise_minutes=runtime.EXERCISE_MINUTES,
        sleep_hours=runtime.SLEEP_HOURS,
    )


def run(sim_settings: Optional[SimulationSettings] = None) -> SimulationState:
    """Restore or found a colony, advance it, save it and return the final state.

    In dev mode every tick is one whole in-game day. Otherwise the colony
    follows the wall clock: each of the ``DAYS`` ticks catches up on the
    time elapsed since the previous save, pausing ``TICK_INTERVAL_SECONDS``
    between ticks.
    """
    runtime = sim_settings or settings.current_settings()
    logger = _initialise_logger(runtime)

    tuning = load_tuning(runtime.TUNING_FILE or None)
    events = EventGenerator(random.Random(runtime.SEED), ambient=runtime.AMBIENT_EVENTS)
    state = load_state(runtime.SAVE_FILE, events=events)
    meta = load_meta(runtime.META_FILE)
    engine = SimulationEngine(tuning, events=events)
    clock = ColonyClock(engine, state, meta)
    metrics = _configured_metrics(runtime)

    if runtime.TELEMETRY_ENABLED:
        telemetry.enable_telemetry(directory=Path(runtime.LOG_DIRECTORY) / "telemetry")

    logger.info(
        "Running %d tick(s) from day %d (dev mode %s)",
        runtime.DAYS,
        state.current_day_index,
        runtime.DEV_MODE,
    )
    try:
        for tick in range(runtime.DAYS):
            if runtime.DEV_MODE:
                clock.advance_dev_day(metrics)
            else:
                if tick:
                    time.sleep(runtime.TICK_INTERVAL_SECONDS)
                clock.tick(datetime.now(), metrics)
            telemetry.daily_sample(state)
            save_state(state, runtime.SAVE_FILE)
            save_meta(clock.meta, runtime.META_FILE)
    except KeyboardInterrupt:
        logger.info("Interrupted on day %d, progress saved", state.current_day_index)
    finally:
        telemetry.flush_all()

    logger.info(
        "Finished on day %d: population %.2f, food %.2f, tech %.1f",
        state.current_day_index,
        state.population,
        state.food_stock_rations,
        state.technology_level,
    )
    return state
