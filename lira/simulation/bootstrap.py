"""Colony bootstrap helpers: fresh starts and resets."""

from __future__ import annotations

import logging
from typing import Optional

from ..systems.events import EventGenerator
from .catalog import initial_build_queue
from .engine import SimulationEngine
from .state import SimulationState

logger = logging.getLogger("lira.bootstrap")


def new_colony(events: Optional[EventGenerator] = None) -> SimulationState:
    """Return a fresh colony with the starter plans queued and the prologue written."""
    state = SimulationState()
    _seed_colony(state, events)
    return state


def reset_colony(
    state: SimulationState,
    engine: Optional[SimulationEngine] = None,
    events: Optional[EventGenerator] = None,
) -> None:
    """Restore ``state`` to touchdown in place and clear the paired engine progress."""
    state.reset()
    if engine is not None:
        engine.reset()
        events = events or engine.events
    _seed_colony(state, events)
    logger.info("Colony reset to day %d", state.current_day_index)


def _seed_colony(state: SimulationState, events: Optional[EventGenerator]) -> None:
    state.build_queue = initial_build_queue()
    (events or EventGenerator()).prologue(state, state.current_day_index)
