from __future__ import annotations

import random

import pytest

from lira.simulation.engine import SimulationEngine
from lira.systems import telemetry
from lira.systems.events import EventGenerator


@pytest.fixture
def quiet_events() -> EventGenerator:
    """Seeded generator that writes simulation events only."""
    return EventGenerator(random.Random(0), ambient=False)


@pytest.fixture
def engine(quiet_events) -> SimulationEngine:
    return SimulationEngine(events=quiet_events)


@pytest.fixture(autouse=True)
def _reset_telemetry():
    yield
    telemetry.disable_telemetry()
