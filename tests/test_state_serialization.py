"""Tests for the colony state model and its save/load contract."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from lira.persistence.storage import load_meta, load_state, save_meta, save_state
from lira.simulation.bootstrap import new_colony
from lira.simulation.clock import ClockMeta
from lira.simulation.engine import EngineProgress
from lira.simulation.state import (
    STATE_FORMAT_VERSION,
    BuildKind,
    Building,
    HealthContributions,
    SimulationState,
    StateDecodeError,
    deserialize_state,
    serialize_state,
)


def _busy_state() -> SimulationState:
    state = new_colony()
    state.current_day_index = 14
    state.population = 11.37
    state.food_stock_rations = 42.5
    state.technology_level = 2.5
    state.active_build = Building(BuildKind.HOUSE, "Stone House", 30.0, 1.0)
    state.active_build_total_days = 1
    state.active_build_days_remaining = 1
    state.last_contributions = HealthContributions(
        steps_exploration_km=1.2,
        sleep_science=0.9,
        sunlight_yield_multiplier=1.25,
    )
    return state


def test_fresh_state_matches_touchdown_values():
    state = SimulationState()
    assert state.current_day_index == 1
    assert state.population == 8.0
    assert state.food_stock_rations == 55.0
    assert state.housing_capacity == 12.0
    assert state.greenhouse_count == 1.0
    assert state.build_points == 10.0
    assert state.build_queue == []
    assert state.active_build is None
    assert state.last_contributions.sunlight_yield_multiplier == 1.0


def test_round_trip_preserves_every_field():
    state = _busy_state()
    restored = deserialize_state(serialize_state(state))
    assert restored == state
    assert restored.build_queue[0].id == state.build_queue[0].id
    assert restored.active_build.kind is BuildKind.HOUSE


def test_serialized_payload_is_versioned_json():
    payload = json.loads(serialize_state(SimulationState()).decode("utf-8"))
    assert payload["version"] == STATE_FORMAT_VERSION
    assert payload["build_queue"] == []


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        b"not json",
        b"\xff\xfe\x00",
        b"[1, 2, 3]",
        b'{"current_day_index": 3}',
        b'{"version": 99, "current_day_index": 3}',
    ],
)
def test_corrupt_payload_raises_decode_error(payload):
    with pytest.raises(StateDecodeError):
        deserialize_state(payload)


@pytest.mark.parametrize("contributions", ["oops", [1, 2], 5])
def test_malformed_contributions_raise_decode_error(contributions):
    payload = json.loads(serialize_state(SimulationState()).decode("utf-8"))
    payload["last_contributions"] = contributions
    with pytest.raises(StateDecodeError):
        deserialize_state(json.dumps(payload).encode("utf-8"))


def test_decode_error_is_a_value_error():
    assert issubclass(StateDecodeError, ValueError)


def test_reset_restores_fresh_values_in_place():
    state = _busy_state()
    log = state.event_log
    state.reset()
    assert state == SimulationState()
    assert state.event_log is not log


def test_contributions_accumulate_and_keep_latest_multiplier():
    total = HealthContributions(sleep_science=1.0, sunlight_yield_multiplier=1.3)
    total.accumulate(HealthContributions(sleep_science=0.5, passive_science=0.75, sunlight_yield_multiplier=1.1))
    assert total.sleep_science == pytest.approx(1.5)
    assert total.passive_science == pytest.approx(0.75)
    assert total.sunlight_yield_multiplier == pytest.approx(1.1)


class TestStorage:
    def test_save_and_load_state(self, tmp_path):
        state = _busy_state()
        path = save_state(state, tmp_path / "saves" / "colony.json")
        assert path.exists()
        assert load_state(path) == state

    def test_missing_save_starts_fresh_colony(self, tmp_path, quiet_events):
        state = load_state(tmp_path / "absent.json", events=quiet_events)
        assert state.current_day_index == 1
        assert [b.display_name for b in state.build_queue] == ["Greenhouse", "House", "School"]
        assert state.event_log

    def test_corrupt_save_starts_fresh_colony(self, tmp_path, quiet_events):
        path = tmp_path / "colony.json"
        path.write_bytes(b"{ broken")
        state = load_state(path, events=quiet_events)
        assert state.current_day_index == 1
        assert len(state.build_queue) == 3

    def test_save_with_malformed_contributions_starts_fresh_colony(self, tmp_path, quiet_events):
        payload = json.loads(serialize_state(_busy_state()).decode("utf-8"))
        payload["last_contributions"] = "oops"
        path = tmp_path / "colony.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        state = load_state(path, events=quiet_events)
        assert state.current_day_index == 1
        assert len(state.build_queue) == 3

    def test_unreadable_save_path_starts_fresh_colony(self, tmp_path, quiet_events):
        directory = tmp_path / "colony.json"
        directory.mkdir()
        state = load_state(directory, events=quiet_events)
        assert state.current_day_index == 1
        assert load_meta(directory) is None

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "colony.json"
        save_state(SimulationState(), path)
        save_state(_busy_state(), path)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["colony.json"]
        assert load_state(path).current_day_index == 14

    def test_meta_round_trip(self, tmp_path):
        progress = EngineProgress(build_day_accumulator=0.4, day_progress=0.6, explored_today_km=0.2)
        progress.todays_contributions.sleep_science = 1.0
        meta = ClockMeta(
            last_update=datetime(2024, 5, 1, 18, 30),
            steps_baseline=3200.0,
            daylight_baseline=45.0,
            engine_progress=progress,
        )
        path = save_meta(meta, tmp_path / "meta.json")
        restored = load_meta(path)
        assert restored == meta

    def test_unreadable_meta_is_ignored(self, tmp_path):
        path = tmp_path / "meta.json"
        path.write_text("{}", encoding="utf-8")
        assert load_meta(path) is None
        assert load_meta(tmp_path / "absent.json") is None
