"""End-to-end tests for colony bootstrap and the headless runner."""

from __future__ import annotations

from lira.config.settings import SimulationSettings
from lira.persistence.storage import load_meta, load_state
from lira.simulation.bootstrap import new_colony, reset_colony
from lira.simulation.loop import run
from lira.simulation.state import DailyHealthMetrics


def _settings(tmp_path, **overrides) -> SimulationSettings:
    values = {
        "DAYS": 5,
        "SAVE_FILE": tmp_path / "saves" / "colony.json",
        "META_FILE": tmp_path / "saves" / "meta.json",
        "LOG_DIRECTORY": tmp_path / "logs",
        "AMBIENT_EVENTS": False,
        "TELEMETRY_ENABLED": False,
        "STEPS": 4000.0,
        "SLEEP_HOURS": 7.0,
    }
    values.update(overrides)
    return SimulationSettings().with_updates(values)


def test_new_colony_has_starter_plans(quiet_events):
    state = new_colony(quiet_events)
    assert [b.display_name for b in state.build_queue] == ["Greenhouse", "House", "School"]
    assert state.event_log[0].startswith("Day 1:")


def test_reset_colony_clears_engine_progress(engine, quiet_events):
    state = new_colony(quiet_events)
    for _ in range(6):
        engine.advance_one_day(state, DailyHealthMetrics(steps=3000))
    engine.advance_fraction_of_day(state, None, 0.4)
    reset_colony(state, engine)
    assert state.current_day_index == 1
    assert len(state.build_queue) == 3
    assert engine.progress.day_progress == 0.0
    assert len(state.event_log) == 3


def test_run_advances_and_saves(tmp_path):
    runtime = _settings(tmp_path)
    state = run(runtime)
    assert state.current_day_index == 6
    assert load_state(runtime.SAVE_FILE) == state
    assert load_meta(runtime.META_FILE) is not None


def test_run_resumes_from_save(tmp_path):
    runtime = _settings(tmp_path)
    run(runtime)
    state = run(runtime)
    assert state.current_day_index == 11


def test_run_writes_telemetry(tmp_path):
    runtime = _settings(tmp_path, TELEMETRY_ENABLED=True, DAYS=3)
    run(runtime)
    files = list((tmp_path / "logs" / "telemetry").glob("daily_*.jsonl"))
    assert len(files) == 1
    assert len(files[0].read_text(encoding="utf-8").splitlines()) == 3


def test_run_uses_tuning_file(tmp_path):
    tuning = tmp_path / "tuning.yaml"
    tuning.write_text("passive_science_points_per_day: 3.0\n", encoding="utf-8")
    runtime = _settings(tmp_path, TUNING_FILE=str(tuning), SLEEP_HOURS=0.0, DAYS=2)
    state = run(runtime)
    assert state.science_points == 6.0
