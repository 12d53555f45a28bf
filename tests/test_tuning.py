from __future__ import annotations

import pytest

from lira.simulation.tuning import DEFAULT_TUNING, SimTuning, load_tuning


def test_defaults_match_documented_rates():
    assert DEFAULT_TUNING.passive_exploration_km_per_day == pytest.approx(0.15)
    assert DEFAULT_TUNING.passive_science_points_per_day == pytest.approx(1.5)
    assert DEFAULT_TUNING.base_build_points_per_day == pytest.approx(3.0)
    assert DEFAULT_TUNING.science_breakthrough_threshold == pytest.approx(30.0)
    assert DEFAULT_TUNING.daylight_science_cap_per_day == pytest.approx(0.8)


def test_with_updates_returns_new_instance():
    tuned = DEFAULT_TUNING.with_updates({"base_yield_per_greenhouse": 4})
    assert tuned.base_yield_per_greenhouse == 4.0
    assert isinstance(tuned.base_yield_per_greenhouse, float)
    assert DEFAULT_TUNING.base_yield_per_greenhouse == 3.0


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"sleep_sigma": -1.0}, "cannot be negative"),
        ({"sleep_sigma": "wide"}, "must be numeric"),
        ({"sleep_sigma": True}, "must be numeric"),
        ({"science_breakthrough_threshold": 0}, "must be positive"),
    ],
)
def test_with_updates_validates(overrides, message):
    with pytest.raises(ValueError, match=message):
        DEFAULT_TUNING.with_updates(overrides)


def test_load_tuning_without_path_returns_base():
    assert load_tuning(None) is DEFAULT_TUNING
    assert load_tuning("") is DEFAULT_TUNING


def test_load_tuning_reads_yaml(tmp_path):
    path = tmp_path / "tuning.yaml"
    path.write_text("ration_per_person_per_day: 1.2\nStudents_Per_School: 10\n", encoding="utf-8")
    tuned = load_tuning(path)
    assert isinstance(tuned, SimTuning)
    assert tuned.ration_per_person_per_day == pytest.approx(1.2)
    assert tuned.students_per_school == pytest.approx(10.0)
    assert tuned.base_build_points_per_day == DEFAULT_TUNING.base_build_points_per_day


def test_load_tuning_applies_on_top_of_base(tmp_path):
    path = tmp_path / "tuning.yaml"
    path.write_text("sleep_sigma: 2.0\n", encoding="utf-8")
    base = DEFAULT_TUNING.with_updates({"sleep_optimal_hours": 8.0})
    tuned = load_tuning(path, base)
    assert tuned.sleep_optimal_hours == 8.0
    assert tuned.sleep_sigma == 2.0


def test_load_tuning_unknown_field(tmp_path):
    path = tmp_path / "tuning.yaml"
    path.write_text("warp_factor: 9\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown tuning field: warp_factor"):
        load_tuning(path)


def test_load_tuning_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_tuning(tmp_path / "absent.yaml")


def test_load_tuning_rejects_non_mapping(tmp_path):
    path = tmp_path / "tuning.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must define a mapping"):
        load_tuning(path)


def test_load_tuning_rejects_invalid_yaml(tmp_path):
    path = tmp_path / "tuning.yaml"
    path.write_text("sleep_sigma: [1, 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_tuning(path)
