"""Tests for the runtime configuration loader."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from lira.config import settings


def _write_tmp_config(tmp_path: Path, content: str) -> Path:
    file_path = tmp_path / "conf.yaml"
    file_path.write_text(content, encoding="utf-8")
    return file_path


def test_env_overrides_take_effect(monkeypatch):
    monkeypatch.delenv("LIRA_CONFIG_FILE", raising=False)
    monkeypatch.setenv("LIRA_DAYS", "45")
    conf = settings.load_runtime_settings(args=[], env=os.environ)
    assert conf.DAYS == 45


def test_cli_overrides_take_precedence():
    conf = settings.load_runtime_settings(args=["--days", "12"], env={})
    assert conf.DAYS == 12


def test_config_file_used_when_provided(tmp_path):
    config = _write_tmp_config(tmp_path, "days: 40\nsleep_hours: 8\n")
    conf = settings.load_runtime_settings(args=["--config", str(config)], env={})
    assert conf.DAYS == 40
    assert conf.SLEEP_HOURS == 8.0


def test_config_file_from_env_variable(tmp_path):
    config = _write_tmp_config(tmp_path, "seed: 99\n")
    conf = settings.load_runtime_settings(args=[], env={"LIRA_CONFIG_FILE": str(config)})
    assert conf.SEED == 99


def test_env_overrides_config(tmp_path):
    config = _write_tmp_config(tmp_path, "days: 40\n")
    conf = settings.load_runtime_settings(args=["--config", str(config)], env={"LIRA_DAYS": "45"})
    assert conf.DAYS == 45


def test_cli_overrides_config_and_env(tmp_path):
    config = _write_tmp_config(tmp_path, "days: 40\n")
    conf = settings.load_runtime_settings(
        args=["--config", str(config), "--days", "47"],
        env={"LIRA_DAYS": "45"},
    )
    assert conf.DAYS == 47


def test_boolean_flags_and_env():
    conf = settings.load_runtime_settings(
        args=["--no-ambient-events", "--real-time"],
        env={"LIRA_TELEMETRY": "true"},
    )
    assert conf.AMBIENT_EVENTS is False
    assert conf.DEV_MODE is False
    assert conf.TELEMETRY_ENABLED is True


def test_path_fields_are_paths(tmp_path):
    conf = settings.load_runtime_settings(
        args=["--save-file", str(tmp_path / "a.json"), "--meta-file", str(tmp_path / "b.json")],
        env={},
    )
    assert conf.SAVE_FILE == tmp_path / "a.json"
    assert isinstance(conf.META_FILE, Path)


def test_log_level_is_normalised(tmp_path):
    config = _write_tmp_config(tmp_path, "debug_log_level: debug\n")
    conf = settings.load_runtime_settings(args=["--config", str(config)], env={})
    assert conf.DEBUG_LOG_LEVEL == "DEBUG"


def test_unknown_log_level_raises():
    with pytest.raises(ValueError, match="DEBUG_LOG_LEVEL"):
        settings.load_runtime_settings(args=["--log-level", "chatty"], env={})


def test_invalid_field_in_config_raises(tmp_path):
    config = _write_tmp_config(tmp_path, "unknown_value: 1\n")
    with pytest.raises(ValueError, match="Unknown config field"):
        settings.load_runtime_settings(args=["--config", str(config)], env={})


def test_missing_config_file_errors(tmp_path):
    missing = tmp_path / "missing.yaml"
    with pytest.raises(FileNotFoundError):
        settings.load_runtime_settings(args=["--config", str(missing)], env={})


def test_non_mapping_config_raises(tmp_path):
    config = _write_tmp_config(tmp_path, "- days\n- 3\n")
    with pytest.raises(ValueError, match="must define a mapping"):
        settings.load_runtime_settings(args=["--config", str(config)], env={})


def test_invalid_numeric_range_raises(tmp_path):
    config = _write_tmp_config(tmp_path, "days: 0\n")
    with pytest.raises(ValueError, match="DAYS"):
        settings.load_runtime_settings(args=["--config", str(config)], env={})


def test_negative_metric_rejected():
    with pytest.raises(ValueError, match="SLEEP_HOURS"):
        settings.load_runtime_settings(args=["--sleep-hours", "-1"], env={})


def test_boolean_rejected_for_numeric_field(tmp_path):
    config = _write_tmp_config(tmp_path, "steps: true\n")
    with pytest.raises(ValueError, match="Invalid numeric value"):
        settings.load_runtime_settings(args=["--config", str(config)], env={})


def test_invalid_relationship_raises(tmp_path):
    config = _write_tmp_config(tmp_path, "save_file: same.json\nmeta_file: same.json\n")
    with pytest.raises(ValueError, match="SAVE_FILE and META_FILE must be different paths"):
        settings.load_runtime_settings(args=["--config", str(config)], env={})


def test_tuning_file_must_be_yaml():
    with pytest.raises(ValueError, match="TUNING_FILE"):
        settings.load_runtime_settings(args=["--tuning-file", "tuning.txt"], env={})


def test_apply_runtime_settings_updates_module_globals():
    original = settings.current_settings()
    try:
        conf = settings.load_runtime_settings(args=["--days", "3", "--seed", "11"], env={})
        settings.apply_runtime_settings(conf)
        assert settings.current_settings() is conf
        assert settings.DAYS == 3
        assert settings.SEED == 11
    finally:
        settings.apply_runtime_settings(original)
