"""Runtime settings for the colony simulation."""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

import yaml

from .constants import DEV_TICK_INTERVAL_SECONDS

logger = logging.getLogger("lira.settings")

_PATH_FIELDS = {"LOG_DIRECTORY", "SAVE_FILE", "META_FILE"}
_STRING_FIELDS = {"DEBUG_LOG_FILE", "DEBUG_LOG_LEVEL", "TUNING_FILE"}
_BOOL_FIELDS = {"DEV_MODE", "TELEMETRY_ENABLED", "AMBIENT_EVENTS"}
_FLOAT_FIELDS = {
    "TICK_INTERVAL_SECONDS",
    "STEPS",
    "DAYLIGHT_MINUTES",
    "EXERCISE_MINUTES",
    "SLEEP_HOURS",
}
_TRUTHY = {"1", "true", "True", "TRUE"}

DAYS = 30
SEED = 7
DEV_MODE = True
TICK_INTERVAL_SECONDS = DEV_TICK_INTERVAL_SECONDS

# Synthetic daily metrics used by the headless runner.
STEPS = 0.0
DAYLIGHT_MINUTES = 0.0
EXERCISE_MINUTES = 0.0
SLEEP_HOURS = 0.0

CONFIG_ENV_VAR = "LIRA_CONFIG_FILE"
DEFAULT_CONFIG_FILE = Path("configs/default.yaml")
SAVE_FILE = Path(os.getenv("LIRA_SAVE_FILE", "saves/colony.json"))
META_FILE = Path(os.getenv("LIRA_META_FILE", "saves/colony_meta.json"))
TUNING_FILE = os.getenv("LIRA_TUNING_FILE", "")
LOG_DIRECTORY = Path(os.getenv("LIRA_LOG_DIR", "logs"))
DEBUG_LOG_FILE = os.getenv("LIRA_DEBUG_LOG", "simulation_debug.log")
DEBUG_LOG_LEVEL = os.getenv("LIRA_DEBUG_LOG_LEVEL", "INFO")
TELEMETRY_ENABLED = os.getenv("LIRA_TELEMETRY", "0") in _TRUTHY
AMBIENT_EVENTS = os.getenv("LIRA_AMBIENT_EVENTS", "1") in _TRUTHY


@dataclass(frozen=True)
class SimulationSettings:
    DAYS: int = DAYS
    SEED: int = SEED
    DEV_MODE: bool = DEV_MODE
    TICK_INTERVAL_SECONDS: float = TICK_INTERVAL_SECONDS
    SAVE_FILE: Path = SAVE_FILE
    META_FILE: Path = META_FILE
    TUNING_FILE: str = TUNING_FILE
    LOG_DIRECTORY: Path = LOG_DIRECTORY
    DEBUG_LOG_FILE: str = DEBUG_LOG_FILE
    DEBUG_LOG_LEVEL: str = DEBUG_LOG_LEVEL
    TELEMETRY_ENABLED: bool = TELEMETRY_ENABLED
    AMBIENT_EVENTS: bool = AMBIENT_EVENTS
    STEPS: float = STEPS
    DAYLIGHT_MINUTES: float = DAYLIGHT_MINUTES
    EXERCISE_MINUTES: float = EXERCISE_MINUTES
    SLEEP_HOURS: float = SLEEP_HOURS

    def with_updates(self, overrides: Dict[str, Any]) -> "SimulationSettings":
        merged = asdict(self)
        merged.update(overrides)
        _validate_settings_dict(merged)
        return SimulationSettings(**merged)


_ACTIVE_SETTINGS = SimulationSettings()
_ENV_VARS: Dict[str, str] = {
    "DAYS": "LIRA_DAYS",
    "SEED": "LIRA_SEED",
    "DEV_MODE": "LIRA_DEV_MODE",
    "TICK_INTERVAL_SECONDS": "LIRA_TICK_INTERVAL",
    "SAVE_FILE": "LIRA_SAVE_FILE",
    "META_FILE": "LIRA_META_FILE",
    "TUNING_FILE": "LIRA_TUNING_FILE",
    "LOG_DIRECTORY": "LIRA_LOG_DIR",
    "DEBUG_LOG_FILE": "LIRA_DEBUG_LOG",
    "DEBUG_LOG_LEVEL": "LIRA_DEBUG_LOG_LEVEL",
    "TELEMETRY_ENABLED": "LIRA_TELEMETRY",
    "AMBIENT_EVENTS": "LIRA_AMBIENT_EVENTS",
    "STEPS": "LIRA_STEPS",
    "DAYLIGHT_MINUTES": "LIRA_DAYLIGHT_MINUTES",
    "EXERCISE_MINUTES": "LIRA_EXERCISE_MINUTES",
    "SLEEP_HOURS": "LIRA_SLEEP_HOURS",
}


def _coerce(value: str, field: str) -> Any:
    if field in _PATH_FIELDS:
        return Path(value)
    if field in _STRING_FIELDS:
        return value
    if field in _BOOL_FIELDS:
        return value in _TRUTHY
    if field in _FLOAT_FIELDS:
        return float(value)
    return int(value)


def _collect_env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for field, env_name in _ENV_VARS.items():
        raw = env.get(env_name)
        if raw is not None:
            overrides[field] = _coerce(raw, field)
    return overrides


def _normalize_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in _TRUTHY
    if isinstance(value, (int, float)):
        return bool(value)
    raise ValueError("Invalid boolean value in config")


def _normalize_numeric(value: Any, caster: type[float | int]) -> float | int:
    if isinstance(value, bool):
        raise ValueError("Invalid numeric value in config")
    if isinstance(value, (int, float)):
        return caster(value)
    if isinstance(value, str):
        return caster(float(value) if caster is float else int(float(value)))
    raise ValueError("Invalid numeric value in config")


def _normalize_config_value(field: str, value: Any) -> Any:
    if field in _PATH_FIELDS:
        if isinstance(value, Path):
            return value
        if isinstance(value, str):
            return Path(value)
        raise ValueError(f"Field {field} must be a path or string")
    if field in _STRING_FIELDS:
        if isinstance(value, str):
            return value
        raise ValueError(f"Field {field} must be a string")
    if field in _BOOL_FIELDS:
        return _normalize_bool(value)
    if field in _FLOAT_FIELDS:
        return float(_normalize_numeric(value, float))
    return int(_normalize_numeric(value, int))


_NUMERIC_BOUNDS: Dict[str, tuple[float, float]] = {
    "DAYS": (1, 100_000),
    "SEED": (0, 2**31 - 1),
    "TICK_INTERVAL_SECONDS": (0.1, 86_400.0),
    "STEPS": (0.0, 200_000.0),
    "DAYLIGHT_MINUTES": (0.0, 1440.0),
    "EXERCISE_MINUTES": (0.0, 1440.0),
    "SLEEP_HOURS": (0.0, 24.0),
}

_CHOICE_FIELDS: Dict[str, set[str]] = {
    "DEBUG_LOG_LEVEL": {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"},
}


def _validate_settings_dict(values: Dict[str, Any]) -> None:
    for field, (lower, upper) in _NUMERIC_BOUNDS.items():
        current = values.get(field)
        if current is None:
            continue
        if not (lower <= current <= upper):
            raise ValueError(f"{field} must be between {lower} and {upper}, got {current}")
    for field, choices in _CHOICE_FIELDS.items():
        current = values.get(field)
        if current is None:
            continue
        if isinstance(current, str) and current.upper() in choices:
            values[field] = current.upper()
            continue
        raise ValueError(f"{field} must be one of {sorted(choices)} (got {current})")
    _validate_relationships(values)


def _validate_relationships(values: Mapping[str, Any]) -> None:
    save_file = values.get("SAVE_FILE")
    meta_file = values.get("META_FILE")
    if save_file and meta_file and Path(save_file) == Path(meta_file):
        raise ValueError("SAVE_FILE and META_FILE must be different paths")
    tuning_file = values.get("TUNING_FILE")
    if tuning_file and Path(tuning_file).suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("TUNING_FILE must point at a .yaml or .yml file")


def _load_config_overrides(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as error:
            raise ValueError(f"Invalid YAML in config file {path}") from error
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must define a mapping")
    valid_fields = set(SimulationSettings.__dataclass_fields__.keys())
    overrides: Dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key).upper()
        if key not in valid_fields:
            raise ValueError(f"Unknown config field: {raw_key}")
        overrides[key] = _normalize_config_value(key, value)
    logger.debug("Loaded %d setting overrides from %s", len(overrides), path)
    return overrides


def _resolve_config_path(cli_value: str | None, env: Mapping[str, str]) -> Path | None:
    candidate_strings = [cli_value, env.get(CONFIG_ENV_VAR)]
    for candidate in candidate_strings:
        if not candidate:
            continue
        path = Path(candidate).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return path
    if DEFAULT_CONFIG_FILE.exists():
        return DEFAULT_CONFIG_FILE
    return None


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Planet Lira colony simulation headless")
    parser.add_argument("--config", type=str, help="Path to a YAML config file with runtime settings")
    parser.add_argument("--days", type=int, help="Number of in-game days to simulate")
    parser.add_argument("--seed", type=int, help="Seed for ambient event selection")
    parser.add_argument("--tick-interval", type=float, help="Seconds between driver ticks")
    parser.add_argument("--save-file", type=str, help="Where the colony state is persisted")
    parser.add_argument("--meta-file", type=str, help="Where the driver metadata is persisted")
    parser.add_argument("--tuning-file", type=str, help="YAML file with tuning overrides")
    parser.add_argument("--log-level", type=str, help="Debug log level")
    parser.add_argument("--telemetry-enabled", type=int, help="Enable telemetry (1 or 0)")
    parser.add_argument("--steps", type=float, help="Steps walked per simulated day")
    parser.add_argument("--daylight-minutes", type=float, help="Daylight minutes per simulated day")
    parser.add_argument("--exercise-minutes", type=float, help="Exercise minutes per simulated day")
    parser.add_argument("--sleep-hours", type=float, help="Sleep hours reported each night")
    parser.add_argument(
        "--ambient-events",
        dest="ambient_events",
        action="store_true",
        help="Sprinkle weather notes and rumours into the journal",
    )
    parser.add_argument(
        "--no-ambient-events",
        dest="ambient_events",
        action="store_false",
        help="Keep the journal to simulation events only",
    )
    parser.add_argument(
        "--real-time",
        dest="dev_mode",
        action="store_false",
        help="Drive the colony from the wall clock instead of one day per tick",
    )
    parser.set_defaults(ambient_events=None, dev_mode=None)
    return parser


def load_runtime_settings(args: Sequence[str] | None = None, env: Mapping[str, str] | None = None) -> SimulationSettings:
    env_mapping = os.environ if env is None else env
    parser = _build_arg_parser()
    parsed = parser.parse_args(args=args)
    overrides: Dict[str, Any] = {}
    config_path = _resolve_config_path(parsed.config, env_mapping)
    if config_path is not None:
        overrides.update(_load_config_overrides(config_path))
    overrides.update(_collect_env_overrides(env_mapping))
    cli_mapping = {
        "DAYS": parsed.days,
        "SEED": parsed.seed,
        "DEV_MODE": parsed.dev_mode,
        "TICK_INTERVAL_SECONDS": parsed.tick_interval,
        "SAVE_FILE": None if parsed.save_file is None else Path(parsed.save_file),
        "META_FILE": None if parsed.meta_file is None else Path(parsed.meta_file),
        "TUNING_FILE": parsed.tuning_file,
        "DEBUG_LOG_LEVEL": parsed.log_level,
        "TELEMETRY_ENABLED": None if parsed.telemetry_enabled is None else bool(parsed.telemetry_enabled),
        "AMBIENT_EVENTS": parsed.ambient_events,
        "STEPS": parsed.steps,
        "DAYLIGHT_MINUTES": parsed.daylight_minutes,
        "EXERCISE_MINUTES": parsed.exercise_minutes,
        "SLEEP_HOURS": parsed.sleep_hours,
    }
    overrides.update({k: v for k, v in cli_mapping.items() if v is not None})
    return _ACTIVE_SETTINGS.with_updates(overrides)


def apply_runtime_settings(new_settings: SimulationSettings) -> SimulationSettings:
    global _ACTIVE_SETTINGS
    global DAYS, SEED, DEV_MODE, TICK_INTERVAL_SECONDS
    global SAVE_FILE, META_FILE, TUNING_FILE
    global LOG_DIRECTORY, DEBUG_LOG_FILE, DEBUG_LOG_LEVEL, TELEMETRY_ENABLED, AMBIENT_EVENTS
    global STEPS, DAYLIGHT_MINUTES, EXERCISE_MINUTES, SLEEP_HOURS

    _ACTIVE_SETTINGS = new_settings
    DAYS = new_settings.DAYS
    SEED = new_settings.SEED
    DEV_MODE = new_settings.DEV_MODE
    TICK_INTERVAL_SECONDS = new_settings.TICK_INTERVAL_SECONDS
    SAVE_FILE = new_settings.SAVE_FILE
    META_FILE = new_settings.META_FILE
    TUNING_FILE = new_settings.TUNING_FILE
    LOG_DIRECTORY = new_settings.LOG_DIRECTORY
    DEBUG_LOG_FILE = new_settings.DEBUG_LOG_FILE
    DEBUG_LOG_LEVEL = new_settings.DEBUG_LOG_LEVEL
    TELEMETRY_ENABLED = new_settings.TELEMETRY_ENABLED
    AMBIENT_EVENTS = new_settings.AMBIENT_EVENTS
    STEPS = new_settings.STEPS
    DAYLIGHT_MINUTES = new_settings.DAYLIGHT_MINUTES
    EXERCISE_MINUTES = new_settings.EXERCISE_MINUTES
    SLEEP_HOURS = new_settings.SLEEP_HOURS
    return _ACTIVE_SETTINGS


def current_settings() -> SimulationSettings:
    return _ACTIVE_SETTINGS
