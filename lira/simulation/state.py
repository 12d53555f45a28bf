"""Persisted colony data model and its byte-level save/load contract."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..config.constants import STARTING_COLONY

STATE_FORMAT_VERSION = 1


class StateDecodeError(ValueError):
    """Raised when persisted bytes cannot be turned back into a state."""


class BuildKind(str, Enum):
    HOUSE = "house"
    GREENHOUSE = "greenhouse"
    SCHOOL = "school"


@dataclass(frozen=True)
class Building:
    """A construction plan; immutable once created."""

    kind: BuildKind
    display_name: str
    cost_points: float
    min_tech_level: float
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "display_name": self.display_name,
            "cost_points": self.cost_points,
            "min_tech_level": self.min_tech_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Building":
        return cls(
            kind=BuildKind(data["kind"]),
            display_name=str(data["display_name"]),
            cost_points=float(data["cost_points"]),
            min_tech_level=float(data["min_tech_level"]),
            id=str(data["id"]),
        )


@dataclass(frozen=True)
class DailyHealthMetrics:
    steps: float = 0.0
    daylight_minutes: float = 0.0
    exercise_minutes: float = 0.0
    sleep_hours: float = 0.0

    @classmethod
    def zero(cls) -> "DailyHealthMetrics":
        return cls()


@dataclass
class HealthContributions:
    """Per-source breakdown of what the player's activity earned the colony."""

    steps_exploration_km: float = 0.0
    passive_exploration_km: float = 0.0
    exercise_build_points: float = 0.0
    passive_build_points: float = 0.0
    sleep_science: float = 0.0
    daylight_science: float = 0.0
    passive_science: float = 0.0
    sunlight_yield_multiplier: float = 1.0

    def accumulate(self, increment: "HealthContributions") -> None:
        """Add ``increment`` field by field; the multiplier keeps the latest value."""
        self.steps_exploration_km += increment.steps_exploration_km
        self.passive_exploration_km += increment.passive_exploration_km
        self.exercise_build_points += increment.exercise_build_points
        self.passive_build_points += increment.passive_build_points
        self.sleep_science += increment.sleep_science
        self.daylight_science += increment.daylight_science
        self.passive_science += increment.passive_science
        self.sunlight_yield_multiplier = increment.sunlight_yield_multiplier

    def copy(self) -> "HealthContributions":
        return HealthContributions(**asdict(self))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthContributions":
        if not isinstance(data, Mapping):
            raise TypeError(f"Contributions must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        return cls(**{key: float(value) for key, value in data.items() if key in known})


@dataclass
class SimulationState:
    current_day_index: int = STARTING_COLONY["current_day_index"]
    population: float = STARTING_COLONY["population"]
    food_stock_rations: float = STARTING_COLONY["food_stock_rations"]
    housing_capacity: float = STARTING_COLONY["housing_capacity"]
    science_points: float = STARTING_COLONY["science_points"]
    explored_radius_km: float = STARTING_COLONY["explored_radius_km"]
    technology_level: float = STARTING_COLONY["technology_level"]
    greenhouse_count: float = STARTING_COLONY["greenhouse_count"]
    school_count: float = STARTING_COLONY["school_count"]
    build_points: float = STARTING_COLONY["build_points"]
    build_queue: List[Building] = field(default_factory=list)
    active_build: Optional[Building] = None
    active_build_total_days: int = 0
    active_build_days_remaining: int = 0
    event_log: List[str] = field(default_factory=list)
    last_contributions: HealthContributions = field(default_factory=HealthContributions)

    def reset(self) -> None:
        """Restore the fresh-colony values in place."""
        fresh = SimulationState()
        for item in fields(self):
            setattr(self, item.name, getattr(fresh, item.name))

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": STATE_FORMAT_VERSION,
            "current_day_index": self.current_day_index,
            "population": self.population,
            "food_stock_rations": self.food_stock_rations,
            "housing_capacity": self.housing_capacity,
            "science_points": self.science_points,
            "explored_radius_km": self.explored_radius_km,
            "technology_level": self.technology_level,
            "greenhouse_count": self.greenhouse_count,
            "school_count": self.school_count,
            "build_points": self.build_points,
            "build_queue": [building.to_dict() for building in self.build_queue],
            "active_build": None if self.active_build is None else self.active_build.to_dict(),
            "active_build_total_days": self.active_build_total_days,
            "active_build_days_remaining": self.active_build_days_remaining,
            "event_log": list(self.event_log),
            "last_contributions": asdict(self.last_contributions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationState":
        version = data.get("version", STATE_FORMAT_VERSION)
        if version != STATE_FORMAT_VERSION:
            raise StateDecodeError(f"Unsupported state format version: {version}")
        active = data.get("active_build")
        return cls(
            current_day_index=int(data["current_day_index"]),
            population=float(data["population"]),
            food_stock_rations=float(data["food_stock_rations"]),
            housing_capacity=float(data["housing_capacity"]),
            science_points=float(data["science_points"]),
            explored_radius_km=float(data["explored_radius_km"]),
            technology_level=float(data["technology_level"]),
            greenhouse_count=float(data["greenhouse_count"]),
            school_count=float(data["school_count"]),
            build_points=float(data["build_points"]),
            build_queue=[Building.from_dict(entry) for entry in data.get("build_queue", [])],
            active_build=None if active is None else Building.from_dict(active),
            active_build_total_days=int(data.get("active_build_total_days", 0)),
            active_build_days_remaining=int(data.get("active_build_days_remaining", 0)),
            event_log=[str(line) for line in data.get("event_log", [])],
            last_contributions=HealthContributions.from_dict(data.get("last_contributions", {})),
        )


def serialize_state(state: SimulationState) -> bytes:
    return json.dumps(state.to_dict(), ensure_ascii=False).encode("utf-8")


def deserialize_state(payload: bytes) -> SimulationState:
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise StateDecodeError("State payload is not valid UTF-8 JSON") from error
    if not isinstance(data, dict):
        raise StateDecodeError("State payload must be a JSON object")
    try:
        return SimulationState.from_dict(data)
    except StateDecodeError:
        raise
    except (KeyError, TypeError, ValueError) as error:
        raise StateDecodeError(f"State payload is incomplete or malformed: {error}") from error
