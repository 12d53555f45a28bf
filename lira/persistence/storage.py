"""Persistence helpers for the colony state and the driver metadata."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..simulation.bootstrap import new_colony
from ..simulation.clock import ClockMeta
from ..simulation.state import SimulationState, StateDecodeError, deserialize_state, serialize_state
from ..systems.events import EventGenerator

logger = logging.getLogger("lira.storage")


def _ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _atomic_write(path: Path, payload: bytes) -> None:
    target = _ensure_parent(Path(path))
    handle, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(handle, "wb") as stream:
            stream.write(payload)
        os.replace(temp_name, target)
    except OSError:
        Path(temp_name).unlink(missing_ok=True)
        raise


def save_state(state: SimulationState, path: Path) -> Path:
    path = Path(path)
    _atomic_write(path, serialize_state(state))
    logger.debug("Saved colony day %d to %s", state.current_day_index, path)
    return path


def load_state(path: Path, *, events: Optional[EventGenerator] = None) -> SimulationState:
    """Load the colony at ``path``; a missing or unreadable save starts a fresh colony."""
    path = Path(path)
    if not path.exists():
        logger.info("No save at %s, starting a fresh colony", path)
        return new_colony(events)
    try:
        return deserialize_state(path.read_bytes())
    except (OSError, StateDecodeError) as error:
        logger.warning("Could not restore colony from %s (%s), starting fresh", path, error)
        return new_colony(events)


def save_meta(meta: ClockMeta, path: Path) -> Path:
    path = Path(path)
    payload = json.dumps(meta.to_dict(), indent=2).encode("utf-8")
    _atomic_write(path, payload)
    return path


def load_meta(path: Path) -> Optional[ClockMeta]:
    """Return the stored metadata, or ``None`` when absent or unreadable."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return ClockMeta.from_dict(data)
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as error:
        logger.warning("Ignoring unreadable metadata at %s (%s)", path, error)
        return None
