"""Save and load helpers for colony state and driver metadata."""

from __future__ import annotations

from .storage import load_meta, load_state, save_meta, save_state

__all__ = ["load_meta", "load_state", "save_meta", "save_state"]
