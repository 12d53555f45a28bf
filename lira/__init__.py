"""Package initializer for the Planet Lira colony simulation."""

from __future__ import annotations

from .config import settings as settings  # Re-export for compatibility.

__all__ = ["settings"]
