"""Crease: HTTP ingestion gateway for ball-by-ball cricket delivery events."""

from __future__ import annotations

__all__: list[str] = []
