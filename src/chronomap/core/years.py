"""Supported year range. Years are signed integers; negative means BC."""

from __future__ import annotations

YEAR_MIN = -3000
YEAR_MAX = 2024


def clamp_year(year: int) -> int:
    """Clamp ``year`` into ``[YEAR_MIN, YEAR_MAX]``."""
    return max(YEAR_MIN, min(YEAR_MAX, int(year)))


__all__ = ["YEAR_MIN", "YEAR_MAX", "clamp_year"]
