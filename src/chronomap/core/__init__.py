"""Core package for ChronoMap.

Holds configuration, the snapshot contracts, the cache, the temporal
controller and the viewport state:
    from chronomap.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
