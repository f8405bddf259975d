"""ChronoMap: a time-indexed world-history atlas core.

The package resolves a requested year to a historical snapshot (cache first,
generator second), projects it onto a 2-D map and lays out its relationship
graph with a force simulation. Rendering is left to the CLI, the HTTP API or
any other surface that consumes the geometry produced here.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
