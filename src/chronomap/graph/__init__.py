"""Force-directed layout of the relationship graph."""

from __future__ import annotations

from .simulation import (
    Edge,
    ForceConfig,
    LayoutFrame,
    LayoutState,
    RelationshipSimulator,
    SimulationRun,
    node_style,
    step,
)

__all__ = [
    "Edge",
    "ForceConfig",
    "LayoutFrame",
    "LayoutState",
    "RelationshipSimulator",
    "SimulationRun",
    "node_style",
    "step",
]
