"""Typed contracts shared by the cache, the controller and the renderers."""

from __future__ import annotations

from .snapshot import (
    INTERACTION_KINDS,
    Civilization,
    Government,
    Interaction,
    InteractionKind,
    Link,
    Node,
    Person,
    RelationshipGraph,
    Snapshot,
    Society,
    snapshot_from_json,
    snapshot_to_json,
    validate_snapshot,
)

__all__ = [
    "INTERACTION_KINDS",
    "InteractionKind",
    "Person",
    "Government",
    "Society",
    "Civilization",
    "Interaction",
    "Node",
    "Link",
    "RelationshipGraph",
    "Snapshot",
    "validate_snapshot",
    "snapshot_from_json",
    "snapshot_to_json",
]
