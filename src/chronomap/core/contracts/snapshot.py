"""Snapshot contracts: the typed shape of one year of world history.

A :class:`Snapshot` is produced by an external generator (or loaded from the
cache) as loosely-typed JSON. Before anything downstream touches it, the
record goes through :func:`validate_snapshot`, which either returns a frozen
model or a readable error string. Nothing is coerced: a latitude sent as the
string ``"41.9"`` or a radius of ``NaN`` is rejected, not repaired.

Wire format
-----------
The JSON form uses camelCase keys (``radiusKm``, ``fromLat`` ...) because
that is what the generator schema asks for and what the cache stores. Python
attributes are snake_case; serialize with ``model_dump(by_alias=True)``.

Tolerated data-quality issues
-----------------------------
- ``Interaction.participants`` is free text and is never checked against the
  civilization names of the same snapshot.
- ``Link.source`` / ``Link.target`` may name a node id that does not exist.
  Such links are kept as-is; the graph layout treats them as inert.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    model_validator,
)

from chronomap.core.result import Result, err, ok

InteractionKind = Literal["conflict", "trade", "culture", "diplomacy"]
INTERACTION_KINDS: tuple[InteractionKind, ...] = ("conflict", "trade", "culture", "diplomacy")


def _finite_number(value: Any) -> float:
    """Accept real ints/floats only, and only finite ones."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError:
        raise ValueError("number out of range") from None
    if not math.isfinite(number):
        raise ValueError("number must be finite")
    return number


Number = Annotated[float, BeforeValidator(_finite_number)]
Latitude = Annotated[float, BeforeValidator(_finite_number), Field(ge=-90.0, le=90.0)]
Longitude = Annotated[float, BeforeValidator(_finite_number), Field(ge=-180.0, le=180.0)]
NonNegative = Annotated[float, BeforeValidator(_finite_number), Field(ge=0.0)]


class _Contract(BaseModel):
    """Shared config: immutable, alias-aware, no NaN/inf anywhere."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        allow_inf_nan=False,
        extra="ignore",
    )


class Person(_Contract):
    """A historical figure attached to a civilization."""

    name: str
    role: str = ""
    lifespan: str = ""
    impact: str = ""
    works: str = ""


class Government(_Contract):
    type: str = ""
    leaders: tuple[str, ...] = ()
    structure: str = ""
    parties: str = ""


class Society(_Contract):
    population: str = ""
    economy: str = ""
    military: str = ""
    culture: str = ""


class Civilization(_Contract):
    """One power on the map, positioned at its center of control."""

    name: str = Field(min_length=1)
    lat: Latitude
    lng: Longitude
    radius_km: NonNegative = Field(alias="radiusKm")
    color: str
    overview: str = ""
    government: Government = Field(default_factory=Government)
    society: Society = Field(default_factory=Society)
    figures: tuple[Person, ...] = ()
    sources: tuple[str, ...] = ()


class Interaction(_Contract):
    """A recorded exchange between two points on the map."""

    type: InteractionKind
    from_lat: Latitude = Field(alias="fromLat")
    from_lng: Longitude = Field(alias="fromLng")
    to_lat: Latitude = Field(alias="toLat")
    to_lng: Longitude = Field(alias="toLng")
    title: str
    description: str = ""
    impact: str = ""
    participants: tuple[str, ...] = ()


class Node(_Contract):
    id: str = Field(min_length=1)
    group: str = "other"
    radius: NonNegative | None = None
    details: str | None = None


class Link(_Contract):
    """An edge referencing two node ids by value."""

    source: str
    target: str
    label: str | None = None
    type: str | None = None


class RelationshipGraph(_Contract):
    """Node-link graph of people, nations and organizations for one year."""

    nodes: tuple[Node, ...] = ()
    links: tuple[Link, ...] = ()
    description: str = ""

    @model_validator(mode="after")
    def _unique_node_ids(self) -> RelationshipGraph:
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"duplicate node id {node.id!r}")
            seen.add(node.id)
        return self

    def node_ids(self) -> frozenset[str]:
        return frozenset(node.id for node in self.nodes)

    def resolved_links(self) -> tuple[Link, ...]:
        """Links whose two endpoints both exist in ``nodes``."""
        ids = self.node_ids()
        return tuple(lk for lk in self.links if lk.source in ids and lk.target in ids)

    def dangling_links(self) -> tuple[Link, ...]:
        ids = self.node_ids()
        return tuple(lk for lk in self.links if lk.source not in ids or lk.target not in ids)


class Snapshot(_Contract):
    """The complete historical record for one requested year."""

    year: StrictInt
    summary: str = ""
    civilizations: tuple[Civilization, ...]
    interactions: tuple[Interaction, ...]
    relationships: RelationshipGraph = Field(default_factory=RelationshipGraph)

    @model_validator(mode="after")
    def _unique_civilization_names(self) -> Snapshot:
        seen: set[str] = set()
        for civ in self.civilizations:
            if civ.name in seen:
                raise ValueError(f"duplicate civilization name {civ.name!r}")
            seen.add(civ.name)
        return self

    def civilization(self, name: str) -> Civilization | None:
        """Return the civilization called ``name``, if present."""
        for civ in self.civilizations:
            if civ.name == name:
                return civ
        return None


# ---- Boundary helpers --------------------------------------------------------


def _describe(exc: ValidationError, limit: int = 3) -> str:
    """Condense a pydantic error into one line, e.g. ``civilizations: Field required``."""
    parts: list[str] = []
    for item in exc.errors()[:limit]:
        loc = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {item.get('msg', 'invalid')}")
    extra = exc.error_count() - limit
    if extra > 0:
        parts.append(f"(+{extra} more)")
    return "; ".join(parts)


def validate_snapshot(raw: Any) -> Result[Snapshot, str]:
    """Validate a loosely-typed record into a :class:`Snapshot`.

    Returns ``Err`` with a short description instead of raising, so the cache
    can treat failures as misses and the controller as malformed responses.
    """
    if isinstance(raw, Snapshot):
        return ok(raw)
    if not isinstance(raw, Mapping):
        return err(f"snapshot must be a JSON object, got {type(raw).__name__}")
    try:
        return ok(Snapshot.model_validate(dict(raw)))
    except ValidationError as exc:
        return err(_describe(exc))


def snapshot_from_json(text: str) -> Result[Snapshot, str]:
    """Decode and validate a serialized snapshot."""
    try:
        payload: Any = json.loads(text)
    except (ValueError, TypeError) as exc:
        return err(f"invalid JSON: {exc}")
    return validate_snapshot(payload)


def snapshot_to_json(snapshot: Snapshot) -> str:
    """Serialize with camelCase keys, the same shape the generator returns."""
    return json.dumps(snapshot.model_dump(mode="json", by_alias=True), ensure_ascii=False)


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
