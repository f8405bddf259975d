"""Map scene: the projected geometry of one snapshot.

This is what a renderer consumes for the world map: one marker per
civilization (center, influence radius, color) and one styled arc per
interaction. A scene is built from a single snapshot and never updated in
place; a new year produces a new scene.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from chronomap.core.contracts.snapshot import Snapshot

from .projection import GeoProjector
from .routes import ArcRoute, InteractionRouter


@dataclass(frozen=True, slots=True)
class CivilizationMarker:
    name: str
    x: float
    y: float
    radius: float
    color: str

    def contains(self, x: float, y: float) -> bool:
        return math.hypot(x - self.x, y - self.y) <= self.radius


@dataclass(frozen=True, slots=True)
class MapScene:
    year: int
    width: float
    height: float
    markers: tuple[CivilizationMarker, ...] = ()
    routes: tuple[ArcRoute, ...] = field(default=(), repr=False)

    def civilization_at(self, x: float, y: float) -> str | None:
        """Name of the top-most marker under ``(x, y)``, if any.

        Markers are drawn in snapshot order, so the last one containing the
        point is the one on top.
        """
        for marker in reversed(self.markers):
            if marker.contains(x, y):
                return marker.name
        return None

    def to_dict(self, segments: int = 24) -> dict[str, Any]:
        """JSON-safe form for the HTTP API."""
        return {
            "year": self.year,
            "width": self.width,
            "height": self.height,
            "civilizations": [
                {
                    "name": m.name,
                    "x": m.x,
                    "y": m.y,
                    "radius": m.radius,
                    "color": m.color,
                }
                for m in self.markers
            ],
            "interactions": [
                {
                    "type": r.kind,
                    "title": r.title,
                    "path": r.svg_path(),
                    "points": [list(p) for p in r.points(segments)],
                    "color": r.style.color,
                    "dash": r.style.dasharray,
                    "width": r.style.width,
                    "opacity": r.style.opacity,
                }
                for r in self.routes
            ],
        }


def build_scene(
    snapshot: Snapshot,
    projector: GeoProjector,
    router: InteractionRouter | None = None,
) -> MapScene:
    """Project ``snapshot`` onto ``projector``'s viewport."""
    router = router if router is not None else InteractionRouter(projector)
    markers: list[CivilizationMarker] = []
    for civ in snapshot.civilizations:
        x, y = projector.project(civ.lat, civ.lng)
        markers.append(
            CivilizationMarker(
                name=civ.name,
                x=x,
                y=y,
                radius=projector.influence_radius_pixels(civ.radius_km),
                color=civ.color,
            )
        )
    return MapScene(
        year=snapshot.year,
        width=projector.width,
        height=projector.height,
        markers=tuple(markers),
        routes=tuple(router.routes(snapshot)),
    )


__all__ = ["CivilizationMarker", "MapScene", "build_scene"]
