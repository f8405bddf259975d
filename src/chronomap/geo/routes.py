"""Curved routes between interacting powers.

Each interaction is drawn as a circular arc whose radius is 1.5x the straight
distance between its projected endpoints. Because the radius scales with the
distance, the bulge (sagitta) of the arc does too: a short border skirmish
stays nearly straight on screen, a Silk Road bows visibly.

The arc follows SVG ``A`` command semantics (small arc, positive sweep), so
``ArcRoute.svg_path()`` and ``ArcRoute.points()`` describe the same curve.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from chronomap.core.contracts.snapshot import Interaction, Snapshot

from .projection import GeoProjector, Point

ARC_RADIUS_FACTOR = 1.5
DEFAULT_SEGMENTS = 24


@dataclass(frozen=True, slots=True)
class RouteStyle:
    color: str
    dash: str | None = None
    width: float = 1.5
    opacity: float = 0.6

    @property
    def dasharray(self) -> str:
        """SVG ``stroke-dasharray`` value."""
        return self.dash or "none"


ROUTE_STYLES: dict[str, RouteStyle] = {
    "conflict": RouteStyle(color="#ef4444", dash="4,4"),
    "trade": RouteStyle(color="#eab308"),
    "culture": RouteStyle(color="#3b82f6"),
    "diplomacy": RouteStyle(color="#3b82f6"),
}


def style_for(kind: str) -> RouteStyle:
    """Style for an interaction type; unknown types draw like culture/diplomacy."""
    return ROUTE_STYLES.get(kind, ROUTE_STYLES["culture"])


@dataclass(frozen=True, slots=True)
class ArcRoute:
    """A circular arc from ``start`` to ``end``.

    ``center`` is ``None`` for a degenerate route whose endpoints coincide.
    Angles are in radians in screen space (y down); ``sweep_angle`` is
    always in ``[0, pi]``.
    """

    start: Point
    end: Point
    radius: float
    center: Point | None
    start_angle: float
    sweep_angle: float
    kind: str
    style: RouteStyle
    title: str = ""

    @property
    def chord(self) -> float:
        return math.dist(self.start, self.end)

    @property
    def sagitta(self) -> float:
        """Maximum distance between the arc and its chord."""
        if self.center is None:
            return 0.0
        half = self.chord / 2.0
        return self.radius - math.sqrt(max(self.radius * self.radius - half * half, 0.0))

    def svg_path(self) -> str:
        x0, y0 = self.start
        x1, y1 = self.end
        if self.center is None:
            return f"M{x0},{y0}"
        r = self.radius
        return f"M{x0},{y0}A{r},{r} 0 0,1 {x1},{y1}"

    def point_at(self, t: float) -> Point:
        """Point at fraction ``t`` in ``[0, 1]`` along the arc."""
        if self.center is None:
            return self.start
        if t <= 0.0:
            return self.start
        if t >= 1.0:
            return self.end
        cx, cy = self.center
        angle = self.start_angle + t * self.sweep_angle
        return (cx + self.radius * math.cos(angle), cy + self.radius * math.sin(angle))

    def points(self, segments: int = DEFAULT_SEGMENTS) -> list[Point]:
        """Polyline approximation with ``segments + 1`` points, endpoints exact."""
        if self.center is None:
            return [self.start, self.end]
        segments = max(1, segments)
        return [self.point_at(i / segments) for i in range(segments + 1)]


def arc(start: Point, end: Point, kind: str = "culture", title: str = "") -> ArcRoute:
    """Build the arc between two projected points."""
    style = style_for(kind)
    x0, y0 = start
    x1, y1 = end
    distance = math.hypot(x1 - x0, y1 - y0)
    if distance == 0.0:
        return ArcRoute(start, end, 0.0, None, 0.0, 0.0, kind, style, title)

    r = distance * ARC_RADIUS_FACTOR
    # Endpoint-to-center conversion (SVG implementation notes, F.6.5) with
    # rx = ry = r, no rotation, large-arc = 0, sweep = 1.
    hx, hy = (x0 - x1) / 2.0, (y0 - y1) / 2.0
    half_sq = hx * hx + hy * hy
    coef = math.sqrt(max(r * r - half_sq, 0.0) / half_sq)
    cxp, cyp = coef * hy, -coef * hx
    center = (cxp + (x0 + x1) / 2.0, cyp + (y0 + y1) / 2.0)

    a0 = math.atan2(hy - cyp, hx - cxp)
    a1 = math.atan2(-hy - cyp, -hx - cxp)
    sweep = (a1 - a0) % (2.0 * math.pi)
    return ArcRoute(start, end, r, center, a0, sweep, kind, style, title)


@dataclass(frozen=True, slots=True)
class InteractionRouter:
    """Projects interactions and turns them into styled arcs."""

    projector: GeoProjector

    def route(self, interaction: Interaction) -> ArcRoute:
        start = self.projector.project(interaction.from_lat, interaction.from_lng)
        end = self.projector.project(interaction.to_lat, interaction.to_lng)
        return arc(start, end, interaction.type, interaction.title)

    def routes(self, snapshot: Snapshot) -> list[ArcRoute]:
        return [self.route(item) for item in snapshot.interactions]


__all__ = [
    "ARC_RADIUS_FACTOR",
    "RouteStyle",
    "ROUTE_STYLES",
    "style_for",
    "ArcRoute",
    "arc",
    "InteractionRouter",
]
