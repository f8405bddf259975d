"""Geospatial projection, interaction routes and the map scene."""

from __future__ import annotations

from .projection import GeoProjector, influence_radius_pixels
from .routes import ArcRoute, InteractionRouter, RouteStyle, arc, style_for
from .scene import CivilizationMarker, MapScene, build_scene

__all__ = [
    "GeoProjector",
    "influence_radius_pixels",
    "ArcRoute",
    "InteractionRouter",
    "RouteStyle",
    "arc",
    "style_for",
    "CivilizationMarker",
    "MapScene",
    "build_scene",
]
