"""Map projection and influence radii.

The projector is a Mercator projection framed the way the world map is shown:
scale ``width / 6.5`` and origin at ``(width / 2, height / 1.6)``, which puts
the equator a little below the vertical center and leaves room for the
northern landmasses. It is a frozen dataclass, so ``project`` is a pure
function of the viewport size and the input coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Mercator is unbounded at the poles; this is the usual web-map cutoff.
MAX_LATITUDE = 85.05112878
SCALE_DIVISOR = 6.5
VERTICAL_ANCHOR = 1.6

# Influence radius: radius_km / REFERENCE_KM * width * WIDTH_FACTOR, floored.
REFERENCE_KM = 15000.0
WIDTH_FACTOR = 1.5
MIN_RADIUS_PX = 10.0

Point = tuple[float, float]


@dataclass(frozen=True, slots=True)
class GeoProjector:
    """Deterministic (lat, lng) -> (x, y) mapping for a ``width x height`` viewport."""

    width: float
    height: float
    min_radius: float = MIN_RADIUS_PX

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError("viewport width and height must be positive")
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            raise ValueError("viewport size must be finite")

    @property
    def scale(self) -> float:
        return self.width / SCALE_DIVISOR

    @property
    def origin(self) -> Point:
        return (self.width / 2.0, self.height / VERTICAL_ANCHOR)

    def project(self, lat: float, lng: float) -> Point:
        """Project degrees to plane coordinates (y grows downward)."""
        phi = math.radians(max(-MAX_LATITUDE, min(MAX_LATITUDE, lat)))
        lam = math.radians(lng)
        ox, oy = self.origin
        x = ox + self.scale * lam
        y = oy - self.scale * math.log(math.tan(math.pi / 4.0 + phi / 2.0))
        return (x, y)

    def invert(self, x: float, y: float) -> Point:
        """Inverse of :meth:`project`; returns ``(lat, lng)`` in degrees."""
        ox, oy = self.origin
        lam = (x - ox) / self.scale
        phi = 2.0 * math.atan(math.exp((oy - y) / self.scale)) - math.pi / 2.0
        return (math.degrees(phi), math.degrees(lam))

    def influence_radius_pixels(self, radius_km: float, viewport_width: float | None = None) -> float:
        """Visual radius for an area of control of ``radius_km``.

        Linear in ``radius_km`` and never below :attr:`min_radius`, so small
        powers stay visible and clickable. Negative or non-finite input maps
        to the floor.
        """
        width = self.width if viewport_width is None else viewport_width
        return influence_radius_pixels(radius_km, width, self.min_radius)


def influence_radius_pixels(
    radius_km: float,
    viewport_width: float,
    min_radius: float = MIN_RADIUS_PX,
) -> float:
    """Module-level form of :meth:`GeoProjector.influence_radius_pixels`."""
    if not math.isfinite(radius_km) or radius_km <= 0:
        return min_radius
    return max(radius_km / REFERENCE_KM * viewport_width * WIDTH_FACTOR, min_radius)


__all__ = [
    "MAX_LATITUDE",
    "MIN_RADIUS_PX",
    "REFERENCE_KM",
    "Point",
    "GeoProjector",
    "influence_radius_pixels",
]
