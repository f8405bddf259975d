"""
Viewport transform for the map: zoom and pan.

A transform ``(k, x, y)`` maps a world point ``p`` to the screen point
``k * p + (x, y)``. The controller keeps exactly one current transform and
enforces two rules after every change:

- ``k`` stays within ``[MIN_SCALE, MAX_SCALE]`` (1x to 8x);
- the translation is constrained so the visible world rectangle stays inside
  the world extent ``[[0, 0], [width, height]]``. At ``k == 1`` the only
  valid transform is the identity; zoomed in, the view can pan but never past
  the map's edges.

The translate constraint follows the usual zoom-behaviour rule: compute how
far the visible rectangle overhangs each edge and shift back by that amount,
centering the content when it is smaller than the viewport.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from chronomap.core.settings import get_logger

MIN_SCALE = 1.0
MAX_SCALE = 8.0
ZOOM_IN_FACTOR = 1.5
ZOOM_OUT_FACTOR = 0.75

Point = tuple[float, float]
TransformListener = Callable[["ViewportTransform"], None]

logger = get_logger("chronomap.viewport")


@dataclass(frozen=True, slots=True)
class ViewportTransform:
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, px: float, py: float) -> Point:
        return (px * self.k + self.x, py * self.k + self.y)

    def invert(self, sx: float, sy: float) -> Point:
        return ((sx - self.x) / self.k, (sy - self.y) / self.k)

    def translate(self, dx: float, dy: float) -> ViewportTransform:
        """Translate by ``(dx, dy)`` in world units."""
        return ViewportTransform(self.k, self.x + self.k * dx, self.y + self.k * dy)

    def to_dict(self) -> dict[str, float]:
        return {"scale": self.k, "translateX": self.x, "translateY": self.y}


IDENTITY = ViewportTransform()


def _clamp_scale(k: float) -> float:
    if not math.isfinite(k):
        return MAX_SCALE if k > 0 else MIN_SCALE
    return max(MIN_SCALE, min(MAX_SCALE, k))


def _axis_shift(d0: float, d1: float) -> float:
    if d1 > d0:
        return (d0 + d1) / 2.0
    return min(0.0, d0) or max(0.0, d1)


def constrain(transform: ViewportTransform, width: float, height: float) -> ViewportTransform:
    """Clamp scale and pull the translation back inside the world extent."""
    t = ViewportTransform(_clamp_scale(transform.k), transform.x, transform.y)
    left, top = t.invert(0.0, 0.0)
    right, bottom = t.invert(width, height)
    dx0, dx1 = left, right - width
    dy0, dy1 = top, bottom - height
    return t.translate(_axis_shift(dx0, dx1), _axis_shift(dy0, dy1))


class ViewportController:
    """Owns the current :class:`ViewportTransform` for a ``width x height`` map."""

    def __init__(self, width: float, height: float) -> None:
        if not (width > 0 and height > 0):
            raise ValueError("viewport width and height must be positive")
        self.width = float(width)
        self.height = float(height)
        self._transform = IDENTITY
        self._listeners: list[TransformListener] = []

    @property
    def transform(self) -> ViewportTransform:
        return self._transform

    @property
    def center(self) -> Point:
        return (self.width / 2.0, self.height / 2.0)

    def subscribe(self, listener: TransformListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, transform: ViewportTransform) -> ViewportTransform:
        constrained = constrain(transform, self.width, self.height)
        if constrained != self._transform:
            self._transform = constrained
            logger.debug("viewport -> %r", constrained)
            for listener in list(self._listeners):
                listener(constrained)
        return self._transform

    def zoom_by(self, factor: float, anchor: Point | None = None) -> ViewportTransform:
        """Multiply the scale by ``factor``, keeping ``anchor`` (screen) fixed."""
        if not (factor > 0 and math.isfinite(factor)):
            raise ValueError(f"zoom factor must be a positive number, got {factor!r}")
        ax, ay = anchor if anchor is not None else self.center
        wx, wy = self._transform.invert(ax, ay)
        k = _clamp_scale(self._transform.k * factor)
        return self._set(ViewportTransform(k, ax - wx * k, ay - wy * k))

    def zoom_in(self) -> ViewportTransform:
        return self.zoom_by(ZOOM_IN_FACTOR)

    def zoom_out(self) -> ViewportTransform:
        return self.zoom_by(ZOOM_OUT_FACTOR)

    def pan_by(self, dx: float, dy: float) -> ViewportTransform:
        """Shift the view by ``(dx, dy)`` screen pixels."""
        t = self._transform
        return self._set(ViewportTransform(t.k, t.x + dx, t.y + dy))

    def pan_to(self, transform: ViewportTransform) -> ViewportTransform:
        return self._set(transform)

    def reset(self) -> ViewportTransform:
        return self._set(IDENTITY)

    def apply(self, x: float, y: float) -> Point:
        """World (projected map) point to screen point."""
        return self._transform.apply(x, y)

    def invert(self, x: float, y: float) -> Point:
        """Screen point to world (projected map) point, e.g. for hit tests."""
        return self._transform.invert(x, y)


__all__ = [
    "MIN_SCALE",
    "MAX_SCALE",
    "ZOOM_IN_FACTOR",
    "ZOOM_OUT_FACTOR",
    "ViewportTransform",
    "IDENTITY",
    "constrain",
    "ViewportController",
]
