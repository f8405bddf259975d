"""Tests for the zoom/pan viewport controller."""

from __future__ import annotations

from typing import Any

import pytest

from chronomap.core.viewport import (
    IDENTITY,
    MAX_SCALE,
    MIN_SCALE,
    ViewportController,
    ViewportTransform,
    constrain,
)

W, H = 800.0, 600.0


def _assert_inside(t: ViewportTransform) -> None:
    left, top = t.invert(0.0, 0.0)
    right, bottom = t.invert(W, H)
    assert left >= -1e-9 and top >= -1e-9
    assert right <= W + 1e-9 and bottom <= H + 1e-9


def test_zoom_in_then_out_returns_to_identity() -> None:
    vp = ViewportController(W, H)
    zoomed = vp.zoom_by(1.5)
    assert zoomed.k == pytest.approx(1.5)
    # Zooming about the center keeps the center fixed.
    assert zoomed.apply(W / 2, H / 2) == pytest.approx((W / 2, H / 2))

    back = vp.zoom_by(1 / 1.5)
    assert back.k == pytest.approx(1.0)
    assert back.x == pytest.approx(0.0, abs=1e-9)
    assert back.y == pytest.approx(0.0, abs=1e-9)


def test_scale_is_clamped() -> None:
    vp = ViewportController(W, H)
    assert vp.zoom_by(100).k == MAX_SCALE
    _assert_inside(vp.transform)
    assert vp.zoom_by(0.001).k == MIN_SCALE
    assert vp.transform == IDENTITY


def test_zoom_in_and_out_buttons() -> None:
    vp = ViewportController(W, H)
    assert vp.zoom_in().k == pytest.approx(1.5)
    assert vp.zoom_out().k == pytest.approx(1.125)


def test_pan_cannot_leave_the_world() -> None:
    vp = ViewportController(W, H)
    # At scale 1 the only valid transform is the identity.
    assert vp.pan_by(200, -150) == IDENTITY

    vp.zoom_by(2)
    vp.pan_by(10_000, 10_000)
    t = vp.transform
    assert (t.x, t.y) == pytest.approx((0.0, 0.0))
    vp.pan_by(-10_000, -10_000)
    t = vp.transform
    assert (t.x, t.y) == pytest.approx((W - 2 * W, H - 2 * H))
    _assert_inside(t)


def test_zoom_anchor_stays_fixed() -> None:
    vp = ViewportController(W, H)
    vp.zoom_by(2)
    anchor = (500.0, 300.0)
    world = vp.invert(*anchor)
    vp.zoom_by(1.5, anchor=anchor)
    assert vp.apply(*world) == pytest.approx(anchor)


def test_pan_to_and_reset() -> None:
    vp = ViewportController(W, H)
    t = vp.pan_to(ViewportTransform(3.0, -400.0, -300.0))
    assert t == ViewportTransform(3.0, -400.0, -300.0)
    assert vp.pan_to(ViewportTransform(20.0, 0.0, 0.0)).k == MAX_SCALE
    assert vp.reset() == IDENTITY


def test_constrain_centers_nothing_when_inside() -> None:
    t = ViewportTransform(2.0, -100.0, -50.0)
    assert constrain(t, W, H) == t


def test_subscribers_see_each_change_once() -> None:
    seen: list[Any] = []
    vp = ViewportController(W, H)
    unsubscribe = vp.subscribe(seen.append)
    vp.zoom_by(2)
    vp.pan_by(0, 0)
    vp.reset()
    unsubscribe()
    vp.zoom_by(2)
    assert [t.k for t in seen] == [2.0, 1.0]


def test_invalid_input() -> None:
    with pytest.raises(ValueError):
        ViewportController(0, 100)
    with pytest.raises(ValueError):
        ViewportController(W, H).zoom_by(0)
