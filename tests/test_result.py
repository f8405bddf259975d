"""Unit tests for the lightweight Result utilities."""

from __future__ import annotations

import pytest

from chronomap.core.result import Err, Ok, Result, err, ok


def test_ok_map_and_unwrap() -> None:
    r: Result[int, str] = ok(10)
    r2 = r.map(lambda x: x + 5)
    assert isinstance(r2, Ok)
    assert r2.is_ok() and r2.unwrap() == 15


def test_err_propagates_through_map() -> None:
    r: Result[int, str] = err("boom")
    assert r.is_err()
    mapped = r.map(lambda x: x + 1)
    assert isinstance(mapped, Err) and mapped.unwrap_err() == "boom"


def test_unwrap_variants() -> None:
    assert ok("x").get_or("fallback") == "x"
    assert err("e").get_or("fallback") == "fallback"
    with pytest.raises(RuntimeError):
        err("e").unwrap()
    with pytest.raises(RuntimeError):
        ok(1).unwrap_err()
