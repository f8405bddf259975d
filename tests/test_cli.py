"""
Tests for the ChronoMap command-line interface.

The production service factory (`_build_service`) is monkeypatched to return
services over a shared in-memory cache, so nothing touches the disk or the
network. We use `typer.testing.CliRunner` to invoke the app in-process.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

from chronomap import cli
from chronomap.cli import app
from chronomap.core.cache import MemorySnapshotCache
from chronomap.generator.snapshot_generator import YearLocator
from chronomap.service import ChronoMapService


class _SearchClient:
    def __init__(self, year: int) -> None:
        self.year = year

    def generate(self, prompt: str, **_: Any) -> str:
        return json.dumps({"year": self.year})


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: Any) -> None:
    """Rich falls back to 80 columns off a terminal; widen so tables do not wrap."""
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture
def cache() -> MemorySnapshotCache:
    return MemorySnapshotCache()


def _install(
    monkeypatch: Any,
    cache: MemorySnapshotCache,
    generator: Any = None,
    locator: Any = None,
) -> list[Any]:
    """Route `_build_service` to in-memory services; returns the locales it saw."""
    locales: list[Any] = []

    def factory(locale: Any = None) -> ChronoMapService:
        locales.append(locale)
        return ChronoMapService.build(cache, generator, locator, locale=locale or "en")

    monkeypatch.setattr(cli, "_build_service", factory)
    return locales


def test_cli_help_lists_commands(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, result.output
    for command in ("show", "search", "layout", "forget"):
        assert command in result.output


def test_show_year_zero_offline(runner: CliRunner, monkeypatch: Any, cache: MemorySnapshotCache) -> None:
    _install(monkeypatch, cache)
    result = runner.invoke(app, ["show", "0"])

    assert result.exit_code == 0, result.output
    assert "0 AD" in result.output
    assert "Roman Empire" in result.output
    assert "Han Dynasty" in result.output
    assert "Silk Road" in result.output
    assert cache.contains(0)


def test_show_unknown_year_offline_fails(runner: CliRunner, monkeypatch: Any, cache: MemorySnapshotCache) -> None:
    _install(monkeypatch, cache)
    result = runner.invoke(app, ["show", "500"])

    assert result.exit_code == 1
    assert "unavailable" in result.output


def test_show_bc_year_with_generator(
    runner: CliRunner,
    monkeypatch: Any,
    cache: MemorySnapshotCache,
    fake_generator: Any,
) -> None:
    _install(monkeypatch, cache, fake_generator)
    result = runner.invoke(app, ["show", "--", "-218"])

    assert result.exit_code == 0, result.output
    assert "218 BC" in result.output
    assert "Carthage" in result.output
    assert "Punic War" in result.output
    assert fake_generator.calls == [(-218, "en")]


def test_show_refresh_and_locale(
    runner: CliRunner,
    monkeypatch: Any,
    cache: MemorySnapshotCache,
    fake_generator: Any,
) -> None:
    locales = _install(monkeypatch, cache, fake_generator)
    assert runner.invoke(app, ["show", "100"]).exit_code == 0
    result = runner.invoke(app, ["show", "100", "--refresh", "--locale", "zh"])

    assert result.exit_code == 0, result.output
    assert locales == [None, "zh"]
    assert fake_generator.calls == [(100, "en"), (100, "zh")]


def test_show_rejects_unknown_locale(runner: CliRunner, monkeypatch: Any, cache: MemorySnapshotCache) -> None:
    _install(monkeypatch, cache)
    result = runner.invoke(app, ["show", "0", "--locale", "fr"])
    assert result.exit_code == 2


def test_show_clamps_far_future(
    runner: CliRunner,
    monkeypatch: Any,
    cache: MemorySnapshotCache,
    fake_generator: Any,
) -> None:
    _install(monkeypatch, cache, fake_generator)
    result = runner.invoke(app, ["show", "3000"])
    assert result.exit_code == 0, result.output
    assert fake_generator.calls == [(2024, "en")]


def test_search_offline_fails(runner: CliRunner, monkeypatch: Any, cache: MemorySnapshotCache) -> None:
    _install(monkeypatch, cache)
    result = runner.invoke(app, ["search", "fall of Rome"])
    assert result.exit_code == 1
    assert "GOOGLE_API_KEY" in result.output


def test_search_prints_year(runner: CliRunner, monkeypatch: Any, cache: MemorySnapshotCache) -> None:
    _install(monkeypatch, cache, locator=YearLocator(_SearchClient(1453)))  # type: ignore[arg-type]
    result = runner.invoke(app, ["search", "fall of Constantinople"])
    assert result.exit_code == 0, result.output
    assert "1453" in result.output
    assert "1453 AD" in result.output


def test_layout_prints_nodes(runner: CliRunner, monkeypatch: Any, cache: MemorySnapshotCache) -> None:
    _install(monkeypatch, cache)
    result = runner.invoke(app, ["layout", "0"])

    assert result.exit_code == 0, result.output
    for node in ("Augustus", "Roman Empire", "Han Dynasty", "Silk Road"):
        assert node in result.output
    assert "iterations" in result.output


def test_layout_reports_dangling_links(
    runner: CliRunner,
    monkeypatch: Any,
    cache: MemorySnapshotCache,
    generator_cls: Any,
    make_record: Any,
) -> None:
    gen = generator_cls({7: make_record(7, dangling=True)})
    _install(monkeypatch, cache, gen)
    result = runner.invoke(app, ["layout", "7"])
    assert result.exit_code == 0, result.output
    assert "1 link(s) reference unknown nodes" in result.output


def test_forget_removes_cached_year(runner: CliRunner, monkeypatch: Any, cache: MemorySnapshotCache) -> None:
    _install(monkeypatch, cache)
    assert runner.invoke(app, ["show", "0"]).exit_code == 0
    assert cache.contains(0)

    first = runner.invoke(app, ["forget", "0"])
    assert first.exit_code == 0
    assert "Forgot 0 AD" in first.output
    assert not cache.contains(0)

    second = runner.invoke(app, ["forget", "0"])
    assert "was not cached" in second.output
