"""Shared fixtures: raw snapshot records and a scriptable fake generator."""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from chronomap.core.settings import LocaleName, load_settings

RecordFactory = Callable[..., dict[str, Any]]


@pytest.fixture(autouse=True)
def _fresh_settings() -> Any:
    """Drop cached settings after each test so env tweaks do not leak."""
    yield
    load_settings.cache_clear()


def _record(year: int, *, summary: str | None = None, dangling: bool = False) -> dict[str, Any]:
    """A valid camelCase snapshot record for ``year`` (the Punic wars, roughly)."""
    links: list[dict[str, Any]] = [
        {"source": "Hannibal", "target": "Carthage", "label": "general", "type": "serves"},
        {"source": "Carthage", "target": "Rome", "label": "war", "type": "conflict"},
        {"source": "Scipio", "target": "Rome", "label": "consul", "type": "serves"},
    ]
    if dangling:
        links.append({"source": "Hannibal", "target": "Numidia", "label": "ally"})
    return {
        "year": year,
        "summary": summary if summary is not None else f"The Mediterranean in {year}.",
        "civilizations": [
            {
                "name": "Carthage",
                "lat": 36.85,
                "lng": 10.32,
                "radiusKm": 900,
                "color": "#a855f7",
                "overview": "A maritime trading republic.",
                "government": {"type": "Republic", "leaders": ["Hanno"]},
                "society": {"economy": "Maritime trade."},
                "figures": [{"name": "Hannibal", "role": "General"}],
                "sources": ["Polybius"],
            },
            {
                "name": "Rome",
                "lat": 41.9,
                "lng": 12.5,
                "radiusKm": 1200,
                "color": "#ef4444",
                "government": {"type": "Republic", "leaders": ["Scipio"]},
            },
        ],
        "interactions": [
            {
                "type": "conflict",
                "fromLat": 36.85,
                "fromLng": 10.32,
                "toLat": 41.9,
                "toLng": 12.5,
                "title": "Punic War",
                "participants": ["Carthage", "Rome"],
            }
        ],
        "relationships": {
            "description": "Punic rivalry",
            "nodes": [
                {"id": "Hannibal", "group": "person"},
                {"id": "Scipio", "group": "person"},
                {"id": "Carthage", "group": "nation"},
                {"id": "Rome", "group": "nation"},
            ],
            "links": links,
        },
    }


@pytest.fixture
def make_record() -> RecordFactory:
    """Factory fixture: ``make_record(year, summary=..., dangling=...)``."""
    return _record


class FakeGenerator:
    """In-memory :class:`SnapshotGenerator` for controller tests.

    - ``records`` overrides the record returned for specific years.
    - ``error`` (if set) is raised by every call.
    - ``gates`` holds per-year events; a call for a gated year waits until
      the test sets the event, which lets tests pick the completion order.
    """

    def __init__(
        self,
        records: Mapping[int, Any] | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.records: dict[int, Any] = dict(records or {})
        self.error = error
        self.gates: dict[int, asyncio.Event] = {}
        self.calls: list[tuple[int, LocaleName]] = []

    def gate(self, year: int) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[year] = event
        return event

    async def generate(self, year: int, locale: LocaleName) -> Mapping[str, Any]:
        self.calls.append((year, locale))
        if year in self.gates:
            await self.gates[year].wait()
        if self.error is not None:
            raise self.error
        if year in self.records:
            return copy.deepcopy(self.records[year])
        return _record(year)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def generator_cls() -> type[FakeGenerator]:
    """The fake class itself, for tests that need custom records or errors."""
    return FakeGenerator
