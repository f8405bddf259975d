"""
Snapshot generator boundary.

Responsibilities
----------------
- Define :class:`SnapshotGenerator`, the protocol the temporal controller
  awaits: ``generate(year, locale)`` returns a raw, snapshot-shaped mapping
  or raises one of the generator errors.
- Provide :class:`LLMSnapshotGenerator`, which asks Gemini (model alias
  ``"snapshot"``) for a JSON record constrained by :data:`SNAPSHOT_SCHEMA`.
- Provide :class:`YearLocator`, which turns a free-text query ("fall of
  Constantinople") into a single year.

The generator deliberately does *not* build a :class:`Snapshot`. Shape
validation belongs to the controller, so every generator (real or fake) goes
through the same check and a bad record always surfaces as
``malformed-response``.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any, Protocol

from chronomap.core.errors import GeneratorMalformed
from chronomap.core.settings import LocaleName, get_logger
from chronomap.core.years import clamp_year

from .client import GenerativeClient
from .prompts import SEARCH_SCHEMA, SNAPSHOT_SCHEMA, search_prompt, snapshot_prompt

_SNAPSHOT_MODEL_ALIAS = "snapshot"
_SEARCH_MODEL_ALIAS = "search"

logger = get_logger("chronomap.generator")


class SnapshotGenerator(Protocol):
    """Anything that can produce a raw snapshot record for a year."""

    async def generate(self, year: int, locale: LocaleName) -> Mapping[str, Any]: ...


def _get_client() -> GenerativeClient:
    """Return the shared client.

    Split into a helper so tests can monkeypatch this function and inject
    a fake client.
    """
    return GenerativeClient.from_env()


def decode_record(text: str) -> dict[str, Any]:
    """Decode the model's JSON text into a mapping.

    Raises
    ------
    GeneratorMalformed
        If the text is not JSON or its root is not an object.
    """
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GeneratorMalformed(f"Generator returned invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise GeneratorMalformed("Generator returned a non-object JSON root.")
    return payload


class LLMSnapshotGenerator:
    """Gemini-backed :class:`SnapshotGenerator`."""

    def __init__(self, client: GenerativeClient | None = None) -> None:
        self._client = client if client is not None else _get_client()

    @property
    def configured(self) -> bool:
        return self._client.configured

    async def generate(self, year: int, locale: LocaleName) -> Mapping[str, Any]:
        prompt = snapshot_prompt(year, locale)
        logger.info("generating snapshot for %s (%s)", year, locale)
        text = await asyncio.to_thread(
            self._client.generate,
            prompt,
            model=_SNAPSHOT_MODEL_ALIAS,
            response_schema=SNAPSHOT_SCHEMA,
        )
        return decode_record(text)


class YearLocator:
    """Resolve a free-text query to the most significant year it refers to."""

    def __init__(self, client: GenerativeClient | None = None) -> None:
        self._client = client if client is not None else _get_client()

    async def locate(self, query: str) -> int:
        """Return the clamped year for ``query``.

        Raises
        ------
        ValueError
            If ``query`` is blank.
        GeneratorError
            Any generator failure, including a missing or non-integer year.
        """
        query = query.strip()
        if not query:
            raise ValueError("search query must not be empty")

        text = await asyncio.to_thread(
            self._client.generate,
            search_prompt(query),
            model=_SEARCH_MODEL_ALIAS,
            response_schema=SEARCH_SCHEMA,
        )
        payload = decode_record(text)
        year = payload.get("year")
        if isinstance(year, bool) or not isinstance(year, int):
            raise GeneratorMalformed(f"Search response has no integer 'year': {payload!r}")
        return clamp_year(year)


__all__ = ["SnapshotGenerator", "LLMSnapshotGenerator", "YearLocator", "decode_record"]
