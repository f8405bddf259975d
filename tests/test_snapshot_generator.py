"""Tests for the snapshot generator and year locator (client faked)."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from chronomap.core.errors import GeneratorMalformed, GeneratorTransport
from chronomap.generator.prompts import SNAPSHOT_SCHEMA, format_year, snapshot_prompt
from chronomap.generator.snapshot_generator import (
    LLMSnapshotGenerator,
    YearLocator,
    decode_record,
)


class FakeClient:
    """Stands in for GenerativeClient; records calls and replays canned text."""

    def __init__(self, text: str = "{}", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[dict[str, Any]] = []

    @property
    def configured(self) -> bool:
        return True

    def generate(self, prompt: str, **kwargs: Any) -> str:
        self.calls.append({"prompt": prompt, **kwargs})
        if self.error is not None:
            raise self.error
        return self.text


def test_format_year() -> None:
    assert format_year(-44) == "44 BC"
    assert format_year(1066) == "1066 AD"


def test_prompt_carries_year_and_language() -> None:
    en = snapshot_prompt(-500, "en")
    zh = snapshot_prompt(-500, "zh")
    assert "500 BC" in en and "English" in en
    assert "Chinese" in zh
    assert '"year" field must be -500' in en


def test_generate_returns_raw_record(make_record: Any) -> None:
    client = FakeClient(json.dumps(make_record(-218)))
    gen = LLMSnapshotGenerator(client)  # type: ignore[arg-type]

    record = asyncio.run(gen.generate(-218, "zh"))

    assert record["year"] == -218
    assert record["civilizations"][0]["radiusKm"] == 900
    call = client.calls[0]
    assert call["model"] == "snapshot"
    assert call["response_schema"] is SNAPSHOT_SCHEMA
    assert "Chinese" in call["prompt"]


def test_generate_does_not_validate_shape() -> None:
    """Shape checks belong to the controller; the generator passes records through."""
    gen = LLMSnapshotGenerator(FakeClient('{"year": 1}'))  # type: ignore[arg-type]
    assert asyncio.run(gen.generate(1, "en")) == {"year": 1}


def test_generate_propagates_client_errors() -> None:
    gen = LLMSnapshotGenerator(FakeClient(error=GeneratorTransport("reset")))  # type: ignore[arg-type]
    with pytest.raises(GeneratorTransport):
        asyncio.run(gen.generate(1, "en"))


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '"year"'])
def test_decode_record_rejects_non_objects(text: str) -> None:
    with pytest.raises(GeneratorMalformed):
        decode_record(text)


def test_locator_returns_clamped_year() -> None:
    assert asyncio.run(YearLocator(FakeClient('{"year": 1453}')).locate("fall of Constantinople")) == 1453  # type: ignore[arg-type]
    assert asyncio.run(YearLocator(FakeClient('{"year": 2500}')).locate("the far future")) == 2024  # type: ignore[arg-type]
    assert asyncio.run(YearLocator(FakeClient('{"year": -9000}')).locate("first cities")) == -3000  # type: ignore[arg-type]


def test_locator_uses_search_model() -> None:
    client = FakeClient('{"year": -44}')
    asyncio.run(YearLocator(client).locate("Ides of March"))  # type: ignore[arg-type]
    assert client.calls[0]["model"] == "search"
    assert "Ides of March" in client.calls[0]["prompt"]


@pytest.mark.parametrize("text", ['{"year": "1453"}', '{"year": true}', '{"when": 1453}'])
def test_locator_rejects_non_integer_year(text: str) -> None:
    with pytest.raises(GeneratorMalformed):
        asyncio.run(YearLocator(FakeClient(text)).locate("something"))  # type: ignore[arg-type]


def test_locator_rejects_blank_query() -> None:
    with pytest.raises(ValueError):
        asyncio.run(YearLocator(FakeClient()).locate("   "))  # type: ignore[arg-type]
