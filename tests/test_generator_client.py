"""Tests for the Gemini client. No real HTTP: `_post` or `urlopen` is patched."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any

import pytest

from chronomap.core.errors import GeneratorMalformed, GeneratorTransport, GeneratorUnavailable
from chronomap.generator.client import GenerativeClient
from chronomap.generator.models import DEFAULT_ALIAS, GEMINI_BASE_URL, get_model


def _gemini(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_from_env_reads_google_settings(monkeypatch: Any) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "test-google-key")
    monkeypatch.setenv("GOOGLE_API_BASE_URL", "https://example.com/v1beta")
    from chronomap.core.settings import load_settings

    load_settings.cache_clear()
    client = GenerativeClient.from_env()

    assert client.api_key == "test-google-key"
    assert client.base_url == "https://example.com/v1beta"
    assert client.default_model_alias == DEFAULT_ALIAS
    assert client.configured


def test_missing_key_is_unavailable() -> None:
    client = GenerativeClient(api_key="")
    assert not client.configured
    with pytest.raises(GeneratorUnavailable):
        client.generate("anything")


def test_generate_builds_gemini_request(monkeypatch: Any) -> None:
    captured: dict[str, Any] = {}

    def fake_post(
        self: GenerativeClient,
        *,
        url: str,
        headers: dict[str, str],
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        captured.update(url=url, headers=headers, payload=payload)
        return _gemini('{"year": 1453}')

    monkeypatch.setattr(GenerativeClient, "_post", fake_post)
    client = GenerativeClient(api_key="k-123")
    schema = {"type": "OBJECT", "properties": {"year": {"type": "NUMBER"}}}

    text = client.generate("When did Constantinople fall?", model="search", response_schema=schema)

    assert text == '{"year": 1453}'
    model = get_model("search")
    assert captured["url"] == f"{GEMINI_BASE_URL}/models/{model.name}:generateContent"
    assert captured["headers"]["x-goog-api-key"] == "k-123"
    gen_cfg = captured["payload"]["generationConfig"]
    assert gen_cfg["responseMimeType"] == "application/json"
    assert gen_cfg["responseSchema"] == schema
    assert gen_cfg["maxOutputTokens"] == model.max_tokens
    assert captured["payload"]["contents"][0]["parts"][0]["text"].startswith("When did")


def test_base_url_override(monkeypatch: Any) -> None:
    urls: list[str] = []

    def fake_post(self: GenerativeClient, *, url: str, headers: Any, payload: Any) -> dict[str, Any]:
        urls.append(url)
        return _gemini("{}")

    monkeypatch.setattr(GenerativeClient, "_post", fake_post)
    GenerativeClient(api_key="k", base_url="http://localhost:9000/v1/").generate("x")
    assert urls == [f"http://localhost:9000/v1/models/{get_model(DEFAULT_ALIAS).name}:generateContent"]


@pytest.mark.parametrize(
    "response",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": None}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": "..."}]}}]},
    ],
)
def test_bad_response_shapes_are_malformed(monkeypatch: Any, response: dict[str, Any]) -> None:
    monkeypatch.setattr(GenerativeClient, "_post", lambda self, **_: response)
    with pytest.raises(GeneratorMalformed):
        GenerativeClient(api_key="k").generate("x")


class _FakeResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


def test_post_decodes_json(monkeypatch: Any) -> None:
    body = json.dumps(_gemini('{"ok": true}')).encode("utf-8")
    monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout: _FakeResponse(body))
    assert GenerativeClient(api_key="k").generate("x") == '{"ok": true}'


def test_post_network_error_is_transport(monkeypatch: Any) -> None:
    def boom(req: Any, timeout: float) -> Any:
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(urllib.request, "urlopen", boom)
    with pytest.raises(GeneratorTransport):
        GenerativeClient(api_key="k").generate("x")


def test_post_timeout_is_transport(monkeypatch: Any) -> None:
    def slow(req: Any, timeout: float) -> Any:
        raise TimeoutError("timed out")

    monkeypatch.setattr(urllib.request, "urlopen", slow)
    with pytest.raises(GeneratorTransport):
        GenerativeClient(api_key="k").generate("x")


def test_post_non_json_body_is_malformed(monkeypatch: Any) -> None:
    monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout: _FakeResponse(b"<html>"))
    with pytest.raises(GeneratorMalformed):
        GenerativeClient(api_key="k").generate("x")
