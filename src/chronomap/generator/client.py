# -----------------------------------------------------------------------------
# Synchronous client for Google Gemini's `generateContent` endpoint.
#
#   - reads the API key / base URL from settings (GOOGLE_API_KEY,
#     GOOGLE_API_BASE_URL)
#   - resolves logical aliases through the model registry
#   - asks for JSON output, optionally constrained by a response schema
#   - maps every failure onto the generator error taxonomy:
#       missing credential            -> GeneratorUnavailable
#       HTTP / network failure        -> GeneratorTransport
#       undecodable or empty payload  -> GeneratorMalformed
#
# HTTP goes through `urllib.request`; tests monkeypatch `_post()` so no real
# request is ever made in CI. Async callers wrap `generate()` in
# `asyncio.to_thread`.
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from chronomap.core.errors import GeneratorMalformed, GeneratorTransport, GeneratorUnavailable
from chronomap.core.settings import load_settings

from .models import DEFAULT_ALIAS, ModelConfig, get_model


@dataclass(slots=True)
class GenerativeClient:
    """Minimal Gemini client with a single :meth:`generate` call.

    Parameters
    ----------
    api_key:
        Google API key. An empty key makes every call raise
        :class:`GeneratorUnavailable`.
    base_url:
        Optional endpoint override; falls back to the model's registry URL.
    default_model_alias:
        Alias looked up in the registry when callers pass no model.
    timeout_seconds:
        Network timeout for one request.
    """

    api_key: str
    base_url: str | None = None
    default_model_alias: str = DEFAULT_ALIAS
    timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls, default_model_alias: str = DEFAULT_ALIAS) -> GenerativeClient:
        """Construct a client from ``GOOGLE_API_KEY`` / ``GOOGLE_API_BASE_URL``."""
        cfg = load_settings()
        return cls(
            api_key=cfg.google_api_key or "",
            base_url=cfg.google_api_base_url,
            default_model_alias=default_model_alias,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        response_schema: Mapping[str, Any] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Return the JSON text produced by the model for ``prompt``.

        Raises
        ------
        GeneratorUnavailable
            If no API key is configured.
        GeneratorTransport
            If the HTTP request fails.
        GeneratorMalformed
            If the response cannot be decoded or carries no text.
        """
        if not self.api_key:
            raise GeneratorUnavailable("Missing GOOGLE_API_KEY; the snapshot generator is offline.")

        config: ModelConfig = get_model(model or self.default_model_alias)
        base_url = (self.base_url or config.base_url).rstrip("/")
        url = f"{base_url}/models/{config.name}:generateContent"

        generation_config: MutableMapping[str, Any] = {
            "temperature": float(temperature if temperature is not None else config.temperature),
            "maxOutputTokens": int(max_tokens if max_tokens is not None else config.max_tokens),
            "responseMimeType": "application/json",
        }
        if response_schema is not None:
            generation_config["responseSchema"] = dict(response_schema)

        payload: MutableMapping[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        response = self._post(url=url, headers=headers, payload=payload)
        return self._extract_text(response)

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _post(
        self,
        *,
        url: str,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Perform an HTTP POST request and decode the JSON response.

        This is the seam tests patch to return canned responses.
        """
        body = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            url=url,
            data=body,
            headers=dict(headers),
            method="POST",
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise GeneratorTransport(
                f"Generator HTTP error {exc.code}: {exc.reason}; body={detail!r}"
            ) from exc
        except (urllib.error.URLError, TimeoutError) as exc:
            raise GeneratorTransport(f"Generator network error: {exc}") from exc

        try:
            decoded: Any = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise GeneratorMalformed("Failed to decode generator response as JSON") from exc
        if not isinstance(decoded, dict):
            raise GeneratorMalformed("Generator response root is not a JSON object")
        return decoded

    @staticmethod
    def _extract_text(response: Mapping[str, Any]) -> str:
        """Concatenate the text parts of ``candidates[0].content.parts``."""
        candidates = response.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise GeneratorMalformed("Gemini response has no candidates.")

        first = candidates[0]
        content = first.get("content") if isinstance(first, Mapping) else None
        if not isinstance(content, Mapping):
            raise GeneratorMalformed("Gemini response candidates[0].content is missing.")

        parts = content.get("parts")
        if not isinstance(parts, list) or not parts:
            raise GeneratorMalformed("Gemini response candidates[0].content.parts is empty.")

        texts = [
            part["text"]
            for part in parts
            if isinstance(part, Mapping) and isinstance(part.get("text"), str)
        ]
        if not texts:
            raise GeneratorMalformed("Gemini response parts contain no text.")
        return "".join(texts)


__all__ = ["GenerativeClient"]
