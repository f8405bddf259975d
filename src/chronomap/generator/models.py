# -----------------------------------------------------------------------------
# Tiny, in-process model registry used by the generative client.
#
# Application code asks for a logical alias ("snapshot", "search") and the
# registry pins it to a concrete Gemini model with default sampling
# parameters. Keeping the mapping here means a model upgrade is a one-line
# change and tests can assert on aliases without touching the network.
# -----------------------------------------------------------------------------
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """Configuration for a single generative model.

    Parameters
    ----------
    name:
        Provider model identifier, e.g. ``"gemini-2.5-flash"``.
    base_url:
        Base URL of the ``generateContent`` endpoint. May be overridden with
        ``GOOGLE_API_BASE_URL``.
    max_tokens:
        Default cap on generated tokens.
    temperature:
        Default sampling temperature. Snapshot generation runs cool so the
        same year tends to produce the same powers.
    """

    name: str
    base_url: str = GEMINI_BASE_URL
    max_tokens: int = 8192
    temperature: float = 0.4


MODEL_REGISTRY: dict[str, ModelConfig] = {
    # Full historical snapshot: long structured JSON output.
    "snapshot": ModelConfig(
        name="gemini-2.5-flash",
        max_tokens=16384,
        temperature=0.3,
    ),
    # Free-text query -> single year; tiny output.
    "search": ModelConfig(
        name="gemini-2.5-flash",
        max_tokens=256,
        temperature=0.0,
    ),
}

#: Default logical alias used when callers do not explicitly choose a model.
DEFAULT_ALIAS: str = "snapshot"


def get_model(alias_or_name: str) -> ModelConfig:
    """Return a :class:`ModelConfig` for an alias, or build one for a raw model id."""
    if alias_or_name in MODEL_REGISTRY:
        return MODEL_REGISTRY[alias_or_name]
    return ModelConfig(name=alias_or_name)


def all_models() -> Mapping[str, ModelConfig]:
    """Return a shallow copy of the registry."""
    return dict(MODEL_REGISTRY)


__all__ = ["GEMINI_BASE_URL", "ModelConfig", "MODEL_REGISTRY", "DEFAULT_ALIAS", "get_model", "all_models"]
