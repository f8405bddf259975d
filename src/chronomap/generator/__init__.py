from __future__ import annotations

from .client import GenerativeClient
from .models import (
    DEFAULT_ALIAS,
    MODEL_REGISTRY,
    ModelConfig,
    all_models,
    get_model,
)
from .snapshot_generator import LLMSnapshotGenerator, SnapshotGenerator, YearLocator

__all__ = [
    "ModelConfig",
    "MODEL_REGISTRY",
    "DEFAULT_ALIAS",
    "get_model",
    "all_models",
    "GenerativeClient",
    "SnapshotGenerator",
    "LLMSnapshotGenerator",
    "YearLocator",
]
