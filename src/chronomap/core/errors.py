"""Failure taxonomy for snapshot resolution.

Only ``CacheCorrupt`` is recovered locally (the cache evicts the entry and
reports a miss). The three generator errors are surfaced to callers as a
``Failed`` state carrying a :class:`FailureReason`; none of them is retried
automatically. A forced refresh is the only retry path.
"""

from __future__ import annotations

from enum import Enum


class FailureReason(str, Enum):
    """Why a year could not be resolved to a snapshot."""

    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed-response"
    TRANSPORT = "transport-error"


class ChronoMapError(Exception):
    """Base class for all ChronoMap errors."""


class CacheCorrupt(ChronoMapError):
    """A stored cache entry could not be decoded into a snapshot."""

    def __init__(self, key: str, detail: str) -> None:
        super().__init__(f"corrupt cache entry {key!r}: {detail}")
        self.key = key
        self.detail = detail


class GeneratorError(ChronoMapError):
    """Base class for failures at the snapshot-generator boundary."""

    reason: FailureReason = FailureReason.TRANSPORT


class GeneratorUnavailable(GeneratorError):
    """No generator (or no credential) is available for this request."""

    reason = FailureReason.UNAVAILABLE


class GeneratorMalformed(GeneratorError):
    """The generator answered, but its payload failed schema validation."""

    reason = FailureReason.MALFORMED


class GeneratorTransport(GeneratorError):
    """The request to the generator failed in transit."""

    reason = FailureReason.TRANSPORT


_ERRORS_BY_REASON: dict[FailureReason, type[GeneratorError]] = {
    FailureReason.UNAVAILABLE: GeneratorUnavailable,
    FailureReason.MALFORMED: GeneratorMalformed,
    FailureReason.TRANSPORT: GeneratorTransport,
}


def error_for(reason: FailureReason, detail: str = "") -> GeneratorError:
    """Exception instance matching a failure reason, for callers that raise."""
    return _ERRORS_BY_REASON[reason](detail or reason.value)


__all__ = [
    "FailureReason",
    "ChronoMapError",
    "CacheCorrupt",
    "GeneratorError",
    "GeneratorUnavailable",
    "GeneratorMalformed",
    "GeneratorTransport",
    "error_for",
]
