"""
Snapshot cache: year -> serialized snapshot, with existence-check and invalidate.

Two backends share one contract:

- :class:`MemorySnapshotCache` keeps serialized strings in a dict. It behaves
  like a browser's local storage and is what tests use.
- :class:`FileSnapshotCache` writes one JSON file per key under a directory
  (``CHRONOMAP_CACHE_DIR`` or ``artifacts/cache/``). The CLI and the HTTP API
  use it so snapshots survive restarts.

Contract
--------
- ``get(year)`` returns a :class:`Snapshot` or ``None``. It never raises on
  malformed stored data: a decode or validation failure is logged, the entry
  is evicted and the call reports a miss.
- ``put(year, snapshot)`` replaces the whole record and returns ``True``, or
  ``False`` if the backend could not store it.
- ``invalidate(year)`` removes the entry if present.

Entries have no TTL. Historical snapshots do not go stale on their own; only
an explicit invalidate (or a successful forced refresh overwriting the entry)
replaces them.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Protocol

from chronomap.core.contracts.snapshot import Snapshot, snapshot_from_json, snapshot_to_json
from chronomap.core.errors import CacheCorrupt
from chronomap.core.settings import get_logger

DEFAULT_PREFIX = "chronomap_data_"

logger = get_logger("chronomap.cache")


def cache_key(year: int, prefix: str = DEFAULT_PREFIX) -> str:
    """Return the storage key for ``year``, e.g. ``chronomap_data_-500``."""
    return f"{prefix}{int(year)}"


class SnapshotCache(Protocol):
    """Structural type accepted by the temporal controller."""

    def get(self, year: int) -> Snapshot | None: ...

    def put(self, year: int, snapshot: Snapshot) -> bool: ...

    def invalidate(self, year: int) -> None: ...

    def contains(self, year: int) -> bool: ...


class _SerializedSnapshotCache(ABC):
    """Shared get/put/invalidate logic over a raw string store."""

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        self.prefix = prefix

    # ------------------------------ raw store --------------------------------

    @abstractmethod
    def _read(self, key: str) -> str | None: ...

    @abstractmethod
    def _write(self, key: str, payload: str) -> None: ...

    @abstractmethod
    def _delete(self, key: str) -> None: ...

    @abstractmethod
    def _keys(self) -> list[str]: ...

    # ------------------------------ public API -------------------------------

    def key(self, year: int) -> str:
        return cache_key(year, self.prefix)

    def get(self, year: int) -> Snapshot | None:
        """Return the cached snapshot for ``year``, or ``None`` on a miss."""
        key = self.key(year)
        try:
            raw = self._read(key)
        except UnicodeDecodeError as exc:
            self._evict(CacheCorrupt(key, f"undecodable payload: {exc}"))
            return None
        except OSError as exc:
            logger.warning("cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None

        parsed = snapshot_from_json(raw)
        if parsed.is_err():
            self._evict(CacheCorrupt(key, parsed.unwrap_err()))
            return None
        snapshot = parsed.unwrap()
        if snapshot.year != int(year):
            self._evict(CacheCorrupt(key, f"entry holds year {snapshot.year}"))
            return None
        return snapshot

    def put(self, year: int, snapshot: Snapshot) -> bool:
        """Store ``snapshot`` under ``year``; return ``False`` if the write failed."""
        key = self.key(year)
        try:
            self._write(key, snapshot_to_json(snapshot))
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("cache write failed for %s: %s", key, exc)
            return False
        logger.debug("cached %s", key)
        return True

    def invalidate(self, year: int) -> None:
        key = self.key(year)
        try:
            self._delete(key)
        except OSError as exc:
            logger.warning("cache invalidate failed for %s: %s", key, exc)
            return
        logger.debug("invalidated %s", key)

    def contains(self, year: int) -> bool:
        """Existence check; does not validate the stored payload."""
        try:
            return self._read(self.key(year)) is not None
        except UnicodeDecodeError:
            return True
        except OSError:
            return False

    def years(self) -> tuple[int, ...]:
        """Return the cached years in ascending order (stable for tests/CLI)."""
        out: list[int] = []
        for key in self._keys():
            suffix = key[len(self.prefix) :]
            try:
                out.append(int(suffix))
            except ValueError:
                continue
        return tuple(sorted(out))

    def _evict(self, problem: CacheCorrupt) -> None:
        logger.warning("%s; evicting", problem)
        try:
            self._delete(problem.key)
        except OSError as exc:
            logger.warning("could not evict %s: %s", problem.key, exc)


class MemorySnapshotCache(_SerializedSnapshotCache):
    """In-process cache holding serialized snapshots in a dict."""

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        super().__init__(prefix)
        self._store: dict[str, str] = {}

    def _read(self, key: str) -> str | None:
        return self._store.get(key)

    def _write(self, key: str, payload: str) -> None:
        self._store[key] = payload

    def _delete(self, key: str) -> None:
        self._store.pop(key, None)

    def _keys(self) -> list[str]:
        return [k for k in self._store if k.startswith(self.prefix)]

    def raw(self, year: int) -> str | None:
        """Return the stored string for ``year`` (diagnostics and tests)."""
        return self._store.get(self.key(year))

    def put_raw(self, year: int, payload: str) -> None:
        """Store an arbitrary string under ``year``'s key, bypassing validation."""
        self._store[self.key(year)] = payload

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._store)


def _default_dir() -> Path:
    """Return the default cache directory."""
    root = os.getenv("CHRONOMAP_CACHE_DIR")
    return Path(root) if root else Path("artifacts") / "cache"


class FileSnapshotCache(_SerializedSnapshotCache):
    """Disk-backed cache: one ``<prefix><year>.json`` file per entry."""

    def __init__(self, base_dir: Path | None = None, prefix: str = DEFAULT_PREFIX) -> None:
        super().__init__(prefix)
        self.base_dir: Path = base_dir if base_dir is not None else _default_dir()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, payload: str) -> None:
        # Readers never see a partial record.
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with tmp.open("w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
        tmp.replace(path)

    def _delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def _keys(self) -> list[str]:
        return [p.stem for p in self.base_dir.glob(f"{self.prefix}*.json")]


__all__ = [
    "DEFAULT_PREFIX",
    "cache_key",
    "SnapshotCache",
    "MemorySnapshotCache",
    "FileSnapshotCache",
]
