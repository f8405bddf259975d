"""
ChronoMap service: one object wiring cache, controller, generator and layout.

The CLI and the HTTP API are thin shells over :class:`ChronoMapService`. It
owns

- the snapshot cache (file-backed by default, see ``CHRONOMAP_CACHE_DIR``),
- an optional :class:`LLMSnapshotGenerator` / :class:`YearLocator`, created
  only when ``GOOGLE_API_KEY`` is set,
- the :class:`TemporalController` that resolves years,
- a :class:`RelationshipSimulator` for the graph layout.

Resolution failures come back from the controller as ``Failed`` values; the
service turns them into the matching :class:`GeneratorError` so that the
outer layers can map them to exit codes or HTTP statuses.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from chronomap.core.cache import FileSnapshotCache, SnapshotCache
from chronomap.core.errors import GeneratorUnavailable, error_for
from chronomap.core.settings import LocaleName, Settings, get_logger, load_settings
from chronomap.core.temporal import Failed, Resolved, TemporalController
from chronomap.generator.client import GenerativeClient
from chronomap.generator.snapshot_generator import LLMSnapshotGenerator, SnapshotGenerator, YearLocator
from chronomap.geo.projection import GeoProjector
from chronomap.geo.scene import MapScene, build_scene
from chronomap.graph.simulation import RelationshipSimulator, SimulationRun

DEFAULT_WIDTH = 1200.0
DEFAULT_HEIGHT = 700.0

logger = get_logger("chronomap.service")


@dataclass(slots=True)
class ChronoMapService:
    cache: SnapshotCache
    controller: TemporalController
    locator: YearLocator | None = None
    simulator: RelationshipSimulator = field(default_factory=RelationshipSimulator)

    # ---- construction ----------------------------------------------------

    @classmethod
    def build(
        cls,
        cache: SnapshotCache,
        generator: SnapshotGenerator | None = None,
        locator: YearLocator | None = None,
        *,
        locale: LocaleName = "en",
    ) -> ChronoMapService:
        return cls(cache=cache, controller=TemporalController(cache, generator, locale=locale), locator=locator)

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> ChronoMapService:
        """Assemble the production wiring from environment settings."""
        cfg = cfg if cfg is not None else load_settings()
        cache = FileSnapshotCache(cfg.cache_dir, prefix=cfg.cache_prefix)
        generator: LLMSnapshotGenerator | None = None
        locator: YearLocator | None = None
        if cfg.generator_configured:
            client = GenerativeClient(api_key=cfg.google_api_key or "", base_url=cfg.google_api_base_url)
            generator = LLMSnapshotGenerator(client)
            locator = YearLocator(client)
        else:
            logger.info("GOOGLE_API_KEY not set; running offline (cache and year 0 only)")
        return cls.build(cache, generator, locator, locale=cfg.locale)

    # ---- operations ------------------------------------------------------

    async def snapshot(self, year: int, *, refresh: bool = False) -> Resolved:
        """Resolve ``year`` now; raise the matching generator error on failure."""
        outcome = await self.controller.resolve_now(year, force_refresh=refresh)
        if isinstance(outcome, Failed):
            raise error_for(outcome.reason, outcome.detail)
        return outcome

    async def scene(
        self,
        year: int,
        width: float = DEFAULT_WIDTH,
        height: float = DEFAULT_HEIGHT,
    ) -> MapScene:
        resolved = await self.snapshot(year)
        return build_scene(resolved.snapshot, GeoProjector(width, height))

    async def graph(
        self,
        year: int,
        width: float = DEFAULT_WIDTH,
        height: float = DEFAULT_HEIGHT,
    ) -> SimulationRun:
        """Relaxed relationship-graph layout for ``year``."""
        resolved = await self.snapshot(year)
        return self.simulator.layout(resolved.snapshot.relationships, width, height)

    async def search(self, query: str) -> int:
        """Map a free-text query to a year; needs a configured generator."""
        if self.locator is None:
            if not query.strip():
                raise ValueError("search query must not be empty")
            raise GeneratorUnavailable("Search needs GOOGLE_API_KEY to be set.")
        return await self.locator.locate(query)

    def forget(self, year: int) -> bool:
        """Drop the cached snapshot for ``year``; ``True`` if one was stored."""
        present = self.cache.contains(year)
        self.cache.invalidate(year)
        return present

    def close(self) -> None:
        self.controller.close()


__all__ = ["ChronoMapService", "DEFAULT_WIDTH", "DEFAULT_HEIGHT"]
