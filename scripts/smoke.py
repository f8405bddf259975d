# scripts/smoke.py
"""
Smoke test script for the ChronoMap stack.

Resolves one year end to end (cache -> generator or bundled fallback),
projects the map scene and relaxes the relationship graph.

Usage
-----
1. Offline, against a throwaway in-memory cache (year 0 ships with the package):
    $ python scripts/smoke.py

2. With a real generator (needs GOOGLE_API_KEY in .env) and the on-disk cache:
    $ python scripts/smoke.py --year -500 --disk
"""

import argparse
import asyncio
import logging
import sys
import traceback
from pathlib import Path

from dotenv import load_dotenv

from chronomap.core.cache import MemorySnapshotCache
from chronomap.core.settings import load_settings
from chronomap.generator.snapshot_generator import LLMSnapshotGenerator
from chronomap.service import ChronoMapService

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")
else:
    print("⚠️  No .env file found; only year 0 can be resolved offline.")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


async def _run(service: ChronoMapService, year: int) -> None:
    resolved = await service.snapshot(year)
    print(f"\n📅 Year {resolved.year} ({resolved.source})")
    print(f"📄 Summary: {resolved.snapshot.summary[:300]}")

    scene = await service.scene(year)
    print("\n🗺️  Markers:")
    for marker in scene.markers:
        print(f"  - {marker.name}: ({marker.x:.0f}, {marker.y:.0f}) r={marker.radius:.1f}px")
    print("\n🧭 Routes:")
    for route in scene.routes:
        print(f"  - [{route.kind}] {route.title}: chord {route.chord:.0f}px, bulge {route.sagitta:.1f}px")

    run = await service.graph(year)
    print(f"\n🕸️  Graph settled after {run.state.iteration} iterations (alpha={run.state.alpha:.4f})")
    for node_id, (x, y) in run.positions().items():
        print(f"  - {node_id}: ({x:.1f}, {y:.1f})")


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run ChronoMap Smoke Test")
    parser.add_argument("--year", "-y", type=int, default=0, help="Year to resolve (negative = BC)")
    parser.add_argument("--disk", action="store_true", help="Use the on-disk cache from settings")
    args = parser.parse_args()

    if args.disk:
        service = ChronoMapService.from_settings()
    else:
        generator = LLMSnapshotGenerator() if load_settings().generator_configured else None
        service = ChronoMapService.build(MemorySnapshotCache(), generator)

    try:
        asyncio.run(_run(service, args.year))
    except Exception as exc:
        print(f"\n❌ Smoke run failed: {exc}")
        traceback.print_exc()
        return
    finally:
        service.close()

    print("\n" + "=" * 60)
    print("✅ Smoke run finished")
    print("=" * 60)


if __name__ == "__main__":
    main()
