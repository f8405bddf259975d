"""
API routes for snapshots, map scenes and relationship layouts.

Endpoints
---------
- `GET /snapshots/{year}`: The validated snapshot record (camelCase JSON).
- `DELETE /snapshots/{year}`: Forget the cached entry for a year.
- `GET /snapshots/{year}/scene`: Projected markers and arc routes.
- `GET /snapshots/{year}/graph`: Relaxed force-directed graph layout.
- `GET /search?q=...`: Free-text query to a year.

Generator failures propagate as exceptions; the handlers registered in
:mod:`chronomap.api.app` turn them into 502/503 responses.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from chronomap.service import DEFAULT_HEIGHT, DEFAULT_WIDTH, ChronoMapService

router = APIRouter(tags=["Snapshots"])


def get_service(request: Request) -> ChronoMapService:
    """Return the app's service, building it from settings on first use."""
    service: ChronoMapService | None = getattr(request.app.state, "service", None)
    if service is None:
        service = ChronoMapService.from_settings()
        request.app.state.service = service
    return service


ServiceDep = Annotated[ChronoMapService, Depends(get_service)]
Width = Annotated[float, Query(gt=0, le=10000)]
Height = Annotated[float, Query(gt=0, le=10000)]


@router.get("/snapshots/{year}", summary="Resolve a year to its snapshot")
async def read_snapshot(year: int, service: ServiceDep, refresh: bool = False) -> dict[str, Any]:
    resolved = await service.snapshot(year, refresh=refresh)
    return {
        "year": resolved.year,
        "source": resolved.source,
        "snapshot": resolved.snapshot.model_dump(mode="json", by_alias=True),
    }


@router.delete("/snapshots/{year}", summary="Forget a cached year")
async def delete_snapshot(year: int, service: ServiceDep) -> dict[str, Any]:
    return {"year": year, "removed": service.forget(year)}


@router.get("/snapshots/{year}/scene", summary="Projected map scene for a year")
async def read_scene(
    year: int,
    service: ServiceDep,
    width: Width = DEFAULT_WIDTH,
    height: Height = DEFAULT_HEIGHT,
) -> dict[str, Any]:
    scene = await service.scene(year, width, height)
    return scene.to_dict()


@router.get("/snapshots/{year}/graph", summary="Force-directed relationship layout")
async def read_graph(
    year: int,
    service: ServiceDep,
    width: Width = 600.0,
    height: Height = 400.0,
) -> dict[str, Any]:
    run = await service.graph(year, width, height)
    return run.to_dict()


@router.get("/search", summary="Find the year a free-text query refers to")
async def search_year(
    service: ServiceDep,
    q: Annotated[str, Query(min_length=1, max_length=200)],
) -> dict[str, Any]:
    return {"query": q, "year": await service.search(q)}
