"""
ChronoMap Command Line Interface (CLI).

A terminal rendering of the atlas built on `typer` and `rich`: the map scene
becomes tables of projected markers and routes, the relationship graph a
table of settled node positions.

Usage
-----
    # Show the world in 500 BC (negative years are BC)
    $ chronomap show -500

    # Ask the generator again, bypassing the cache
    $ chronomap show 1453 --refresh --locale zh

    # Find the year a free-text event refers to
    $ chronomap search "fall of Constantinople"

    # Relax the relationship graph for a year
    $ chronomap layout 0

    # Drop a cached year
    $ chronomap forget 1453
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from chronomap.core.contracts.snapshot import Snapshot
from chronomap.core.errors import GeneratorError
from chronomap.core.settings import LocaleName, load_settings
from chronomap.core.temporal import Resolved
from chronomap.core.years import YEAR_MAX, YEAR_MIN
from chronomap.generator.prompts import format_year
from chronomap.geo.projection import GeoProjector
from chronomap.geo.scene import MapScene, build_scene
from chronomap.graph.simulation import SimulationRun, node_style
from chronomap.service import DEFAULT_HEIGHT, DEFAULT_WIDTH, ChronoMapService

# Ensure env vars (like GOOGLE_API_KEY) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="ChronoMap: an interactive atlas of world history, year by year.",
    rich_markup_mode="markdown",
)
console = Console()


# --------------------------------------------------------------------------- #
# Helpers: wiring & rendering
# --------------------------------------------------------------------------- #


def _build_service(locale: LocaleName | None = None) -> ChronoMapService:
    """Production wiring; tests monkeypatch this to inject an in-memory service."""
    cfg = load_settings()
    if locale is not None and locale != cfg.locale:
        cfg = cfg.model_copy(update={"locale": locale})
    return ChronoMapService.from_settings(cfg)


def _fail(exc: Exception) -> typer.Exit:
    label = exc.reason.value if isinstance(exc, GeneratorError) else type(exc).__name__
    console.print(Panel(str(exc), title=f"[bold red]Error: {label}[/bold red]", border_style="red"))
    return typer.Exit(code=1)


def _render_snapshot(resolved: Resolved, scene: MapScene) -> None:
    snapshot: Snapshot = resolved.snapshot
    console.rule(f"[bold]{format_year(snapshot.year)}[/bold]  [dim]({resolved.source})[/dim]")
    if snapshot.summary:
        console.print(snapshot.summary)
        console.print("")

    civs = Table(title="Civilizations", show_lines=False)
    civs.add_column("Name", style="bold")
    civs.add_column("Lat/Lng", justify="right")
    civs.add_column("Radius (km)", justify="right")
    civs.add_column("Map x,y", justify="right")
    civs.add_column("Radius (px)", justify="right")
    civs.add_column("Leaders")
    for civ, marker in zip(snapshot.civilizations, scene.markers, strict=True):
        civs.add_row(
            f"[{civ.color}]●[/] {civ.name}",
            f"{civ.lat:.1f}, {civ.lng:.1f}",
            f"{civ.radius_km:,.0f}",
            f"{marker.x:.0f}, {marker.y:.0f}",
            f"{marker.radius:.1f}",
            ", ".join(civ.government.leaders),
        )
    console.print(civs)

    if scene.routes:
        routes = Table(title="Interactions")
        routes.add_column("Type")
        routes.add_column("Title", style="bold")
        routes.add_column("Chord (px)", justify="right")
        routes.add_column("Bulge (px)", justify="right")
        for route in scene.routes:
            routes.add_row(
                f"[{route.style.color}]{route.kind}[/]",
                route.title,
                f"{route.chord:.0f}",
                f"{route.sagitta:.1f}",
            )
        console.print(routes)


def _render_layout(run: SimulationRun) -> None:
    state = run.state
    status = "converged" if run.frame().converged else "budget reached"
    console.print(
        f"[dim]{state.iteration} iterations, alpha={state.alpha:.4f}, {status}[/dim]"
    )
    nodes = Table(title=run.graph.description or "Relationships")
    nodes.add_column("Node", style="bold")
    nodes.add_column("Group")
    nodes.add_column("x", justify="right")
    nodes.add_column("y", justify="right")
    positions = run.positions()
    for node in run.graph.nodes:
        x, y = positions[node.id]
        nodes.add_row(node.id, f"[{node_style(node.group).color}]{node.group}[/]", f"{x:.1f}", f"{y:.1f}")
    console.print(nodes)

    edges = run.edges()
    if edges:
        links = Table(title="Links")
        links.add_column("Source")
        links.add_column("Target")
        links.add_column("Label")
        for edge in edges:
            links.add_row(edge.source, edge.target, edge.label or "")
        console.print(links)
    skipped = len(run.graph.dangling_links())
    if skipped:
        console.print(f"[yellow]{skipped} link(s) reference unknown nodes and were skipped.[/yellow]")


YearArg = Annotated[
    int,
    typer.Argument(help=f"Year to show; negative is BC. Clamped to [{YEAR_MIN}, {YEAR_MAX}]."),
]
WidthOpt = Annotated[float, typer.Option("--width", help="Viewport width in pixels.")]
HeightOpt = Annotated[float, typer.Option("--height", help="Viewport height in pixels.")]

# Lets BC years be typed as plain negatives: `chronomap show -500`.
_YEAR_CONTEXT = {"ignore_unknown_options": True}


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command(context_settings=_YEAR_CONTEXT)  # type: ignore[misc]
def show(
    year: YearArg,
    refresh: Annotated[
        bool,
        typer.Option("--refresh", "-r", help="Skip the cache and ask the generator again."),
    ] = False,
    locale: Annotated[
        str | None,
        typer.Option("--locale", "-l", help="Generator language: 'en' or 'zh'."),
    ] = None,
    width: WidthOpt = DEFAULT_WIDTH,
    height: HeightOpt = DEFAULT_HEIGHT,
) -> None:
    """Resolve a year and print its civilizations and interactions."""
    if locale is not None and locale not in ("en", "zh"):
        raise typer.BadParameter("locale must be 'en' or 'zh'", param_hint="--locale")
    service = _build_service(locale)  # type: ignore[arg-type]

    async def _run() -> tuple[Resolved, MapScene]:
        resolved = await service.snapshot(year, refresh=refresh)
        return resolved, build_scene(resolved.snapshot, GeoProjector(width, height))

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"[cyan]Consulting the archives for {format_year(year)}...", total=None)
            resolved, scene = asyncio.run(_run())
    except (GeneratorError, ValueError) as exc:
        raise _fail(exc) from exc
    finally:
        service.close()

    _render_snapshot(resolved, scene)


@app.command()  # type: ignore[misc]
def search(
    query: Annotated[str, typer.Argument(help="An event, person or era, e.g. 'fall of Rome'.")],
) -> None:
    """Find the most significant year for a free-text query."""
    service = _build_service()
    try:
        found = asyncio.run(service.search(query))
    except (GeneratorError, ValueError) as exc:
        raise _fail(exc) from exc
    finally:
        service.close()
    console.print(f"[bold green]{found}[/bold green]  [dim]{format_year(found)}[/dim]")


@app.command(context_settings=_YEAR_CONTEXT)  # type: ignore[misc]
def layout(
    year: YearArg,
    width: WidthOpt = 600.0,
    height: HeightOpt = 400.0,
) -> None:
    """Relax the relationship graph of a year and print node positions."""
    service = _build_service()
    try:
        run = asyncio.run(service.graph(year, width, height))
    except (GeneratorError, ValueError) as exc:
        raise _fail(exc) from exc
    finally:
        service.close()
    _render_layout(run)


@app.command(context_settings=_YEAR_CONTEXT)  # type: ignore[misc]
def forget(year: YearArg) -> None:
    """Remove a year from the snapshot cache."""
    service = _build_service()
    try:
        removed = service.forget(year)
    finally:
        service.close()
    if removed:
        console.print(f"[green]Forgot {format_year(year)}.[/green]")
    else:
        console.print(f"[dim]{format_year(year)} was not cached.[/dim]")


if __name__ == "__main__":
    app()
