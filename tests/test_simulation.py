"""Tests for the force-directed relationship layout."""

from __future__ import annotations

import itertools
import math
import random
from typing import Any

from chronomap.core.contracts import RelationshipGraph, validate_snapshot
from chronomap.graph.simulation import (
    ForceConfig,
    RelationshipSimulator,
    initial_state,
    node_style,
    resolve_links,
    step,
)

WIDTH, HEIGHT = 600.0, 400.0


def _chain(n: int, *, extra_links: list[dict[str, str]] | None = None) -> RelationshipGraph:
    nodes = [{"id": f"n{i}", "group": "nation" if i % 2 else "person"} for i in range(n)]
    links = [{"source": f"n{i}", "target": f"n{i + 1}"} for i in range(n - 1)]
    links.extend(extra_links or [])
    return RelationshipGraph.model_validate({"nodes": nodes, "links": links})


def _mean_link_length(graph: RelationshipGraph, pos: dict[str, tuple[float, float]]) -> float:
    lengths = [math.dist(pos[lk.source], pos[lk.target]) for lk in graph.resolved_links()]
    return sum(lengths) / len(lengths)


def _random_layout(graph: RelationshipGraph, seed: int = 7) -> dict[str, tuple[float, float]]:
    rng = random.Random(seed)
    return {n.id: (rng.uniform(0, WIDTH), rng.uniform(0, HEIGHT)) for n in graph.nodes}


def test_step_is_pure() -> None:
    graph = _chain(5)
    ids = [n.id for n in graph.nodes]
    state = initial_state(ids, (WIDTH / 2, HEIGHT / 2))
    links = resolve_links(graph.links, ids)
    cfg = ForceConfig()

    a = step(state, links, cfg, (WIDTH / 2, HEIGHT / 2))
    b = step(state, links, cfg, (WIDTH / 2, HEIGHT / 2))

    assert a == b
    assert state.iteration == 0 and a.iteration == 1
    assert a.alpha < state.alpha


def test_layout_produces_finite_coordinates() -> None:
    graph = _chain(12, extra_links=[{"source": "n0", "target": "n6"}])
    run = RelationshipSimulator().start(graph, WIDTH, HEIGHT)
    for frame in run.frames():
        for x, y in frame.positions.values():
            assert math.isfinite(x) and math.isfinite(y)


def test_coincident_start_is_separated_without_nan() -> None:
    graph = _chain(6)
    run = RelationshipSimulator().start(graph, WIDTH, HEIGHT, initial={n.id: (0.0, 0.0) for n in graph.nodes})
    final = run.run_to_end()
    points = list(final.positions.values())
    assert all(math.isfinite(x) and math.isfinite(y) for x, y in points)
    assert max(math.dist(p, q) for p, q in itertools.combinations(points, 2)) > 10.0


def test_links_pull_endpoints_together() -> None:
    """Linked nodes end closer than in a random layout, and closer than unlinked pairs."""
    graph = _chain(8)
    start = _random_layout(graph)
    run = RelationshipSimulator().start(graph, WIDTH, HEIGHT, initial=start)
    pos = dict(run.run_to_end().positions)

    linked = _mean_link_length(graph, pos)
    assert linked < _mean_link_length(graph, start)

    pairs = {(lk.source, lk.target) for lk in graph.links}
    unlinked = [
        math.dist(pos[a], pos[b])
        for a, b in itertools.combinations(pos, 2)
        if (a, b) not in pairs and (b, a) not in pairs
    ]
    assert linked < sum(unlinked) / len(unlinked)


def test_layout_stays_centered() -> None:
    graph = _chain(7)
    run = RelationshipSimulator().start(graph, WIDTH, HEIGHT, initial=_random_layout(graph, seed=3))
    pos = run.run_to_end().positions
    mx = sum(x for x, _ in pos.values()) / len(pos)
    my = sum(y for _, y in pos.values()) / len(pos)
    assert abs(mx - WIDTH / 2) < 5.0
    assert abs(my - HEIGHT / 2) < 5.0


def test_run_stops_at_convergence_or_budget() -> None:
    cfg = ForceConfig()
    run = RelationshipSimulator(cfg).start(_chain(4), WIDTH, HEIGHT)
    frames = list(run.frames())
    assert 0 < len(frames) <= cfg.max_iterations
    last = frames[-1]
    assert last.converged or last.iteration == cfg.max_iterations
    assert list(run.frames()) == []


def test_restart_reheats_the_run() -> None:
    run = RelationshipSimulator().start(_chain(4), WIDTH, HEIGHT)
    run.run_to_end()
    run.restart()
    assert run.state.alpha == 1.0
    assert next(run.frames()).iteration == 1


def test_dangling_links_are_inert_and_not_drawn(make_record: Any) -> None:
    snap = validate_snapshot(make_record(-218, dangling=True)).unwrap()
    graph = snap.relationships
    run = RelationshipSimulator().start(graph, WIDTH, HEIGHT)
    final = run.run_to_end()

    assert set(final.positions) == {"Hannibal", "Scipio", "Carthage", "Rome"}
    edges = run.edges()
    assert len(edges) == 3
    assert all(e.target != "Numidia" and e.source != "Numidia" for e in edges)
    assert len(resolve_links(graph.links, [n.id for n in graph.nodes])) == 3


def test_new_run_retires_previous_one() -> None:
    sim = RelationshipSimulator()
    first = sim.start(_chain(5), WIDTH, HEIGHT)
    stream = first.frames()
    assert next(stream).iteration == 1

    second = sim.start(_chain(3), WIDTH, HEIGHT)
    assert not first.active
    assert list(stream) == []
    assert first.tick() is None
    assert sim.current is second
    assert second.active and second.state.iteration == 0
    assert next(second.frames()).iteration == 1


def test_empty_graph_is_fine() -> None:
    run = RelationshipSimulator().start(RelationshipGraph(), WIDTH, HEIGHT)
    final = run.run_to_end()
    assert dict(final.positions) == {}
    assert run.edges() == []


def test_node_styles_by_group() -> None:
    assert node_style("person").color == "#f472b6"
    assert node_style("nation").color == "#60a5fa"
    assert node_style("organization").color == "#a3e635"
    assert node_style("anything").color == "#a3e635"


def test_to_dict_shape(make_record: Any) -> None:
    snap = validate_snapshot(make_record(-218, dangling=True)).unwrap()
    run = RelationshipSimulator().layout(snap.relationships, WIDTH, HEIGHT)
    data = run.to_dict()
    assert data["description"] == "Punic rivalry"
    assert {n["id"] for n in data["nodes"]} == {"Hannibal", "Scipio", "Carthage", "Rome"}
    assert all({"x", "y", "color", "radius"} <= set(n) for n in data["nodes"])
    assert len(data["links"]) == 3
