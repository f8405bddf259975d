"""
Force-directed layout for the relationship graph.

Model
-----
Nodes are particles with a position and a velocity. Each tick:

1. **Link springs** pull the endpoints of every link toward a rest length
   (80 px). A link's strength is ``1 / min(degree(source), degree(target))``
   and the correction is split between its endpoints by degree, so hubs move
   less than leaves.
2. **Many-body repulsion** pushes every pair apart with a force of
   ``|strength| * alpha / distance`` (strength -200). Distances below 1 px are
   softened so coincident nodes do not explode.
3. **Centering** translates the whole layout so its mean sits on the canvas
   center. It moves positions, not velocities, so it never adds energy.
4. **Integration**: velocities are damped by ``velocity_decay`` (0.4) and
   added to positions.

``alpha`` is the simulation "temperature": it scales the spring and
repulsion forces and cools geometrically from 1 toward 0, reaching
``alpha_min`` after 300 ticks. A run stops when alpha drops below
``alpha_min``, when no node moved more than ``tolerance`` pixels in the last
tick, or when the iteration budget is spent.

Design
------
:func:`step` is a pure function ``(state, links, config, center) -> state``
over frozen :class:`LayoutState` values, so it can be tested without any
rendering surface. :class:`SimulationRun` drives it as a finite generator of
:class:`LayoutFrame` objects for progressive rendering, and
:class:`RelationshipSimulator` makes sure only the most recently started run
keeps producing frames.

Links whose ``source`` or ``target`` is not a node id are dropped before the
first tick: they exert no force and are not returned as edges.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from chronomap.core.contracts.snapshot import Link, RelationshipGraph
from chronomap.core.settings import get_logger

Point = tuple[float, float]

ALPHA_MIN = 0.001
COOLING_TICKS = 300

logger = get_logger("chronomap.graph")


@dataclass(frozen=True, slots=True)
class ForceConfig:
    """Tunable constants of the simulation."""

    link_distance: float = 80.0
    charge_strength: float = -200.0
    distance_min: float = 1.0
    center_strength: float = 1.0
    velocity_decay: float = 0.4
    alpha_min: float = ALPHA_MIN
    alpha_decay: float = 1.0 - ALPHA_MIN ** (1.0 / COOLING_TICKS)
    alpha_target: float = 0.0
    max_iterations: int = COOLING_TICKS
    tolerance: float = 0.01


@dataclass(frozen=True, slots=True)
class NodeState:
    id: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


@dataclass(frozen=True, slots=True)
class SpringLink:
    """A link resolved to node indices, with its precomputed strength and bias."""

    source: int
    target: int
    strength: float
    bias: float


@dataclass(frozen=True, slots=True)
class LayoutState:
    nodes: tuple[NodeState, ...]
    alpha: float = 1.0
    iteration: int = 0
    max_delta: float = math.inf

    def positions(self) -> dict[str, Point]:
        return {n.id: (n.x, n.y) for n in self.nodes}


@dataclass(frozen=True, slots=True)
class LayoutFrame:
    """One rendered tick of a run."""

    iteration: int
    alpha: float
    max_delta: float
    converged: bool
    positions: Mapping[str, Point] = field(repr=False)


def converged(state: LayoutState, config: ForceConfig) -> bool:
    return state.alpha < config.alpha_min or state.max_delta < config.tolerance


# ---- Construction ------------------------------------------------------------


def resolve_links(
    links: Sequence[Link],
    node_ids: Sequence[str],
) -> tuple[SpringLink, ...]:
    """Map id-based links onto node indices, skipping dangling links and self-loops."""
    index = {node_id: i for i, node_id in enumerate(node_ids)}
    pairs: list[tuple[int, int]] = []
    for link in links:
        s = index.get(link.source)
        t = index.get(link.target)
        if s is None or t is None:
            logger.debug("skipping dangling link %s -> %s", link.source, link.target)
            continue
        if s == t:
            continue
        pairs.append((s, t))

    degree = [0] * len(node_ids)
    for s, t in pairs:
        degree[s] += 1
        degree[t] += 1

    return tuple(
        SpringLink(
            source=s,
            target=t,
            strength=1.0 / min(degree[s], degree[t]),
            bias=degree[s] / (degree[s] + degree[t]),
        )
        for s, t in pairs
    )


def phyllotaxis(count: int, center: Point) -> list[Point]:
    """Deterministic sunflower arrangement around ``center``."""
    cx, cy = center
    golden = math.pi * (3.0 - math.sqrt(5.0))
    out: list[Point] = []
    for i in range(count):
        radius = 10.0 * math.sqrt(0.5 + i)
        angle = i * golden
        out.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return out


def initial_state(
    node_ids: Sequence[str],
    center: Point,
    initial: Mapping[str, Point] | None = None,
) -> LayoutState:
    """Fresh state: given positions where provided, phyllotaxis elsewhere."""
    seeded = phyllotaxis(len(node_ids), center)
    nodes: list[NodeState] = []
    for i, node_id in enumerate(node_ids):
        x, y = seeded[i]
        if initial is not None and node_id in initial:
            px, py = initial[node_id]
            if math.isfinite(px) and math.isfinite(py):
                x, y = px, py
        nodes.append(NodeState(node_id, x, y))
    return LayoutState(tuple(nodes))


# ---- Step function -----------------------------------------------------------


def _jiggle(i: int, j: int) -> float:
    """Tiny, never-zero, deterministic offset to separate coincident nodes."""
    return (((i * 31 + j * 17) % 97) + 1) / 97.0 * 1e-6 - 0.5e-6


def step(
    state: LayoutState,
    links: Sequence[SpringLink],
    config: ForceConfig,
    center: Point,
) -> LayoutState:
    """Advance the layout by one tick. Pure: ``state`` is not modified."""
    alpha = state.alpha + (config.alpha_target - state.alpha) * config.alpha_decay
    n = len(state.nodes)
    if n == 0:
        return LayoutState((), alpha, state.iteration + 1, 0.0)

    xs = [node.x for node in state.nodes]
    ys = [node.y for node in state.nodes]
    vxs = [node.vx for node in state.nodes]
    vys = [node.vy for node in state.nodes]

    # Springs
    for link in links:
        s, t = link.source, link.target
        dx = xs[t] + vxs[t] - xs[s] - vxs[s] or _jiggle(s, t)
        dy = ys[t] + vys[t] - ys[s] - vys[s] or _jiggle(t, s)
        dist = math.hypot(dx, dy)
        k = (dist - config.link_distance) / dist * alpha * link.strength
        dx *= k
        dy *= k
        vxs[t] -= dx * link.bias
        vys[t] -= dy * link.bias
        vxs[s] += dx * (1.0 - link.bias)
        vys[s] += dy * (1.0 - link.bias)

    # Repulsion
    dmin2 = config.distance_min * config.distance_min
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            dx = xs[j] - xs[i] or _jiggle(i, j)
            dy = ys[j] - ys[i] or _jiggle(j, i)
            l2 = dx * dx + dy * dy
            if l2 < dmin2:
                l2 = math.sqrt(dmin2 * l2)
            w = config.charge_strength * alpha / l2
            vxs[i] += dx * w
            vys[i] += dy * w

    # Centering
    cx, cy = center
    sx = (sum(xs) / n - cx) * config.center_strength
    sy = (sum(ys) / n - cy) * config.center_strength

    keep = 1.0 - config.velocity_decay
    nodes: list[NodeState] = []
    max_delta = 0.0
    for i, old in enumerate(state.nodes):
        vx = vxs[i] * keep
        vy = vys[i] * keep
        x = xs[i] - sx + vx
        y = ys[i] - sy + vy
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(vx) and math.isfinite(vy)):
            x, y, vx, vy = old.x, old.y, 0.0, 0.0
        max_delta = max(max_delta, math.hypot(x - old.x, y - old.y))
        nodes.append(NodeState(old.id, x, y, vx, vy))

    return LayoutState(tuple(nodes), alpha, state.iteration + 1, max_delta)


# ---- Runs --------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NodeStyle:
    color: str
    radius: float = 5.0


NODE_STYLES: dict[str, NodeStyle] = {
    "person": NodeStyle("#f472b6"),
    "nation": NodeStyle("#60a5fa"),
}
DEFAULT_NODE_STYLE = NodeStyle("#a3e635")


def node_style(group: str) -> NodeStyle:
    return NODE_STYLES.get(group, DEFAULT_NODE_STYLE)


@dataclass(frozen=True, slots=True)
class Edge:
    source: str
    target: str
    label: str | None
    type: str | None
    start: Point
    end: Point


class SimulationRun:
    """One relaxation of one graph. Obtain via :meth:`RelationshipSimulator.start`."""

    def __init__(
        self,
        simulator: RelationshipSimulator,
        generation: int,
        graph: RelationshipGraph,
        state: LayoutState,
        center: Point,
        config: ForceConfig,
    ) -> None:
        self._simulator = simulator
        self._generation = generation
        self.graph = graph
        self.center = center
        self.config = config
        self._state = state
        self._links = resolve_links(graph.links, [node.id for node in graph.nodes])
        self._stopped = False

    @property
    def state(self) -> LayoutState:
        return self._state

    @property
    def active(self) -> bool:
        """False once stopped or once a newer run was started on the simulator."""
        return not self._stopped and self._simulator.generation == self._generation

    @property
    def finished(self) -> bool:
        return (
            self._state.iteration >= self.config.max_iterations
            or converged(self._state, self.config)
        )

    def stop(self) -> None:
        self._stopped = True

    def restart(self, alpha: float = 1.0) -> None:
        """Reheat from the current positions; the next :meth:`frames` call runs again."""
        if not self.active:
            return
        self._state = replace(self._state, alpha=alpha, iteration=0, max_delta=math.inf)

    def tick(self) -> LayoutFrame | None:
        """Advance one step; ``None`` if the run is inactive or finished."""
        if not self.active or self.finished:
            return None
        self._state = step(self._state, self._links, self.config, self.center)
        return self.frame()

    def frames(self) -> Iterator[LayoutFrame]:
        """Finite stream of frames until convergence, budget, or supersession."""
        while True:
            frame = self.tick()
            if frame is None:
                return
            yield frame

    def run_to_end(self) -> LayoutFrame:
        last = self.frame()
        for last in self.frames():
            pass
        return last

    def frame(self) -> LayoutFrame:
        return LayoutFrame(
            iteration=self._state.iteration,
            alpha=self._state.alpha,
            max_delta=self._state.max_delta,
            converged=converged(self._state, self.config),
            positions=self._state.positions(),
        )

    def positions(self) -> dict[str, Point]:
        return self._state.positions()

    def edges(self) -> list[Edge]:
        """Renderable edges: resolved links only, with current endpoint positions."""
        pos = self._state.positions()
        return [
            Edge(link.source, link.target, link.label, link.type, pos[link.source], pos[link.target])
            for link in self.graph.resolved_links()
            if link.source != link.target
        ]

    def to_dict(self) -> dict[str, Any]:
        pos = self._state.positions()
        return {
            "description": self.graph.description,
            "iterations": self._state.iteration,
            "alpha": self._state.alpha,
            "converged": converged(self._state, self.config),
            "nodes": [
                {
                    "id": node.id,
                    "group": node.group,
                    "details": node.details,
                    "x": pos[node.id][0],
                    "y": pos[node.id][1],
                    "radius": node.radius if node.radius is not None else node_style(node.group).radius,
                    "color": node_style(node.group).color,
                }
                for node in self.graph.nodes
            ],
            "links": [
                {
                    "source": e.source,
                    "target": e.target,
                    "label": e.label,
                    "type": e.type,
                    "x1": e.start[0],
                    "y1": e.start[1],
                    "x2": e.end[0],
                    "y2": e.end[1],
                }
                for e in self.edges()
            ],
        }


class RelationshipSimulator:
    """Starts layout runs; only the latest run keeps ticking."""

    def __init__(self, config: ForceConfig | None = None) -> None:
        self.config = config if config is not None else ForceConfig()
        self._generation = 0
        self._current: SimulationRun | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current(self) -> SimulationRun | None:
        return self._current

    def start(
        self,
        graph: RelationshipGraph,
        width: float,
        height: float,
        *,
        initial: Mapping[str, Point] | None = None,
    ) -> SimulationRun:
        """Begin a fresh run for ``graph`` centered on a ``width x height`` canvas.

        Any previous run is retired; nothing of its state is reused.
        """
        if self._current is not None:
            self._current.stop()
        self._generation += 1
        center = (width / 2.0, height / 2.0)
        state = initial_state([node.id for node in graph.nodes], center, initial)
        self._current = SimulationRun(self, self._generation, graph, state, center, self.config)
        return self._current

    def layout(self, graph: RelationshipGraph, width: float, height: float) -> SimulationRun:
        """Start a run and relax it to the end."""
        run = self.start(graph, width, height)
        run.run_to_end()
        return run


__all__ = [
    "ForceConfig",
    "NodeState",
    "SpringLink",
    "LayoutState",
    "LayoutFrame",
    "Edge",
    "NodeStyle",
    "node_style",
    "converged",
    "resolve_links",
    "initial_state",
    "phyllotaxis",
    "step",
    "SimulationRun",
    "RelationshipSimulator",
]
