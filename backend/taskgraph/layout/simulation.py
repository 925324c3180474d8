"""Force-directed layout simulation.

A small velocity-Verlet simulation in the style of d3-force: each tick cools
``alpha`` toward ``alpha_target``, lets every force add to node velocities,
then moves nodes. Pinned nodes are held at their pin.

Many-body and collision forces are computed pairwise, which is fine for the
tens to low hundreds of tasks a dashboard shows.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Iterable, Sequence

from taskgraph.models.graph import GraphEdge, GraphNode

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

ALPHA_MIN = 0.001
ALPHA_DECAY = 1 - ALPHA_MIN ** (1 / 300)
VELOCITY_DECAY = 0.4

NodeValue = Callable[[GraphNode], float]


class Force:
    """Base class for forces. ``initialize`` is called whenever nodes change."""

    def initialize(self, nodes: Sequence[GraphNode], rng: random.Random) -> None:
        self.nodes = list(nodes)
        self.rng = rng

    def apply(self, alpha: float) -> None:
        raise NotImplementedError

    def _jiggle(self) -> float:
        return (self.rng.random() - 0.5) * 1e-6


class LinkForce(Force):
    """Pulls linked nodes toward a fixed distance."""

    def __init__(self, distance: float = 100.0, iterations: int = 1) -> None:
        self.distance = distance
        self.iterations = iterations
        self.links: list[GraphEdge] = []
        self.nodes: list[GraphNode] = []
        self._resolved: list[tuple[GraphNode, GraphNode, float, float]] = []

    def set_links(self, links: Iterable[GraphEdge]) -> None:
        self.links = list(links)
        self._resolve()

    def initialize(self, nodes: Sequence[GraphNode], rng: random.Random) -> None:
        super().initialize(nodes, rng)
        self._resolve()

    def _resolve(self) -> None:
        by_id = {node.id: node for node in self.nodes}
        count: dict[str, int] = {}
        for link in self.links:
            count[link.source] = count.get(link.source, 0) + 1
            count[link.target] = count.get(link.target, 0) + 1

        self._resolved = []
        for link in self.links:
            source = by_id.get(link.source)
            target = by_id.get(link.target)
            if source is None or target is None:
                continue
            # A loop pulls a node onto itself: no net force
            if source is target:
                continue
            c_source, c_target = count[link.source], count[link.target]
            strength = 1 / min(c_source, c_target)
            bias = c_source / (c_source + c_target)
            self._resolved.append((source, target, strength, bias))

    def apply(self, alpha: float) -> None:
        for _ in range(self.iterations):
            for source, target, strength, bias in self._resolved:
                sp, tp = source.position, target.position
                x = (tp.x + tp.vx - sp.x - sp.vx) or self._jiggle()
                y = (tp.y + tp.vy - sp.y - sp.vy) or self._jiggle()
                length = math.sqrt(x * x + y * y)
                length = (length - self.distance) / length * alpha * strength
                x *= length
                y *= length
                tp.vx -= x * bias
                tp.vy -= y * bias
                sp.vx += x * (1 - bias)
                sp.vy += y * (1 - bias)


class ManyBodyForce(Force):
    """Mutual repulsion (negative strength) or attraction between all nodes."""

    def __init__(self, strength: float = -30.0, distance_min: float = 1.0) -> None:
        self.strength = strength
        self.distance_min2 = distance_min * distance_min
        self.nodes: list[GraphNode] = []

    def apply(self, alpha: float) -> None:
        for node in self.nodes:
            p = node.position
            for other in self.nodes:
                if other is node:
                    continue
                x = other.position.x - p.x
                y = other.position.y - p.y
                if x == 0:
                    x = self._jiggle()
                if y == 0:
                    y = self._jiggle()
                dist2 = x * x + y * y
                if dist2 < self.distance_min2:
                    dist2 = math.sqrt(self.distance_min2 * dist2)
                w = self.strength * alpha / dist2
                p.vx += x * w
                p.vy += y * w


class CenterForce(Force):
    """Translates all nodes so their mean position sits on the center."""

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0) -> None:
        self.x = x
        self.y = y
        self.strength = strength
        self.nodes: list[GraphNode] = []

    def apply(self, alpha: float) -> None:
        if not self.nodes:
            return
        n = len(self.nodes)
        sx = sum(node.position.x for node in self.nodes) / n - self.x
        sy = sum(node.position.y for node in self.nodes) / n - self.y
        for node in self.nodes:
            node.position.x -= sx * self.strength
            node.position.y -= sy * self.strength


class CollideForce(Force):
    """Keeps circles of ``radius`` from overlapping."""

    def __init__(self, radius: float = 1.0, strength: float = 1.0, iterations: int = 1) -> None:
        self.radius = radius
        self.strength = strength
        self.iterations = iterations
        self.nodes: list[GraphNode] = []

    def apply(self, alpha: float) -> None:
        r = self.radius * 2
        # Equal radii, so each side of an overlap takes half the correction
        share = 0.5
        for _ in range(self.iterations):
            for i, node in enumerate(self.nodes):
                p = node.position
                xi = p.x + p.vx
                yi = p.y + p.vy
                for other in self.nodes[i + 1:]:
                    q = other.position
                    x = xi - q.x - q.vx
                    y = yi - q.y - q.vy
                    dist2 = x * x + y * y
                    if dist2 >= r * r:
                        continue
                    if x == 0:
                        x = self._jiggle()
                        dist2 += x * x
                    if y == 0:
                        y = self._jiggle()
                        dist2 += y * y
                    dist = math.sqrt(dist2)
                    dist = (r - dist) / dist * self.strength
                    x *= dist
                    y *= dist
                    p.vx += x * share
                    p.vy += y * share
                    q.vx -= x * share
                    q.vy -= y * share


class PositionForce(Force):
    """Pulls each node toward a per-node target along one axis."""

    def __init__(
        self,
        axis: str,
        target: float | NodeValue = 0.0,
        strength: float | NodeValue = 0.1,
    ) -> None:
        if axis not in ("x", "y"):
            raise ValueError(f"Unknown axis: {axis}")
        self.axis = axis
        self.target = target
        self.strength = strength
        self.nodes: list[GraphNode] = []
        self._targets: list[float] = []
        self._strengths: list[float] = []

    def set_target(self, target: float | NodeValue) -> None:
        self.target = target
        self._evaluate()

    def set_strength(self, strength: float | NodeValue) -> None:
        self.strength = strength
        self._evaluate()

    def initialize(self, nodes: Sequence[GraphNode], rng: random.Random) -> None:
        super().initialize(nodes, rng)
        self._evaluate()

    def _evaluate(self) -> None:
        self._targets = [_value(self.target, node) for node in self.nodes]
        self._strengths = [_value(self.strength, node) for node in self.nodes]

    def target_of(self, node_id: str) -> float | None:
        for node, target in zip(self.nodes, self._targets):
            if node.id == node_id:
                return target
        return None

    def strength_of(self, node_id: str) -> float | None:
        for node, strength in zip(self.nodes, self._strengths):
            if node.id == node_id:
                return strength
        return None

    def apply(self, alpha: float) -> None:
        for node, target, strength in zip(self.nodes, self._targets, self._strengths):
            p = node.position
            if self.axis == "x":
                p.vx += (target - p.x) * strength * alpha
            else:
                p.vy += (target - p.y) * strength * alpha


def _value(value: float | NodeValue, node: GraphNode) -> float:
    return value(node) if callable(value) else value


class ForceSimulation:
    """Owns a node list and a set of named forces and advances them in ticks."""

    def __init__(
        self,
        nodes: Sequence[GraphNode] | None = None,
        seed: int = 0,
        center: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        self.alpha = 1.0
        self.alpha_min = ALPHA_MIN
        self.alpha_decay = ALPHA_DECAY
        self.alpha_target = 0.0
        self.velocity_decay = 1 - VELOCITY_DECAY
        self.center = center
        self._rng = random.Random(seed)
        self._forces: dict[str, Force] = {}
        self._nodes: list[GraphNode] = []
        self.set_nodes(nodes or [])

    @property
    def nodes(self) -> list[GraphNode]:
        return list(self._nodes)

    @property
    def is_hot(self) -> bool:
        """True while the simulation has energy left or is being held warm."""
        return self.alpha >= self.alpha_min or self.alpha_target >= self.alpha_min

    def set_nodes(self, nodes: Sequence[GraphNode]) -> None:
        """Replace the node collection. Does not touch alpha."""
        self._nodes = list(nodes)
        self._initialize_positions()
        for force in self._forces.values():
            force.initialize(self._nodes, self._rng)

    def force(self, name: str) -> Force | None:
        return self._forces.get(name)

    def set_force(self, name: str, force: Force | None) -> None:
        if force is None:
            self._forces.pop(name, None)
            return
        force.initialize(self._nodes, self._rng)
        self._forces[name] = force

    def find(self, node_id: str) -> GraphNode | None:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def restart(self, alpha: float | None = None) -> None:
        if alpha is not None:
            self.alpha = alpha

    def tick(self, iterations: int = 1) -> None:
        """Advance the simulation synchronously, ignoring ``alpha_min``."""
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

            for force in self._forces.values():
                force.apply(self.alpha)

            for node in self._nodes:
                p = node.position
                if node.pin is None:
                    p.vx *= self.velocity_decay
                    p.vy *= self.velocity_decay
                    p.x += p.vx
                    p.y += p.vy
                else:
                    p.x = node.pin.fx
                    p.y = node.pin.fy
                    p.vx = 0.0
                    p.vy = 0.0

    def _initialize_positions(self) -> None:
        """Place unpositioned nodes on a phyllotaxis spiral around the center."""
        cx, cy = self.center
        for index, node in enumerate(self._nodes):
            p = node.position
            if node.pin is not None:
                p.x = node.pin.fx
                p.y = node.pin.fy
            if not p.is_set:
                radius = INITIAL_RADIUS * math.sqrt(0.5 + index)
                angle = index * INITIAL_ANGLE
                p.x = cx + radius * math.cos(angle)
                p.y = cy + radius * math.sin(angle)
