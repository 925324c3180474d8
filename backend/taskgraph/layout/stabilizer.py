"""Layout pre-stabilization.

New nodes get their first coordinates from a disposable shadow simulation
that runs a short warm-up before anything is shown, so they appear already
near their resting place instead of flying in from the origin.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

from taskgraph.layout.placement import configure_forces
from taskgraph.layout.simulation import ForceSimulation
from taskgraph.models.graph import GraphEdge, GraphNode, Pin, Position

logger = logging.getLogger(__name__)

DEFAULT_WARMUP_TICKS = 10


class LayoutStabilizer:
    """Assigns stable initial positions to nodes that are new to the scene."""

    def __init__(
        self,
        width: float,
        height: float,
        warmup_ticks: int = DEFAULT_WARMUP_TICKS,
        seed: int = 0,
    ) -> None:
        self.width = width
        self.height = height
        self.warmup_ticks = warmup_ticks
        self.seed = seed

    def stabilize(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        new_ids: Collection[str],
    ) -> None:
        """Write warm-up positions onto the nodes listed in ``new_ids``.

        Existing nodes take part in the shadow run held at their current
        coordinates, so new nodes settle around the layout the user already
        sees. Their own position, velocity and pin are never touched.
        """
        new_ids = set(new_ids)
        if not new_ids:
            return

        shadow_nodes = [self._shadow_copy(node, node.id not in new_ids) for node in nodes]
        shadow = ForceSimulation(
            shadow_nodes,
            seed=self.seed,
            center=(self.width / 2, self.height / 2),
        )
        configure_forces(shadow, edges, self.width, self.height)
        shadow.tick(self.warmup_ticks)

        settled = {node.id: node for node in shadow.nodes}
        for node in nodes:
            if node.id in new_ids:
                result = settled[node.id].position
                node.position.x = result.x
                node.position.y = result.y
                node.position.vx = 0.0
                node.position.vy = 0.0

        logger.debug(
            f"Stabilized {len(new_ids)} new node(s) over {self.warmup_ticks} ticks "
            f"({len(nodes) - len(new_ids)} existing held in place)"
        )

    @staticmethod
    def _shadow_copy(node: GraphNode, hold: bool) -> GraphNode:
        position = Position(x=node.position.x, y=node.position.y)
        pin = node.pin
        if pin is not None:
            pin = Pin(fx=pin.fx, fy=pin.fy)
        elif hold and position.is_set:
            pin = Pin(fx=position.x, fy=position.y)
        return GraphNode(id=node.id, name=node.name, status=node.status, position=position, pin=pin)
