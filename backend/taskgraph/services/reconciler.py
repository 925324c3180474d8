"""Graph reconciliation.

Maps a freshly built node/edge set onto the live scene by key instead of
rebuilding it. Nodes are keyed by task id, edges by (source, target). Nodes
that survive keep their object identity, simulated position and pin.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from taskgraph.layout.placement import configure_forces, update_topology
from taskgraph.layout.simulation import ForceSimulation
from taskgraph.layout.stabilizer import LayoutStabilizer
from taskgraph.models.graph import EdgeKey, GraphEdge, GraphNode, SceneDiff
from taskgraph.models.task import Task

logger = logging.getLogger(__name__)


def build_graph(tasks: Sequence[Task]) -> tuple[list[GraphNode], list[GraphEdge]]:
    """Derive graph nodes and edges from a task snapshot.

    Dependencies on ids missing from the snapshot and repeated dependencies
    do not produce edges. A self-dependency resolves, so it is kept as a loop.
    """
    nodes = [GraphNode(id=task.id, name=task.name, status=task.status) for task in tasks]
    known_ids = {node.id for node in nodes}

    edges: list[GraphEdge] = []
    seen: set[EdgeKey] = set()
    for task in tasks:
        for dep_id in task.dependency_ids():
            if dep_id not in known_ids:
                logger.warning(
                    f"Dependency link ignored: task {dep_id} (required by {task.id}) "
                    f"not found in task list"
                )
                continue
            edge = GraphEdge(source=dep_id, target=task.id)
            if edge.key in seen:
                continue
            seen.add(edge.key)
            edges.append(edge)

    return nodes, edges


class GraphReconciler:
    """Holds the live scene and applies enter/update/exit to it.

    The reconciler is the only component that adds or removes nodes from the
    simulation. It never resets ``alpha``: after an update the physics simply
    continues from the current positions.
    """

    def __init__(
        self,
        simulation: ForceSimulation,
        stabilizer: LayoutStabilizer,
        width: float,
        height: float,
    ) -> None:
        self.simulation = simulation
        self.stabilizer = stabilizer
        self.width = width
        self.height = height
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[EdgeKey, GraphEdge] = {}
        configure_forces(self.simulation, [], width, height)

    @property
    def nodes(self) -> list[GraphNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[GraphEdge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> GraphNode | None:
        return self._nodes.get(node_id)

    def resize(self, width: float, height: float) -> None:
        """Move the layout center and placement targets to a new viewport."""
        self.width = width
        self.height = height
        self.stabilizer.width = width
        self.stabilizer.height = height
        update_topology(self.simulation, self.nodes, self.edges, width, height)

    def reconcile(
        self,
        new_nodes: Sequence[GraphNode],
        new_edges: Sequence[GraphEdge],
    ) -> SceneDiff:
        """Apply exit, enter and update for a new node/edge set.

        Args:
            new_nodes: Nodes built from the latest snapshot (fresh objects)
            new_edges: Edges built from the latest snapshot

        Returns:
            SceneDiff describing what the renderer has to create, change or drop
        """
        diff = SceneDiff()
        incoming_ids = {node.id for node in new_nodes}
        incoming_edges = {edge.key: edge for edge in new_edges}

        # Exit: drop right away so the simulation stops moving removed entities
        for key in list(self._edges):
            if key not in incoming_edges:
                del self._edges[key]
                diff.exited_edges.append(key)
        for node_id in list(self._nodes):
            if node_id not in incoming_ids:
                self._nodes.pop(node_id).unpin()
                diff.exited.append(node_id)

        # Enter: new objects for new keys, existing objects kept for the rest
        ordered: list[GraphNode] = []
        entering: list[GraphNode] = []
        for incoming in new_nodes:
            existing = self._nodes.get(incoming.id)
            if existing is None:
                entering.append(incoming)
                ordered.append(incoming)
            else:
                ordered.append(existing)

        self.stabilizer.stabilize(ordered, list(incoming_edges.values()), {n.id for n in entering})

        for node in entering:
            self._nodes[node.id] = node
            diff.entered.append(node)
        for key, edge in incoming_edges.items():
            if key not in self._edges:
                self._edges[key] = edge
                diff.entered_edges.append(edge)

        # Update: only data-derived attributes, never the position or pin
        for incoming in new_nodes:
            existing = self._nodes[incoming.id]
            if existing is incoming:
                continue
            if existing.name != incoming.name or existing.status != incoming.status:
                existing.name = incoming.name
                existing.status = incoming.status
                diff.updated.append(existing)

        # Keep snapshot order for the scene and the simulation
        self._nodes = {node.id: node for node in ordered}
        self._edges = {key: self._edges[key] for key in incoming_edges}
        update_topology(self.simulation, ordered, self.edges, self.width, self.height)

        logger.info(
            f"Reconciled scene: {len(diff.entered)} entered, {len(diff.updated)} updated, "
            f"{len(diff.exited)} exited, {len(diff.entered_edges)} edge(s) entered, "
            f"{len(diff.exited_edges)} edge(s) exited"
        )
        return diff
