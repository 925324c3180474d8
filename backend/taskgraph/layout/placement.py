"""Degree-based placement targets.

Tasks nobody depends on drift to one side, tasks that depend on nothing to
the other, so dependency chains read left to right. Highly connected tasks
are held near the vertical center while leaves drift outward.

Degrees are recomputed from scratch on every update by scanning every edge
for every node. That is O(nodes x edges): fine at dashboard scale, the first
thing to index if graphs grow into the thousands.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from taskgraph.layout.simulation import (
    CenterForce,
    CollideForce,
    ForceSimulation,
    LinkForce,
    ManyBodyForce,
    PositionForce,
)
from taskgraph.models.graph import GraphEdge, GraphNode

LINK_DISTANCE = 100.0
CHARGE_STRENGTH = -300.0
COLLIDE_RADIUS = 30.0
X_STRENGTH = 0.2
Y_BASE_STRENGTH = 0.05
Y_STRENGTH_PER_EDGE = 0.03
Y_MAX_STRENGTH = 0.3


class NodeRole(str, Enum):
    """Where a node sits in the dependency flow."""

    SOURCE = "source"  # No incoming edges
    SINK = "sink"  # Incoming edges but no outgoing ones
    MIDDLE = "middle"


def degrees(node_id: str, edges: Sequence[GraphEdge]) -> tuple[int, int]:
    """Return (in_degree, out_degree) of a node."""
    in_degree = sum(1 for edge in edges if edge.target == node_id)
    out_degree = sum(1 for edge in edges if edge.source == node_id)
    return in_degree, out_degree


def node_role(node_id: str, edges: Sequence[GraphEdge]) -> NodeRole:
    in_degree, out_degree = degrees(node_id, edges)
    if in_degree == 0:
        return NodeRole.SOURCE
    if out_degree == 0:
        return NodeRole.SINK
    return NodeRole.MIDDLE


def horizontal_target(role: NodeRole, width: float) -> float:
    if role is NodeRole.SOURCE:
        return width * 0.2
    if role is NodeRole.SINK:
        return width * 0.8
    return width * 0.5


def vertical_strength(total_degree: int) -> float:
    return min(Y_BASE_STRENGTH + total_degree * Y_STRENGTH_PER_EDGE, Y_MAX_STRENGTH)


def apply_degree_forces(
    simulation: ForceSimulation,
    edges: Sequence[GraphEdge],
    width: float,
    height: float,
) -> None:
    """Re-evaluate the x/y placement forces against the current topology."""
    edges = list(edges)

    def x_target(node: GraphNode) -> float:
        return horizontal_target(node_role(node.id, edges), width)

    def y_strength(node: GraphNode) -> float:
        return vertical_strength(sum(degrees(node.id, edges)))

    x_force = simulation.force("x")
    if isinstance(x_force, PositionForce):
        x_force.set_target(x_target)
    else:
        simulation.set_force("x", PositionForce("x", x_target, X_STRENGTH))

    y_force = simulation.force("y")
    if isinstance(y_force, PositionForce):
        y_force.target = height / 2
        y_force.set_strength(y_strength)
    else:
        simulation.set_force("y", PositionForce("y", height / 2, y_strength))


def configure_forces(
    simulation: ForceSimulation,
    edges: Sequence[GraphEdge],
    width: float,
    height: float,
) -> None:
    """Install the dashboard's force configuration on a simulation."""
    link = LinkForce(distance=LINK_DISTANCE)
    simulation.set_force("link", link)
    link.set_links(edges)
    simulation.set_force("charge", ManyBodyForce(strength=CHARGE_STRENGTH))
    simulation.set_force("center", CenterForce(width / 2, height / 2))
    simulation.set_force("collide", CollideForce(radius=COLLIDE_RADIUS))
    apply_degree_forces(simulation, edges, width, height)


def update_topology(
    simulation: ForceSimulation,
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    width: float,
    height: float,
) -> None:
    """Swap in new node/edge collections without restarting the simulation."""
    simulation.set_nodes(nodes)
    link = simulation.force("link")
    if isinstance(link, LinkForce):
        link.set_links(edges)
    center = simulation.force("center")
    if isinstance(center, CenterForce):
        center.x, center.y = width / 2, height / 2
    apply_degree_forces(simulation, edges, width, height)
