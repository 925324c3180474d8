"""Force layout: simulation primitive, degree placement and stabilization."""

from taskgraph.layout.placement import (
    NodeRole,
    apply_degree_forces,
    configure_forces,
    degrees,
    horizontal_target,
    node_role,
    update_topology,
    vertical_strength,
)
from taskgraph.layout.simulation import (
    CenterForce,
    CollideForce,
    ForceSimulation,
    LinkForce,
    ManyBodyForce,
    PositionForce,
)
from taskgraph.layout.stabilizer import LayoutStabilizer

__all__ = [
    "ForceSimulation",
    "LinkForce",
    "ManyBodyForce",
    "CenterForce",
    "CollideForce",
    "PositionForce",
    "LayoutStabilizer",
    "NodeRole",
    "apply_degree_forces",
    "configure_forces",
    "degrees",
    "horizontal_target",
    "node_role",
    "update_topology",
    "vertical_strength",
]
