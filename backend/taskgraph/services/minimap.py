"""Minimap projection of the scene."""

from __future__ import annotations

from collections.abc import Sequence

from taskgraph.models.graph import GraphEdge, GraphNode
from taskgraph.models.view import (
    MinimapLine,
    MinimapPoint,
    MinimapResponse,
    MinimapViewport,
    ViewTransform,
)
from taskgraph.services.view_state import status_color

MINIMAP_FRACTION = 0.2
PADDING = 20.0


class _Scale:
    """Linear map from a world-space domain onto [0, size]."""

    def __init__(self, lo: float, hi: float, size: float) -> None:
        self.lo = lo
        self.span = (hi - lo) or 1.0
        self.size = size

    def __call__(self, value: float) -> float:
        return (value - self.lo) / self.span * self.size


def project_minimap(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    transform: ViewTransform,
    width: float,
    height: float,
) -> MinimapResponse:
    """Project nodes, edges and the visible viewport into the minimap square."""
    size = min(width, height) * MINIMAP_FRACTION
    if not nodes:
        return MinimapResponse(size=size)

    xs = [node.x for node in nodes]
    ys = [node.y for node in nodes]
    to_x = _Scale(min(xs) - PADDING, max(xs) + PADDING, size)
    to_y = _Scale(min(ys) - PADDING, max(ys) + PADDING, size)

    by_id = {node.id: node for node in nodes}
    points = [
        MinimapPoint(id=node.id, x=to_x(node.x), y=to_y(node.y), color=status_color(node.status))
        for node in nodes
    ]
    lines = [
        MinimapLine(
            x1=to_x(by_id[edge.source].x),
            y1=to_y(by_id[edge.source].y),
            x2=to_x(by_id[edge.target].x),
            y2=to_y(by_id[edge.target].y),
        )
        for edge in edges
        if edge.source in by_id and edge.target in by_id
    ]

    view_x = -transform.x / transform.k
    view_y = -transform.y / transform.k
    view_w = width / transform.k
    view_h = height / transform.k
    viewport = MinimapViewport(
        x=to_x(view_x),
        y=to_y(view_y),
        width=to_x(view_x + view_w) - to_x(view_x),
        height=to_y(view_y + view_h) - to_y(view_y),
    )
    return MinimapResponse(size=size, nodes=points, links=lines, viewport=viewport)
