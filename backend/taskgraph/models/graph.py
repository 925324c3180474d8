"""Scene graph types: nodes, edges and the structural diff between scenes.

Node state is split by owner. ``position`` belongs to the force simulation,
``pin`` belongs to drag handling. Visibility is never stored on a node; it is
computed from view state when attributes are rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field

EdgeKey = tuple[str, str]


@dataclass
class Position:
    """Simulated position and velocity of a node."""

    x: float | None = None
    y: float | None = None
    vx: float = 0.0
    vy: float = 0.0

    @property
    def is_set(self) -> bool:
        return self.x is not None and self.y is not None


@dataclass
class Pin:
    """A user-set fixed position."""

    fx: float
    fy: float


@dataclass
class GraphNode:
    """A node of the dependency graph, derived 1:1 from a task."""

    id: str
    name: str | None = None
    status: str | None = None
    position: Position = field(default_factory=Position)
    pin: Pin | None = None

    @property
    def x(self) -> float:
        return self.position.x if self.position.x is not None else 0.0

    @property
    def y(self) -> float:
        return self.position.y if self.position.y is not None else 0.0

    def pin_at(self, fx: float, fy: float) -> None:
        self.pin = Pin(fx=fx, fy=fy)

    def unpin(self) -> None:
        self.pin = None


@dataclass(frozen=True)
class GraphEdge:
    """A dependency edge. ``source`` must finish before ``target``."""

    source: str
    target: str

    @property
    def key(self) -> EdgeKey:
        return (self.source, self.target)


@dataclass
class SceneDiff:
    """Result of reconciling a new node/edge set onto the scene.

    ``updated`` only lists nodes whose mutable attributes (name, status)
    actually changed.
    """

    entered: list[GraphNode] = field(default_factory=list)
    updated: list[GraphNode] = field(default_factory=list)
    exited: list[str] = field(default_factory=list)
    entered_edges: list[GraphEdge] = field(default_factory=list)
    exited_edges: list[EdgeKey] = field(default_factory=list)

    @property
    def is_structural(self) -> bool:
        """True when anything entered or exited."""
        return bool(self.entered or self.exited or self.entered_edges or self.exited_edges)

    @property
    def is_empty(self) -> bool:
        return not self.is_structural and not self.updated
