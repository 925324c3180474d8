"""Pydantic models for view state and render records."""

from enum import Enum

from pydantic import BaseModel, Field

MIN_ZOOM = 0.1
MAX_ZOOM = 4.0


class SortOption(str, Enum):
    """Sort orders for the task list view."""

    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    STATUS = "status"
    DATE_ASC = "date-asc"
    DATE_DESC = "date-desc"


class PlaceholderState(str, Enum):
    """Why no graph is shown."""

    UNAVAILABLE = "unavailable"  # No session to render from
    LOADING = "loading"  # First snapshot not fetched yet
    EMPTY = "empty"  # Snapshot has no tasks
    ERROR = "error"  # First snapshot failed to load


class ViewTransform(BaseModel):
    """Pan/zoom transform: screen = world * k + (x, y)."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def clamped(self) -> "ViewTransform":
        return ViewTransform(x=self.x, y=self.y, k=min(max(self.k, MIN_ZOOM), MAX_ZOOM))


class NodeAttributes(BaseModel):
    """Visual attributes of a node, applied as-is by the renderer."""

    opacity: float = 1.0
    grayscale: float = 0.0
    highlighted: bool = False
    status_class: str = "unknown"
    color: str = "#7f8c8d"
    label: str = ""
    tooltip: str = ""


class EdgeAttributes(BaseModel):
    """Visual attributes of an edge."""

    opacity: float = 0.6
    stroke: str = "#999"


class NodeFrame(BaseModel):
    """A node as sent to renderers."""

    id: str
    name: str | None = None
    status: str | None = None
    x: float = 0.0
    y: float = 0.0
    fx: float | None = None
    fy: float | None = None
    attributes: NodeAttributes = Field(default_factory=NodeAttributes)


class EdgeFrame(BaseModel):
    """An edge as sent to renderers."""

    source: str
    target: str
    attributes: EdgeAttributes = Field(default_factory=EdgeAttributes)


class NodePositionFrame(BaseModel):
    """Per-tick position of a node."""

    id: str
    x: float
    y: float


class SceneFrame(BaseModel):
    """Structural change for renderers (enter/update/exit)."""

    entered: list[NodeFrame] = Field(default_factory=list)
    updated: list[NodeFrame] = Field(default_factory=list)
    exited: list[str] = Field(default_factory=list)
    entered_edges: list[EdgeFrame] = Field(default_factory=list)
    exited_edges: list[tuple[str, str]] = Field(default_factory=list)


class StyleFrame(BaseModel):
    """Full attribute refresh after a view state change."""

    nodes: dict[str, NodeAttributes] = Field(default_factory=dict)
    edges: list[EdgeFrame] = Field(default_factory=list)


class SceneResponse(BaseModel):
    """Full current scene, or the placeholder shown instead."""

    placeholder: PlaceholderState | None = None
    error: str | None = None
    nodes: list[NodeFrame] = Field(default_factory=list)
    edges: list[EdgeFrame] = Field(default_factory=list)
    transform: ViewTransform = Field(default_factory=ViewTransform)
    selected_task_id: str | None = None


class ProgressSummary(BaseModel):
    """Completion counts over the current snapshot."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    completed_percent: float = 0.0
    in_progress_percent: float = 0.0
    pending_percent: float = 0.0


class MinimapPoint(BaseModel):
    id: str
    x: float
    y: float
    color: str


class MinimapLine(BaseModel):
    x1: float
    y1: float
    x2: float
    y2: float


class MinimapViewport(BaseModel):
    x: float
    y: float
    width: float
    height: float


class MinimapResponse(BaseModel):
    """Overview projection of the scene."""

    size: float
    nodes: list[MinimapPoint] = Field(default_factory=list)
    links: list[MinimapLine] = Field(default_factory=list)
    viewport: MinimapViewport | None = None
