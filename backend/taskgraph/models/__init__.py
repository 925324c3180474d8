"""Pydantic models and scene types for the task graph dashboard."""

from taskgraph.models.graph import (
    EdgeKey,
    GraphEdge,
    GraphNode,
    Pin,
    Position,
    SceneDiff,
)
from taskgraph.models.intent import (
    DragIntent,
    FilterIntent,
    Intent,
    IntentRequest,
    IntentResult,
    ResetViewIntent,
    SelectIntent,
    ZoomIntent,
)
from taskgraph.models.task import (
    DependencyReference,
    RelatedFile,
    Task,
    TaskDependency,
    TaskDetails,
    TaskListResponse,
    TaskListView,
    TaskStatus,
)
from taskgraph.models.view import (
    EdgeAttributes,
    EdgeFrame,
    MinimapResponse,
    NodeAttributes,
    NodeFrame,
    NodePositionFrame,
    PlaceholderState,
    ProgressSummary,
    SceneFrame,
    SceneResponse,
    SortOption,
    StyleFrame,
    ViewTransform,
)

__all__ = [
    # Tasks
    "Task",
    "TaskStatus",
    "TaskDependency",
    "RelatedFile",
    "TaskListResponse",
    "TaskListView",
    "TaskDetails",
    "DependencyReference",
    # Scene
    "GraphNode",
    "GraphEdge",
    "EdgeKey",
    "Position",
    "Pin",
    "SceneDiff",
    # Intents
    "Intent",
    "IntentRequest",
    "IntentResult",
    "SelectIntent",
    "DragIntent",
    "ZoomIntent",
    "FilterIntent",
    "ResetViewIntent",
    # View
    "ViewTransform",
    "SortOption",
    "PlaceholderState",
    "NodeAttributes",
    "EdgeAttributes",
    "NodeFrame",
    "EdgeFrame",
    "NodePositionFrame",
    "SceneFrame",
    "StyleFrame",
    "SceneResponse",
    "ProgressSummary",
    "MinimapResponse",
]
