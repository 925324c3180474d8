"""View state: filtering, sorting, selection, zoom and visual attributes.

Filtering never removes anything from the scene. Filtered-out nodes stay in
the simulation and are only dimmed through their attribute record.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

from taskgraph.models.graph import GraphEdge, GraphNode
from taskgraph.models.task import Task, TaskStatus
from taskgraph.models.view import (
    EdgeAttributes,
    NodeAttributes,
    SortOption,
    ViewTransform,
)

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"

STATUS_RANK = {
    TaskStatus.PENDING.value: 1,
    TaskStatus.IN_PROGRESS.value: 2,
    TaskStatus.COMPLETED.value: 3,
}

STATUS_COLORS = {
    TaskStatus.COMPLETED.value: "var(--secondary-color)",
    TaskStatus.IN_PROGRESS.value: "var(--primary-color)",
    TaskStatus.PENDING.value: "#f1c40f",
}
UNKNOWN_STATUS_COLOR = "#7f8c8d"

DIMMED_NODE_OPACITY = 0.2
DIMMED_NODE_GRAYSCALE = 0.8
EDGE_OPACITY = 0.6
DIMMED_EDGE_OPACITY = 0.1
EDGE_STROKE = "#999"
DIMMED_EDGE_STROKE = "#ccc"


def status_class(status: str | None) -> str:
    return status.replace("_", "-") if status else "unknown"


def status_color(status: str | None) -> str:
    return STATUS_COLORS.get(status or "", UNKNOWN_STATUS_COLOR)


def node_attributes(
    node: GraphNode,
    visible_ids: Collection[str],
    selected_task_id: str | None,
) -> NodeAttributes:
    """Compute the visual record of a node from its data and the view state."""
    visible = node.id in visible_ids
    label = node.name or ""
    return NodeAttributes(
        opacity=1.0 if visible else DIMMED_NODE_OPACITY,
        grayscale=0.0 if visible else DIMMED_NODE_GRAYSCALE,
        highlighted=node.id == selected_task_id,
        status_class=status_class(node.status),
        color=status_color(node.status),
        label=label,
        tooltip=f"{label} ({node.status or 'unknown'})",
    )


def edge_attributes(edge: GraphEdge, visible_ids: Collection[str]) -> EdgeAttributes:
    """An edge is drawn normally only when both endpoints are visible."""
    if edge.source in visible_ids and edge.target in visible_ids:
        return EdgeAttributes(opacity=EDGE_OPACITY, stroke=EDGE_STROKE)
    return EdgeAttributes(opacity=DIMMED_EDGE_OPACITY, stroke=DIMMED_EDGE_STROKE)


def _created_timestamp(task: Task) -> float:
    return task.created_at.timestamp() if task.created_at else 0.0


def sort_tasks(tasks: Sequence[Task], option: SortOption) -> list[Task]:
    """Sort tasks for the list view. The graph is never reordered."""
    if option is SortOption.NAME_ASC:
        return sorted(tasks, key=lambda t: (t.name or "").casefold())
    if option is SortOption.NAME_DESC:
        return sorted(tasks, key=lambda t: (t.name or "").casefold(), reverse=True)
    if option is SortOption.STATUS:
        return sorted(tasks, key=lambda t: STATUS_RANK.get(t.status or "", 0))
    if option is SortOption.DATE_ASC:
        return sorted(tasks, key=_created_timestamp)
    return sorted(tasks, key=_created_timestamp, reverse=True)


class ViewStateController:
    """Owns selection, filters, sort order and the pan/zoom transform."""

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self.selected_task_id: str | None = None
        self.search_term = ""
        self.status_filter = ALL_STATUSES
        self.sort_option = SortOption.DATE_DESC
        self.transform = ViewTransform()

    def matches(self, task: Task) -> bool:
        """Check a task against the status filter and the search term."""
        if self.status_filter != ALL_STATUSES and task.status != self.status_filter:
            return False
        if not self.search_term:
            return True
        term = self.search_term
        return term in (task.name or "").lower() or term in (task.description or "").lower()

    def visible_ids(self, tasks: Sequence[Task]) -> set[str]:
        return {task.id for task in tasks if self.matches(task)}

    def list_view(self, tasks: Sequence[Task]) -> list[Task]:
        return sort_tasks([task for task in tasks if self.matches(task)], self.sort_option)

    def set_filter(
        self,
        status_filter: str | None = None,
        search_term: str | None = None,
        sort_option: SortOption | None = None,
    ) -> None:
        if status_filter is not None:
            self.status_filter = status_filter
        if search_term is not None:
            self.search_term = search_term.lower()
        if sort_option is not None:
            self.sort_option = sort_option

    def select(self, task_id: str, node: GraphNode | None = None) -> ViewTransform | None:
        """Toggle selection of ``task_id``.

        Selecting the selected task clears the selection. Selecting another
        task switches to it directly and, when its node is known, recenters
        the view on it.

        Returns:
            The new transform if the view was recentered, otherwise None
        """
        if self.selected_task_id == task_id:
            self.selected_task_id = None
            return None

        self.selected_task_id = task_id
        if node is None:
            return None
        return self.center_on(node)

    def prune_selection(self, task_ids: Collection[str]) -> bool:
        """Clear the selection if its task left the snapshot."""
        if self.selected_task_id is not None and self.selected_task_id not in task_ids:
            logger.info(
                f"Selected task {self.selected_task_id} no longer exists, clearing selection"
            )
            self.selected_task_id = None
            return True
        return False

    def zoom(self, transform: ViewTransform) -> ViewTransform:
        self.transform = transform.clamped()
        return self.transform

    def center_on(self, node: GraphNode) -> ViewTransform:
        """Pan so ``node`` sits in the middle of the viewport, keeping the scale."""
        k = self.transform.k
        self.transform = ViewTransform(
            x=self.width / 2 - node.x * k,
            y=self.height / 2 - node.y * k,
            k=k,
        )
        return self.transform

    def reset_transform(self) -> ViewTransform:
        self.transform = ViewTransform()
        return self.transform
