"""Snapshot-wide summaries: progress, analysis result and task details."""

from __future__ import annotations

from collections.abc import Sequence

from taskgraph.models.task import DependencyReference, Task, TaskDetails, TaskStatus
from taskgraph.models.view import ProgressSummary


def progress_summary(tasks: Sequence[Task]) -> ProgressSummary:
    """Count tasks per status and express each count as a percentage."""
    total = len(tasks)
    if total == 0:
        return ProgressSummary()

    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED.value)
    in_progress = sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS.value)
    pending = sum(1 for t in tasks if t.status == TaskStatus.PENDING.value)
    return ProgressSummary(
        total=total,
        completed=completed,
        in_progress=in_progress,
        pending=pending,
        completed_percent=completed / total * 100,
        in_progress_percent=in_progress / total * 100,
        pending_percent=pending / total * 100,
    )


def find_analysis_result(tasks: Sequence[Task]) -> str | None:
    """Return the first non-empty analysis result in the snapshot."""
    for task in tasks:
        if task.analysis_result:
            return task.analysis_result
    return None


def task_details(tasks: Sequence[Task], task_id: str) -> TaskDetails | None:
    """Build the details view of a task, resolving dependency names.

    Dependencies that point outside the snapshot are kept and flagged as
    unresolved, unlike in the graph where they are dropped.
    """
    by_id = {task.id: task for task in tasks}
    task = by_id.get(task_id)
    if task is None:
        return None

    references = []
    for dep_id in task.dependency_ids():
        dep = by_id.get(dep_id)
        references.append(
            DependencyReference(
                task_id=dep_id,
                name=dep.name if dep else None,
                resolved=dep is not None,
            )
        )
    return TaskDetails(task=task, dependencies=references)
