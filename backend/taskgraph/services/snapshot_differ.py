"""Snapshot change detection.

Decides whether an incoming task snapshot differs meaningfully from the one
currently rendered, so polling cycles that change nothing skip reconciliation
and leave the layout undisturbed.

Only the fields in COMPARED_FIELDS, the dependency ids, the related file
(path, type) pairs and updated_at are inspected. A change confined to any
other field (a related file's description, created_at, extra fields) is not
detected unless the server also bumps updated_at.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from taskgraph.models.task import RelatedFile, Task

logger = logging.getLogger(__name__)

COMPARED_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "status",
    "notes",
    "implementation_guide",
    "verification_criteria",
    "summary",
)


def has_changed(old: Sequence[Task] | None, new: Sequence[Task] | None) -> bool:
    """Return True if ``new`` differs from ``old`` in a way worth re-rendering."""
    reason = find_change(old, new)
    if reason is not None:
        logger.info(f"Task snapshot changed: {reason}")
        return True
    return False


def find_change(old: Sequence[Task] | None, new: Sequence[Task] | None) -> str | None:
    """Describe the first meaningful difference between two snapshots.

    Returns:
        A short human-readable reason, or None if nothing relevant changed.
    """
    if old is None or new is None:
        return "no previous snapshot"

    if len(old) != len(new):
        return f"task count changed ({len(old)} -> {len(new)})"

    old_by_id = {task.id: task for task in old}
    new_ids = {task.id for task in new}

    for task in old:
        if task.id not in new_ids:
            return f"task removed: {task.id}"

    for new_task in new:
        old_task = old_by_id.get(new_task.id)
        if old_task is None:
            return f"task added: {new_task.id}"

        for field in COMPARED_FIELDS:
            if getattr(old_task, field) != getattr(new_task, field):
                return f"task {new_task.id} changed field: {field}"

        if not same_dependencies(old_task, new_task):
            return f"task {new_task.id} changed field: dependencies"

        if not same_related_files(old_task.related_files, new_task.related_files):
            return f"task {new_task.id} changed field: related_files"

        if _stamp(old_task) != _stamp(new_task):
            return f"task {new_task.id} changed field: updated_at"

    return None


def same_dependencies(old_task: Task, new_task: Task) -> bool:
    """Compare dependency ids as sets (order and duplicates ignored)."""
    return set(old_task.dependency_ids()) == set(new_task.dependency_ids())


def same_related_files(
    old_files: Sequence[RelatedFile] | None,
    new_files: Sequence[RelatedFile] | None,
) -> bool:
    """Compare related files position by position on (path, type)."""
    old_files = old_files or []
    new_files = new_files or []
    if len(old_files) != len(new_files):
        return False
    return all(
        a.path == b.path and a.type == b.type for a, b in zip(old_files, new_files)
    )


def _stamp(task: Task) -> str | None:
    return None if task.updated_at is None else str(task.updated_at)
