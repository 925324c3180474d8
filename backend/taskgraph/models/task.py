"""Pydantic models for task snapshots.

A snapshot is the full task list as served by the task backend. Field names
on the wire are camelCase; attributes are snake_case.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel
from pydantic import Field as PydanticField


class TaskStatus(str, Enum):
    """Status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskDependency(BaseModel):
    """Wrapper form of a dependency reference."""

    task_id: str = PydanticField(alias="taskId")

    model_config = {"populate_by_name": True, "extra": "allow"}


class RelatedFile(BaseModel):
    """A file referenced by a task."""

    path: str
    type: str
    description: str | None = None

    model_config = {"extra": "allow"}


class Task(BaseModel):
    """A task record in a snapshot."""

    id: str
    name: str | None = None
    description: str | None = None
    # Kept as a plain string so statuses unknown to the dashboard still render
    status: str | None = None
    notes: str | None = None
    implementation_guide: str | None = PydanticField(
        default=None, alias="implementationGuide"
    )
    verification_criteria: str | None = PydanticField(
        default=None, alias="verificationCriteria"
    )
    summary: str | None = None
    analysis_result: str | None = PydanticField(default=None, alias="analysisResult")
    created_at: datetime | None = PydanticField(default=None, alias="createdAt")
    updated_at: datetime | None = PydanticField(default=None, alias="updatedAt")
    dependencies: list[str | TaskDependency] | None = None
    related_files: list[RelatedFile] | None = PydanticField(
        default=None, alias="relatedFiles"
    )

    model_config = {"populate_by_name": True, "extra": "allow"}

    def dependency_ids(self) -> list[str]:
        """Dependency references unwrapped to raw task ids, in declaration order."""
        return [
            dep.task_id if isinstance(dep, TaskDependency) else dep
            for dep in self.dependencies or []
        ]


class TaskListResponse(BaseModel):
    """Payload of the snapshot endpoint."""

    tasks: list[Task] = PydanticField(default_factory=list)


class DependencyReference(BaseModel):
    """A dependency of a task, resolved against the current snapshot."""

    task_id: str
    name: str | None = None
    resolved: bool = False


class TaskDetails(BaseModel):
    """Everything the details panel shows for one task."""

    task: Task
    dependencies: list[DependencyReference] = PydanticField(default_factory=list)


class TaskListView(BaseModel):
    """Filtered and sorted task list."""

    tasks: list[Task] = PydanticField(default_factory=list)
    total: int = 0
    selected_task_id: str | None = None
