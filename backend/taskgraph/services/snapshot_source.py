"""HTTP client for the task snapshot endpoint."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from taskgraph.errors import SnapshotFetchError
from taskgraph.models.task import Task, TaskListResponse

logger = logging.getLogger(__name__)


class SnapshotSource:
    """Pulls the full task list from the task backend on demand."""

    def __init__(self, client: httpx.AsyncClient, tasks_url: str) -> None:
        self._client = client
        self._tasks_url = tasks_url

    async def fetch(self) -> list[Task]:
        """Fetch and parse the current snapshot.

        Raises:
            SnapshotFetchError: On network errors, non-2xx responses or
                payloads that do not parse as a task list
        """
        try:
            response = await self._client.get(self._tasks_url)
        except httpx.HTTPError as e:
            raise SnapshotFetchError(f"Request to {self._tasks_url} failed: {e}") from e

        if response.status_code >= 400:
            raise SnapshotFetchError(
                f"HTTP error! Status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = TaskListResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SnapshotFetchError(f"Invalid task list payload: {e}") from e

        logger.debug(f"Fetched {len(payload.tasks)} task(s) from {self._tasks_url}")
        return payload.tasks
