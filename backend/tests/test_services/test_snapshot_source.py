"""Tests for the snapshot HTTP client."""

import httpx
import pytest

from taskgraph.errors import SnapshotFetchError
from taskgraph.services.snapshot_source import SnapshotSource

TASKS_URL = "http://tasks.test/api/tasks"


async def fetch_with(handler):
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        return await SnapshotSource(client, TASKS_URL).fetch()


class TestSnapshotSource:
    """Tests for SnapshotSource.fetch."""

    @pytest.mark.asyncio
    async def test_parses_tasks(self):
        payload = {
            "tasks": [
                {"id": "1", "name": "Plan", "status": "completed", "createdAt": "2024-01-01T00:00:00Z"},
                {"id": "2", "name": "Build", "dependencies": [{"taskId": "1"}]},
            ]
        }
        tasks = await fetch_with(lambda request: httpx.Response(200, json=payload))

        assert [t.id for t in tasks] == ["1", "2"]
        assert tasks[0].created_at is not None
        assert tasks[1].dependency_ids() == ["1"]

    @pytest.mark.asyncio
    async def test_missing_tasks_key_is_empty(self):
        tasks = await fetch_with(lambda request: httpx.Response(200, json={}))
        assert tasks == []

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        with pytest.raises(SnapshotFetchError) as exc_info:
            await fetch_with(lambda request: httpx.Response(500))
        assert exc_info.value.status_code == 500
        assert exc_info.value.retriable is True

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        with pytest.raises(SnapshotFetchError):
            await fetch_with(lambda request: httpx.Response(200, content=b"<html>"))

    @pytest.mark.asyncio
    async def test_invalid_payload(self):
        with pytest.raises(SnapshotFetchError):
            await fetch_with(lambda request: httpx.Response(200, json={"tasks": [{"name": "no id"}]}))

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SnapshotFetchError) as exc_info:
            await fetch_with(handler)
        assert exc_info.value.status_code is None
