"""Pytest configuration and fixtures."""

from typing import Any, AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from taskgraph.config import DashboardConfig
from taskgraph.main import app
from taskgraph.services import session as session_module
from taskgraph.services.session import DashboardSession

TASKS_BASE_URL = "http://tasks.test"


class FakeTaskBackend:
    """In-memory task backend served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.tasks: list[dict[str, Any]] = []
        self.status_code = 200
        self.snapshot_requests = 0
        self.stream_status_code = 503
        self.stream_body = b""

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tasks":
            self.snapshot_requests += 1
            if self.status_code != 200:
                return httpx.Response(self.status_code, json={"error": "unavailable"})
            return httpx.Response(200, json={"tasks": self.tasks})
        if request.url.path == "/api/tasks/stream":
            return httpx.Response(
                self.stream_status_code,
                content=self.stream_body,
                headers={"Content-Type": "text/event-stream"},
            )
        return httpx.Response(404)


def task_payload(task_id: str, **fields: Any) -> dict[str, Any]:
    """Build a wire-format task record (camelCase keys)."""
    payload: dict[str, Any] = {"id": task_id, "name": f"Task {task_id}", "status": "pending"}
    payload.update(fields)
    return payload


@pytest.fixture
def backend() -> FakeTaskBackend:
    return FakeTaskBackend()


@pytest.fixture
async def http_client(backend: FakeTaskBackend) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client whose requests are answered by the fake task backend."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)) as client:
        yield client


@pytest.fixture
def config() -> DashboardConfig:
    return DashboardConfig(tasks_base_url=TASKS_BASE_URL)


@pytest.fixture
async def session(
    config: DashboardConfig,
    http_client: httpx.AsyncClient,
) -> AsyncGenerator[DashboardSession, None]:
    """A dashboard session with no background work started."""
    dashboard = DashboardSession(config, client=http_client)
    yield dashboard
    await dashboard.close()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with no dashboard session installed."""
    session_module._session = None
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def session_client(
    session: DashboardSession,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client backed by the ``session`` fixture."""
    session_module._session = session
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client
    finally:
        session_module._session = None
