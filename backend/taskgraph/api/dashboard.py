"""Dashboard API routes.

Renderers read the scene and listen for frames here, and report user
interaction back as intents.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from taskgraph.errors import SessionNotReadyError
from taskgraph.models import (
    FilterIntent,
    IntentRequest,
    IntentResult,
    MinimapResponse,
    PlaceholderState,
    ProgressSummary,
    SceneResponse,
    TaskDetails,
    TaskListView,
)
from taskgraph.services.minimap import project_minimap
from taskgraph.services.session import DashboardSession, get_session
from taskgraph.services.summary import progress_summary, task_details

logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 15.0

router = APIRouter(prefix="/dashboard")


# =============================================================================
# Response Models
# =============================================================================


class NotificationItem(BaseModel):
    """A transient notification still within its time-to-live."""

    id: int
    message: str
    level: str


class NotificationsResponse(BaseModel):
    """Active notifications, oldest first."""

    notifications: list[NotificationItem]


class AnalysisResponse(BaseModel):
    """Global analysis result of the current snapshot."""

    analysis_result: str | None = None


class RefreshResponse(BaseModel):
    """Outcome of a manual refresh."""

    changed: bool
    placeholder: PlaceholderState | None = None
    error: str | None = None


def _require_session() -> DashboardSession:
    try:
        return get_session()
    except SessionNotReadyError as e:
        logger.warning(f"Dashboard request rejected: {e}")
        raise HTTPException(status_code=503, detail=str(e))


# =============================================================================
# Scene
# =============================================================================


@router.get("/scene")
async def get_scene() -> SceneResponse:
    """Full scene, or the placeholder to show instead of a graph."""
    try:
        session = get_session()
    except SessionNotReadyError as e:
        return SceneResponse(placeholder=PlaceholderState.UNAVAILABLE, error=str(e))
    return session.scene()


@router.get("/stream")
async def stream_frames() -> StreamingResponse:
    """Stream frames to a renderer with Server-Sent Events.

    The first frame is always ``snapshot`` carrying the full scene, so a
    renderer that (re)connects never has to merge diffs onto stale state.

    Events:
        - snapshot: Full scene on connect
        - scene: Enter/update/exit after a snapshot changed
        - tick: Node positions after a simulation tick
        - style: Attribute refresh after a view state change
        - view: Selection and transform
        - notification: Transient error message
        - analysis: Global analysis result changed
        - placeholder: Nothing to draw
    """
    session = _require_session()
    queue = session.hub.subscribe()

    async def event_generator():
        """Generate SSE frames for one renderer."""
        try:
            yield f"event: snapshot\ndata: {session.scene().model_dump_json()}\n\n"
            while True:
                try:
                    frame = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                if frame is None:
                    break
                yield f"event: {frame['event']}\ndata: {json.dumps(frame['data'])}\n\n"
        finally:
            session.hub.unsubscribe(queue)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/intents")
async def post_intent(body: IntentRequest) -> IntentResult:
    """Apply a renderer intent (select, drag, zoom, filter, reset_view)."""
    session = _require_session()
    return session.apply_intent(body.intent)


@router.post("/refresh")
async def refresh() -> RefreshResponse:
    """Pull a fresh snapshot now instead of waiting for an update event."""
    session = _require_session()
    diff = await session.refresh()
    return RefreshResponse(
        changed=diff is not None,
        placeholder=session.placeholder(),
        error=session.load_error,
    )


@router.get("/minimap")
async def get_minimap() -> MinimapResponse:
    """Overview projection of the scene and the visible viewport."""
    session = _require_session()
    return project_minimap(
        session.reconciler.nodes,
        session.reconciler.edges,
        session.view.transform,
        session.view.width,
        session.view.height,
    )


# =============================================================================
# Task views
# =============================================================================


@router.get("/tasks")
async def list_tasks(
    status: str | None = Query(None, description="Status filter ('all' or a status)"),
    search: str | None = Query(None, description="Case-insensitive name/description search"),
) -> TaskListView:
    """Filtered and sorted task list.

    Query parameters are applied as a filter intent, so the graph dims the
    same tasks the list hides.
    """
    session = _require_session()
    if status is not None or search is not None:
        session.apply_intent(FilterIntent(status_filter=status, search_term=search))
    tasks = session.view.list_view(session.tasks)
    return TaskListView(
        tasks=tasks,
        total=len(tasks),
        selected_task_id=session.view.selected_task_id,
    )


@router.get("/tasks/{task_id}")
async def get_task_details(task_id: str) -> TaskDetails:
    """Details of one task with dependency names resolved."""
    session = _require_session()
    details = task_details(session.tasks, task_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return details


@router.get("/progress")
async def get_progress() -> ProgressSummary:
    """Completion counts over the current snapshot."""
    session = _require_session()
    return progress_summary(session.tasks)


@router.get("/analysis")
async def get_analysis() -> AnalysisResponse:
    """Global analysis result, if any task carries one."""
    session = _require_session()
    return AnalysisResponse(analysis_result=session.analysis_result)


@router.get("/notifications")
async def get_notifications() -> NotificationsResponse:
    """Notifications that have not yet expired."""
    session = _require_session()
    return NotificationsResponse(
        notifications=[
            NotificationItem(id=n.id, message=n.message, level=n.level)
            for n in session.notifications.active()
        ]
    )
