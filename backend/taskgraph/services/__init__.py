"""Services for the task graph dashboard."""

from taskgraph.services.live_channel import ChannelState, LiveUpdateChannel, iter_events
from taskgraph.services.minimap import project_minimap
from taskgraph.services.notifications import NotificationCenter
from taskgraph.services.reconciler import GraphReconciler, build_graph
from taskgraph.services.renderer_hub import RendererHub
from taskgraph.services.session import (
    DashboardSession,
    get_session,
    init_session,
    shutdown_session,
)
from taskgraph.services.snapshot_differ import COMPARED_FIELDS, find_change, has_changed
from taskgraph.services.snapshot_source import SnapshotSource
from taskgraph.services.summary import find_analysis_result, progress_summary, task_details
from taskgraph.services.view_state import ViewStateController

__all__ = [
    "COMPARED_FIELDS",
    "ChannelState",
    "DashboardSession",
    "GraphReconciler",
    "LiveUpdateChannel",
    "NotificationCenter",
    "RendererHub",
    "SnapshotSource",
    "ViewStateController",
    "build_graph",
    "find_analysis_result",
    "find_change",
    "get_session",
    "has_changed",
    "init_session",
    "iter_events",
    "progress_summary",
    "project_minimap",
    "shutdown_session",
    "task_details",
]
