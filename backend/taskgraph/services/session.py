"""Dashboard session: the single owned context of the live dashboard.

The session holds the last rendered snapshot, the scene, the simulation, the
view state and the live update channel, and relays frames to renderers:

- ``scene``: structural enter/update/exit with attributes
- ``tick``: node positions after a simulation tick
- ``style``: full attribute refresh after a view state change
- ``view``: selection and pan/zoom transform
- ``notification``: a transient error message
- ``analysis``: the global analysis result changed
- ``placeholder``: nothing to draw (loading, empty or failed first load)

Mutation ownership: the simulation writes node positions, drag intents and
reset write pins, the view state controller owns selection, filters and the
transform. Visibility is recomputed from view state, never stored.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence

import httpx

from taskgraph.config import DashboardConfig
from taskgraph.errors import SessionNotReadyError, SnapshotFetchError
from taskgraph.layout.simulation import ForceSimulation
from taskgraph.layout.stabilizer import LayoutStabilizer
from taskgraph.models.graph import GraphNode, SceneDiff
from taskgraph.models.intent import (
    DragIntent,
    FilterIntent,
    Intent,
    IntentResult,
    ResetViewIntent,
    SelectIntent,
    ZoomIntent,
)
from taskgraph.models.task import Task
from taskgraph.models.view import (
    EdgeFrame,
    NodeFrame,
    NodePositionFrame,
    PlaceholderState,
    SceneFrame,
    SceneResponse,
    StyleFrame,
)
from taskgraph.services.live_channel import LiveUpdateChannel
from taskgraph.services.notifications import NotificationCenter
from taskgraph.services.reconciler import GraphReconciler, build_graph
from taskgraph.services.renderer_hub import RendererHub
from taskgraph.services.snapshot_differ import has_changed
from taskgraph.services.snapshot_source import SnapshotSource
from taskgraph.services.summary import find_analysis_result
from taskgraph.services.view_state import (
    ViewStateController,
    edge_attributes,
    node_attributes,
)

logger = logging.getLogger(__name__)

FRAME_INTERVAL_SECONDS = 1 / 60
DRAG_ALPHA_TARGET = 0.3
RESET_SCATTER = 50.0

# Singleton session instance
_session: "DashboardSession | None" = None


class DashboardSession:
    """Owns every piece of mutable dashboard state for the service lifetime."""

    def __init__(
        self,
        config: DashboardConfig,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Build the session without starting any background work.

        Args:
            config: Dashboard settings.
            client: HTTP client for the task backend; created if not given.
            sleep: Reconnect delay function for the live update channel.
        """
        self.config = config
        width, height = config.viewport_width, config.viewport_height

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.fetch_timeout_seconds)
        self.source = SnapshotSource(self._client, config.tasks_url)
        self.channel = LiveUpdateChannel(
            self._client,
            config.stream_url,
            self.refresh,
            reconnect_delay=config.reconnect_delay_seconds,
            sleep=sleep,
        )

        self.simulation = ForceSimulation(seed=config.layout_seed, center=(width / 2, height / 2))
        self.stabilizer = LayoutStabilizer(
            width, height, warmup_ticks=config.stabilizer_warmup_ticks, seed=config.layout_seed
        )
        self.reconciler = GraphReconciler(self.simulation, self.stabilizer, width, height)
        self.view = ViewStateController(width, height)
        self.notifications = NotificationCenter(config.notification_ttl_seconds)
        self.hub = RendererHub()

        self.tasks: list[Task] = []
        self.loaded = False
        self.load_error: str | None = None
        self.analysis_result: str | None = None

        self._rng = random.Random(config.layout_seed)
        self._tick_task: asyncio.Task | None = None
        self._wake = asyncio.Event()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Load the first snapshot, then start the tick loop and the channel."""
        await self.refresh()
        self._tick_task = asyncio.create_task(self._tick_loop())
        self.channel.start()
        logger.info("Dashboard session started")

    async def close(self) -> None:
        """Tear down background work: reconnect timer, stream and tick loop."""
        await self.channel.close()
        if self._tick_task:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None
        self.hub.close()
        if self._owns_client:
            await self._client.aclose()
        logger.info("Dashboard session closed")

    # -------------------------------------------------------------------------
    # Snapshot synchronization
    # -------------------------------------------------------------------------

    async def refresh(self) -> SceneDiff | None:
        """Fetch a snapshot and apply it.

        Fetch errors are reported, never raised: a notification when a
        snapshot is already shown, the inline load error otherwise. The most
        recently completed fetch always wins.
        """
        try:
            tasks = await self.source.fetch()
        except SnapshotFetchError as e:
            logger.error(f"Error fetching tasks: {e}")
            if self.loaded:
                notification = self.notifications.push(f"Failed to update tasks: {e}")
                self.hub.publish(
                    "notification",
                    {"id": notification.id, "message": notification.message, "level": notification.level},
                )
            else:
                self.load_error = str(e)
                self._publish_placeholder()
            return None
        return self.apply_snapshot(tasks)

    def apply_snapshot(self, tasks: Sequence[Task]) -> SceneDiff | None:
        """Reconcile a snapshot onto the scene if it differs from the last one.

        Returns:
            The scene diff, or None when nothing meaningful changed
        """
        self._update_analysis_result(tasks)

        first_load = not self.loaded
        self.loaded = True
        self.load_error = None
        if not first_load and not has_changed(self.tasks, tasks):
            logger.info("No significant task changes detected, skipping reconciliation")
            return None

        self.tasks = list(tasks)
        nodes, edges = build_graph(self.tasks)
        diff = self.reconciler.reconcile(nodes, edges)

        if self.view.prune_selection({task.id for task in self.tasks}):
            self._publish_view()

        if not self.tasks:
            self._publish_placeholder()
        self._publish_scene(diff)
        self._publish_style()
        return diff

    def _update_analysis_result(self, tasks: Sequence[Task]) -> None:
        result = find_analysis_result(tasks)
        if result != self.analysis_result:
            self.analysis_result = result
            self.hub.publish("analysis", {"analysis_result": result})

    # -------------------------------------------------------------------------
    # Intents
    # -------------------------------------------------------------------------

    def apply_intent(self, intent: Intent) -> IntentResult:
        """Reduce a renderer intent into view or simulation state."""
        recentered = False
        if isinstance(intent, SelectIntent):
            transform = self.view.select(intent.task_id, self.reconciler.get_node(intent.task_id))
            recentered = transform is not None
            self._publish_view()
            self._publish_style()
        elif isinstance(intent, DragIntent):
            self._apply_drag(intent)
        elif isinstance(intent, ZoomIntent):
            self.view.zoom(intent.transform)
            self._publish_view()
        elif isinstance(intent, FilterIntent):
            self.view.set_filter(intent.status_filter, intent.search_term, intent.sort_option)
            self._publish_style()
        elif isinstance(intent, ResetViewIntent):
            self.reset_view()

        return IntentResult(
            selected_task_id=self.view.selected_task_id,
            transform=self.view.transform,
            recentered=recentered,
        )

    def _apply_drag(self, intent: DragIntent) -> None:
        node = self.reconciler.get_node(intent.task_id)
        if node is None:
            logger.warning(f"Drag on unknown node {intent.task_id} ignored")
            return

        if intent.phase == "start":
            self.simulation.alpha_target = DRAG_ALPHA_TARGET
            self.simulation.restart()
            node.pin_at(node.x, node.y)
            self._wake.set()
        elif intent.phase == "move":
            if node.pin is None:
                node.pin_at(node.x, node.y)
            node.pin_at(node.pin.fx + intent.dx, node.pin.fy + intent.dy)
            self._wake.set()
        else:
            # The pin stays until the node is removed or the view is reset
            self.simulation.alpha_target = 0.0

    def reset_view(self) -> None:
        """Identity transform, pins cleared, nodes re-scattered, full restart."""
        self.view.reset_transform()
        cx = self.reconciler.width / 2
        cy = self.reconciler.height / 2
        for node in self.reconciler.nodes:
            node.unpin()
            node.position.x = cx + (self._rng.random() - 0.5) * RESET_SCATTER
            node.position.y = cy + (self._rng.random() - 0.5) * RESET_SCATTER
        self.reconciler.resize(self.reconciler.width, self.reconciler.height)
        self.simulation.restart(alpha=1.0)
        self._wake.set()
        self._publish_view()
        self._publish_tick()

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the live simulation one step and publish positions."""
        self.simulation.tick()
        self._publish_tick()

    async def _tick_loop(self) -> None:
        while True:
            if self.simulation.is_hot:
                self.tick()
                await asyncio.sleep(FRAME_INTERVAL_SECONDS)
            else:
                self._wake.clear()
                await self._wake.wait()

    # -------------------------------------------------------------------------
    # Renderer views
    # -------------------------------------------------------------------------

    def placeholder(self) -> PlaceholderState | None:
        if not self.loaded:
            return PlaceholderState.ERROR if self.load_error else PlaceholderState.LOADING
        if not self.tasks:
            return PlaceholderState.EMPTY
        return None

    def scene(self) -> SceneResponse:
        """Full scene for a renderer that connects or resynchronizes."""
        placeholder = self.placeholder()
        if placeholder is not None:
            return SceneResponse(
                placeholder=placeholder,
                error=self.load_error,
                transform=self.view.transform,
                selected_task_id=self.view.selected_task_id,
            )

        visible = self.view.visible_ids(self.tasks)
        return SceneResponse(
            nodes=[self._node_frame(node, visible) for node in self.reconciler.nodes],
            edges=[
                EdgeFrame(source=e.source, target=e.target, attributes=edge_attributes(e, visible))
                for e in self.reconciler.edges
            ],
            transform=self.view.transform,
            selected_task_id=self.view.selected_task_id,
        )

    def _node_frame(self, node: GraphNode, visible: set[str]) -> NodeFrame:
        return NodeFrame(
            id=node.id,
            name=node.name,
            status=node.status,
            x=node.x,
            y=node.y,
            fx=node.pin.fx if node.pin else None,
            fy=node.pin.fy if node.pin else None,
            attributes=node_attributes(node, visible, self.view.selected_task_id),
        )

    def _publish_scene(self, diff: SceneDiff) -> None:
        visible = self.view.visible_ids(self.tasks)
        frame = SceneFrame(
            entered=[self._node_frame(node, visible) for node in diff.entered],
            updated=[self._node_frame(node, visible) for node in diff.updated],
            exited=diff.exited,
            entered_edges=[
                EdgeFrame(source=e.source, target=e.target, attributes=edge_attributes(e, visible))
                for e in diff.entered_edges
            ],
            exited_edges=diff.exited_edges,
        )
        self.hub.publish("scene", frame.model_dump(mode="json"))

    def _publish_style(self) -> None:
        visible = self.view.visible_ids(self.tasks)
        selected = self.view.selected_task_id
        frame = StyleFrame(
            nodes={node.id: node_attributes(node, visible, selected) for node in self.reconciler.nodes},
            edges=[
                EdgeFrame(source=e.source, target=e.target, attributes=edge_attributes(e, visible))
                for e in self.reconciler.edges
            ],
        )
        self.hub.publish("style", frame.model_dump(mode="json"))

    def _publish_view(self) -> None:
        self.hub.publish(
            "view",
            {
                "selected_task_id": self.view.selected_task_id,
                "transform": self.view.transform.model_dump(),
            },
        )

    def _publish_tick(self) -> None:
        positions = [
            NodePositionFrame(id=node.id, x=node.x, y=node.y).model_dump()
            for node in self.simulation.nodes
        ]
        self.hub.publish("tick", {"nodes": positions, "alpha": self.simulation.alpha})

    def _publish_placeholder(self) -> None:
        placeholder = self.placeholder()
        self.hub.publish(
            "placeholder",
            {"placeholder": placeholder.value if placeholder else None, "error": self.load_error},
        )


# =============================================================================
# Session lifecycle
# =============================================================================


async def init_session(
    config: DashboardConfig | None = None,
    client: httpx.AsyncClient | None = None,
) -> DashboardSession:
    """Create and start the global dashboard session."""
    global _session
    if _session is not None:
        await _session.close()
    _session = DashboardSession(config or DashboardConfig.from_env(), client=client)
    await _session.start()
    return _session


async def shutdown_session() -> None:
    """Close the global dashboard session, if any."""
    global _session
    if _session is not None:
        await _session.close()
        _session = None


def get_session() -> DashboardSession:
    """Get the global dashboard session."""
    if _session is None:
        raise SessionNotReadyError("Dashboard session not initialized. Call init_session first.")
    return _session
