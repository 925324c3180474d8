"""Tests for graph building and reconciliation."""

import math

import pytest

from taskgraph.layout.placement import NodeRole, node_role
from taskgraph.layout.simulation import ForceSimulation
from taskgraph.layout.stabilizer import LayoutStabilizer
from taskgraph.models.task import Task, TaskDependency
from taskgraph.services.reconciler import GraphReconciler, build_graph

WIDTH = 800.0
HEIGHT = 400.0


def make_task(task_id: str, status: str = "pending", dependencies=None, name=None) -> Task:
    return Task(
        id=task_id,
        name=name or f"Task {task_id}",
        status=status,
        dependencies=dependencies or [],
    )


@pytest.fixture
def simulation() -> ForceSimulation:
    return ForceSimulation(seed=0, center=(WIDTH / 2, HEIGHT / 2))


@pytest.fixture
def reconciler(simulation) -> GraphReconciler:
    stabilizer = LayoutStabilizer(WIDTH, HEIGHT, seed=0)
    return GraphReconciler(simulation, stabilizer, WIDTH, HEIGHT)


def apply(reconciler: GraphReconciler, tasks: list[Task]):
    return reconciler.reconcile(*build_graph(tasks))


class TestBuildGraph:
    """Tests for deriving nodes and edges from a snapshot."""

    def test_edges_point_from_dependency_to_dependent(self):
        nodes, edges = build_graph([make_task("1"), make_task("2", dependencies=["1"])])
        assert [n.id for n in nodes] == ["1", "2"]
        assert [e.key for e in edges] == [("1", "2")]

    def test_dangling_dependency_dropped(self):
        _, edges = build_graph([make_task("2", dependencies=["9"])])
        assert edges == []

    def test_self_dependency_kept_as_loop(self):
        _, edges = build_graph([make_task("1", dependencies=["1"])])
        assert [e.key for e in edges] == [("1", "1")]

    def test_self_dependency_makes_middle_role(self):
        _, edges = build_graph([make_task("1", dependencies=["1"])])
        assert node_role("1", edges) is NodeRole.MIDDLE

    def test_duplicate_dependency_produces_one_edge(self):
        tasks = [make_task("1"), make_task("2", dependencies=["1", TaskDependency(task_id="1")])]
        _, edges = build_graph(tasks)
        assert [e.key for e in edges] == [("1", "2")]

    def test_node_carries_name_and_status(self):
        nodes, _ = build_graph([make_task("1", status="completed", name="Ship it")])
        assert nodes[0].name == "Ship it"
        assert nodes[0].status == "completed"


class TestReconcile:
    """Tests for enter/update/exit against the live scene."""

    def test_first_snapshot_enters_everything(self, reconciler):
        diff = apply(reconciler, [make_task("1"), make_task("2", dependencies=["1"])])
        assert [n.id for n in diff.entered] == ["1", "2"]
        assert [e.key for e in diff.entered_edges] == [("1", "2")]
        assert diff.updated == []
        assert diff.exited == []
        assert all(n.position.is_set for n in reconciler.nodes)

    def test_status_change_is_a_single_update(self, reconciler):
        apply(reconciler, [make_task("1"), make_task("2", dependencies=["1"])])
        node_before = reconciler.get_node("2")

        diff = apply(
            reconciler,
            [make_task("1"), make_task("2", status="in_progress", dependencies=["1"])],
        )

        assert [n.id for n in diff.updated] == ["2"]
        assert diff.updated[0].status == "in_progress"
        assert diff.entered == []
        assert diff.exited == []
        assert diff.entered_edges == []
        assert diff.exited_edges == []
        assert reconciler.get_node("2") is node_before
        assert [e.key for e in reconciler.edges] == [("1", "2")]

    def test_reconcile_is_idempotent(self, reconciler):
        tasks = [make_task("1"), make_task("2", dependencies=["1"])]
        apply(reconciler, tasks)
        diff = apply(reconciler, tasks)
        assert diff.is_empty

    def test_self_loop_simulates(self, reconciler, simulation):
        diff = apply(reconciler, [make_task("1", dependencies=["1"]), make_task("2", dependencies=["1"])])
        assert [e.key for e in diff.entered_edges] == [("1", "1"), ("1", "2")]

        simulation.tick(20)

        for node in reconciler.nodes:
            assert math.isfinite(node.x) and math.isfinite(node.y)

    def test_existing_positions_survive(self, reconciler, simulation):
        apply(reconciler, [make_task("1"), make_task("2", dependencies=["1"])])
        simulation.tick(5)
        before = {n.id: (n.x, n.y) for n in reconciler.nodes}

        apply(
            reconciler,
            [make_task("1"), make_task("2", dependencies=["1"]), make_task("3", dependencies=["2"])],
        )

        for node_id, position in before.items():
            node = reconciler.get_node(node_id)
            assert (node.x, node.y) == position
        assert reconciler.get_node("3").position.is_set

    def test_alpha_not_reset(self, reconciler, simulation):
        apply(reconciler, [make_task("1")])
        simulation.alpha = 0.05
        apply(reconciler, [make_task("1"), make_task("2")])
        assert simulation.alpha == 0.05

    def test_removal_drops_node_and_its_edges_only(self, reconciler):
        apply(
            reconciler,
            [make_task("1"), make_task("2", dependencies=["1"]), make_task("3", dependencies=["2"])],
        )
        node_1 = reconciler.get_node("1")

        diff = apply(reconciler, [make_task("1"), make_task("2", dependencies=["1"])])

        assert diff.exited == ["3"]
        assert diff.exited_edges == [("2", "3")]
        assert diff.entered == []
        assert reconciler.get_node("3") is None
        assert reconciler.get_node("1") is node_1
        assert [e.key for e in reconciler.edges] == [("1", "2")]

    def test_dangling_edge_appears_when_target_arrives(self, reconciler):
        apply(reconciler, [make_task("2", dependencies=["9"])])
        assert reconciler.edges == []

        diff = apply(reconciler, [make_task("2", dependencies=["9"]), make_task("9")])

        assert [n.id for n in diff.entered] == ["9"]
        assert [e.key for e in diff.entered_edges] == [("9", "2")]

    def test_simulation_follows_snapshot_order(self, reconciler, simulation):
        apply(reconciler, [make_task("1"), make_task("2")])
        apply(reconciler, [make_task("3"), make_task("2"), make_task("1")])
        assert [n.id for n in simulation.nodes] == ["3", "2", "1"]
        assert [n.id for n in reconciler.nodes] == ["3", "2", "1"]


class TestPins:
    """Tests for pins across reconciliation."""

    def test_pin_survives_update(self, reconciler):
        apply(reconciler, [make_task("1"), make_task("2")])
        node = reconciler.get_node("1")
        node.pin_at(10.0, 20.0)

        apply(reconciler, [make_task("1", name="Renamed"), make_task("2")])

        assert node.pin is not None
        assert (node.pin.fx, node.pin.fy) == (10.0, 20.0)
        assert (node.x, node.y) == (10.0, 20.0)

    def test_pin_cleared_on_exit(self, reconciler):
        apply(reconciler, [make_task("1"), make_task("2")])
        node = reconciler.get_node("1")
        node.pin_at(10.0, 20.0)

        apply(reconciler, [make_task("2")])

        assert node.pin is None
        assert reconciler.get_node("1") is None
