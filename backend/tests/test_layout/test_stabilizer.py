"""Tests for layout pre-stabilization."""

import math

from taskgraph.layout.stabilizer import LayoutStabilizer
from taskgraph.models.graph import GraphEdge, GraphNode, Position

WIDTH = 800.0
HEIGHT = 400.0


class TestLayoutStabilizer:
    """Tests for LayoutStabilizer."""

    def test_new_nodes_get_positions(self):
        nodes = [GraphNode(id="a"), GraphNode(id="b")]
        LayoutStabilizer(WIDTH, HEIGHT).stabilize(nodes, [GraphEdge("a", "b")], {"a", "b"})

        for node in nodes:
            assert node.position.is_set
            assert math.isfinite(node.x) and math.isfinite(node.y)
            assert (node.position.vx, node.position.vy) == (0.0, 0.0)

    def test_existing_nodes_untouched(self):
        existing = GraphNode(id="a", position=Position(x=100.0, y=120.0, vx=1.5, vy=-2.0))
        new = GraphNode(id="b")

        LayoutStabilizer(WIDTH, HEIGHT).stabilize([existing, new], [GraphEdge("a", "b")], {"b"})

        assert existing.position == Position(x=100.0, y=120.0, vx=1.5, vy=-2.0)
        assert existing.pin is None
        assert new.position.is_set

    def test_existing_pin_untouched(self):
        existing = GraphNode(id="a", position=Position(x=10.0, y=10.0))
        existing.pin_at(10.0, 10.0)

        LayoutStabilizer(WIDTH, HEIGHT).stabilize([existing, GraphNode(id="b")], [], {"b"})

        assert (existing.pin.fx, existing.pin.fy) == (10.0, 10.0)

    def test_new_node_settles_near_its_dependency(self):
        existing = GraphNode(id="a", position=Position(x=WIDTH / 2, y=HEIGHT / 2))
        new = GraphNode(id="b")

        LayoutStabilizer(WIDTH, HEIGHT).stabilize([existing, new], [GraphEdge("a", "b")], {"b"})

        assert math.hypot(new.x - existing.x, new.y - existing.y) < 200.0

    def test_deterministic(self):
        def run() -> list[tuple[float, float]]:
            nodes = [GraphNode(id="a"), GraphNode(id="b"), GraphNode(id="c")]
            stabilizer = LayoutStabilizer(WIDTH, HEIGHT, seed=7)
            stabilizer.stabilize(nodes, [GraphEdge("a", "b")], {"a", "b", "c"})
            return [(n.x, n.y) for n in nodes]

        assert run() == run()

    def test_nothing_new_is_a_no_op(self):
        node = GraphNode(id="a")
        LayoutStabilizer(WIDTH, HEIGHT).stabilize([node], [], set())
        assert not node.position.is_set
