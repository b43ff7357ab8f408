"""
Tests for the graph model.
"""

import pytest

from archcanvas.shared import (
    Edge, GraphSnapshot, Node, Position,
    DuplicateEdge, EditorError, NodeNotFound, SelfLoopNotAllowed,
    SnapshotIntegrityError, UnknownResourceType,
)
from archcanvas.services.graph_model import GraphModel, find_snapshot_problems


class TestNodes:
    """Node creation and editing."""

    def test_add_node_seeds_from_template(self, graph):
        node = graph.add_node("AWS", "EC2", (100, 200))

        assert node.provider == "AWS"
        assert node.resource_type == "EC2"
        assert node.label == "EC2"
        assert node.position == Position(x=100, y=200)
        assert node.properties == {
            "instance_type": "t2.micro",
            "ami": "ami-0c55b159cbfafe1f0",
            "region": "us-east-1",
        }
        assert node.id.startswith("EC2-")
        assert graph.node_count == 1

    def test_add_node_unknown_type_leaves_graph_unchanged(self, graph):
        with pytest.raises(UnknownResourceType):
            graph.add_node("AWS", "Mainframe")

        assert graph.node_count == 0

    def test_node_ids_are_unique(self, graph):
        ids = {graph.add_node("AWS", "S3").id for _ in range(50)}

        assert len(ids) == 50

    def test_ids_not_reused_after_removal(self, graph):
        removed = graph.add_node("AWS", "EC2")
        graph.remove_node(removed.id)

        assert removed.id in graph._issued_ids
        assert graph.add_node("AWS", "EC2").id != removed.id

    def test_rename_node(self, graph):
        node = graph.add_node("AWS", "EC2")

        renamed = graph.rename_node(node.id, "web-server")

        assert renamed.label == "web-server"
        assert graph.get_node(node.id).label == "web-server"

    def test_set_property_overwrites_and_adds(self, graph):
        node = graph.add_node("AWS", "EC2")

        graph.set_property(node.id, "instance_type", "m5.large")
        graph.set_property(node.id, "tag", "frontend")

        assert graph.get_node(node.id).properties == {
            "instance_type": "m5.large",
            "ami": "ami-0c55b159cbfafe1f0",
            "region": "us-east-1",
            "tag": "frontend",
        }

    def test_nodes_do_not_share_properties(self, graph):
        first = graph.add_node("AWS", "EC2")
        second = graph.add_node("AWS", "EC2")

        graph.set_property(first.id, "instance_type", "m5.large")

        assert graph.get_node(second.id).properties["instance_type"] == "t2.micro"

    def test_returned_nodes_are_copies(self, graph):
        node = graph.add_node("AWS", "EC2")
        copy = graph.get_node(node.id)
        copy.properties["instance_type"] = "hacked"

        assert graph.get_node(node.id).properties["instance_type"] == "t2.micro"

    def test_move_node(self, graph):
        node = graph.add_node("GCP", "Compute", (0, 0))

        moved = graph.move_node(node.id, Position(x=5, y=-3))

        assert moved.position == Position(x=5, y=-3)

    def test_edit_missing_node_raises(self, graph):
        with pytest.raises(NodeNotFound):
            graph.rename_node("missing", "x")
        with pytest.raises(NodeNotFound):
            graph.set_property("missing", "k", "v")
        with pytest.raises(NodeNotFound):
            graph.get_node("missing")


class TestEdges:
    """Edge creation and removal."""

    def test_add_edge(self, graph):
        a = graph.add_node("AWS", "EC2")
        b = graph.add_node("AWS", "RDS")

        edge = graph.add_edge(a.id, b.id, "data")

        assert edge.source == a.id
        assert edge.target == b.id
        assert edge.kind == "data"
        assert graph.edge_count == 1
        assert graph.get_edge(edge.id) == edge

    def test_self_loop_rejected(self, graph):
        a = graph.add_node("AWS", "EC2")

        with pytest.raises(SelfLoopNotAllowed):
            graph.add_edge(a.id, a.id)

    def test_self_loop_checked_before_existence(self, graph):
        with pytest.raises(SelfLoopNotAllowed):
            graph.add_edge("ghost", "ghost")

    def test_missing_endpoint_rejected(self, graph):
        a = graph.add_node("AWS", "EC2")

        with pytest.raises(NodeNotFound):
            graph.add_edge(a.id, "ghost")
        assert graph.edge_count == 0

    def test_duplicate_ordered_pair_rejected(self, graph):
        a = graph.add_node("AWS", "EC2")
        b = graph.add_node("AWS", "RDS")
        graph.add_edge(a.id, b.id)

        with pytest.raises(DuplicateEdge):
            graph.add_edge(a.id, b.id)
        assert graph.edge_count == 1

    def test_reverse_direction_is_a_different_edge(self, graph):
        a = graph.add_node("AWS", "EC2")
        b = graph.add_node("AWS", "VPC")

        graph.add_edge(a.id, b.id)
        graph.add_edge(b.id, a.id)

        assert graph.edge_count == 2

    def test_unknown_kind_rejected(self, graph):
        a = graph.add_node("AWS", "EC2")
        b = graph.add_node("AWS", "VPC")

        with pytest.raises(EditorError):
            graph.add_edge(a.id, b.id, "telepathy")

    def test_remove_edge_is_idempotent(self, graph):
        a = graph.add_node("AWS", "EC2")
        b = graph.add_node("AWS", "VPC")
        edge = graph.add_edge(a.id, b.id)

        assert graph.remove_edge(edge.id) is True
        assert graph.remove_edge(edge.id) is False
        assert graph.get_edge(edge.id) is None

    def test_remove_node_cascades(self, graph):
        a = graph.add_node("AWS", "EC2")
        b = graph.add_node("AWS", "RDS")
        c = graph.add_node("AWS", "S3")
        ab = graph.add_edge(a.id, b.id)
        ca = graph.add_edge(c.id, a.id)
        graph.add_node("AWS", "VPC")

        removed = graph.remove_node(a.id)

        assert removed == {ab.id, ca.id}
        assert graph.edge_count == 0
        assert graph.node_count == 3
        for edge in graph.edges():
            assert graph.has_node(edge.source) and graph.has_node(edge.target)

    def test_remove_missing_node_is_noop(self, graph):
        assert graph.remove_node("ghost") == set()

    def test_edges_for_node_in_insertion_order(self, graph):
        a = graph.add_node("AWS", "EC2")
        b = graph.add_node("AWS", "RDS")
        c = graph.add_node("AWS", "S3")
        first = graph.add_edge(a.id, b.id)
        second = graph.add_edge(c.id, a.id)

        assert [e.id for e in graph.edges_for_node(a.id)] == [first.id, second.id]


class TestSnapshots:
    """Snapshot, restore and clear."""

    def build(self, graph):
        a = graph.add_node("AWS", "EC2", (10, 20))
        b = graph.add_node("AWS", "RDS", (30, 40))
        graph.add_edge(a.id, b.id)
        graph.rename_node(a.id, "api")
        return a, b

    def test_snapshot_restore_round_trip(self, graph, taxonomy):
        self.build(graph)
        snapshot = graph.snapshot()

        other = GraphModel(taxonomy)
        other.restore(snapshot)

        assert other.snapshot() == snapshot

    def test_snapshot_preserves_insertion_order(self, graph):
        a, b = self.build(graph)

        assert [n.id for n in graph.snapshot().nodes] == [a.id, b.id]

    def test_restore_invalid_snapshot_is_atomic(self, graph):
        self.build(graph)
        before = graph.snapshot()
        bad = GraphSnapshot(
            nodes=[Node(id="n1", provider="AWS", resource_type="EC2", label="x",
                        properties={"instance_type": "t2.micro", "ami": "a", "region": "r"})],
            edges=[Edge(id="e1", source="n1", target="ghost")],
        )

        with pytest.raises(SnapshotIntegrityError):
            graph.restore(bad)
        assert graph.snapshot() == before

    def test_restored_ids_are_never_reissued(self, graph, taxonomy):
        self.build(graph)
        snapshot = graph.snapshot()
        other = GraphModel(taxonomy)
        other.restore(snapshot)

        new_node = other.add_node("AWS", "EC2")

        assert new_node.id not in {n.id for n in snapshot.nodes}

    def test_clear(self, graph):
        self.build(graph)

        graph.clear()

        assert graph.node_count == 0
        assert graph.edge_count == 0
        assert graph.snapshot().is_empty


class TestSnapshotProblems:
    """Integrity checks used by restore, save and import."""

    def node(self, node_id, resource_type="EC2", **properties):
        defaults = {"instance_type": "t2.micro", "ami": "a", "region": "r"}
        defaults.update(properties)
        return Node(id=node_id, provider="AWS", resource_type=resource_type, label=node_id,
                    properties=defaults)

    def test_valid_snapshot_has_no_problems(self, taxonomy):
        snapshot = GraphSnapshot(nodes=[self.node("a"), self.node("b")],
                                 edges=[Edge(id="e", source="a", target="b")])

        assert find_snapshot_problems(snapshot, taxonomy) == []

    def test_reports_each_problem(self, taxonomy):
        snapshot = GraphSnapshot(
            nodes=[
                self.node("a"),
                self.node("a"),
                Node(id="x", provider="AWS", resource_type="Mainframe", label="x"),
                Node(id="y", provider="AWS", resource_type="EC2", label="y"),
            ],
            edges=[
                Edge(id="loop", source="a", target="a"),
                Edge(id="dangling", source="a", target="ghost"),
            ],
        )

        problems = find_snapshot_problems(snapshot, taxonomy)

        assert len(problems) == 5
        assert any("duplicate node id" in p for p in problems)
        assert any("unknown resource type" in p for p in problems)
        assert any("missing properties" in p for p in problems)
        assert any("self-loop" in p for p in problems)
        assert any("missing node" in p for p in problems)

    def test_duplicate_pairs_reported(self, taxonomy):
        snapshot = GraphSnapshot(
            nodes=[self.node("a"), self.node("b")],
            edges=[Edge(id="e1", source="a", target="b"), Edge(id="e2", source="a", target="b")],
        )

        assert len(find_snapshot_problems(snapshot, taxonomy)) == 1
