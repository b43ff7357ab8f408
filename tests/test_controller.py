"""
Tests for the interaction controller state machine.
"""

import pytest

from archcanvas.shared import Edge, GraphSnapshot, Node, Settings, get_metrics
from archcanvas.services.editor import (
    ConnectingEdge,
    DraggingNewNode,
    EditingLabel,
    Idle,
    InteractionController,
    NodeSelected,
    NoticeLevel,
)

from conftest import connect, place


class TestPlacement:
    """Catalog drag and drop."""

    def test_drag_and_drop_creates_node(self, controller):
        start = controller.catalog_drag_start({"provider": "AWS", "resource_type": "EC2"})
        assert isinstance(start.state, DraggingNewNode)

        result = controller.drop_on_canvas((120, 80))

        assert result.accepted
        assert isinstance(controller.state, Idle)
        assert result.node.properties["instance_type"] == "t2.micro"
        assert controller.node_count == 1

    def test_camel_case_payload_accepted(self, controller):
        controller.catalog_drag_start({"provider": "Kubernetes", "resourceType": "Service"})
        node = controller.drop_on_canvas((0, 0)).node

        assert node.properties == {"type": "ClusterIP", "port": "80"}

    @pytest.mark.parametrize("payload", [
        {"provider": "AWS", "resource_type": "Mainframe"},
        {"provider": "AWS"},
        "AWS/EC2",
        None,
    ])
    def test_invalid_payload_aborts_silently(self, controller, payload):
        result = controller.catalog_drag_start(payload)

        assert not result.accepted
        assert result.notice is None
        assert isinstance(controller.state, Idle)
        assert controller.node_count == 0
        assert not controller.notices

    def test_drop_outside_canvas_cancels(self, controller):
        controller.catalog_drag_start({"provider": "AWS", "resource_type": "S3"})

        controller.drop_outside_canvas()

        assert isinstance(controller.state, Idle)
        assert controller.node_count == 0

    def test_drop_without_drag_is_ignored(self, controller):
        result = controller.drop_on_canvas((0, 0))

        assert not result.accepted
        assert controller.node_count == 0

    def test_drag_from_selection(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)

        controller.catalog_drag_start({"provider": "AWS", "resource_type": "RDS"})

        assert isinstance(controller.state, DraggingNewNode)


class TestConnecting:
    """Connection drags from node handles."""

    def test_compute_to_database_connects(self, controller):
        web = place(controller, "AWS", "EC2")
        db = place(controller, "AWS", "RDS")

        result = connect(controller, web.id, db.id)

        assert result.accepted
        assert result.edge.source == web.id
        assert controller.edge_count == 1
        assert isinstance(controller.state, Idle)

    def test_storage_to_database_rejected_by_policy(self, controller):
        bucket = place(controller, "AWS", "S3")
        db = place(controller, "AWS", "RDS")

        result = connect(controller, bucket.id, db.id)

        assert not result.accepted
        assert result.notice.code == "invalid_connection"
        assert result.notice.level == NoticeLevel.WARNING
        assert controller.edge_count == 0
        assert isinstance(controller.state, Idle)

    def test_release_over_empty_canvas_creates_nothing(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.pointer_down_on_node_handle(node.id)
        assert isinstance(controller.state, ConnectingEdge)

        controller.pointer_up_on_empty_canvas()

        assert controller.edge_count == 0
        assert isinstance(controller.state, Idle)

    def test_release_over_source_is_self_loop(self, controller):
        node = place(controller, "AWS", "VPC")

        result = connect(controller, node.id, node.id)

        assert result.notice.code == "self_loop_not_allowed"
        assert controller.edge_count == 0

    def test_duplicate_connection_rejected(self, controller):
        web = place(controller, "AWS", "EC2")
        db = place(controller, "AWS", "RDS")
        connect(controller, web.id, db.id)

        result = connect(controller, web.id, db.id)

        assert result.notice.code == "duplicate_edge"
        assert controller.edge_count == 1

    def test_handle_on_missing_node(self, controller):
        result = controller.pointer_down_on_node_handle("ghost")

        assert result.notice.code == "node_not_found"
        assert isinstance(controller.state, Idle)

    def test_edge_kind_is_recorded(self, controller):
        web = place(controller, "AWS", "EC2")
        db = place(controller, "AWS", "RDS")

        result = connect(controller, web.id, db.id, kind="data")

        assert result.edge.kind == "data"


class TestSelectionAndEditing:
    """Selection, label editing and property changes."""

    def test_click_selects(self, controller):
        node = place(controller, "AWS", "EC2")

        controller.click_node(node.id)

        assert controller.state == NodeSelected(node_id=node.id)
        assert controller.selected_node().id == node.id

    def test_rename_then_delete_leaves_empty_graph(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)
        controller.click_node(node.id, on_label=True)
        assert isinstance(controller.state, EditingLabel)

        result = controller.commit_label("Web Server")
        assert result.node.label == "Web Server"
        assert controller.state == NodeSelected(node_id=node.id)

        controller.delete_selected()

        snapshot = controller.snapshot()
        assert snapshot.node_count == 0
        assert snapshot.edge_count == 0

    def test_blank_label_rejected(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)
        controller.click_node(node.id, on_label=True)

        result = controller.commit_label("   ")

        assert result.notice.code == "empty_label"
        assert controller.get_node(node.id).label == "EC2"
        assert controller.state == NodeSelected(node_id=node.id)

    def test_cancel_discards_label_edit(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)
        controller.click_node(node.id, on_label=True)

        controller.cancel()

        assert controller.state == NodeSelected(node_id=node.id)
        assert controller.get_node(node.id).label == "EC2"

    def test_click_canvas_discards_label_edit(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)
        controller.click_node(node.id, on_label=True)

        controller.click_canvas()

        assert isinstance(controller.state, Idle)

    def test_click_other_node_moves_selection(self, controller):
        first = place(controller, "AWS", "EC2")
        second = place(controller, "AWS", "RDS")
        controller.click_node(first.id)

        controller.click_node(second.id)

        assert controller.state == NodeSelected(node_id=second.id)

    def test_property_change_is_applied_immediately(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)

        result = controller.change_property("instance_type", "m5.large")

        assert result.accepted
        assert controller.get_node(node.id).properties["instance_type"] == "m5.large"

    def test_property_change_without_selection_is_ignored(self, controller):
        place(controller, "AWS", "EC2")

        result = controller.change_property("instance_type", "m5.large")

        assert not result.accepted
        assert result.notice is None

    def test_blank_property_key_rejected(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)

        result = controller.change_property(" ", "x")

        assert result.notice.code == "empty_property_key"

    def test_move_node(self, controller):
        node = place(controller, "AWS", "EC2", (0, 0))

        result = controller.move_node(node.id, (40, 50))

        assert result.node.position.x == 40
        assert result.node.position.y == 50


class TestDeletion:
    """Node and edge deletion, clearing the canvas."""

    def test_delete_selected_cascades_edges(self, controller):
        web = place(controller, "AWS", "EC2")
        db = place(controller, "AWS", "RDS")
        vpc = place(controller, "AWS", "VPC")
        e1 = connect(controller, web.id, db.id).edge
        e2 = connect(controller, vpc.id, web.id).edge
        controller.click_node(web.id)

        result = controller.delete_selected()

        assert result.removed_edge_ids == {e1.id, e2.id}
        assert controller.edge_count == 0
        assert isinstance(controller.state, Idle)

    def test_deleted_node_cannot_be_connected(self, controller):
        web = place(controller, "AWS", "EC2")
        db = place(controller, "AWS", "RDS")
        controller.click_node(web.id)
        controller.delete_selected()

        result = controller.pointer_down_on_node_handle(web.id)
        assert result.notice.code == "node_not_found"

        controller.pointer_down_on_node_handle(db.id)
        result = controller.pointer_up_on_node(web.id)
        assert result.notice.code == "node_not_found"

    def test_delete_edge(self, controller):
        web = place(controller, "AWS", "EC2")
        db = place(controller, "AWS", "RDS")
        edge = connect(controller, web.id, db.id).edge

        assert controller.delete_edge(edge.id).removed_edge_ids == {edge.id}
        assert controller.delete_edge(edge.id).removed_edge_ids == frozenset()

    def test_clear_canvas_from_any_state(self, controller):
        web = place(controller, "AWS", "EC2")
        place(controller, "AWS", "RDS")
        controller.pointer_down_on_node_handle(web.id)

        controller.clear_canvas()

        assert controller.node_count == 0
        assert isinstance(controller.state, Idle)


class TestSnapshots:
    """Installing snapshots after load or import."""

    def test_install_snapshot_replaces_graph(self, controller, settings):
        source = InteractionController(settings=settings)
        a = place(source, "AWS", "EC2")
        b = place(source, "AWS", "RDS")
        connect(source, a.id, b.id)
        node = place(controller, "GCP", "Compute")
        controller.click_node(node.id)

        result = controller.install_snapshot(source.snapshot())

        assert result.accepted
        assert controller.snapshot() == source.snapshot()
        assert isinstance(controller.state, Idle)

    def test_bad_snapshot_leaves_graph_and_state(self, controller):
        node = place(controller, "AWS", "EC2")
        controller.click_node(node.id)
        before = controller.snapshot()
        bad = GraphSnapshot(
            nodes=[Node(id="x", provider="AWS", resource_type="Mainframe", label="x")],
            edges=[Edge(id="e", source="x", target="y")],
        )

        result = controller.install_snapshot(bad)

        assert result.notice.level == NoticeLevel.ERROR
        assert result.notice.code == "snapshot_integrity_error"
        assert controller.snapshot() == before
        assert controller.state == NodeSelected(node_id=node.id)


class TestNotices:
    """Notice delivery and bookkeeping."""

    def test_on_notice_callback(self, settings, mocker):
        callback = mocker.Mock()
        controller = InteractionController(settings=settings, on_notice=callback)

        controller.pointer_down_on_node_handle("ghost")

        callback.assert_called_once()
        assert callback.call_args.args[0].code == "node_not_found"

    def test_notices_are_bounded(self):
        settings = Settings(_env_file=None, max_notices=2)
        controller = InteractionController(settings=settings)
        for _ in range(5):
            controller.pointer_down_on_node_handle("ghost")

        assert len(controller.notices) == 2
        assert len(controller.dismiss_notices()) == 2
        assert not controller.notices

    def test_gesture_metrics(self, controller):
        place(controller, "AWS", "EC2")
        controller.drop_on_canvas((0, 0))

        metrics = get_metrics()
        assert metrics.get_counter("editor_gesture_accepted") == 2
        assert metrics.get_counter("editor_gesture_ignored") == 1

    def test_graph_size_gauges(self, controller):
        web = place(controller, "AWS", "EC2")
        db = place(controller, "AWS", "RDS")
        connect(controller, web.id, db.id)

        snapshot = get_metrics().get_all_metrics()
        assert snapshot["gauges"] == {"graph_nodes": 2, "graph_edges": 1}
        assert snapshot["counters"]["editor_gesture_accepted"] == 6
