"""
Interaction Controller.

A finite-state machine that consumes canvas and catalog events and turns
completed gestures into Graph Model mutations. It is the only writer of the
graph. Every model error is caught here and converted into a notice; after
any event the controller is in a stable state.
"""

from collections import deque
from typing import Any, Callable, Deque, Iterator, List, Mapping, Optional, Tuple, Union

from ...shared import (
    get_logger, get_metrics, get_settings,
    ConnectionKind, Edge, GraphSnapshot, Node, Position, Settings,
    EditorError, NodeNotFound, UnknownResourceType,
)
from ..connection_rules import ConnectionPolicy, policy_from_settings
from ..graph_model import GraphModel
from ..taxonomy import ResourceTaxonomy
from .states import (
    IDLE,
    ConnectingEdge,
    DraggingNewNode,
    EditingLabel,
    EditorState,
    Idle,
    InteractionResult,
    NodeSelected,
    Notice,
    NoticeLevel,
    focused_node_id,
)

PositionLike = Union[Position, Tuple[float, float]]


class InteractionController:
    """
    Editor state machine over one graph.

    States: ``Idle``, ``DraggingNewNode``, ``ConnectingEdge``,
    ``NodeSelected``, ``EditingLabel``. Each event method returns an
    ``InteractionResult``; events that make no sense in the current state
    are ignored and leave the state unchanged.
    """

    def __init__(self,
                 graph: Optional[GraphModel] = None,
                 policy: Optional[ConnectionPolicy] = None,
                 taxonomy: Optional[ResourceTaxonomy] = None,
                 on_notice: Optional[Callable[[Notice], None]] = None,
                 settings: Optional[Settings] = None):
        """
        Initialize the controller.

        Args:
            graph: Graph to edit; a fresh empty graph by default
            policy: Connection policy; the configured default policy by default
            taxonomy: Taxonomy for a fresh graph, ignored when ``graph`` is given
            on_notice: Callback receiving every notice as it is raised
            settings: Settings override, mostly for tests
        """
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.settings = settings or get_settings()

        self._graph = graph or GraphModel(taxonomy)
        self.policy = policy or policy_from_settings(self.settings)
        self.on_notice = on_notice

        self._state: EditorState = IDLE
        self.notices: Deque[Notice] = deque(maxlen=self.settings.max_notices)

    # ========== Read access ==========

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def taxonomy(self) -> ResourceTaxonomy:
        return self._graph.taxonomy

    def snapshot(self) -> GraphSnapshot:
        return self._graph.snapshot()

    def get_node(self, node_id: str) -> Optional[Node]:
        if not self._graph.has_node(node_id):
            return None
        return self._graph.get_node(node_id)

    def nodes(self) -> Iterator[Node]:
        return self._graph.nodes()

    def edges(self) -> Iterator[Edge]:
        return self._graph.edges()

    @property
    def node_count(self) -> int:
        return self._graph.node_count

    @property
    def edge_count(self) -> int:
        return self._graph.edge_count

    def selected_node(self) -> Optional[Node]:
        node_id = focused_node_id(self._state)
        return self.get_node(node_id) if node_id else None

    def icon_for(self, node_id: str) -> str:
        node = self.get_node(node_id)
        if node is None:
            return "default"
        return self.taxonomy.icon_for(node.provider, node.resource_type)

    def dismiss_notices(self) -> List[Notice]:
        """Hand back and clear pending notices."""
        pending = list(self.notices)
        self.notices.clear()
        return pending

    # ========== Placement ==========

    def catalog_drag_start(self, payload: Mapping[str, Any]) -> InteractionResult:
        """
        A catalog item was picked up.

        The payload is ``{"provider": ..., "resource_type": ...}``
        (``resourceType`` also accepted). Payloads that fail taxonomy lookup
        abort the gesture silently.
        """
        gesture = "catalog_drag_start"
        if not isinstance(self._state, (Idle, NodeSelected)):
            return self._ignored(gesture)

        provider, resource_type = _parse_catalog_payload(payload)
        try:
            if provider is None or resource_type is None:
                raise UnknownResourceType(str(provider), str(resource_type))
            entry = self.taxonomy.lookup(provider, resource_type)
        except EditorError as e:
            self.logger.debug(f"Aborted catalog drag with invalid payload: {e.message}")
            self._state = IDLE
            self.metrics.record_gesture(gesture, "aborted")
            return InteractionResult(gesture=gesture, accepted=False, state=self._state)

        self._state = DraggingNewNode(provider=entry.provider.value, resource_type=entry.name)
        return self._accepted(gesture)

    def drop_on_canvas(self, position: PositionLike) -> InteractionResult:
        gesture = "drop_on_canvas"
        state = self._state
        if not isinstance(state, DraggingNewNode):
            return self._ignored(gesture)

        self._state = IDLE
        try:
            node = self._graph.add_node(state.provider, state.resource_type, position)
        except EditorError as e:
            return self._rejected(gesture, e)

        self.logger.info(f"Placed {state.provider}/{state.resource_type} node {node.id}")
        return self._accepted(gesture, node=node)

    def drop_outside_canvas(self) -> InteractionResult:
        gesture = "drop_outside_canvas"
        if not isinstance(self._state, DraggingNewNode):
            return self._ignored(gesture)
        self._state = IDLE
        return self._accepted(gesture)

    # ========== Connecting ==========

    def pointer_down_on_node_handle(self, node_id: str) -> InteractionResult:
        gesture = "pointer_down_on_node_handle"
        if not isinstance(self._state, (Idle, NodeSelected)):
            return self._ignored(gesture)
        if not self._graph.has_node(node_id):
            self._state = IDLE
            return self._rejected(gesture, NodeNotFound(node_id))

        self._state = ConnectingEdge(source_id=node_id)
        return self._accepted(gesture)

    def pointer_up_on_node(self,
                           target_id: str,
                           kind: Union[ConnectionKind, str] = ConnectionKind.NETWORK) -> InteractionResult:
        """
        Finish a connection drag over ``target_id``.

        The policy is consulted before the model; a rejected pair never
        reaches ``add_edge``. Either way the controller returns to Idle.
        """
        gesture = "pointer_up_on_node"
        state = self._state
        if not isinstance(state, ConnectingEdge):
            return self._ignored(gesture)

        self._state = IDLE
        source_id = state.source_id
        try:
            if source_id != target_id:
                self.policy.check(
                    self._graph.category_of_node(source_id),
                    self._graph.category_of_node(target_id),
                )
            edge = self._graph.add_edge(source_id, target_id, kind)
        except EditorError as e:
            return self._rejected(gesture, e)

        self.logger.info(f"Connected {source_id} -> {target_id} ({edge.id})")
        return self._accepted(gesture, edge=edge)

    def pointer_up_on_empty_canvas(self) -> InteractionResult:
        gesture = "pointer_up_on_empty_canvas"
        if not isinstance(self._state, ConnectingEdge):
            return self._ignored(gesture)
        self._state = IDLE
        return self._accepted(gesture)

    # ========== Selection & editing ==========

    def click_node(self, node_id: str, on_label: bool = False) -> InteractionResult:
        """
        A node was clicked.

        Idle selects it. Clicking the label of the already selected node
        starts label editing; clicking another node moves the selection.
        """
        gesture = "click_node"
        state = self._state
        if not isinstance(state, (Idle, NodeSelected, EditingLabel)):
            return self._ignored(gesture)
        if not self._graph.has_node(node_id):
            self._state = IDLE
            return self._rejected(gesture, NodeNotFound(node_id))

        current = focused_node_id(state)
        if current == node_id:
            if isinstance(state, NodeSelected) and on_label:
                self._state = EditingLabel(node_id=node_id)
        else:
            self._state = NodeSelected(node_id=node_id)
        return self._accepted(gesture, node=self._graph.get_node(node_id))

    def click_canvas(self) -> InteractionResult:
        """Click on empty canvas: drop focus, discarding any label edit."""
        gesture = "click_canvas"
        if not isinstance(self._state, (Idle, NodeSelected, EditingLabel)):
            return self._ignored(gesture)
        self._state = IDLE
        return self._accepted(gesture)

    def commit_label(self, label: str) -> InteractionResult:
        gesture = "commit_label"
        state = self._state
        if not isinstance(state, EditingLabel):
            return self._ignored(gesture)

        self._state = NodeSelected(node_id=state.node_id)
        if not label or not label.strip():
            return self._notify(gesture, Notice(
                level=NoticeLevel.WARNING,
                code="empty_label",
                message="Label cannot be empty",
            ))
        try:
            node = self._graph.rename_node(state.node_id, label.strip())
        except EditorError as e:
            self._state = IDLE
            return self._rejected(gesture, e)

        return self._accepted(gesture, node=node)

    def change_property(self, key: str, value: str) -> InteractionResult:
        """
        Property panel field changed; applied immediately.

        Only valid while a node has focus.
        """
        gesture = "change_property"
        node_id = focused_node_id(self._state)
        if node_id is None:
            return self._ignored(gesture)
        if not key or not key.strip():
            return self._notify(gesture, Notice(
                level=NoticeLevel.WARNING,
                code="empty_property_key",
                message="Property name cannot be empty",
            ))
        try:
            node = self._graph.set_property(node_id, key, value)
        except EditorError as e:
            self._state = IDLE
            return self._rejected(gesture, e)

        return self._accepted(gesture, node=node)

    def move_node(self, node_id: str, position: PositionLike) -> InteractionResult:
        """A node was dragged to a new position."""
        gesture = "move_node"
        if not isinstance(self._state, (Idle, NodeSelected)):
            return self._ignored(gesture)
        try:
            node = self._graph.move_node(node_id, position)
        except EditorError as e:
            return self._rejected(gesture, e)
        return self._accepted(gesture, node=node)

    # ========== Deletion ==========

    def delete_selected(self) -> InteractionResult:
        """Delete key or delete button while a node is selected."""
        gesture = "delete_selected"
        state = self._state
        if not isinstance(state, NodeSelected):
            return self._ignored(gesture)

        self._state = IDLE
        removed = self._graph.remove_node(state.node_id)
        self.logger.info(f"Deleted node {state.node_id} with {len(removed)} edges")
        return self._accepted(gesture, removed_edge_ids=frozenset(removed))

    def delete_edge(self, edge_id: str) -> InteractionResult:
        gesture = "delete_edge"
        if not isinstance(self._state, (Idle, NodeSelected)):
            return self._ignored(gesture)
        removed = self._graph.remove_edge(edge_id)
        return self._accepted(gesture, removed_edge_ids=frozenset({edge_id} if removed else ()))

    def clear_canvas(self) -> InteractionResult:
        """Remove everything and return to Idle, whatever was in progress."""
        gesture = "clear_canvas"
        removed = frozenset(edge.id for edge in self._graph.edges())
        self._graph.clear()
        self._state = IDLE
        self.logger.info("Canvas cleared")
        return self._accepted(gesture, removed_edge_ids=removed)

    # ========== Cancel ==========

    def cancel(self) -> InteractionResult:
        """
        Escape.

        Abandons a drag or a connection, discards a label edit (keeping the
        node selected) or drops the selection.
        """
        gesture = "cancel"
        state = self._state
        if isinstance(state, EditingLabel):
            self._state = NodeSelected(node_id=state.node_id)
        else:
            self._state = IDLE
        return self._accepted(gesture)

    # ========== Whole-graph install ==========

    def install_snapshot(self, snapshot: GraphSnapshot) -> InteractionResult:
        """
        Replace the graph with ``snapshot`` atomically.

        Used after a load or an import. On failure the current graph and
        state are left as they were.
        """
        gesture = "install_snapshot"
        try:
            self._graph.restore(snapshot)
        except EditorError as e:
            return self._rejected(gesture, e, level=NoticeLevel.ERROR)

        self._state = IDLE
        return self._accepted(gesture)

    # ========== Internals ==========

    def _accepted(self, gesture: str, **payload) -> InteractionResult:
        self.metrics.record_gesture(gesture, "accepted")
        self.metrics.gauge("graph_nodes", self._graph.node_count)
        self.metrics.gauge("graph_edges", self._graph.edge_count)
        return InteractionResult(gesture=gesture, accepted=True, state=self._state, **payload)

    def _ignored(self, gesture: str) -> InteractionResult:
        self.logger.debug(f"Ignored {gesture} in state {self._state.name}")
        self.metrics.record_gesture(gesture, "ignored")
        return InteractionResult(gesture=gesture, accepted=False, state=self._state)

    def _rejected(self,
                  gesture: str,
                  error: EditorError,
                  level: NoticeLevel = NoticeLevel.WARNING) -> InteractionResult:
        self.logger.warning(f"{gesture} rejected: {error.message}")
        return self._notify(gesture, Notice.from_error(error, level))

    def _notify(self, gesture: str, notice: Notice) -> InteractionResult:
        self.metrics.record_gesture(gesture, "rejected")
        self.notices.append(notice)
        if self.on_notice is not None:
            self.on_notice(notice)
        return InteractionResult(gesture=gesture, accepted=False, state=self._state, notice=notice)


def _parse_catalog_payload(payload: Any) -> Tuple[Optional[str], Optional[str]]:
    if not isinstance(payload, Mapping):
        return None, None
    provider = payload.get("provider")
    resource_type = payload.get("resource_type", payload.get("resourceType"))
    if not isinstance(provider, str) or not isinstance(resource_type, str):
        return None, None
    return provider, resource_type
