"""
Graph Model: the canonical in-memory node/edge graph.

Backed by a ``networkx.DiGraph``. Node records hang off graph nodes under the
``record`` attribute, edge records off graph edges; an edge-id index keeps
edges addressable and in insertion order. ``DiGraph`` holds at most one edge
per ordered pair, which is exactly the duplicate-edge rule.

Every public mutation either completes or raises before touching state.
"""

import uuid
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

import networkx as nx

from ...shared import (
    get_logger,
    ConnectionKind, Edge, GraphSnapshot, Node, Position,
    DuplicateEdge, EditorError, NodeNotFound, SelfLoopNotAllowed, SnapshotIntegrityError,
)
from ..taxonomy import ResourceCategory, ResourceTaxonomy, get_taxonomy

RECORD = "record"


def find_snapshot_problems(snapshot: GraphSnapshot, taxonomy: ResourceTaxonomy) -> List[str]:
    """
    List every invariant the snapshot breaks; an empty list means installable.

    Checks unique ids, taxonomy membership, template keys, and that edges
    reference existing nodes without self-loops or duplicate ordered pairs.
    """
    problems: List[str] = []
    node_ids: Set[str] = set()

    for node in snapshot.nodes:
        if node.id in node_ids:
            problems.append(f"duplicate node id '{node.id}'")
            continue
        node_ids.add(node.id)
        if (node.provider, node.resource_type) not in taxonomy:
            problems.append(
                f"node '{node.id}' has unknown resource type '{node.provider}/{node.resource_type}'"
            )
            continue
        template_keys = taxonomy.defaults_for(node.provider, node.resource_type).keys()
        missing = [key for key in template_keys if key not in node.properties]
        if missing:
            problems.append(f"node '{node.id}' is missing properties {missing}")

    edge_ids: Set[str] = set()
    pairs: Set[Tuple[str, str]] = set()
    for edge in snapshot.edges:
        if edge.id in edge_ids:
            problems.append(f"duplicate edge id '{edge.id}'")
            continue
        edge_ids.add(edge.id)
        if edge.source not in node_ids or edge.target not in node_ids:
            problems.append(f"edge '{edge.id}' references a missing node")
        elif edge.source == edge.target:
            problems.append(f"edge '{edge.id}' is a self-loop")
        elif (edge.source, edge.target) in pairs:
            problems.append(f"edge '{edge.id}' duplicates {edge.source}->{edge.target}")
        else:
            pairs.add((edge.source, edge.target))

    return problems


class GraphModel:
    """
    Canonical graph of nodes and edges.

    Only the interaction controller calls the mutating operations. Readers
    get deep copies, so the stored records cannot be changed behind the
    model's back.
    """

    def __init__(self, taxonomy: Optional[ResourceTaxonomy] = None):
        self.logger = get_logger(__name__)
        self.taxonomy = taxonomy or get_taxonomy()

        self._graph = nx.DiGraph()
        self._edge_index: Dict[str, Tuple[str, str]] = {}
        # Every id handed out or installed this session; never reissued
        self._issued_ids: Set[str] = set()

    # ========== Queries ==========

    def __contains__(self, node_id: str) -> bool:
        return self._graph.has_node(node_id)

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return len(self._edge_index)

    def has_node(self, node_id: str) -> bool:
        return self._graph.has_node(node_id)

    def get_node(self, node_id: str) -> Node:
        return self._node_record(node_id).model_copy(deep=True)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        pair = self._edge_index.get(edge_id)
        if pair is None:
            return None
        return self._graph.edges[pair][RECORD].model_copy(deep=True)

    def nodes(self) -> Iterator[Node]:
        for _, record in self._graph.nodes(data=RECORD):
            yield record.model_copy(deep=True)

    def edges(self) -> Iterator[Edge]:
        for pair in self._edge_index.values():
            yield self._graph.edges[pair][RECORD].model_copy(deep=True)

    def edges_for_node(self, node_id: str) -> List[Edge]:
        """Edges touching ``node_id`` in insertion order."""
        if not self._graph.has_node(node_id):
            raise NodeNotFound(node_id)
        return [edge for edge in self.edges() if edge.touches(node_id)]

    def category_of_node(self, node_id: str) -> ResourceCategory:
        record = self._node_record(node_id)
        return self.taxonomy.category_of(record.provider, record.resource_type)

    # ========== Node mutations ==========

    def add_node(self,
                 provider: str,
                 resource_type: str,
                 position: Union[Position, Tuple[float, float], None] = None) -> Node:
        """
        Create a node seeded from the taxonomy template.

        Raises:
            UnknownResourceType: if ``(provider, resource_type)`` is not in the catalog
        """
        entry = self.taxonomy.lookup(provider, resource_type)

        node = Node(
            id=self._allocate_id(entry.name),
            provider=entry.provider.value,
            resource_type=entry.name,
            label=entry.name,
            position=_as_position(position),
            properties=entry.default_properties(),
        )
        self._graph.add_node(node.id, **{RECORD: node})

        self.logger.debug(f"Added node {node.id} ({entry.key})")
        return node.model_copy(deep=True)

    def remove_node(self, node_id: str) -> Set[str]:
        """
        Remove a node and every edge touching it.

        Returns:
            Ids of the edges removed by the cascade; empty when the node is absent
        """
        if not self._graph.has_node(node_id):
            return set()

        touching = list(self._graph.in_edges(node_id)) + list(self._graph.out_edges(node_id))
        removed_edge_ids = {self._graph.edges[pair][RECORD].id for pair in touching}
        for edge_id in removed_edge_ids:
            del self._edge_index[edge_id]
        self._graph.remove_node(node_id)

        self.logger.debug(f"Removed node {node_id} and {len(removed_edge_ids)} edges")
        return removed_edge_ids

    def rename_node(self, node_id: str, label: str) -> Node:
        record = self._node_record(node_id)
        record.label = label
        return record.model_copy(deep=True)

    def set_property(self, node_id: str, key: str, value: str) -> Node:
        """
        Set one configuration value on a node.

        Edits are eager and unvalidated; this is the single place a
        property validation layer would go.
        """
        record = self._node_record(node_id)
        record.properties = {**record.properties, key: value}
        return record.model_copy(deep=True)

    def move_node(self, node_id: str, position: Union[Position, Tuple[float, float]]) -> Node:
        record = self._node_record(node_id)
        record.position = _as_position(position)
        return record.model_copy(deep=True)

    # ========== Edge mutations ==========

    def add_edge(self,
                 source_id: str,
                 target_id: str,
                 kind: Union[ConnectionKind, str] = ConnectionKind.NETWORK) -> Edge:
        """
        Connect two existing nodes.

        Raises:
            SelfLoopNotAllowed: if ``source_id == target_id``
            NodeNotFound: if either endpoint is absent
            DuplicateEdge: if the ordered pair is already connected
        """
        try:
            kind = ConnectionKind(kind)
        except ValueError:
            raise EditorError(f"Unknown connection kind '{kind}'")
        if source_id == target_id:
            raise SelfLoopNotAllowed(source_id)
        for node_id in (source_id, target_id):
            if not self._graph.has_node(node_id):
                raise NodeNotFound(node_id)
        if self._graph.has_edge(source_id, target_id):
            raise DuplicateEdge(source_id, target_id)

        edge = Edge(id=self._allocate_id("edge"), source=source_id, target=target_id, kind=kind)
        self._graph.add_edge(source_id, target_id, **{RECORD: edge})
        self._edge_index[edge.id] = (source_id, target_id)

        self.logger.debug(f"Added edge {edge.id}: {source_id} -> {target_id}")
        return edge.model_copy(deep=True)

    def remove_edge(self, edge_id: str) -> bool:
        """Remove an edge; returns False when it was already absent."""
        pair = self._edge_index.pop(edge_id, None)
        if pair is None:
            return False
        self._graph.remove_edge(*pair)
        return True

    # ========== Whole-graph operations ==========

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(nodes=list(self.nodes()), edges=list(self.edges()))

    def restore(self, snapshot: GraphSnapshot) -> None:
        """
        Replace the whole graph with ``snapshot``.

        The snapshot is checked first; on any problem nothing changes.

        Raises:
            SnapshotIntegrityError: if the snapshot breaks a graph invariant
        """
        problems = find_snapshot_problems(snapshot, self.taxonomy)
        if problems:
            raise SnapshotIntegrityError("Snapshot cannot be installed: " + "; ".join(problems))

        graph = nx.DiGraph()
        edge_index: Dict[str, Tuple[str, str]] = {}
        for node in snapshot.nodes:
            graph.add_node(node.id, **{RECORD: node.model_copy(deep=True)})
        for edge in snapshot.edges:
            graph.add_edge(edge.source, edge.target, **{RECORD: edge.model_copy(deep=True)})
            edge_index[edge.id] = (edge.source, edge.target)

        self._graph = graph
        self._edge_index = edge_index
        self._issued_ids.update(graph.nodes)
        self._issued_ids.update(edge_index)

        self.logger.info(
            f"Restored graph with {snapshot.node_count} nodes and {snapshot.edge_count} edges"
        )

    def clear(self) -> None:
        self._graph = nx.DiGraph()
        self._edge_index = {}

    # ========== Internals ==========

    def _node_record(self, node_id: str) -> Node:
        if not self._graph.has_node(node_id):
            raise NodeNotFound(node_id)
        return self._graph.nodes[node_id][RECORD]

    def _allocate_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}-{uuid.uuid4().hex[:8]}"
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate


def _as_position(position: Union[Position, Tuple[float, float], None]) -> Position:
    if position is None:
        return Position()
    if isinstance(position, Position):
        return position.model_copy()
    x, y = position
    return Position(x=x, y=y)
