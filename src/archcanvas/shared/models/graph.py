"""
Graph data models for ArchCanvas.

These models are the value objects shared by every service:
- graph_model: holds them in memory and hands out copies
- editor: returns them from completed gestures
- persistence: stores and exports them as JSON
"""

from enum import Enum
from typing import Dict, List

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from .base import BaseModel


class ConnectionKind(str, Enum):
    """Relationship an edge represents. Informational only."""
    NETWORK = "network"
    DATA = "data"
    DEPENDENCY = "dependency"


class Position(BaseModel):
    """A point in canvas space."""

    model_config = ConfigDict(extra="ignore")

    x: float = Field(default=0.0, description="Horizontal canvas coordinate")
    y: float = Field(default=0.0, description="Vertical canvas coordinate")


class Node(BaseModel):
    """
    A single cloud resource placed on the canvas.

    ``properties`` is an ordered string-to-string mapping seeded from the
    taxonomy template for ``(provider, resource_type)``.
    """

    # Documents written by newer editors may carry extra fields
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique identifier within the graph")
    provider: str = Field(..., description="Provider namespace, e.g. 'AWS'")
    resource_type: str = Field(
        ...,
        validation_alias=AliasChoices("resource_type", "resourceType", "type"),
        description="Resource type within the provider, e.g. 'EC2'",
    )
    label: str = Field(..., description="User-editable display name")
    position: Position = Field(default_factory=Position, description="Canvas position")
    properties: Dict[str, str] = Field(default_factory=dict, description="Resource configuration")

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        if not v or not v.strip():
            raise ValueError("Node id cannot be empty")
        return v

    @field_validator('properties', mode='before')
    @classmethod
    def stringify_properties(cls, v):
        """Property values are always strings; numbers from old exports are coerced."""
        if isinstance(v, dict):
            return {str(key): "" if value is None else str(value) for key, value in v.items()}
        return v


class Edge(BaseModel):
    """A directed connection between two nodes of the same graph."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique identifier within the graph")
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    kind: ConnectionKind = Field(
        default=ConnectionKind.NETWORK,
        validation_alias=AliasChoices("kind", "connection_kind", "connectionKind"),
        description="Relationship kind",
    )

    def touches(self, node_id: str) -> bool:
        """True when either endpoint is ``node_id``."""
        return self.source == node_id or self.target == node_id


class GraphSnapshot(BaseModel):
    """
    Complete, self-contained state of a graph at one instant.

    Nodes and edges keep insertion order so that two snapshots of the same
    graph compare equal.
    """

    model_config = ConfigDict(extra="ignore")

    nodes: List[Node] = Field(default_factory=list, description="All nodes")
    edges: List[Edge] = Field(default_factory=list, description="All edges")

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges
