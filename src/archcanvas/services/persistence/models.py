"""
Data models for the Persistence Manager.

Provides the stored architecture record, list summaries, the portable
export document and the outcome reported for background saves.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from ...shared.models.base import BaseModel, TimestampMixin
from ...shared.models.graph import Edge, GraphSnapshot, Node

EXPORT_FORMAT_VERSION = 1


class Architecture(TimestampMixin):
    """
    A named, persisted snapshot of a node/edge graph.

    Superseded wholesale on every save; there is no partial update.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique architecture identifier")
    name: str = Field(..., description="Display name")
    owner_id: str = Field(..., description="Owner reference")
    nodes: List[Node] = Field(default_factory=list, description="Graph nodes")
    edges: List[Edge] = Field(default_factory=list, description="Graph edges")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Architecture name cannot be empty")
        return v.strip()

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def snapshot(self) -> GraphSnapshot:
        """Graph content as a snapshot ready for ``install_snapshot``."""
        return GraphSnapshot(
            nodes=[node.model_copy(deep=True) for node in self.nodes],
            edges=[edge.model_copy(deep=True) for edge in self.edges],
        )

    def summary(self) -> "ArchitectureSummary":
        return ArchitectureSummary(
            id=self.id,
            name=self.name,
            updated_at=self.updated_at,
            node_count=self.node_count,
            edge_count=self.edge_count,
        )


class ArchitectureSummary(BaseModel):
    """One row of the saved-architectures list."""

    id: str = Field(..., description="Architecture identifier")
    name: str = Field(..., description="Display name")
    updated_at: datetime = Field(..., description="Last save time")
    node_count: int = Field(default=0, ge=0, description="Number of nodes")
    edge_count: int = Field(default=0, ge=0, description="Number of edges")


class ExportDocument(BaseModel):
    """
    Portable export file contents.

    Field names are stable; newer editors may only add fields, which older
    ones ignore on import.
    """

    model_config = ConfigDict(extra="ignore")

    format_version: int = Field(default=EXPORT_FORMAT_VERSION, ge=1, description="Export format version")
    name: str = Field(default="", description="Architecture name at export time")
    nodes: List[Node] = Field(default_factory=list, description="Graph nodes")
    edges: List[Edge] = Field(default_factory=list, description="Graph edges")

    @classmethod
    def from_snapshot(cls, snapshot: GraphSnapshot, name: str) -> "ExportDocument":
        return cls(name=name, nodes=snapshot.nodes, edges=snapshot.edges)

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(nodes=list(self.nodes), edges=list(self.edges))


class SaveOutcome(BaseModel):
    """Result reported asynchronously for a fire-and-forget save."""

    success: bool = Field(..., description="Whether the save was committed")
    architecture: Optional[Architecture] = Field(default=None, description="Saved record")
    error_code: Optional[str] = Field(default=None, description="Error code if failed")
    error_message: Optional[str] = Field(default=None, description="Error message if failed")
