"""
Shared data models for ArchCanvas.
"""

from .base import BaseModel, TimestampMixin, next_timestamp, utc_now
from .graph import ConnectionKind, Edge, GraphSnapshot, Node, Position

__all__ = [
    # Graph models
    "ConnectionKind",
    "Edge",
    "GraphSnapshot",
    "Node",
    "Position",
    # Base models
    "BaseModel",
    "TimestampMixin",
    "next_timestamp",
    "utc_now",
]
