"""
Graph Model for ArchCanvas.

The canonical in-memory representation of nodes and edges with
consistency-preserving mutations and whole-graph snapshot/restore.
"""

from .graph import GraphModel, find_snapshot_problems

__all__ = [
    "GraphModel",
    "find_snapshot_problems",
]
