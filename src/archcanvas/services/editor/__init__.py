"""
Interaction Controller for ArchCanvas.

Finite-state machine translating canvas and catalog events into graph
mutations; the only writer of the graph model.
"""

from .controller import InteractionController
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
)

__all__ = [
    "InteractionController",
    "IDLE",
    "ConnectingEdge",
    "DraggingNewNode",
    "EditingLabel",
    "EditorState",
    "Idle",
    "InteractionResult",
    "NodeSelected",
    "Notice",
    "NoticeLevel",
]
