"""
Editor states, notices and gesture results.

Each state is an immutable value carrying only the data that state needs,
so combinations such as "dragging a new node while editing a label" cannot
be represented at all.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Union

from ...shared import ArchCanvasError, Edge, Node


@dataclass(frozen=True)
class Idle:
    """Nothing in progress."""
    name = "idle"


@dataclass(frozen=True)
class DraggingNewNode:
    """A catalog item is picked up but not dropped yet."""
    provider: str
    resource_type: str
    name = "dragging_new_node"


@dataclass(frozen=True)
class ConnectingEdge:
    """Pointer went down on a node's connection handle."""
    source_id: str
    name = "connecting_edge"


@dataclass(frozen=True)
class NodeSelected:
    """A node has focus; the property panel edits it."""
    node_id: str
    name = "node_selected"


@dataclass(frozen=True)
class EditingLabel:
    """The focused node's label is being edited in place."""
    node_id: str
    name = "editing_label"


EditorState = Union[Idle, DraggingNewNode, ConnectingEdge, NodeSelected, EditingLabel]

IDLE = Idle()


def focused_node_id(state: EditorState) -> Optional[str]:
    """Node the property panel is bound to, if any."""
    if isinstance(state, (NodeSelected, EditingLabel)):
        return state.node_id
    return None


class NoticeLevel(str, Enum):
    """Severity of a user-facing notice."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A dismissible, non-blocking message for the hosting screen."""

    level: NoticeLevel
    code: str
    message: str

    @classmethod
    def from_error(cls, error: ArchCanvasError, level: NoticeLevel = NoticeLevel.WARNING) -> "Notice":
        return cls(level=level, code=error.code, message=error.message)


@dataclass(frozen=True)
class InteractionResult:
    """Outcome of one event delivered to the controller."""

    gesture: str
    accepted: bool
    state: EditorState
    notice: Optional[Notice] = None
    node: Optional[Node] = None
    edge: Optional[Edge] = None
    removed_edge_ids: FrozenSet[str] = field(default_factory=frozenset)
