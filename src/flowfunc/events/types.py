"""Events emitted to the host as property changes."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class EditorStatus(Enum):
    """Which side last changed the graph.

    Values:
        CLIENT: The user edited the graph in the editor.
        SERVER: The host pushed new nodes; the editor must remount.
    """

    CLIENT = "client"
    SERVER = "server"


def _now() -> float:
    return time.time()


@dataclass(frozen=True)
class BaseEvent:
    """Base class for host-facing events.

    Attributes:
        timestamp: Unix timestamp when the event was created.
    """

    timestamp: float = field(default_factory=_now, compare=False)

    def to_props(self) -> dict[str, Any]:
        """Property dict delivered to the host."""
        raise NotImplementedError


@dataclass(frozen=True)
class EditorChanged(BaseEvent):
    """Emitted after any engine-driven graph or comment change.

    Attributes:
        nodes: Current nodes reported by the engine.
        comments: Current comments reported by the engine.
    """

    nodes: Mapping[str, Any] = field(default_factory=dict)
    comments: Mapping[str, Any] = field(default_factory=dict)
    editor_status: EditorStatus = EditorStatus.CLIENT

    def to_props(self) -> dict[str, Any]:
        return {
            "editor_status": self.editor_status.value,
            "nodes": dict(self.nodes),
            "comments": dict(self.comments),
        }


@dataclass(frozen=True)
class SelectionChanged(BaseEvent):
    """Emitted after every click on the editor, even when nothing is selected."""

    selected_nodes: tuple[str, ...] = ()

    def to_props(self) -> dict[str, Any]:
        return {"selected_nodes": list(self.selected_nodes)}


@dataclass(frozen=True)
class NodeDoubleClicked(BaseEvent):
    """Emitted when a node is double clicked."""

    node_id: str = ""

    def to_props(self) -> dict[str, Any]:
        return {"double_clicked_node": self.node_id}


@dataclass(frozen=True)
class PropToggled(BaseEvent):
    """Emitted when an editor toolbar button flips a boolean prop."""

    prop: str = ""
    value: bool = False

    def to_props(self) -> dict[str, Any]:
        return {self.prop: self.value}


Event = Union[EditorChanged, SelectionChanged, NodeDoubleClicked, PropToggled]
