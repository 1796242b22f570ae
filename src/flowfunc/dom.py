"""Minimal DOM interface used by the selection tracker and status applier.

The editor container is provided by the host (a browser bridge, a test
double, ...). Only the operations below are required.
"""

from __future__ import annotations

from collections.abc import Callable, MutableSet
from dataclasses import dataclass
from typing import Protocol

NODE_ID_ATTRIBUTE = "data-node-id"
NODE_WRAPPER_PREFIX = "Node_wrapper"
ACTIVE_CLASS = "active"


class Element(Protocol):
    """A DOM element."""

    @property
    def parent(self) -> Element | None: ...

    @property
    def classes(self) -> MutableSet[str]: ...

    def get_attribute(self, name: str) -> str | None: ...


class Container(Protocol):
    """The element hosting the graph engine."""

    @property
    def client_width(self) -> float: ...

    @property
    def client_height(self) -> float: ...

    def find_node(self, node_id: str) -> Element | None:
        """Element whose ``data-node-id`` equals *node_id*, if any."""
        ...

    def add_event_listener(self, kind: str, handler: Callable[[DomEvent], None]) -> None: ...

    def get_attribute(self, name: str) -> str | None: ...

    def set_attribute(self, name: str, value: str) -> None: ...


@dataclass(frozen=True)
class DomEvent:
    """A delegated mouse event."""

    target: Element | None
    ctrl_key: bool = False
    meta_key: bool = False

    @property
    def modifier(self) -> bool:
        return self.ctrl_key or self.meta_key


def is_node_wrapper(element: Element) -> bool:
    return any(cls.startswith(NODE_WRAPPER_PREFIX) for cls in element.classes)


def closest_node(element: Element | None) -> Element | None:
    """Nearest ancestor-or-self that wraps a node."""
    current = element
    while current is not None:
        if is_node_wrapper(current):
            return current
        current = current.parent
    return None
