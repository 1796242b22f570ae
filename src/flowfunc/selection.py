"""Node selection from delegated click events.

Selection is a pure reducer over :class:`ClickEvent` values. The
:class:`SelectionTracker` binds it to a DOM container: it resolves click
targets to node ids, keeps the ``active`` class in sync, and emits the
selection to the host after every click.

Rules:
    plain click on a node       selection becomes exactly that node
    plain click on empty space  selection becomes empty
    modifier click on a node    node is added (never removed)
    modifier click elsewhere    selection unchanged
    double click on a node      NodeDoubleClicked; selection unchanged
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from flowfunc.dom import (
    ACTIVE_CLASS,
    NODE_ID_ATTRIBUTE,
    Container,
    DomEvent,
    Element,
    closest_node,
)
from flowfunc.events import EventDispatcher, NodeDoubleClicked, SelectionChanged

logger = logging.getLogger(__name__)

# Set on the container once handlers are registered
BOUND_ATTRIBUTE = "data-event-click"


@dataclass(frozen=True)
class SelectionState:
    """Selected node ids in the order they were selected."""

    selected: tuple[str, ...] = ()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.selected

    def __len__(self) -> int:
        return len(self.selected)

    def with_node(self, node_id: str) -> SelectionState:
        if node_id in self.selected:
            return self
        return SelectionState(self.selected + (node_id,))


@dataclass(frozen=True)
class ClickEvent:
    """A click already resolved to the node it hit (None for empty space)."""

    node_id: str | None
    modifier: bool = False


def reduce_click(state: SelectionState, event: ClickEvent) -> SelectionState:
    """Next selection after a click."""
    base = state if event.modifier else SelectionState()
    if event.node_id is None:
        return base
    return base.with_node(event.node_id)


def reduce_double_click(event: ClickEvent) -> str | None:
    """Node id a double click reports, if it hit a node."""
    return event.node_id


def _node_id(element: Element | None) -> str | None:
    if element is None:
        return None
    return element.get_attribute(NODE_ID_ATTRIBUTE)


class SelectionTracker:
    """Keeps the selection of one container and reports it to the host.

    Args:
        container: Element hosting the engine
        dispatcher: Receives SelectionChanged and NodeDoubleClicked events
        known_nodes: Returns the host's current node map; used to clear the
            ``active`` class on a plain click
    """

    def __init__(
        self,
        container: Container,
        dispatcher: EventDispatcher,
        known_nodes: Callable[[], Mapping[str, Any] | None] | None = None,
    ) -> None:
        self.container = container
        self.dispatcher = dispatcher
        self._known_nodes = known_nodes or dict
        self.state = SelectionState()

    def bind(self) -> bool:
        """Register click handlers once per container.

        Returns:
            True if handlers were registered, False if already bound
        """
        if self.container.get_attribute(BOUND_ATTRIBUTE) == "true":
            return False
        self.container.add_event_listener("click", self.handle_click)
        self.container.add_event_listener("dblclick", self.handle_double_click)
        self.container.set_attribute(BOUND_ATTRIBUTE, "true")
        return True

    def handle_click(self, event: DomEvent) -> SelectionState:
        if not event.modifier:
            self._clear_active()

        wrapper = closest_node(event.target)
        node_id = _node_id(wrapper)
        self.state = reduce_click(self.state, ClickEvent(node_id, event.modifier))
        if wrapper is not None and node_id is not None:
            wrapper.classes.add(ACTIVE_CLASS)

        self.dispatcher.emit(SelectionChanged(selected_nodes=self.state.selected))
        return self.state

    def handle_double_click(self, event: DomEvent) -> str | None:
        node_id = reduce_double_click(ClickEvent(_node_id(closest_node(event.target)), event.modifier))
        if node_id is not None:
            self.dispatcher.emit(NodeDoubleClicked(node_id=node_id))
        return node_id

    def _clear_active(self) -> None:
        for node_id in self._known_nodes() or {}:
            element = self.container.find_node(node_id)
            if element is None:
                logger.debug("No element for node '%s' while clearing selection", node_id)
                continue
            element.classes.discard(ACTIVE_CLASS)
