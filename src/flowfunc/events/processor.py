"""Event processor base classes."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flowfunc.events.types import (
        EditorChanged,
        Event,
        NodeDoubleClicked,
        PropToggled,
        SelectionChanged,
    )


# Mapping from event class name to handler method name.
_EVENT_METHOD_MAP: dict[str, str] = {
    "EditorChanged": "on_editor_changed",
    "SelectionChanged": "on_selection_changed",
    "NodeDoubleClicked": "on_node_double_clicked",
    "PropToggled": "on_prop_toggled",
}


class EventProcessor:
    """Base class for event consumers.

    Subclass and override ``on_event`` to receive all events,
    or use ``TypedEventProcessor`` for per-type dispatch.
    """

    def on_event(self, event: Event) -> None:
        """Called for every event. Override in subclasses."""


class TypedEventProcessor(EventProcessor):
    """Dispatches ``on_event`` to typed handler methods automatically.

    Unhandled event types are silently ignored.
    """

    def on_event(self, event: Event) -> None:
        method_name = _EVENT_METHOD_MAP.get(type(event).__name__)
        if method_name is not None:
            method = getattr(self, method_name, None)
            if method is not None:
                method(event)

    def on_editor_changed(self, event: EditorChanged) -> None: ...
    def on_selection_changed(self, event: SelectionChanged) -> None: ...
    def on_node_double_clicked(self, event: NodeDoubleClicked) -> None: ...
    def on_prop_toggled(self, event: PropToggled) -> None: ...


class PropsProcessor(EventProcessor):
    """Forwards each event to the host as a property update.

    Args:
        set_props: Host callback receiving the event's prop dict
    """

    def __init__(self, set_props: Callable[[dict[str, Any]], None]) -> None:
        self._set_props = set_props

    def on_event(self, event: Event) -> None:
        self._set_props(event.to_props())
