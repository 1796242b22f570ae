"""Host-facing events: prop updates emitted by the editor."""

from flowfunc.events.dispatcher import EventDispatcher
from flowfunc.events.processor import EventProcessor, PropsProcessor, TypedEventProcessor
from flowfunc.events.types import (
    BaseEvent,
    EditorChanged,
    EditorStatus,
    Event,
    NodeDoubleClicked,
    PropToggled,
    SelectionChanged,
)

__all__ = [
    # Event types
    "BaseEvent",
    "EditorChanged",
    "EditorStatus",
    "Event",
    "NodeDoubleClicked",
    "PropToggled",
    "SelectionChanged",
    # Processors
    "EventDispatcher",
    "EventProcessor",
    "PropsProcessor",
    "TypedEventProcessor",
]
