"""Event dispatcher that fans out events to processors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flowfunc.events.processor import EventProcessor

if TYPE_CHECKING:
    from flowfunc.events.types import Event

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Manages a list of event processors and dispatches events to them.

    By default, dispatch is best-effort: a failing processor never breaks
    the editor. With ``strict=True``, exceptions propagate immediately.
    """

    def __init__(
        self,
        processors: list[EventProcessor] | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self._processors: list[EventProcessor] = list(processors) if processors else []
        self._strict = strict

    def add(self, processor: EventProcessor) -> None:
        """Append *processor*; it receives events after those already registered."""
        self._processors.append(processor)

    def emit(self, event: Event) -> None:
        """Send *event* to every processor synchronously."""
        for processor in self._processors:
            try:
                processor.on_event(event)
            except Exception:
                if self._strict:
                    raise
                logger.warning(
                    "EventProcessor %s failed on %s",
                    processor,
                    type(event).__name__,
                    exc_info=True,
                )
