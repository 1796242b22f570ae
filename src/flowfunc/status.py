"""Reflect external execution statuses as CSS classes on node elements."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from flowfunc.dom import Container
from flowfunc.exceptions import LookupFailure, LookupKind

logger = logging.getLogger(__name__)


class NodeStatus(Enum):
    """Execution status of a node; the value is the CSS class applied."""

    STARTED = "started"
    QUEUED = "queued"
    DEFERRED = "deferred"
    FINISHED = "finished"
    CANCELED = "canceled"
    STOPPED = "stopped"
    SCHEDULED = "scheduled"
    FAILED = "failed"


STATUS_CLASSES: frozenset[str] = frozenset(s.value for s in NodeStatus)


@dataclass(frozen=True)
class StatusReport:
    """Outcome of one status pass.

    Attributes:
        applied: node id -> status class that was set
        misses: Entries skipped because the node or status was unknown
    """

    applied: Mapping[str, str] = field(default_factory=dict)
    misses: tuple[LookupFailure, ...] = ()


def apply_statuses(
    container: Container,
    status_table: Mapping[str, NodeStatus | str] | None,
) -> StatusReport:
    """Set one status class per node, replacing any previous status class.

    Missing nodes and unknown statuses are skipped and reported, never raised.
    Entries with an empty status are left alone. A None or empty table does
    nothing.
    """
    if not status_table:
        return StatusReport()

    applied: dict[str, str] = {}
    misses: list[LookupFailure] = []
    for node_id, status in status_table.items():
        if not status:
            continue
        try:
            css_class = NodeStatus(status).value
        except ValueError:
            misses.append(LookupFailure(LookupKind.STATUS, str(status)))
            continue

        element = container.find_node(node_id)
        if element is None:
            misses.append(LookupFailure(LookupKind.NODE_ELEMENT, node_id))
            continue

        for stale in STATUS_CLASSES:
            element.classes.discard(stale)
        element.classes.add(css_class)
        applied[node_id] = css_class

    if misses:
        logger.debug("Status pass skipped %d entries: %s", len(misses), misses)
    return StatusReport(applied=applied, misses=tuple(misses))
