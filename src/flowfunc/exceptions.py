"""Exceptions and result values for flowfunc.

Configuration-time structural problems raise :class:`ConfigError`.
Runtime lookup misses are never raised; they are reported as
:class:`LookupFailure` values so callers decide whether to log or ignore them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConfigErrorKind(Enum):
    """Why a schema could not be compiled."""

    UNKNOWN_CONTROL_TYPE = "unknown_control_type"
    UNKNOWN_PORT_TYPE = "unknown_port_type"
    DUPLICATE_PORT_TYPE = "duplicate_port_type"
    DUPLICATE_NODE_TYPE = "duplicate_node_type"
    UNKNOWN_FUNCTION = "unknown_function"
    INVALID_EXPRESSION = "invalid_expression"
    INVALID_SCHEMA = "invalid_schema"


class ConfigError(Exception):
    """Schema references something that cannot be resolved.

    Attributes:
        kind: Category of the failure
        key: The offending identifier (port type, control kind, path, ...)
        message: Human-readable error message
    """

    def __init__(
        self,
        kind: ConfigErrorKind,
        key: str,
        message: str | None = None,
    ) -> None:
        self.kind = kind
        self.key = key
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        label = self.kind.value.replace("_", " ")
        return f"Invalid config: {label} '{self.key}'"


class LookupKind(Enum):
    """What kind of runtime lookup missed."""

    NODE_ELEMENT = "node_element"
    STATUS = "status"
    FUNCTION = "function"


@dataclass(frozen=True)
class LookupFailure:
    """A tolerated runtime miss.

    Attributes:
        kind: Which lookup missed
        key: The identifier that could not be resolved
    """

    kind: LookupKind
    key: str


@dataclass(frozen=True)
class DuplicateRegistration:
    """Informational notice: a built-in type id was declared again and ignored."""

    kind: str
    key: str
