"""Schema definitions for port and node types.

The host delivers schemas as JSON-style dicts with camelCase keys::

    {
        "portTypes": [{"type": "text", "label": "Text", "color": "green",
                       "controls": [{"type": "text", "name": "text"}]}],
        "nodeTypes": [{"type": "upper", "label": "Upper", "category": "str",
                       "inputs": [{"type": "text", "name": "value"}],
                       "outputs": [{"type": "text", "name": "result"}]}],
    }

``Schema.from_dict`` turns that into the frozen dataclasses below, which the
compiler consumes. Schemas can also be built directly from the dataclasses.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from flowfunc.exceptions import ConfigError, ConfigErrorKind


@dataclass(frozen=True)
class ControlSpec:
    """A declared control: a factory name plus the fields passed to it."""

    kind: str
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ControlSpec:
        params = dict(data)
        kind = params.pop("type", None)
        if not kind:
            raise ConfigError(
                ConfigErrorKind.INVALID_SCHEMA,
                repr(dict(data)),
                f"Control declaration has no 'type': {dict(data)!r}",
            )
        return cls(kind=kind, params=params)


@dataclass(frozen=True)
class PortTypeSpec:
    """Declared port type.

    Attributes:
        id: Unique port type id
        label: Display label
        name: Key of the port value; defaults to ``id``
        color: Color token resolved through the color table
        controls: Declared controls, in order
        accept_types: Port type ids this port accepts; defaults to ``[id]``
    """

    id: str
    label: str = ""
    name: str | None = None
    color: str | None = None
    controls: tuple[ControlSpec, ...] = ()
    accept_types: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortTypeSpec:
        port_id = _require(data, "type", "port type")
        accept = data.get("acceptTypes")
        return cls(
            id=port_id,
            label=data.get("label") or port_id,
            name=data.get("name"),
            color=data.get("color"),
            controls=tuple(ControlSpec.from_dict(c) for c in data.get("controls") or ()),
            accept_types=tuple(accept) if accept is not None else None,
        )


@dataclass(frozen=True)
class PortSpec:
    """One entry of a structured inputs/outputs list."""

    port_type: str
    name: str
    label: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortSpec:
        # Per-entry controls are owned by the port type, not the entry
        extra = {k: v for k, v in data.items() if k not in ("type", "name", "label", "controls")}
        port_type = _require(data, "type", "port")
        return cls(
            port_type=port_type,
            name=data.get("name") or port_type,
            label=data.get("label", ""),
            extra=extra,
        )


@dataclass(frozen=True)
class ExpressionInputs:
    """Inputs computed by Python source compiled at schema-compile time."""

    source: str


@dataclass(frozen=True)
class PathInputs:
    """Inputs computed by a function looked up by dotted name in a FunctionRegistry."""

    path: str


@dataclass(frozen=True)
class StructuredInputs:
    """Inputs declared as a fixed list of ports."""

    ports: tuple[PortSpec, ...] = ()


InputsSpec = Union[ExpressionInputs, PathInputs, StructuredInputs]


def parse_inputs(value: Any) -> InputsSpec:
    """Pick the inputs variant from its host representation."""
    if not value:
        return StructuredInputs()
    if isinstance(value, (ExpressionInputs, PathInputs, StructuredInputs)):
        return value
    if isinstance(value, Mapping):
        if "source" in value:
            return ExpressionInputs(source=value["source"])
        if "path" in value:
            return PathInputs(path=value["path"])
        raise ConfigError(
            ConfigErrorKind.INVALID_SCHEMA,
            repr(dict(value)),
            f"Inputs mapping must contain 'source' or 'path', got keys {sorted(value)}",
        )
    if isinstance(value, Sequence) and not isinstance(value, str):
        return StructuredInputs(ports=tuple(PortSpec.from_dict(p) for p in value))
    raise ConfigError(
        ConfigErrorKind.INVALID_SCHEMA,
        repr(value),
        f"Unsupported inputs declaration: {value!r}",
    )


@dataclass(frozen=True)
class NodeTypeSpec:
    """Declared node type.

    Attributes:
        id: Unique node type id
        label: Display label
        category: Optional group name, prefixed to the label
        description: Free text shown by the engine
        inputs: One of the three inputs variants
        outputs: Structured output ports
        extra: Remaining declared fields, passed through to the engine
    """

    id: str
    label: str = ""
    category: str | None = None
    description: str = ""
    inputs: InputsSpec = field(default_factory=StructuredInputs)
    outputs: tuple[PortSpec, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def effective_label(self) -> str:
        if self.category:
            return f"{self.category}: {self.label}"
        return self.label

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NodeTypeSpec:
        node_id = _require(data, "type", "node type")
        known = ("type", "label", "category", "description", "inputs", "outputs")
        return cls(
            id=node_id,
            label=data.get("label") or node_id,
            category=data.get("category"),
            description=data.get("description", ""),
            inputs=parse_inputs(data.get("inputs")),
            outputs=tuple(PortSpec.from_dict(p) for p in data.get("outputs") or ()),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class Schema:
    """Complete port and node type declaration delivered by the host."""

    port_types: tuple[PortTypeSpec, ...] = ()
    node_types: tuple[NodeTypeSpec, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schema:
        return cls(
            port_types=tuple(PortTypeSpec.from_dict(p) for p in data.get("portTypes") or ()),
            node_types=tuple(NodeTypeSpec.from_dict(n) for n in data.get("nodeTypes") or ()),
        )


def load_schema(path: str | Path) -> Schema:
    """Read a schema from a JSON file."""
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, Mapping):
        raise ConfigError(
            ConfigErrorKind.INVALID_SCHEMA,
            str(path),
            f"Schema file '{path}' must contain a JSON object",
        )
    return Schema.from_dict(data)


def _require(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not value or not isinstance(value, str):
        raise ConfigError(
            ConfigErrorKind.INVALID_SCHEMA,
            repr(dict(data)),
            f"Invalid {what} declaration: missing '{key}'\n\n"
            f"  -> Got: {dict(data)!r}\n\n"
            f"How to fix:\n"
            f"  Give every {what} a non-empty string '{key}'",
        )
    return value
