"""Compiled port and node types consumed by the graph engine."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

import networkx as nx

from flowfunc.config.resolvers import Control, checkbox_control, label_control, number_control, text_control
from flowfunc.config.spec import InputsSpec, PortSpec, StructuredInputs
from flowfunc.exceptions import DuplicateRegistration

# Port type that accepts every registered type; its accept set drives widening
GENERIC_PORT_TYPE = "object"


@dataclass(frozen=True)
class Port:
    """A concrete port on a node."""

    type: str
    name: str
    label: str
    color: str | None = None
    controls: tuple[Control, ...] = ()
    accept_types: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "label": self.label,
            "color": self.color,
            "controls": [c.to_dict() for c in self.controls],
            "acceptTypes": list(self.accept_types),
            **self.extra,
        }


@dataclass(frozen=True)
class PortType:
    """Resolved port type. Calling it builds a :class:`Port`.

    Example:
        >>> text = PortType("text", "Text", "text")
        >>> text(name="title", label="Title").name
        'title'
    """

    id: str
    label: str
    name: str
    color: str | None = None
    controls: tuple[Control, ...] = ()
    accept_types: tuple[str, ...] = ()

    def __call__(self, name: str | None = None, label: str | None = None, **extra: Any) -> Port:
        return Port(
            type=self.id,
            name=name or self.name,
            label=label or self.label,
            color=self.color,
            controls=self.controls,
            accept_types=self.accept_types,
            extra=extra,
        )

    def with_accept_types(self, accept_types: tuple[str, ...]) -> PortType:
        return replace(self, accept_types=tuple(accept_types))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.id,
            "name": self.name,
            "label": self.label,
            "color": self.color,
            "controls": [c.to_dict() for c in self.controls],
            "acceptTypes": list(self.accept_types),
        }


InputResolver = Callable[[Mapping[str, PortType], Any, Any, Any], Any]


@dataclass(frozen=True)
class NodeType:
    """Resolved node type.

    ``inputs`` keeps the declared variant for comparison and display; the
    compiled ``resolver`` is what actually produces the input ports.
    """

    id: str
    label: str
    description: str = ""
    inputs: InputsSpec = field(default_factory=StructuredInputs)
    outputs: tuple[PortSpec, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)
    resolver: InputResolver | None = field(default=None, compare=False, repr=False)

    def resolve_inputs(
        self,
        ports: Mapping[str, PortType],
        input_data: Any = None,
        connections: Any = None,
        context: Any = None,
    ) -> list[Port]:
        """Compute this node's input ports for the engine's current state."""
        if self.resolver is None:
            return []
        return list(self.resolver(ports, input_data, connections, context) or [])

    def resolve_outputs(self, ports: Mapping[str, PortType]) -> list[Port]:
        return [build_port(ports, spec) for spec in self.outputs]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.id,
            "label": self.label,
            "description": self.description,
            "inputs": type(self.inputs).__name__,
            "outputs": [spec.port_type for spec in self.outputs],
            **self.extra,
        }


def build_port(ports: Mapping[str, PortType], spec: PortSpec) -> Port:
    """Build a declared port through the ports factory keyed by its type."""
    return ports[spec.port_type](name=spec.name, label=spec.label, **spec.extra)


@dataclass(frozen=True)
class Registry:
    """Immutable {port_types, node_types} produced by the compiler.

    Attributes:
        port_types: id -> PortType (also the ports factory passed to resolvers)
        node_types: id -> NodeType
        type_safety: False once accept types were widened
        notices: Built-in ids that were declared again and ignored
    """

    port_types: Mapping[str, PortType]
    node_types: Mapping[str, NodeType]
    type_safety: bool = True
    notices: tuple[DuplicateRegistration, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "port_types", MappingProxyType(dict(self.port_types)))
        object.__setattr__(self, "node_types", MappingProxyType(dict(self.node_types)))

    @property
    def generic(self) -> PortType:
        return self.port_types[GENERIC_PORT_TYPE]

    def can_connect(self, output_type: str, input_type: str) -> bool:
        """True if an output of *output_type* may feed an input of *input_type*."""
        target = self.port_types.get(input_type)
        return target is not None and output_type in target.accept_types

    def compatibility_graph(self) -> nx.DiGraph:
        """Accept relation as a graph: edge ``accepted -> acceptor``."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self.port_types)
        for port in self.port_types.values():
            for accepted in port.accept_types:
                graph.add_edge(accepted, port.id)
        return graph

    def to_dict(self) -> dict[str, Any]:
        return {
            "portTypes": {k: v.to_dict() for k, v in self.port_types.items()},
            "nodeTypes": {k: v.to_dict() for k, v in self.node_types.items()},
            "typeSafety": self.type_safety,
        }


def base_port_types() -> dict[str, PortType]:
    """Standard port types every registry starts with.

    The generic port's accept set is filled in by the compiler once all
    custom types are known.
    """
    return {
        GENERIC_PORT_TYPE: PortType(
            GENERIC_PORT_TYPE, "Object", GENERIC_PORT_TYPE,
            color="grey", controls=(label_control(GENERIC_PORT_TYPE, "Object"),),
        ),
        "string": PortType(
            "string", "Text", "string",
            color="green", controls=(text_control(name="string", label="Text"),),
            accept_types=("string",),
        ),
        "number": PortType(
            "number", "Number", "number",
            color="red", controls=(number_control(name="number", label="Number"),),
            accept_types=("number",),
        ),
        "boolean": PortType(
            "boolean", "True/False", "boolean",
            color="blue", controls=(checkbox_control(name="boolean", label="True/False"),),
            accept_types=("boolean",),
        ),
    }
