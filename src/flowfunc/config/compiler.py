"""Schema compiler: turns a :class:`Schema` into an engine :class:`Registry`.

Compilation is deterministic given the resolver tables. Structural problems
(unknown control kinds, unknown port types, unregistered functions, duplicate
custom ids) raise :class:`ConfigError`; re-declaring a built-in port type is
recorded as a notice and otherwise ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from flowfunc.config.functions import FunctionRegistry, compile_expression
from flowfunc.config.registry import (
    GENERIC_PORT_TYPE,
    InputResolver,
    NodeType,
    PortType,
    Registry,
    base_port_types,
    build_port,
)
from flowfunc.config.resolvers import COLORS, CONTROLS, ControlFactory, label_control, resolve_color
from flowfunc.config.spec import (
    ExpressionInputs,
    NodeTypeSpec,
    PathInputs,
    PortSpec,
    PortTypeSpec,
    Schema,
    StructuredInputs,
)
from flowfunc.exceptions import ConfigError, ConfigErrorKind, DuplicateRegistration, LookupFailure

logger = logging.getLogger(__name__)


def compile_config(
    schema: Schema | Mapping[str, Any],
    type_safety: bool = True,
    *,
    functions: FunctionRegistry | None = None,
    controls: Mapping[str, ControlFactory] | None = None,
    colors: Mapping[str, str] | None = None,
) -> Registry:
    """Compile a schema into a registry.

    Args:
        schema: A Schema, or the host's camelCase dict form
        type_safety: When False, every port accepts what the generic port accepts
        functions: Registry used to resolve path-based node inputs
        controls: Control kind -> factory (default: CONTROLS)
        colors: Color token -> engine color (default: COLORS)

    Returns:
        Immutable Registry

    Raises:
        ConfigError: On unresolved references or duplicate custom ids
    """
    if not isinstance(schema, Schema):
        schema = Schema.from_dict(schema)
    controls = CONTROLS if controls is None else controls
    colors = COLORS if colors is None else colors

    port_types, notices = _compile_port_types(schema.port_types, controls, colors)
    node_types: dict[str, NodeType] = {}
    for spec in schema.node_types:
        if spec.id in node_types:
            raise ConfigError(
                ConfigErrorKind.DUPLICATE_NODE_TYPE,
                spec.id,
                f"Node type '{spec.id}' is declared more than once\n\n"
                f"How to fix:\n"
                f"  Give every node type a unique 'type'",
            )
        node_types[spec.id] = _compile_node_type(spec, port_types, functions)

    registry = Registry(port_types, node_types, type_safety=True, notices=tuple(notices))
    return apply_type_safety(registry, type_safety)


def widen_accept_types(registry: Registry) -> Registry:
    """Give every port type the generic port's accept set.

    One-way: the original accept sets are not kept on the result.
    """
    accept = registry.generic.accept_types
    widened = {key: port.with_accept_types(accept) for key, port in registry.port_types.items()}
    return replace(registry, port_types=widened, type_safety=False)


def apply_type_safety(registry: Registry, type_safety: bool) -> Registry:
    """Widen when type safety is off; otherwise return the registry as is.

    Turning type safety back on cannot restore constraints that were already
    widened. Recompile from the schema for that.
    """
    if type_safety:
        return registry
    return widen_accept_types(registry)


def _compile_port_types(
    specs: tuple[PortTypeSpec, ...],
    controls: Mapping[str, ControlFactory],
    colors: Mapping[str, str],
) -> tuple[dict[str, PortType], list[DuplicateRegistration]]:
    port_types = base_port_types()
    builtin = set(port_types)
    notices: list[DuplicateRegistration] = []

    for spec in specs:
        if spec.id in builtin:
            logger.info("Port type '%s' is built in; ignoring the schema declaration", spec.id)
            notices.append(DuplicateRegistration("port_type", spec.id))
            continue
        if spec.id in port_types:
            raise ConfigError(
                ConfigErrorKind.DUPLICATE_PORT_TYPE,
                spec.id,
                f"Port type '{spec.id}' is declared more than once\n\n"
                f"How to fix:\n"
                f"  Give every port type a unique 'type'",
            )
        port_types[spec.id] = _compile_port_type(spec, controls, colors)

    port_types[GENERIC_PORT_TYPE] = port_types[GENERIC_PORT_TYPE].with_accept_types(tuple(port_types))

    for port in port_types.values():
        for accepted in port.accept_types:
            if accepted not in port_types:
                raise ConfigError(
                    ConfigErrorKind.UNKNOWN_PORT_TYPE,
                    accepted,
                    f"Port type '{port.id}' accepts unknown type '{accepted}'\n\n"
                    f"  -> Known port types: {', '.join(port_types)}",
                )
    return port_types, notices


def _compile_port_type(
    spec: PortTypeSpec,
    controls: Mapping[str, ControlFactory],
    colors: Mapping[str, str],
) -> PortType:
    name = spec.name or spec.id

    color = resolve_color(spec.color, colors)
    if spec.color and color is None:
        logger.warning("Unknown color '%s' for port type '%s'; leaving it unset", spec.color, spec.id)

    if spec.controls:
        resolved = []
        for control in spec.controls:
            factory = controls.get(control.kind)
            if factory is None:
                raise ConfigError(
                    ConfigErrorKind.UNKNOWN_CONTROL_TYPE,
                    control.kind,
                    f"Unknown control type '{control.kind}' on port type '{spec.id}'\n\n"
                    f"  -> Known controls: {', '.join(sorted(controls))}",
                )
            params = dict(control.params)
            params.setdefault("name", name)
            resolved.append(factory(**params))
        port_controls = tuple(resolved)
    else:
        port_controls = (label_control(name, spec.label),)

    return PortType(
        id=spec.id,
        label=spec.label,
        name=name,
        color=color,
        controls=port_controls,
        accept_types=spec.accept_types if spec.accept_types is not None else (spec.id,),
    )


def _compile_node_type(
    spec: NodeTypeSpec,
    port_types: Mapping[str, PortType],
    functions: FunctionRegistry | None,
) -> NodeType:
    for output in spec.outputs:
        _check_port_type(output, port_types, spec.id)
    return NodeType(
        id=spec.id,
        label=spec.effective_label,
        description=spec.description,
        inputs=spec.inputs,
        outputs=spec.outputs,
        extra=spec.extra,
        resolver=_compile_inputs(spec, port_types, functions),
    )


def _compile_inputs(
    spec: NodeTypeSpec,
    port_types: Mapping[str, PortType],
    functions: FunctionRegistry | None,
) -> InputResolver:
    inputs = spec.inputs

    if isinstance(inputs, ExpressionInputs):
        return compile_expression(inputs.source, key=spec.id)

    if isinstance(inputs, PathInputs):
        return _path_resolver(inputs.path, spec.id, functions)

    if isinstance(inputs, StructuredInputs):
        for port_spec in inputs.ports:
            _check_port_type(port_spec, port_types, spec.id)
        declared = inputs.ports

        def structured(ports, input_data, connections, context):
            return [build_port(ports, port_spec) for port_spec in declared]

        return structured

    raise ConfigError(
        ConfigErrorKind.INVALID_SCHEMA,
        spec.id,
        f"Node type '{spec.id}' has unsupported inputs {inputs!r}",
    )


def _path_resolver(path: str, node_id: str, functions: FunctionRegistry | None) -> InputResolver:
    if functions is None or path not in functions:
        raise ConfigError(
            ConfigErrorKind.UNKNOWN_FUNCTION,
            path,
            f"Input function '{path}' for node type '{node_id}' is not registered\n\n"
            f"How to fix:\n"
            f"  functions = FunctionRegistry()\n"
            f"  functions.register('{path}', my_inputs)\n"
            f"  compile_config(schema, functions=functions)",
        )

    def resolve(ports, input_data, connections, context):
        # Looked up per call so re-registration takes effect without recompiling
        func = functions.lookup(path)
        if isinstance(func, LookupFailure):
            logger.warning(
                "Input function '%s' for node type '%s' is no longer registered; node has no inputs (%s)",
                path,
                node_id,
                func,
            )
            return []
        return func(ports, input_data, connections, context)

    return resolve


def _check_port_type(port: PortSpec, port_types: Mapping[str, PortType], node_id: str) -> None:
    if port.port_type not in port_types:
        raise ConfigError(
            ConfigErrorKind.UNKNOWN_PORT_TYPE,
            port.port_type,
            f"Unknown port type '{port.port_type}' on node type '{node_id}' (port '{port.name}')\n\n"
            f"  -> Known port types: {', '.join(port_types)}\n\n"
            f"How to fix:\n"
            f"  Declare the port type under 'portTypes'",
        )
