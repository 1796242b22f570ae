"""Schema compilation: port/node type declarations -> engine registry."""

from flowfunc.config.compiler import apply_type_safety, compile_config, widen_accept_types
from flowfunc.config.functions import FunctionRegistry, compile_expression
from flowfunc.config.registry import GENERIC_PORT_TYPE, NodeType, Port, PortType, Registry
from flowfunc.config.resolvers import COLORS, CONTROLS, Control
from flowfunc.config.spec import (
    ControlSpec,
    ExpressionInputs,
    NodeTypeSpec,
    PathInputs,
    PortSpec,
    PortTypeSpec,
    Schema,
    StructuredInputs,
    load_schema,
)

__all__ = [
    # Compiler
    "compile_config",
    "apply_type_safety",
    "widen_accept_types",
    # Functions
    "FunctionRegistry",
    "compile_expression",
    # Registry
    "GENERIC_PORT_TYPE",
    "NodeType",
    "Port",
    "PortType",
    "Registry",
    # Resolvers
    "COLORS",
    "CONTROLS",
    "Control",
    # Schema
    "ControlSpec",
    "ExpressionInputs",
    "NodeTypeSpec",
    "PathInputs",
    "PortSpec",
    "PortTypeSpec",
    "Schema",
    "StructuredInputs",
    "load_schema",
]
