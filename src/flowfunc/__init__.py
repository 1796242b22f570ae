"""Flowfunc - node editor schemas, viewport fitting, selection and status tracking."""

from flowfunc._config import FlowfuncConfig, load_config
from flowfunc.config import (
    FunctionRegistry,
    NodeType,
    Port,
    PortType,
    Registry,
    Schema,
    apply_type_safety,
    compile_config,
    load_schema,
    widen_accept_types,
)
from flowfunc.editor import EditorProps, EngineOptions, Flowfunc, GraphEngine
from flowfunc.events import (
    EditorChanged,
    EventDispatcher,
    EventProcessor,
    NodeDoubleClicked,
    PropsProcessor,
    PropToggled,
    SelectionChanged,
    TypedEventProcessor,
)
from flowfunc.exceptions import (
    ConfigError,
    ConfigErrorKind,
    DuplicateRegistration,
    LookupFailure,
    LookupKind,
)
from flowfunc.selection import ClickEvent, SelectionState, SelectionTracker, reduce_click, reduce_double_click
from flowfunc.status import NodeStatus, StatusReport, apply_statuses
from flowfunc.viewport import Transform, ViewportController, fit_to_view

__all__ = [
    # Editor
    "Flowfunc",
    "EditorProps",
    "EngineOptions",
    "GraphEngine",
    # Config compiler
    "compile_config",
    "apply_type_safety",
    "widen_accept_types",
    "load_schema",
    "Schema",
    "Registry",
    "PortType",
    "NodeType",
    "Port",
    "FunctionRegistry",
    # Viewport
    "Transform",
    "ViewportController",
    "fit_to_view",
    # Selection
    "ClickEvent",
    "SelectionState",
    "SelectionTracker",
    "reduce_click",
    "reduce_double_click",
    # Status
    "NodeStatus",
    "StatusReport",
    "apply_statuses",
    # Events
    "EditorChanged",
    "EventDispatcher",
    "EventProcessor",
    "NodeDoubleClicked",
    "PropToggled",
    "PropsProcessor",
    "SelectionChanged",
    "TypedEventProcessor",
    # Errors
    "ConfigError",
    "ConfigErrorKind",
    "DuplicateRegistration",
    "LookupFailure",
    "LookupKind",
    # Project config
    "FlowfuncConfig",
    "load_config",
]
