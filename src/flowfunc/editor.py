"""The editor orchestrator: props in, engine + DOM services, events out.

``Flowfunc`` mirrors the lifecycle of the hosted editor component::

    editor = Flowfunc(props, container, engine_factory, set_props=send)
    editor.mount()              # compile, construct engine, bind clicks
    editor.update(new_props)    # recompile / remount / fit / statuses
    editor.handle_change()      # engine reported an edit

The graph engine itself is external; it is constructed through
``engine_factory`` and must satisfy :class:`GraphEngine`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from flowfunc._config import FlowfuncConfig
from flowfunc.config import FunctionRegistry, NodeType, PortType, Registry, Schema, compile_config
from flowfunc.dom import Container
from flowfunc.events import (
    EditorChanged,
    EditorStatus,
    EventDispatcher,
    EventProcessor,
    PropsProcessor,
    PropToggled,
)
from flowfunc.selection import SelectionTracker
from flowfunc.status import StatusReport, apply_statuses
from flowfunc.viewport import Transform, ViewportController

logger = logging.getLogger(__name__)


class GraphEngine(Protocol):
    """The hosted graph-editing engine."""

    def get_nodes(self) -> Mapping[str, Any]: ...

    def get_comments(self) -> Mapping[str, Any]: ...

    def set_transform(self, *, x: float, y: float, scale: float) -> None: ...


@dataclass(frozen=True)
class EngineOptions:
    """Construction-time configuration handed to the engine factory.

    ``key`` identifies the instance: a new key means the previous engine must
    be discarded and rebuilt.
    """

    port_types: Mapping[str, PortType]
    node_types: Mapping[str, NodeType]
    key: str
    nodes: Mapping[str, Any] = field(default_factory=dict)
    default_nodes: Sequence[Any] = ()
    context: Any = None
    initial_scale: float = 1.0
    disable_zoom: bool = False
    disable_pan: bool = False
    space_to_pan: bool = False
    on_change: Callable[[], None] | None = None


EngineFactory = Callable[[EngineOptions], GraphEngine]


@dataclass(frozen=True)
class EditorProps:
    """Properties delivered by the host.

    Attributes:
        config: Port/node type schema (Schema or its dict form)
        nodes: Current nodes, id -> node
        nodes_status: Execution status per node id
        editor_status: "server" when the host pushed new nodes
        type_safety: When False, any port can connect to any other port
        default_nodes: Nodes present in a fresh editor
        context: Opaque value passed to input functions
        initial_scale: Zoom of the first engine instance
        disable_zoom: Disable zooming
        disable_pan: Disable panning
        space_to_pan: Pan only while space is held
        fit_to_view: A change to True requests a fit
    """

    config: Schema | Mapping[str, Any] | None = None
    nodes: Mapping[str, Any] = field(default_factory=dict)
    nodes_status: Mapping[str, str] | None = None
    editor_status: str = EditorStatus.CLIENT.value
    type_safety: bool = True
    default_nodes: Sequence[Any] = ()
    context: Any = None
    initial_scale: float | None = None
    disable_zoom: bool = False
    disable_pan: bool = False
    space_to_pan: bool = False
    fit_to_view: bool = False


class Flowfunc:
    """Wires host props to the compiler, viewport, selection and status services.

    Args:
        props: Initial host props
        container: DOM element hosting the engine
        engine_factory: Builds an engine from EngineOptions
        set_props: Host callback for emitted prop updates
        processors: Extra event processors
        functions: Registry for path-based node inputs
        config: Project defaults (padding, min scale, initial scale)
    """

    def __init__(
        self,
        props: EditorProps,
        container: Container,
        engine_factory: EngineFactory,
        *,
        set_props: Callable[[dict[str, Any]], None] | None = None,
        processors: list[EventProcessor] | None = None,
        functions: FunctionRegistry | None = None,
        config: FlowfuncConfig | None = None,
    ) -> None:
        self.config = config or FlowfuncConfig()
        self.props = props
        self.container = container
        self.functions = functions
        self._engine_factory = engine_factory

        self.dispatcher = EventDispatcher(processors)
        if set_props is not None:
            self.dispatcher.add(PropsProcessor(set_props))

        self.viewport = ViewportController(
            props.initial_scale or self.config.initial_scale,
            padding=self.config.padding,
            min_scale=self.config.min_scale,
            fit_trigger=props.fit_to_view,
        )
        self.selection = SelectionTracker(container, self.dispatcher, lambda: self.props.nodes)
        self.registry = self._compile(props)
        self.engine: GraphEngine | None = None
        self._mounted: tuple[Any, ...] | None = None

    @property
    def transform(self) -> Transform:
        return self.viewport.transform

    def mount(self) -> GraphEngine:
        """Construct the engine and bind click handling."""
        self._ensure_engine()
        self.selection.bind()
        return self.engine

    def update(self, props: EditorProps) -> StatusReport:
        """Apply new host props.

        Recompiles when the schema object or type safety changed, remounts when
        the host pushed nodes, fits on a rising ``fit_to_view``, then applies
        node statuses.

        Raises:
            ConfigError: If the new schema cannot be compiled. The editor then
                keeps its previous props and registry.
        """
        previous = self.props
        if props.config is not previous.config or props.type_safety != previous.type_safety:
            self.registry = self._compile(props)
        self.props = props
        if props.editor_status == EditorStatus.SERVER.value:
            self.viewport.remount()
        self.viewport.request_fit(
            props.fit_to_view,
            props.nodes or {},
            self.container.client_width,
            self.container.client_height,
            self.engine,
        )

        self._ensure_engine()
        self.selection.bind()
        return apply_statuses(self.container, props.nodes_status)

    def fit(self) -> Transform | None:
        """Fit the current nodes into the container (the fit-to-view button)."""
        transform = self.viewport.fit(
            self.props.nodes or {},
            self.container.client_width,
            self.container.client_height,
            self.engine,
        )
        if transform is not None:
            self._ensure_engine()
        return transform

    def handle_change(self) -> None:
        """Report the engine's nodes and comments to the host."""
        if self.engine is None:
            return
        self.dispatcher.emit(
            EditorChanged(
                nodes=self.engine.get_nodes(),
                comments=self.engine.get_comments(),
            )
        )

    def toggle_zoom(self) -> None:
        self.dispatcher.emit(PropToggled(prop="disable_zoom", value=not self.props.disable_zoom))

    def toggle_pan(self) -> None:
        self.dispatcher.emit(PropToggled(prop="disable_pan", value=not self.props.disable_pan))

    def _compile(self, props: EditorProps) -> Registry:
        schema = props.config if props.config is not None else Schema()
        return compile_config(schema, props.type_safety, functions=self.functions)

    def _ensure_engine(self) -> None:
        # Everything the engine only reads at construction time
        current = (
            self.viewport.key,
            self.registry,
            self.props.disable_zoom,
            self.props.disable_pan,
            self.props.space_to_pan,
        )
        if self.engine is not None and self._mounted == current:
            return

        logger.debug("Constructing engine instance %s", self.viewport.key)
        self.engine = self._engine_factory(
            EngineOptions(
                port_types=self.registry.port_types,
                node_types=self.registry.node_types,
                key=self.viewport.key,
                nodes=self.props.nodes or {},
                default_nodes=self.props.default_nodes,
                context=self.props.context,
                initial_scale=self.viewport.initial_scale,
                disable_zoom=self.props.disable_zoom,
                disable_pan=self.props.disable_pan,
                space_to_pan=self.props.space_to_pan,
                on_change=self.handle_change,
            )
        )
        self._mounted = current
