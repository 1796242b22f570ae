"""Fit-to-view geometry for the editor viewport.

``fit_to_view`` is a pure function of node positions and viewport size.
``ViewportController`` applies its result to a live engine and tracks the
engine instance key, since the engine only reads its initial scale when it is
constructed.

Example (nodes at (0, 0) and (100, 100) in a 500x500 viewport)::

    padded box      (-150, -150) .. (250, 250), 400 x 400
    scale           min(500/400, 500/400) = 1.25
    translate       250 - 50 * 1.25 = 187.5 on both axes
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flowfunc.editor import GraphEngine

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 150.0
DEFAULT_MIN_SCALE = 0.1


@dataclass(frozen=True)
class Transform:
    """Pan offset and zoom applied to the viewport."""

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    def __post_init__(self) -> None:
        if not self.scale > 0:
            raise ValueError(f"Transform scale must be positive, got {self.scale}")


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box in graph coordinates."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def expand(self, padding: float) -> Bounds:
        return Bounds(
            self.min_x - padding,
            self.min_y - padding,
            self.max_x + padding,
            self.max_y + padding,
        )


def _position(node: Any) -> tuple[float, float]:
    if isinstance(node, Mapping):
        return float(node["x"]), float(node["y"])
    return float(node.x), float(node.y)


def node_bounds(nodes: Mapping[str, Any] | Iterable[Any]) -> Bounds | None:
    """Bounding box of node positions, or None when there are no nodes.

    Only the ``(x, y)`` anchor of each node is considered, not its rendered size.
    """
    values = nodes.values() if isinstance(nodes, Mapping) else nodes
    positions = [_position(node) for node in values]
    if not positions:
        return None
    xs = [x for x, _ in positions]
    ys = [y for _, y in positions]
    return Bounds(min(xs), min(ys), max(xs), max(ys))


def fit_to_view(
    nodes: Mapping[str, Any] | Iterable[Any],
    viewport_width: float,
    viewport_height: float,
    padding: float = DEFAULT_PADDING,
    min_scale: float = DEFAULT_MIN_SCALE,
) -> Transform | None:
    """Transform that centers all nodes in the viewport.

    Args:
        nodes: Mapping id -> node, or an iterable of nodes, each with x and y
        viewport_width: Container width in pixels
        viewport_height: Container height in pixels
        padding: Margin added around the node box on every side
        min_scale: Lower bound on the zoom; there is no upper bound

    Returns:
        The fitted Transform, or None when there is nothing to fit (no nodes,
        an empty viewport, or a zero-size box)
    """
    bounds = node_bounds(nodes)
    if bounds is None:
        return None
    if viewport_width <= 0 or viewport_height <= 0:
        return None

    content = bounds.expand(padding)
    scales = []
    if content.width > 0:
        scales.append(viewport_width / content.width)
    if content.height > 0:
        scales.append(viewport_height / content.height)
    if not scales:
        return None

    scale = max(min(scales), min_scale)
    center_x, center_y = content.center
    return Transform(
        x=viewport_width / 2 - center_x * scale,
        y=viewport_height / 2 - center_y * scale,
        scale=scale,
    )


def _new_key() -> str:
    return uuid.uuid4().hex[:8]


class ViewportController:
    """Applies fitted transforms and owns the engine instance key.

    A new key means the host must construct a fresh engine so that the stored
    ``initial_scale`` takes effect; the live ``set_transform`` call keeps the
    current instance consistent in the meantime.
    """

    def __init__(
        self,
        initial_scale: float = 1.0,
        *,
        padding: float = DEFAULT_PADDING,
        min_scale: float = DEFAULT_MIN_SCALE,
        fit_trigger: bool = False,
    ) -> None:
        self.transform = Transform(scale=initial_scale)
        self.padding = padding
        self.min_scale = min_scale
        self.key = _new_key()
        self._last_trigger = bool(fit_trigger)

    @property
    def initial_scale(self) -> float:
        """Scale the next engine instance should be constructed with."""
        return self.transform.scale

    def remount(self) -> str:
        """Rotate the instance key, forcing the host to rebuild the engine."""
        self.key = _new_key()
        logger.debug("Engine instance key rotated to %s", self.key)
        return self.key

    def fit(
        self,
        nodes: Mapping[str, Any] | Iterable[Any],
        viewport_width: float,
        viewport_height: float,
        engine: GraphEngine | None = None,
    ) -> Transform | None:
        """Fit the nodes and apply the result. A no-op leaves all state unchanged."""
        transform = fit_to_view(
            nodes,
            viewport_width,
            viewport_height,
            padding=self.padding,
            min_scale=self.min_scale,
        )
        if transform is None:
            return None

        if engine is not None:
            engine.set_transform(x=transform.x, y=transform.y, scale=transform.scale)
        self.transform = transform
        self.remount()
        logger.debug("Fitted viewport to %s", transform)
        return transform

    def request_fit(
        self,
        trigger: bool,
        nodes: Mapping[str, Any] | Iterable[Any],
        viewport_width: float,
        viewport_height: float,
        engine: GraphEngine | None = None,
    ) -> Transform | None:
        """Fit only on a False -> True transition of *trigger*."""
        rising = bool(trigger) and not self._last_trigger
        self._last_trigger = bool(trigger)
        if not rising:
            return None
        return self.fit(nodes, viewport_width, viewport_height, engine)
