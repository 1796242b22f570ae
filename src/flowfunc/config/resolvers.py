"""Lookup tables for port colors and port controls.

Colors map a schema token to the engine's color name. Controls map a control
kind to a factory that builds a :class:`Control` from the declared fields.

Both tables are plain dicts so hosts can pass extended copies to the compiler.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

# Engine color names. "gray" is accepted as an alias of "grey".
COLORS: dict[str, str] = {
    "yellow": "yellow",
    "orange": "orange",
    "red": "red",
    "pink": "pink",
    "purple": "purple",
    "blue": "blue",
    "green": "green",
    "grey": "grey",
    "gray": "grey",
}


@dataclass(frozen=True)
class Control:
    """A widget bound to a port's default value.

    Attributes:
        kind: Factory name that produced the control (text, number, ...)
        name: Key of the value inside the port's data
        label: Text shown next to the widget
        default_value: Initial value
        params: Remaining declared fields, passed through untouched
    """

    kind: str
    name: str
    label: str = ""
    default_value: Any = None
    params: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "name": self.name,
            "label": self.label,
            "defaultValue": self.default_value,
            **self.params,
        }


ControlFactory = Callable[..., Control]


def _split(params: dict[str, Any], default: Any) -> tuple[str, str, Any, dict[str, Any]]:
    """Pull the common fields out of declared control params."""
    rest = dict(params)
    name = rest.pop("name", "")
    label = rest.pop("label", "")
    if "defaultValue" in rest:
        default = rest.pop("defaultValue")
    elif "default_value" in rest:
        default = rest.pop("default_value")
    return name, label, default, rest


def text_control(**params: Any) -> Control:
    name, label, default, rest = _split(params, "")
    return Control("text", name, label, default, rest)


def number_control(**params: Any) -> Control:
    name, label, default, rest = _split(params, 0)
    return Control("number", name, label, default, rest)


def checkbox_control(**params: Any) -> Control:
    name, label, default, rest = _split(params, False)
    return Control("checkbox", name, label, default, rest)


def select_control(**params: Any) -> Control:
    """Single choice. Defaults to the first option's value."""
    options = params.get("options") or []
    first = options[0].get("value") if options and isinstance(options[0], Mapping) else None
    name, label, default, rest = _split(params, first)
    return Control("select", name, label, default, rest)


def multiselect_control(**params: Any) -> Control:
    name, label, default, rest = _split(params, [])
    return Control("multiselect", name, label, default, rest)


def custom_control(**params: Any) -> Control:
    name, label, default, rest = _split(params, None)
    return Control("custom", name, label, default, rest)


CONTROLS: dict[str, ControlFactory] = {
    "text": text_control,
    "number": number_control,
    "checkbox": checkbox_control,
    "select": select_control,
    "multiselect": multiselect_control,
    "custom": custom_control,
}


def label_control(name: str, label: str) -> Control:
    """Non-interactive control that renders the port's own label."""
    return custom_control(name=name, label=label, defaultValue=None, render="port-label")


def resolve_color(token: str | None, colors: Mapping[str, str] = COLORS) -> str | None:
    """Resolve a color token, returning None for empty or unknown tokens."""
    if not token:
        return None
    return colors.get(token)
