"""Shared fixtures: an in-memory DOM, a recording engine, and sample schemas."""

from __future__ import annotations

from collections import defaultdict

import pytest

from flowfunc.dom import NODE_ID_ATTRIBUTE, DomEvent

# =============================================================================
# Fake DOM
# =============================================================================


class FakeElement:
    def __init__(self, classes=(), attributes=None, parent=None):
        self.classes = set(classes)
        self.attributes = dict(attributes or {})
        self.parent = parent

    def get_attribute(self, name):
        return self.attributes.get(name)

    def child(self, *classes, **attributes):
        return FakeElement(classes, attributes, parent=self)


class FakeContainer:
    def __init__(self, width=500, height=500):
        self.client_width = width
        self.client_height = height
        self.attributes = {}
        self.listeners = defaultdict(list)
        self.root = FakeElement(["NodeEditor_editorWrapper"])
        self.elements = {}

    def add_node(self, node_id):
        """Add a node wrapper with a label inside it; returns the wrapper."""
        wrapper = self.root.child("Node_wrapper__1w3cr", **{NODE_ID_ATTRIBUTE: node_id})
        wrapper.label = wrapper.child("Node_label__3MmhF")
        self.elements[node_id] = wrapper
        return wrapper

    def find_node(self, node_id):
        return self.elements.get(node_id)

    def add_event_listener(self, kind, handler):
        self.listeners[kind].append(handler)

    def get_attribute(self, name):
        return self.attributes.get(name)

    def set_attribute(self, name, value):
        self.attributes[name] = value

    def click(self, target, *, ctrl=False, meta=False):
        for handler in self.listeners["click"]:
            handler(DomEvent(target, ctrl_key=ctrl, meta_key=meta))

    def dblclick(self, target):
        for handler in self.listeners["dblclick"]:
            handler(DomEvent(target))


# =============================================================================
# Fake engine
# =============================================================================


class FakeEngine:
    def __init__(self, options):
        self.options = options
        self.nodes = dict(options.nodes)
        self.comments = {}
        self.transforms = []

    def get_nodes(self):
        return dict(self.nodes)

    def get_comments(self):
        return dict(self.comments)

    def set_transform(self, *, x, y, scale):
        self.transforms.append({"x": x, "y": y, "scale": scale})


class EngineFactory:
    """Records every engine it builds."""

    def __init__(self):
        self.engines = []

    def __call__(self, options):
        engine = FakeEngine(options)
        self.engines.append(engine)
        return engine


class PropsLog(list):
    """Host set_props callback that records every update."""

    def __call__(self, props):
        self.append(props)


@pytest.fixture
def container():
    return FakeContainer()


@pytest.fixture
def engine_factory():
    return EngineFactory()


@pytest.fixture
def props_log():
    return PropsLog()


# =============================================================================
# Sample schemas
# =============================================================================


@pytest.fixture
def schema_dict():
    """Host-form schema with one custom port of each control style."""
    return {
        "portTypes": [
            {
                "type": "text",
                "label": "Text",
                "color": "green",
                "controls": [{"type": "text", "name": "text", "label": "Text"}],
            },
            {
                "type": "choice",
                "label": "Choice",
                "color": "purple",
                "controls": [
                    {
                        "type": "select",
                        "name": "choice",
                        "options": [{"value": "a", "label": "A"}, {"value": "b", "label": "B"}],
                    }
                ],
            },
            {"type": "frame", "label": "Data Frame", "color": "blue"},
        ],
        "nodeTypes": [
            {
                "type": "upper",
                "label": "Upper",
                "category": "strings",
                "description": "Uppercase a string",
                "inputs": [{"type": "text", "name": "value", "label": "Value"}],
                "outputs": [{"type": "text", "name": "result", "label": "Result"}],
            },
            {
                "type": "head",
                "label": "Head",
                "inputs": [
                    {"type": "frame", "name": "df", "label": "Frame"},
                    {"type": "number", "name": "n", "label": "Rows"},
                ],
                "outputs": [{"type": "frame", "name": "out", "label": "Frame"}],
            },
        ],
    }
