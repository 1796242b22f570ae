"""Tests for the schema compiler."""

import logging

import pytest

from flowfunc.config import (
    GENERIC_PORT_TYPE,
    FunctionRegistry,
    Schema,
    apply_type_safety,
    compile_config,
    widen_accept_types,
)
from flowfunc.exceptions import ConfigError, ConfigErrorKind


def _node(node_id, inputs=None, outputs=None, **extra):
    return {"type": node_id, "label": node_id.title(), "inputs": inputs, "outputs": outputs or [], **extra}


class TestDeterminism:
    def test_same_schema_compiles_to_equal_registries(self, schema_dict):
        first = compile_config(schema_dict)
        second = compile_config(schema_dict)
        assert first == second

    def test_dict_and_dataclass_forms_agree(self, schema_dict):
        assert compile_config(schema_dict) == compile_config(Schema.from_dict(schema_dict))

    def test_expression_nodes_compare_by_declaration(self):
        schema = {"nodeTypes": [_node("dyn", inputs={"source": "[]"})]}
        assert compile_config(schema) == compile_config(schema)


class TestPortTypes:
    def test_builtin_port_types_present(self):
        registry = compile_config({})
        assert set(registry.port_types) == {"object", "string", "number", "boolean"}

    def test_color_token_resolved(self, schema_dict):
        registry = compile_config(schema_dict)
        assert registry.port_types["text"].color == "green"
        assert registry.port_types["frame"].color == "blue"

    def test_empty_color_left_unset(self):
        registry = compile_config({"portTypes": [{"type": "plain", "label": "Plain", "color": ""}]})
        assert registry.port_types["plain"].color is None

    def test_unknown_color_warns_and_is_unset(self, caplog):
        with caplog.at_level(logging.WARNING, logger="flowfunc.config.compiler"):
            registry = compile_config({"portTypes": [{"type": "odd", "label": "Odd", "color": "teal"}]})
        assert registry.port_types["odd"].color is None
        assert "teal" in caplog.text

    def test_declared_controls_resolved_in_order(self, schema_dict):
        registry = compile_config(schema_dict)
        (control,) = registry.port_types["choice"].controls
        assert control.kind == "select"
        assert control.name == "choice"
        assert control.default_value == "a"
        assert control.params["options"][1] == {"value": "b", "label": "B"}

    def test_control_name_defaults_to_port_name(self):
        registry = compile_config(
            {"portTypes": [{"type": "count", "label": "Count", "controls": [{"type": "number"}]}]}
        )
        (control,) = registry.port_types["count"].controls
        assert control.name == "count"
        assert control.default_value == 0

    def test_default_label_control_when_no_controls(self, schema_dict):
        registry = compile_config(schema_dict)
        (control,) = registry.port_types["frame"].controls
        assert control.kind == "custom"
        assert control.label == "Data Frame"
        assert control.name == "frame"
        assert control.default_value is None
        assert control.params["render"] == "port-label"

    def test_unknown_control_type_raises(self):
        schema = {"portTypes": [{"type": "x", "label": "X", "controls": [{"type": "slider"}]}]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.UNKNOWN_CONTROL_TYPE
        assert exc_info.value.key == "slider"

    def test_custom_control_table(self):
        from flowfunc.config.resolvers import CONTROLS, Control

        def slider(**params):
            return Control("slider", params.pop("name"), params.pop("label", ""), 0, params)

        schema = {"portTypes": [{"type": "x", "label": "X", "controls": [{"type": "slider", "max": 10}]}]}
        registry = compile_config(schema, controls={**CONTROLS, "slider": slider})
        assert registry.port_types["x"].controls[0].params == {"max": 10}

    def test_redeclared_builtin_is_a_notice(self):
        registry = compile_config({"portTypes": [{"type": "string", "label": "My String", "color": "red"}]})
        assert registry.port_types["string"].label == "Text"
        assert [(n.kind, n.key) for n in registry.notices] == [("port_type", "string")]

    def test_duplicate_custom_port_type_raises(self):
        schema = {"portTypes": [{"type": "x", "label": "X"}, {"type": "x", "label": "Again"}]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.DUPLICATE_PORT_TYPE

    def test_accept_types_default_to_own_id(self, schema_dict):
        registry = compile_config(schema_dict)
        assert registry.port_types["text"].accept_types == ("text",)

    def test_generic_accepts_every_port_type(self, schema_dict):
        registry = compile_config(schema_dict)
        assert set(registry.generic.accept_types) == set(registry.port_types)

    def test_unknown_accept_type_raises(self):
        schema = {"portTypes": [{"type": "x", "label": "X", "acceptTypes": ["x", "ghost"]}]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.UNKNOWN_PORT_TYPE
        assert exc_info.value.key == "ghost"

    def test_accept_types_reference_registered_ids(self, schema_dict):
        registry = compile_config(schema_dict, type_safety=False)
        for port in registry.port_types.values():
            assert set(port.accept_types) <= set(registry.port_types)


class TestNodeTypes:
    def test_category_prefixes_label(self, schema_dict):
        registry = compile_config(schema_dict)
        assert registry.node_types["upper"].label == "strings: Upper"
        assert registry.node_types["head"].label == "Head"

    def test_structured_inputs_built_from_port_types(self, schema_dict):
        registry = compile_config(schema_dict)
        ports = registry.node_types["head"].resolve_inputs(registry.port_types)
        assert [(p.type, p.name, p.label) for p in ports] == [("frame", "df", "Frame"), ("number", "n", "Rows")]
        assert ports[1].controls == registry.port_types["number"].controls

    def test_outputs_built_from_port_types(self, schema_dict):
        registry = compile_config(schema_dict)
        (port,) = registry.node_types["upper"].resolve_outputs(registry.port_types)
        assert (port.type, port.name, port.color) == ("text", "result", "green")

    def test_no_inputs(self):
        registry = compile_config({"nodeTypes": [_node("source", outputs=[{"type": "number", "name": "n"}])]})
        assert registry.node_types["source"].resolve_inputs(registry.port_types) == []

    def test_extra_fields_pass_through(self):
        registry = compile_config({"nodeTypes": [_node("n", initialWidth=200, deletable=False)]})
        assert registry.node_types["n"].extra == {"initialWidth": 200, "deletable": False}

    def test_unknown_input_port_type_raises(self):
        schema = {"nodeTypes": [_node("n", inputs=[{"type": "ghost", "name": "g"}])]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.UNKNOWN_PORT_TYPE
        assert "ghost" in str(exc_info.value)

    def test_unknown_output_port_type_raises(self):
        schema = {"nodeTypes": [_node("n", outputs=[{"type": "ghost", "name": "g"}])]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.UNKNOWN_PORT_TYPE

    def test_duplicate_node_type_raises(self):
        schema = {"nodeTypes": [_node("n"), _node("n")]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.DUPLICATE_NODE_TYPE


class TestExpressionInputs:
    def test_called_with_four_positional_arguments_in_order(self):
        schema = {"nodeTypes": [_node("dyn", inputs={"source": "[input_data, connections, context]"})]}
        registry = compile_config(schema)
        node_type = registry.node_types["dyn"]

        assert node_type.resolve_inputs(registry.port_types, "data", "conns", "ctx") == ["data", "conns", "ctx"]
        with pytest.raises(TypeError):
            node_type.resolver(registry.port_types, "data", "conns")

    def test_builds_ports_from_input_data(self):
        source = (
            "count = input_data.get('count', {}).get('number', 0)\n"
            "[ports['number'](name=f'n{i}', label=f'N{i}') for i in range(count)]"
        )
        registry = compile_config({"nodeTypes": [_node("dyn", inputs={"source": source})]})
        ports = registry.node_types["dyn"].resolve_inputs(registry.port_types, {"count": {"number": 3}}, {}, None)
        assert [p.name for p in ports] == ["n0", "n1", "n2"]

    def test_syntax_error_raises_config_error(self):
        schema = {"nodeTypes": [_node("dyn", inputs={"source": "return ["})]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.INVALID_EXPRESSION
        assert exc_info.value.key == "dyn"


class TestPathInputs:
    def test_resolved_from_function_registry(self):
        functions = FunctionRegistry()

        @functions.register("frames.columns")
        def columns(ports, input_data, connections, context):
            return [ports["string"](name=col, label=col) for col in context["columns"]]

        schema = {"nodeTypes": [_node("select", inputs={"path": "frames.columns"})]}
        registry = compile_config(schema, functions=functions)
        ports = registry.node_types["select"].resolve_inputs(registry.port_types, {}, {}, {"columns": ["a", "b"]})
        assert [p.name for p in ports] == ["a", "b"]

    def test_unregistered_path_raises_at_compile_time(self):
        schema = {"nodeTypes": [_node("select", inputs={"path": "frames.columns"})]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema, functions=FunctionRegistry())
        assert exc_info.value.kind is ConfigErrorKind.UNKNOWN_FUNCTION
        assert exc_info.value.key == "frames.columns"

    def test_missing_function_registry_raises(self):
        schema = {"nodeTypes": [_node("select", inputs={"path": "frames.columns"})]}
        with pytest.raises(ConfigError) as exc_info:
            compile_config(schema)
        assert exc_info.value.kind is ConfigErrorKind.UNKNOWN_FUNCTION

    def test_unregistered_after_compile_yields_no_inputs(self, caplog):
        functions = FunctionRegistry({"f": lambda ports, i, c, ctx: [ports["number"]()]})
        registry = compile_config({"nodeTypes": [_node("n", inputs={"path": "f"})]}, functions=functions)
        functions.unregister("f")

        with caplog.at_level(logging.WARNING, logger="flowfunc.config.compiler"):
            assert registry.node_types["n"].resolve_inputs(registry.port_types) == []
        assert "no longer registered" in caplog.text
        assert "LookupKind.FUNCTION" in caplog.text

    def test_reregistered_function_takes_effect(self):
        functions = FunctionRegistry({"f": lambda ports, i, c, ctx: []})
        registry = compile_config({"nodeTypes": [_node("n", inputs={"path": "f"})]}, functions=functions)
        functions.register("f", lambda ports, i, c, ctx: [ports["boolean"]()])
        (port,) = registry.node_types["n"].resolve_inputs(registry.port_types)
        assert port.type == "boolean"


class TestTypeSafety:
    def test_widening_gives_every_port_the_generic_accept_set(self, schema_dict):
        registry = compile_config(schema_dict, type_safety=False)
        generic = registry.port_types[GENERIC_PORT_TYPE].accept_types
        assert registry.type_safety is False
        for port in registry.port_types.values():
            assert port.accept_types == generic

    def test_widening_applies_to_built_ports(self, schema_dict):
        registry = compile_config(schema_dict, type_safety=False)
        (port,) = registry.node_types["upper"].resolve_outputs(registry.port_types)
        assert set(port.accept_types) == set(registry.port_types)

    def test_reenabling_does_not_restore_constraints(self, schema_dict):
        widened = compile_config(schema_dict, type_safety=False)
        again = apply_type_safety(widened, True)
        assert again is widened
        assert again.port_types["text"].accept_types == widened.generic.accept_types

    def test_fresh_compile_restores_constraints(self, schema_dict):
        compile_config(schema_dict, type_safety=False)
        registry = compile_config(schema_dict, type_safety=True)
        assert registry.port_types["text"].accept_types == ("text",)

    def test_widen_returns_new_registry(self, schema_dict):
        registry = compile_config(schema_dict)
        widened = widen_accept_types(registry)
        assert widened is not registry
        assert registry.port_types["text"].accept_types == ("text",)


class TestImmutability:
    def test_registry_mappings_are_read_only(self, schema_dict):
        registry = compile_config(schema_dict)
        with pytest.raises(TypeError):
            registry.port_types["extra"] = registry.port_types["text"]
        with pytest.raises(TypeError):
            registry.node_types["extra"] = registry.node_types["upper"]
