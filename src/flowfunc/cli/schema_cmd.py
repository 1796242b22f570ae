"""Schema CLI commands: inspect, ports."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Annotated

import typer

from flowfunc._config import load_config
from flowfunc.cli._format import format_table, print_json, print_lines, truncate
from flowfunc.config import FunctionRegistry, Registry, compile_config, load_schema
from flowfunc.exceptions import ConfigError

app = typer.Typer(help="Compile and inspect port/node type schemas.")


def _import_functions(module_path: str) -> FunctionRegistry:
    """Import a FunctionRegistry from 'module:attribute' path."""
    if ":" not in module_path:
        print(f"Error: '{module_path}' must use 'module:attribute' format")
        raise typer.Exit(1)
    module_name, attr_name = module_path.rsplit(":", 1)

    try:
        if "." not in sys.path:
            sys.path.insert(0, ".")
        module = importlib.import_module(module_name)
    except ImportError as e:
        print(f"Error: Could not import module '{module_name}': {e}")
        raise typer.Exit(1) from e

    functions = getattr(module, attr_name, None)
    if not isinstance(functions, FunctionRegistry):
        print(f"Error: '{module_path}' is not a FunctionRegistry (got {type(functions).__name__})")
        raise typer.Exit(1)
    return functions


def _schema_path(target: str) -> Path:
    """Resolve a schema file path or a name registered in [tool.flowfunc.schemas]."""
    path = Path(target)
    if path.is_file():
        return path

    registered = load_config().schema_path(target)
    if registered is None:
        print(f"Error: '{target}' is not a file and not registered in [tool.flowfunc.schemas]")
        print("Hint: register it in pyproject.toml:")
        print(f'  [tool.flowfunc.schemas]\n  {target} = "schemas/{target}.json"')
        raise typer.Exit(1)
    if not registered.is_file():
        print(f"Error: schema '{target}' points to missing file {registered}")
        raise typer.Exit(1)
    return registered


def load_registry(target: str, type_safety: bool = True, functions: str | None = None) -> Registry:
    """Load and compile a schema, exiting with the error message on failure."""
    path = _schema_path(target)
    registry_functions = _import_functions(functions) if functions else None
    try:
        return compile_config(load_schema(path), type_safety, functions=registry_functions)
    except ConfigError as e:
        print(f"Error: {e}")
        raise typer.Exit(1) from e


def _type_safety(disabled: bool) -> bool:
    return load_config().type_safety and not disabled


@app.command("inspect")
def schema_inspect(
    target: Annotated[str, typer.Argument(help="Schema JSON file or registered name")],
    no_type_safety: Annotated[bool, typer.Option("--no-type-safety", help="Let any port connect to any port")] = False,
    functions: Annotated[str | None, typer.Option("--functions", help="FunctionRegistry as 'module:attribute'")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
):
    """Compile a schema and list its port and node types."""
    registry = load_registry(target, _type_safety(no_type_safety), functions)

    if as_json:
        print_json("schema.inspect", registry.to_dict(), output)
        return

    print(
        f"\nSchema: {target} | {len(registry.port_types)} port types | "
        f"{len(registry.node_types)} node types | type safety {'on' if registry.type_safety else 'off'}\n"
    )

    port_rows = [
        [port.id, port.label, port.color or "—", ", ".join(c.kind for c in port.controls)]
        for port in registry.port_types.values()
    ]
    print_lines(format_table(["Port", "Label", "Color", "Controls"], port_rows))
    print()

    node_rows = []
    for node_type in registry.node_types.values():
        outputs = ", ".join(spec.name for spec in node_type.outputs) or "—"
        node_rows.append(
            [
                node_type.id,
                truncate(node_type.label, 40),
                type(node_type.inputs).__name__.removesuffix("Inputs").lower(),
                truncate(outputs, 30),
            ]
        )
    if node_rows:
        print_lines(format_table(["Node", "Label", "Inputs", "Outputs"], node_rows))
    else:
        print("  No node types declared.")

    for notice in registry.notices:
        print(f"\n  Note: built-in {notice.kind.replace('_', ' ')} '{notice.key}' was declared again and ignored")

    print(f"\n  For JSON: flowfunc schema inspect {target} --json")


@app.command("ports")
def schema_ports(
    target: Annotated[str, typer.Argument(help="Schema JSON file or registered name")],
    no_type_safety: Annotated[bool, typer.Option("--no-type-safety", help="Let any port connect to any port")] = False,
    functions: Annotated[str | None, typer.Option("--functions", help="FunctionRegistry as 'module:attribute'")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
):
    """Show which port types each port type accepts."""
    registry = load_registry(target, _type_safety(no_type_safety), functions)
    graph = registry.compatibility_graph()

    data = {
        port_id: {
            "accepts": sorted(graph.predecessors(port_id)),
            "accepted_by": sorted(graph.successors(port_id)),
        }
        for port_id in registry.port_types
    }

    if as_json:
        print_json("schema.ports", data, output)
        return

    rows = [
        [port_id, ", ".join(info["accepts"]) or "—", ", ".join(info["accepted_by"]) or "—"]
        for port_id, info in data.items()
    ]
    print()
    print_lines(format_table(["Port", "Accepts", "Accepted by"], rows))
