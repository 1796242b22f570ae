"""Viewport CLI commands: fit."""

from __future__ import annotations

import json
from typing import Annotated

import typer

from flowfunc._config import load_config
from flowfunc.cli._format import print_json
from flowfunc.viewport import fit_to_view, node_bounds

app = typer.Typer(help="Viewport geometry.")


@app.command("fit")
def view_fit(
    nodes_file: Annotated[str, typer.Argument(help="JSON file with nodes (id -> {x, y, ...}) or a list of nodes")],
    width: Annotated[float, typer.Option("--width", help="Viewport width in pixels")],
    height: Annotated[float, typer.Option("--height", help="Viewport height in pixels")],
    padding: Annotated[float | None, typer.Option("--padding", help="Margin around the nodes")] = None,
    min_scale: Annotated[float | None, typer.Option("--min-scale", help="Lowest allowed zoom")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
):
    """Compute the transform that fits all nodes into the viewport."""
    config = load_config()
    padding = config.padding if padding is None else padding
    min_scale = config.min_scale if min_scale is None else min_scale

    try:
        with open(nodes_file) as f:
            nodes = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: Could not read nodes from '{nodes_file}': {e}")
        raise typer.Exit(1) from e

    try:
        transform = fit_to_view(nodes, width, height, padding=padding, min_scale=min_scale)
        bounds = node_bounds(nodes)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        print(f"Error: Nodes in '{nodes_file}' need numeric 'x' and 'y': {e}")
        raise typer.Exit(1) from e

    if as_json:
        data = None
        if transform is not None:
            data = {"x": transform.x, "y": transform.y, "scale": transform.scale}
        print_json("view.fit", data)
        return

    if transform is None:
        print("\n  Nothing to fit: no nodes or empty viewport.")
        return

    print(f"\n  Nodes: ({bounds.min_x:g}, {bounds.min_y:g}) .. ({bounds.max_x:g}, {bounds.max_y:g})")
    print(f"  Transform: x={transform.x:g} y={transform.y:g} scale={transform.scale:g}")
