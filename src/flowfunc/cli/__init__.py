"""Flowfunc CLI: inspect schemas and compute viewport fits.

Entry point for the `flowfunc` command. Requires ``pip install flowfunc[cli]``.

Commands:
    schema inspect  Compile a schema and list its port and node types
    schema ports    Show which port types each port type accepts
    view fit        Compute the fit-to-view transform for a node file
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install flowfunc[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all subcommands."""
    _require_typer()

    import typer

    from flowfunc.cli.schema_cmd import app as schema_app
    from flowfunc.cli.view_cmd import app as view_app

    app = typer.Typer(
        name="flowfunc",
        help="Flowfunc schema and viewport tools.",
        no_args_is_help=True,
    )
    app.add_typer(schema_app, name="schema")
    app.add_typer(view_app, name="view")

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
