"""Project-level configuration from pyproject.toml.

Reads the [tool.flowfunc] section to provide editor defaults and named
schema files for the CLI::

    [tool.flowfunc]
    padding = 120
    min_scale = 0.2
    type_safety = false

    [tool.flowfunc.schemas]
    pipeline = "schemas/pipeline.json"
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

from flowfunc.viewport import DEFAULT_MIN_SCALE, DEFAULT_PADDING


@dataclass(frozen=True)
class FlowfuncConfig:
    """Configuration from [tool.flowfunc] in pyproject.toml."""

    padding: float = DEFAULT_PADDING
    min_scale: float = DEFAULT_MIN_SCALE
    initial_scale: float = 1.0
    type_safety: bool = True
    schemas: dict[str, str] = field(default_factory=dict)
    root: Path | None = None

    def schema_path(self, name: str) -> Path | None:
        """Path of a registered schema, relative to the pyproject.toml directory."""
        value = self.schemas.get(name)
        if value is None:
            return None
        path = Path(value)
        if self.root is not None and not path.is_absolute():
            path = self.root / path
        return path


def find_pyproject(start: Path | None = None) -> Path | None:
    """Walk up from start directory to find pyproject.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> FlowfuncConfig:
    """Load [tool.flowfunc] from the nearest pyproject.toml.

    Returns default config if no pyproject.toml or no [tool.flowfunc] section.
    """
    path = find_pyproject(start)
    if path is None:
        return FlowfuncConfig()

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("tool", {}).get("flowfunc", {})
    if not section:
        return FlowfuncConfig()

    return FlowfuncConfig(
        padding=float(section.get("padding", DEFAULT_PADDING)),
        min_scale=float(section.get("min_scale", DEFAULT_MIN_SCALE)),
        initial_scale=float(section.get("initial_scale", 1.0)),
        type_safety=bool(section.get("type_safety", True)),
        schemas=dict(section.get("schemas", {})),
        root=path.parent,
    )
