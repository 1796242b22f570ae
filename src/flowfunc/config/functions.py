"""Input-port functions: the explicit function registry and the expression compiler.

Node types may compute their input ports dynamically. Both dynamic strategies
produce a callable with the signature::

    fn(ports, input_data, connections, context) -> list[Port]

*Path* inputs name a function registered in a :class:`FunctionRegistry`.
*Expression* inputs carry Python source that is checked and compiled once::

    ports["number"](name="count", label="Count")   # last expression is returned

The expression runs with a restricted set of builtins and may not import or
declare globals. Private attributes and frame introspection are rejected too.
"""

from __future__ import annotations

import ast
import builtins
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from flowfunc.exceptions import ConfigError, ConfigErrorKind, LookupFailure, LookupKind

InputFunction = Callable[[Any, Any, Any, Any], Any]

SAFE_BUILTINS: dict[str, Any] = {
    name: getattr(builtins, name)
    for name in (
        "abs", "all", "any", "bool", "dict", "enumerate", "filter", "float",
        "int", "isinstance", "len", "list", "map", "max", "min", "range",
        "reversed", "round", "set", "sorted", "str", "sum", "tuple", "zip",
    )
}

# Frame and code objects reachable from generators, coroutines and tracebacks
_INTROSPECTION_ATTRIBUTES = frozenset(
    {
        "gi_frame", "gi_code", "gi_yieldfrom", "cr_frame", "cr_code", "cr_await",
        "ag_frame", "ag_code", "f_back", "f_globals", "f_locals", "f_builtins",
        "f_code", "tb_frame", "tb_next",
    }
)

_FUNCTION_NAME = "_flowfunc_inputs"
_TEMPLATE = f"def {_FUNCTION_NAME}(ports, input_data, connections, context):\n    pass\n"


class FunctionRegistry:
    """Named input functions available to path-based node inputs.

    Names are usually dotted (``"strings.split_inputs"``). A name is first
    looked up as a flat key, then by walking nested mappings or attributes.

    Example:
        >>> functions = FunctionRegistry()
        >>> @functions.register("strings.no_inputs")
        ... def no_inputs(ports, input_data, connections, context):
        ...     return []
        >>> "strings.no_inputs" in functions
        True
    """

    def __init__(self, functions: Mapping[str, Any] | None = None) -> None:
        self._functions: dict[str, Any] = dict(functions) if functions else {}

    def register(self, path: str, func: InputFunction | None = None):
        """Register *func* under *path*. Usable as a decorator when func is omitted."""
        if func is None:
            def decorator(f: InputFunction) -> InputFunction:
                self._functions[path] = f
                return f

            return decorator
        self._functions[path] = func
        return func

    def unregister(self, path: str) -> None:
        self._functions.pop(path, None)

    def get(self, path: str) -> InputFunction | None:
        """Return the function at *path*, or None when nothing callable is found."""
        if path in self._functions:
            found = self._functions[path]
            return found if callable(found) else None

        head, _, rest = path.partition(".")
        current = self._functions.get(head)
        for part in rest.split(".") if rest else ():
            if current is None:
                return None
            if isinstance(current, Mapping):
                current = current.get(part)
            else:
                current = getattr(current, part, None)
        return current if callable(current) else None

    def lookup(self, path: str) -> InputFunction | LookupFailure:
        """Like :meth:`get`, but a miss is returned as a LookupFailure."""
        func = self.get(path)
        if func is None:
            return LookupFailure(LookupKind.FUNCTION, path)
        return func

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)


class _RestrictionChecker(ast.NodeVisitor):
    """Collect constructs not allowed in input expressions."""

    def __init__(self) -> None:
        self.violations: list[str] = []

    def visit_Import(self, node: ast.Import) -> None:
        self.violations.append(f"line {node.lineno}: imports are not allowed")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        self.violations.append(f"line {node.lineno}: imports are not allowed")

    def visit_Global(self, node: ast.Global) -> None:
        self.violations.append(f"line {node.lineno}: 'global' is not allowed")

    def visit_Nonlocal(self, node: ast.Nonlocal) -> None:
        self.violations.append(f"line {node.lineno}: 'nonlocal' is not allowed")

    def visit_Yield(self, node: ast.Yield) -> None:
        self.violations.append(f"line {node.lineno}: 'yield' is not allowed")

    def visit_YieldFrom(self, node: ast.YieldFrom) -> None:
        self.violations.append(f"line {node.lineno}: 'yield from' is not allowed")

    def visit_Await(self, node: ast.Await) -> None:
        self.violations.append(f"line {node.lineno}: 'await' is not allowed")

    def visit_Name(self, node: ast.Name) -> None:
        if node.id.startswith("__"):
            self.violations.append(f"line {node.lineno}: name '{node.id}' is not allowed")
        self.generic_visit(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if node.attr.startswith("_") or node.attr in _INTROSPECTION_ATTRIBUTES:
            self.violations.append(f"line {node.lineno}: attribute '{node.attr}' is not allowed")
        self.generic_visit(node)

    def visit_Subscript(self, node: ast.Subscript) -> None:
        key = node.slice
        if isinstance(key, ast.Constant) and isinstance(key.value, str) and key.value.startswith("__"):
            self.violations.append(f"line {node.lineno}: key '{key.value}' is not allowed")
        self.generic_visit(node)


def _last_expr_to_return(body: list[ast.stmt]) -> list[ast.stmt]:
    if body and isinstance(body[-1], ast.Expr):
        return_stmt = ast.Return(value=body[-1].value)
        ast.copy_location(return_stmt, body[-1])
        return body[:-1] + [return_stmt]
    return body


def compile_expression(source: str, *, key: str = "<expression>") -> InputFunction:
    """Compile input-expression source into a four-argument function.

    Args:
        source: Function body; may use ``ports``, ``input_data``,
            ``connections`` and ``context``. A trailing expression is returned.
        key: Identifier used in error messages and tracebacks (the node type id)

    Raises:
        ConfigError: INVALID_EXPRESSION on syntax errors or restricted constructs
    """
    filename = f"<flowfunc inputs: {key}>"
    try:
        user_tree = ast.parse(source, filename=filename, mode="exec")
    except SyntaxError as e:
        raise ConfigError(
            ConfigErrorKind.INVALID_EXPRESSION,
            key,
            f"Invalid inputs expression for '{key}'\n\n"
            f"  -> Syntax error on line {e.lineno}: {e.msg}",
        ) from e

    if not user_tree.body:
        raise ConfigError(
            ConfigErrorKind.INVALID_EXPRESSION,
            key,
            f"Invalid inputs expression for '{key}'\n\n  -> Source is empty",
        )

    checker = _RestrictionChecker()
    checker.visit(user_tree)
    if checker.violations:
        details = "\n".join(f"  -> {v}" for v in checker.violations)
        raise ConfigError(
            ConfigErrorKind.INVALID_EXPRESSION,
            key,
            f"Invalid inputs expression for '{key}'\n\n{details}\n\n"
            f"How to fix:\n"
            f"  Register a function in a FunctionRegistry and use a path reference instead",
        )

    tree = ast.parse(_TEMPLATE, filename=filename, mode="exec")
    tree.body[0].body = _last_expr_to_return(user_tree.body)
    ast.fix_missing_locations(tree)
    code = compile(tree, filename, "exec", dont_inherit=True)

    namespace: dict[str, Any] = {"__builtins__": SAFE_BUILTINS}
    exec(code, namespace)
    return namespace[_FUNCTION_NAME]
