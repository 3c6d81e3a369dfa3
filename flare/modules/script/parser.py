"""
Parser for flare.file scripts.

A flare.file uses a small, Starlark-like subset of Python syntax:

    kube_config(path="/home/me/.kube/config")
    wc = capv_provider(kubeconfig="/tmp/wc.kubeconfig")
    kube_config(capi_provider=wc)
    kube_capture(what="objects", kinds=["pods", "services"], namespaces=["default"])

Accepted at module level:
  - Calls to a plain name
  - Single-name assignments whose value is such a call
Accepted as argument values:
  - Constants: strings, ints, floats, bools, None
  - List/tuple and dict literals of argument values
  - Names bound by an earlier assignment
  - Nested calls

Everything else is rejected with ScriptParseError.
"""

import ast
from typing import Any, List, Optional, Set, TextIO, Union

from flare.errors import ScriptParseError

from .models import DictValue, Directive, ListValue, Reference, Script


class _ScriptBuilder:
    """Turns a parsed module into directives, tracking bound names."""

    def __init__(self):
        self.bound: Set[str] = set()

    def build(self, tree: ast.Module) -> List[Optional[Directive]]:
        directives = []
        for stmt in tree.body:
            directives.append(self._statement(stmt))
        return directives

    def _statement(self, stmt: ast.stmt) -> Optional[Directive]:
        if isinstance(stmt, ast.Expr):
            # Docstring-style string literals are allowed as comments
            if isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, str):
                return None
            return self._call(stmt.value)

        if isinstance(stmt, ast.Assign):
            if len(stmt.targets) != 1 or not isinstance(stmt.targets[0], ast.Name):
                raise ScriptParseError("only single-name assignment is supported", stmt.lineno)
            target = stmt.targets[0].id
            directive = self._call(stmt.value)
            self.bound.add(target)
            return Directive(
                name=directive.name,
                args=directive.args,
                kwargs=directive.kwargs,
                position=directive.position,
                target=target,
            )

        raise ScriptParseError(f"unsupported statement: {type(stmt).__name__}", stmt.lineno)

    def _call(self, node: ast.AST) -> Directive:
        line = getattr(node, "lineno", None)
        if not isinstance(node, ast.Call):
            raise ScriptParseError("expected a built-in call", line)
        if not isinstance(node.func, ast.Name):
            raise ScriptParseError("only calls to plain names are supported", line)

        args = []
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                raise ScriptParseError("*args unpacking is not supported", line)
            args.append(self._value(arg))

        kwargs = []
        seen = set()
        for keyword in node.keywords:
            if keyword.arg is None:
                raise ScriptParseError("**kwargs unpacking is not supported", line)
            if keyword.arg in seen:
                raise ScriptParseError(f"keyword argument repeated: {keyword.arg}", line)
            seen.add(keyword.arg)
            kwargs.append((keyword.arg, self._value(keyword.value)))

        return Directive(
            name=node.func.id,
            args=tuple(args),
            kwargs=tuple(kwargs),
            position=line or 0,
        )

    def _value(self, node: ast.AST) -> Any:
        line = getattr(node, "lineno", None)
        if isinstance(node, ast.Constant):
            if isinstance(node.value, (str, int, float, bool)) or node.value is None:
                return node.value
            raise ScriptParseError(f"unsupported constant: {node.value!r}", line)
        if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub):
            value = self._value(node.operand)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return -value
            raise ScriptParseError("unary minus needs a number", line)
        if isinstance(node, (ast.List, ast.Tuple)):
            return ListValue(tuple(self._value(item) for item in node.elts))
        if isinstance(node, ast.Dict):
            items = []
            for key, value in zip(node.keys, node.values):
                if key is None:
                    raise ScriptParseError("** in dict literal is not supported", line)
                items.append((self._value(key), self._value(value)))
            return DictValue(tuple(items))
        if isinstance(node, ast.Name):
            if node.id not in self.bound:
                raise ScriptParseError(f"undefined name: {node.id}", line)
            return Reference(node.id, line or 0)
        if isinstance(node, ast.Call):
            return self._call(node)
        raise ScriptParseError(f"unsupported expression: {type(node).__name__}", line)


def parse(source: Union[str, bytes, TextIO]) -> Script:
    """
    Parse flare.file source into a Script.

    Args:
        source: Script text, bytes, or a readable text stream

    Raises:
        ScriptParseError: invalid syntax or unsupported construct
    """
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        source = source.decode("utf-8")

    try:
        tree = ast.parse(source, mode="exec")
    except SyntaxError as e:
        raise ScriptParseError(f"invalid syntax: {e.msg}", e.lineno) from e

    directives = [d for d in _ScriptBuilder().build(tree) if d is not None]
    return Script(directives=tuple(directives), source=source)
