# tree_catalog/templates.py
"""
HTML template store.

Templates are loaded once from a directory and kept in memory, keyed by
file name. A template marks substitutions with ``<%- expression %>``;
each marker is replaced by the string value of its expression, where
the render context is available as ``context``::

    <h1><%- context.title %></h1>
    <div class="trees"><%- context.imageTags %></div>

Expressions are parsed with :mod:`ast` and evaluated by a small
whitelist: the name ``context``, attribute and subscript lookups,
string/number literals and ``+``. Nothing in a template can call a
function or reach anything other than the context it was given.
"""

from __future__ import annotations

import ast
import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel

from .exceptions import StartupError, TemplateNotFoundError, TemplateRenderError

logger = logging.getLogger(__name__)

MARKER_RE = re.compile(r"<%-(.+?)%>", re.DOTALL)
CONTEXT_NAME = "context"


def _lookup(value: Any, key: Any, expression: str) -> Any:
    """Resolve one ``.key`` or ``[key]`` step."""
    if isinstance(key, str) and key.startswith("_"):
        raise TemplateRenderError(f"Private field {key!r} in expression: {expression}")
    if isinstance(value, Mapping):
        if key in value:
            return value[key]
    elif isinstance(value, BaseModel):
        if isinstance(key, str) and key in type(value).model_fields:
            return getattr(value, key)
    elif isinstance(value, Sequence) and not isinstance(value, str):
        if isinstance(key, int) and -len(value) <= key < len(value):
            return value[key]
    raise TemplateRenderError(f"Undefined field {key!r} in expression: {expression}")


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _evaluate(node: ast.AST, context: Any, expression: str) -> Any:
    if isinstance(node, ast.Expression):
        return _evaluate(node.body, context, expression)
    if isinstance(node, ast.Name):
        if node.id != CONTEXT_NAME:
            raise TemplateRenderError(f"Unknown name {node.id!r} in expression: {expression}")
        return context
    if isinstance(node, ast.Constant) and isinstance(node.value, (str, int, float)):
        return node.value
    if isinstance(node, ast.Attribute):
        return _lookup(_evaluate(node.value, context, expression), node.attr, expression)
    if isinstance(node, ast.Subscript):
        key = _evaluate(node.slice, context, expression)
        return _lookup(_evaluate(node.value, context, expression), key, expression)
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Add):
        left = _evaluate(node.left, context, expression)
        right = _evaluate(node.right, context, expression)
        if isinstance(left, str) or isinstance(right, str):
            return _stringify(left) + _stringify(right)
        if isinstance(left, (int, float)) and isinstance(right, (int, float)):
            return left + right
        raise TemplateRenderError(f"Unsupported operands for '+' in expression: {expression}")
    raise TemplateRenderError(
        f"Unsupported syntax {type(node).__name__} in expression: {expression}"
    )


def evaluate_expression(expression: str, context: Any) -> str:
    """Evaluate a single marker expression and return its string value."""
    source = expression.strip()
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as exc:
        raise TemplateRenderError(f"Invalid expression {source!r}: {exc.msg}") from exc
    return _stringify(_evaluate(tree, context, source))


class TemplateStore:
    """In-memory mapping of template name to raw template text."""

    def __init__(self) -> None:
        self._templates: Dict[str, str] = {}

    def load_all(self, directory: Path) -> None:
        directory = Path(directory)
        try:
            paths = [p for p in directory.iterdir() if p.is_file()]
            for path in paths:
                self._templates[path.name] = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StartupError(f"Cannot load templates from {directory}: {exc}") from exc
        logger.info("Loaded %d templates from %s", len(self._templates), directory)

    def names(self) -> List[str]:
        return list(self._templates)

    def render(self, template_name: str, context: Any) -> str:
        """Render ``template_name`` with ``context`` bound as ``context``.

        Raises
        ------
        TemplateNotFoundError
            If no template with that name was loaded.
        TemplateRenderError
            If any marker holds an invalid expression or refers to a
            field the context does not have.
        """
        try:
            template = self._templates[template_name]
        except KeyError:
            raise TemplateNotFoundError(template_name) from None
        return MARKER_RE.sub(
            lambda m: evaluate_expression(m.group(1), context), template
        )
