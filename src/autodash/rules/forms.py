"""Helpers for the nested list forms used in rule definitions.

Metric, filter and breakout bodies are written as nested lists, e.g.
``["sum", ["dimension", "Income"]]``. A ``["dimension", <Identifier>]`` node
refers to a bound dimension and is replaced by a concrete field reference
when a query is built.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

MAX_SCORE = 100

DIMENSION = "dimension"


def is_dimension_form(form: Any) -> bool:
    """Whether ``form`` is a ``["dimension", "<Identifier>"]`` node."""
    return (
        isinstance(form, (list, tuple))
        and len(form) == 2
        and isinstance(form[0], str)
        and form[0].lower() == DIMENSION
        and isinstance(form[1], str)
    )


def dimension_form(identifier: str) -> list[str]:
    return [DIMENSION, identifier]


def collect_dimensions(form: Any) -> list[str]:
    """Identifiers of every dimension referenced anywhere in ``form``.

    Order of first appearance is preserved and duplicates are dropped.
    """
    found: dict[str, None] = {}

    def visit(node: Any) -> None:
        if is_dimension_form(node):
            found.setdefault(node[1], None)
        elif isinstance(node, (list, tuple)):
            for child in node:
                visit(child)
        elif isinstance(node, dict):
            for child in node.values():
                visit(child)

    visit(form)
    return list(found)


def postwalk(form: Any, fn: Callable[[Any], Any]) -> Any:
    """Rebuild ``form`` bottom-up, applying ``fn`` to every node after its children."""
    if isinstance(form, (list, tuple)):
        return fn([postwalk(child, fn) for child in form])
    if isinstance(form, dict):
        return fn({key: postwalk(value, fn) for key, value in form.items()})
    return fn(form)
