"""Conditional and no-op fragments for use inside another template.

``cond`` and ``cond_fn`` return *template functions*: callables with the
same signature as :func:`~pitwall.compose.builder.query` that return either
a composed Query or ``None``.  ``None`` interpolates as empty text, so a
disabled fragment contributes neither SQL nor parameters::

    q = query(
        "SELECT 1 {extra} FROM a",
        extra=cond(include_extra)(", 2"),
    )
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pitwall.compose.builder import query
from pitwall.compose.query import Query

#: A function applied to a template and values, returning a Query or nothing.
TemplateFn = Callable[..., "Query | None"]


def cond(condition: Any) -> TemplateFn:
    """Return a template function that composes only when ``condition`` is true.

    Args:
        condition: Evaluated for truthiness when the template function is built.

    Returns:
        A callable taking ``(template, *values, **named)``.
    """

    def template_fn(template: Any = None, *values: Any, **named: Any) -> Query | None:
        if condition:
            return query(template, *values, **named)
        return None

    return template_fn


def cond_fn(predicate: Callable[[Any], Any]) -> Callable[[Any], TemplateFn]:
    """Curried form of :func:`cond` driven by a predicate.

    Example::

        is_column_included = cond_fn(lambda column: column in columns)
        query("SELECT 1 {c} FROM a", c=is_column_included("total")(", total"))

    Args:
        predicate: Called with the input when the template function runs.

    Returns:
        A callable that takes the predicate input and returns a template
        function.
    """

    def bind(predicate_input: Any) -> TemplateFn:
        def template_fn(template: Any = None, *values: Any, **named: Any) -> Query | None:
            if predicate(predicate_input):
                return query(template, *values, **named)
            return None

        return template_fn

    return bind


def comment(*_args: Any, **_kwargs: Any) -> str:
    """Document a template in place; always interpolates as empty text."""
    return ""
