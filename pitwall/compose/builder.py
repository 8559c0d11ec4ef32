"""Template → Query composition.

``query`` is the top-level entry point.  It accepts a template in one of two
shapes and folds it, left to right, into a :class:`~pitwall.compose.query.Query`:

* a ``str`` in :meth:`str.format` syntax, whose replacement fields are
  filled from the positional and keyword arguments::

      query("SELECT * FROM users WHERE id = {id}", id=param("id", 7))

* a sequence of N literal parts followed by N-1 values, the same calling
  convention as a tagged template literal::

      query(["SELECT * FROM users WHERE id = ", ""], param("id", 7))

Interpolated values
-------------------
Each value is classified in this order:

1. ``None``                → empty text
2. ``str`` / number        → raw text (never parameterized)
3. ``Parameter``           → placeholder token; first name wins
4. ``Query``               → its named SQL, its params merged
5. ``list`` / ``tuple``    → all Query (concatenated) or all Parameter
                             (tokens joined by ``", "``)
6. anything else           → :class:`~pitwall.errors.UnhandledCase`

Raw text is inserted verbatim, so strings must only ever carry SQL the
caller controls (identifiers, keywords, trusted fragments).  Use
:func:`~pitwall.compose.parameter.param` for data.
"""
from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from string import Formatter
from typing import Any

from pitwall.compose.parameter import Parameter
from pitwall.compose.query import Query, placeholder_token
from pitwall.compose.text import collapse_blank_lines
from pitwall.errors import (
    ArrayOfUndefined,
    InconsistentArrayTypes,
    InvalidQueryTemplate,
    UnhandledArrayType,
    UnhandledCase,
)

_FORMATTER = Formatter()


class QueryComposer:
    """Folds one template into a Query.

    Holds the parameter registry for a single composition; create a fresh
    instance per template.
    """

    def __init__(self) -> None:
        self._params: dict[str, Parameter] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compose(self, parts: Sequence[str], values: Sequence[Any]) -> Query:
        """Fold ``parts`` and ``values`` into a Query.

        Args:
            parts: N literal SQL fragments.
            values: N-1 values interpolated between consecutive fragments.

        Returns:
            The composed :class:`Query`.

        Raises:
            InvalidQueryTemplate: If ``parts`` is empty or the arity is wrong.
            QueryBuildError: (subclasses) for unsupported interpolated values.
        """
        if not isinstance(parts, Sequence) or isinstance(parts, str) or len(parts) < 1:
            raise InvalidQueryTemplate()
        if not all(isinstance(part, str) for part in parts):
            raise InvalidQueryTemplate("template parts must be strings")
        if len(values) != len(parts) - 1:
            raise InvalidQueryTemplate(
                f"expected {len(parts) - 1} values for {len(parts)} parts, got {len(values)}"
            )

        chunks = [parts[0]]
        for part, value in zip(parts[1:], values):
            chunks.append(self._render(value))
            chunks.append(part)

        return Query(
            named_parameters_sql=collapse_blank_lines("".join(chunks)),
            params=tuple(self._params.values()),
        )

    # ------------------------------------------------------------------
    # Parameter registry
    # ------------------------------------------------------------------

    def _add_param(self, parameter: Parameter) -> None:
        # If the same name is supplied more than once, the first one wins.
        self._params.setdefault(parameter.name, parameter)

    def _merge(self, nested: Query) -> str:
        for parameter in nested.params:
            self._add_param(parameter)
        return nested.named_parameters_sql

    # ------------------------------------------------------------------
    # Value dispatch
    # ------------------------------------------------------------------

    def _render(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            raise UnhandledCase(value)
        if isinstance(value, (str, int, float, Decimal)):
            return str(value)
        if isinstance(value, Parameter):
            self._add_param(value)
            return placeholder_token(value.name)
        if isinstance(value, Query):
            return self._merge(value)
        if isinstance(value, (list, tuple)):
            return self._render_sequence(value)
        raise UnhandledCase(value)

    def _render_sequence(self, values: Sequence[Any]) -> str:
        if not values:
            return ""

        # The first element decides the kind of the whole list.
        first = values[0]
        if isinstance(first, Query):
            if not all(isinstance(v, Query) for v in values):
                raise InconsistentArrayTypes()
            return "".join(self._merge(v) for v in values)
        if isinstance(first, Parameter):
            if not all(isinstance(v, Parameter) for v in values):
                raise InconsistentArrayTypes()
            return ", ".join(self._render(v) for v in values)
        if first is None:
            raise ArrayOfUndefined()
        raise UnhandledArrayType(type(first).__name__)


def _split_format_template(
    template: str,
    args: Sequence[Any],
    kwargs: dict[str, Any],
) -> tuple[list[str], list[Any]]:
    """Split a ``str.format`` template into literal parts and field values."""
    try:
        parsed = list(_FORMATTER.parse(template))
    except ValueError as exc:
        raise InvalidQueryTemplate(str(exc)) from exc

    parts = [""]
    values: list[Any] = []
    auto_index = 0
    for literal, field, format_spec, conversion in parsed:
        parts[-1] += literal
        if field is None:
            continue
        if format_spec or conversion:
            raise InvalidQueryTemplate(
                f"format specs and conversions are not supported: {{{field}}}"
            )

        key: int | str
        if field == "":
            key = auto_index
            auto_index += 1
        elif field.isdigit():
            key = int(field)
        else:
            key = field

        try:
            value = args[key] if isinstance(key, int) else kwargs[key]
        except (IndexError, KeyError):
            raise InvalidQueryTemplate(f"no value supplied for field {{{field}}}") from None

        values.append(value)
        parts.append("")
    return parts, values


def query(template: str | Sequence[str] | None = None, *values: Any, **named: Any) -> Query:
    """Build a :class:`Query` from a template and interpolated values.

    Example::

        active = query("AND active = {}", param("active", True))
        q = query(
            \"\"\"
            SELECT id, name
            FROM users
            WHERE id IN ({ids})
            {active}
            \"\"\",
            ids=param("id", [1, 2, 3]),
            active=cond(only_active)("AND active = {}", param("active", True)),
        )
        q.sql     # ... WHERE id IN ($1, $2, $3) AND active = $4

    A ``str`` template is always parsed as a format string, so literal
    braces in array or jsonb literals must be doubled, or the SQL passed in
    the list-of-parts form, which is never parsed::

        query("SELECT '{{1,2,3}}'::int[]")   # SELECT '{1,2,3}'::int[]
        query(["SELECT '{1,2,3}'::int[]"])

    Args:
        template: A ``str.format`` template, or a sequence of literal parts.
        *values: Positional field values, or the N-1 values for N parts.
        **named: Named field values (``str`` templates only).

    Returns:
        The composed :class:`Query`.

    Raises:
        InvalidQueryTemplate: If the template is missing, empty or malformed.
        QueryBuildError: (subclasses) for unsupported interpolated values.
    """
    if isinstance(template, str):
        parts, field_values = _split_format_template(template, values, named)
        return QueryComposer().compose(parts, field_values)
    if named:
        raise InvalidQueryTemplate("named values require a str template")
    return QueryComposer().compose(template, values)  # type: ignore[arg-type]
