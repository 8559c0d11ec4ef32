"""The immutable Query value produced by the composer.

A Query stores SQL with *named* placeholder tokens plus the deduplicated
parameters those tokens refer to.  Positional numbering (``$1``, ``$2``, …)
is derived from the order of ``params`` only when ``sql`` is read, which is
what allows queries to be nested inside one another before numbering.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import cached_property
from typing import Any

from pitwall.compose.parameter import Parameter
from pitwall.compose.text import dedent


def placeholder_token(name: str) -> str:
    """Return the named placeholder token for parameter ``name``."""
    return f":param[{name}]/param:"


def positional_marker(index: int) -> str:
    """Return the positional marker for the zero-based parameter ``index``."""
    return f"${index + 1}"


def render_literal(value: Any) -> str:
    """Render ``value`` for a query dump: numbers bare, the rest quoted."""
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return f"'{value}'"


@dataclass(frozen=True)
class Query:
    """A composed SQL statement.

    Build instances with :func:`~pitwall.compose.builder.query`; direct
    construction skips parameter deduplication.

    Attributes:
        named_parameters_sql: SQL containing one placeholder token per
            parameter use (see :func:`placeholder_token`).
        params: Parameters in first-seen order, unique by name.
    """

    named_parameters_sql: str
    params: tuple[Parameter, ...] = ()

    @cached_property
    def sql(self) -> str:
        """SQL with positional ``$N`` markers, in ``params`` order."""
        sql = self.named_parameters_sql
        for index, parameter in enumerate(self.params):
            sql = sql.replace(placeholder_token(parameter.name), positional_marker(index))
        return dedent(sql)

    @cached_property
    def values(self) -> tuple[Any, ...]:
        """Parameter values in positional order, ready to bind."""
        return tuple(p.value for p in self.params)

    def dump(self) -> str:
        """Return the SQL with every marker replaced by its literal value.

        For logging and debugging only; never execute the result.
        """
        output = self.sql
        # Highest index first so that $1 does not clobber the prefix of $10.
        for index in reversed(range(len(self.params))):
            output = output.replace(
                positional_marker(index), render_literal(self.params[index].value)
            )
        return dedent(output)

    def debug(self) -> str:
        """Alias of :meth:`dump`."""
        return self.dump()
