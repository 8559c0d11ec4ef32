"""Named query parameters.

A :class:`Parameter` is bound positionally when its enclosing
:class:`~pitwall.compose.query.Query` is executed.  Parameters are
identified by name: interpolating two parameters with the same name into
one query keeps only the first.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pitwall.errors import InvalidParameter


@dataclass(frozen=True)
class Parameter:
    """A named, typed value bound positionally at execution time.

    Attributes:
        name: Unique name within a query (e.g. ``'user_id'``).
        value: The scalar value sent to the database.
        type: Free-form type hint (e.g. ``'Int'``); informational only.
    """

    name: str
    value: Any
    type: str = ""


def param(name: str, value: Any, type: str = "") -> Parameter | list[Parameter]:
    """Create a parameter, or one parameter per element of a list.

    A list or tuple value expands to parameters named ``name_0``,
    ``name_1``, … in order.  Interpolating that list renders the
    placeholders joined by ``", "``, which is how ``IN (...)`` clauses
    are written::

        query("SELECT * FROM a WHERE id IN ({})", param("id", [1, 2, 3]))

    Args:
        name: Parameter name; must be a non-empty string.
        value: Scalar value, or a list/tuple of scalar values.
        type: Optional type hint copied onto every created parameter.

    Returns:
        A single :class:`Parameter`, or a list of them for sequence values.

    Raises:
        InvalidParameter: If ``name`` is empty or not a string.
    """
    if not isinstance(name, str) or not name:
        raise InvalidParameter(name)
    if isinstance(value, (list, tuple)):
        return [
            Parameter(name=f"{name}_{index}", value=item, type=type)
            for index, item in enumerate(value)
        ]
    return Parameter(name=name, value=value, type=type)
