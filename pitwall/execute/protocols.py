"""Interfaces the executor and transactions need from a database client.

Any pool whose connections expose ``query(text, values)`` and ``release()``
works; :mod:`pitwall.adapters.postgres` provides one for psycopg.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """A connection checked out of a :class:`ConnectionPool`."""

    def query(self, text: str, values: Sequence[Any] | None = None) -> Any:
        """Execute ``text`` with positional ``$N`` values bound; return the rows.

        Raises whatever the underlying client raises on SQL errors.
        """

    def release(self) -> None:
        """Return the connection to its pool.  Called at most once."""


@runtime_checkable
class ConnectionPool(Protocol):
    """Source of connections."""

    def connect(self) -> Connection:
        """Check out a connection; raises on exhaustion or network errors."""
