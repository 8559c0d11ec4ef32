"""Test fixtures: an in-memory connection pool that records every statement."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any


class StubDatabaseError(Exception):
    """Raised by :class:`StubConnection` for statements marked to fail."""


class StubConnection:
    """Connection double that records statements into its pool."""

    def __init__(self, pool: StubPool) -> None:
        self._pool = pool
        self.release_count = 0

    def query(self, text: str, values: Sequence[Any] | None = None) -> list[Any]:
        self._pool.statements.append(text)
        self._pool.calls.append((text, values))
        if any(marker in text for marker in self._pool.fail_on):
            raise StubDatabaseError(f"unit test error intentionally thrown: {text}")
        return list(self._pool.rows)

    def release(self) -> None:
        self.release_count += 1


class StubPool:
    """Connection pool double.

    Args:
        fail_on: Substrings; any statement containing one raises
            :class:`StubDatabaseError` (after being recorded).
        rows: Rows returned by every successful statement.
        connect_error: Raised by :meth:`connect` when set.
    """

    def __init__(
        self,
        fail_on: Iterable[str] = (),
        rows: Iterable[Any] = (),
        connect_error: Exception | None = None,
    ) -> None:
        self.fail_on = tuple(fail_on)
        self.rows = tuple(rows)
        self.connect_error = connect_error
        self.statements: list[str] = []
        self.calls: list[tuple[str, Sequence[Any] | None]] = []
        self.connections: list[StubConnection] = []

    def connect(self) -> StubConnection:
        if self.connect_error is not None:
            raise self.connect_error
        connection = StubConnection(self)
        self.connections.append(connection)
        return connection

    @property
    def release_count(self) -> int:
        """Total ``release()`` calls across every connection handed out."""
        return sum(c.release_count for c in self.connections)
