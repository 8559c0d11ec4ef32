"""PostgreSQL connection pool adapter built on psycopg 3.

Install the optional dependency before using this module::

    pip install "pitwall[postgres]"

Example::

    from pitwall import begin_transaction, make_executor, param, query
    from pitwall.adapters.postgres import PostgresPool

    with PostgresPool("postgresql://user:pw@localhost/app") as pool:
        execute = make_executor(pool)
        rows = execute(query("SELECT {}::int + 1", param("n", 41)))

Pooled connections run in autocommit mode because the executor and
transactions issue ``begin;`` / ``commit;`` / ``rollback;`` themselves.
Statements go through :class:`psycopg.RawCursor`, which accepts the native
``$1, $2, …`` placeholders that :attr:`pitwall.Query.sql` produces.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from psycopg import Connection as PsycopgConnection
    from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)


class PostgresConnection:
    """A pooled psycopg connection exposing ``query`` and ``release``."""

    def __init__(self, pool: ConnectionPool, connection: PsycopgConnection) -> None:
        self._pool = pool
        self._connection = connection
        self._released = False

    @property
    def raw(self) -> PsycopgConnection:
        """The underlying psycopg connection."""
        return self._connection

    def query(self, text: str, values: Sequence[Any] | None = None) -> list[Any]:
        """Execute ``text`` with ``values`` bound to ``$1, $2, …``.

        Returns:
            All result rows, or ``[]`` for statements that return none.
        """
        with self._connection.cursor() as cursor:
            cursor.execute(text, list(values) if values else None)
            if cursor.description is None:
                return []
            return cursor.fetchall()

    def release(self) -> None:
        """Return the connection to the pool; later calls do nothing."""
        if self._released:
            return
        self._released = True
        self._pool.putconn(self._connection)


class PostgresPool:
    """:class:`~pitwall.execute.protocols.ConnectionPool` over ``psycopg_pool``.

    Args:
        conninfo: libpq connection string or URL.
        min_size: Minimum number of pooled connections.
        max_size: Maximum number of pooled connections.
        timeout: Seconds to wait for a free connection in :meth:`connect`.
        row_factory: Optional psycopg row factory (e.g. ``dict_row``).
        **pool_kwargs: Passed through to :class:`psycopg_pool.ConnectionPool`.

    Raises:
        ImportError: If ``psycopg`` or ``psycopg_pool`` is not installed.
    """

    def __init__(
        self,
        conninfo: str,
        *,
        min_size: int = 1,
        max_size: int = 10,
        timeout: float = 30.0,
        row_factory: Any = None,
        **pool_kwargs: Any,
    ) -> None:
        try:
            from psycopg import RawCursor
            from psycopg_pool import ConnectionPool as _ConnectionPool
        except ImportError as exc:
            raise ImportError(
                "psycopg and psycopg_pool are required for PostgresPool. "
                'Install them with: pip install "pitwall[postgres]"'
            ) from exc

        connection_kwargs: dict[str, Any] = {"autocommit": True, "cursor_factory": RawCursor}
        if row_factory is not None:
            connection_kwargs["row_factory"] = row_factory

        self._timeout = timeout
        self._pool = _ConnectionPool(
            conninfo,
            min_size=min_size,
            max_size=max_size,
            kwargs=connection_kwargs,
            open=True,
            **pool_kwargs,
        )
        logger.debug("Opened PostgreSQL pool (min_size=%d, max_size=%d)", min_size, max_size)

    def connect(self) -> PostgresConnection:
        """Check out a connection, waiting up to ``timeout`` seconds."""
        return PostgresConnection(self._pool, self._pool.getconn(timeout=self._timeout))

    def close(self) -> None:
        """Close the pool and every connection in it."""
        self._pool.close()
        logger.debug("Closed PostgreSQL pool")

    def __enter__(self) -> PostgresPool:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
