"""Single-statement execution inside an implicit transaction.

Each call checks out a fresh connection, wraps the statement in
``begin;`` … ``commit;`` (or ``rollback;``), and releases the connection on
every exit path::

    execute = make_executor(pool)
    rows = execute(query("SELECT * FROM users WHERE id = {}", param("id", 7)))

The executor keeps no state between calls.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pitwall.compose.query import Query
from pitwall.errors import EmptySql
from pitwall.execute.diagnostics import log_db_exception
from pitwall.execute.options import ExecutorOptions, PreambleStatement, resolve_options
from pitwall.execute.protocols import Connection, ConnectionPool

logger = logging.getLogger(__name__)

BEGIN = "begin;"
COMMIT = "commit;"
ROLLBACK = "rollback;"


def execute_statement(connection: Connection, statement: PreambleStatement) -> tuple[Any, str]:
    """Run a raw SQL string or a Query on ``connection``.

    Returns:
        ``(rows, log_text)`` where ``log_text`` is the raw string or the
        Query dump.
    """
    if isinstance(statement, Query):
        rows = connection.query(statement.sql, list(statement.values))
        return rows, statement.dump()
    return connection.query(statement), statement


class QueryExecutor:
    """Executes one Query per call against a connection from ``pool``.

    Args:
        pool: Any object satisfying :class:`~pitwall.execute.protocols.ConnectionPool`.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def __call__(
        self,
        query: Query,
        options: ExecutorOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> Any:
        """Execute ``query`` and return the client's rows.

        Args:
            query: The statement to run.
            options: :class:`ExecutorOptions` or an equivalent mapping.
            **overrides: Individual option values, applied over ``options``.

        Returns:
            Whatever the connection's ``query`` returned for the statement.

        Raises:
            EmptySql: If ``query.sql`` is empty; no statement is issued.
            Exception: Any error from the database client, after rollback.
        """
        opts = resolve_options(ExecutorOptions, options, overrides)
        connection = self._pool.connect()
        try:
            if not query.sql:
                if not opts.suppress_error_logging:
                    logger.error(
                        "Empty SQL. This likely means something went wrong "
                        "when building the query:\n%r",
                        query.named_parameters_sql,
                    )
                raise EmptySql()
            return self._run(connection, query, opts)
        finally:
            connection.release()

    def _run(self, connection: Connection, query: Query, opts: ExecutorOptions) -> Any:
        try:
            connection.query(BEGIN)
            for statement in opts.preamble:
                execute_statement(connection, statement)
            rows = connection.query(query.sql, list(query.values))
            connection.query(ROLLBACK if opts.auto_rollback else COMMIT)
        except Exception as exc:
            log_db_exception(exc, opts.suppress_error_logging, query)
            # A failing rollback replaces the original error; it stays chained.
            try:
                connection.query(ROLLBACK)
            except Exception as rollback_exc:
                log_db_exception(rollback_exc, opts.suppress_error_logging)
                raise
            raise
        return rows


def make_executor(pool: ConnectionPool) -> QueryExecutor:
    """Return a single-statement executor bound to ``pool``."""
    return QueryExecutor(pool)
