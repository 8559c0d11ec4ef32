"""Explicit transactions holding one connection across many statements.

Lifecycle
---------
::

    NOT_STARTED ──begin──▶ STARTED ──commit()────────▶ COMMITTED
                              │    ──rollback()──────▶ ROLLED_BACK
                              │    ──query failure───▶ ROLLED_BACK
                              └────rollback failure──▶ FAILED_TO_ROLLBACK

``STARTED`` is entered once a connection has been acquired; a failure
during ``begin;`` or the preamble rolls back and releases before the error
reaches the caller, so no Transaction is ever returned in that case.  The
connection is held until the first terminal transition and released exactly
once.  Every operation after that raises
:class:`~pitwall.errors.NoTransactionInProgress`.

Usage::

    begin = begin_transaction(pool)
    with begin(preamble=["SET LOCAL statement_timeout = 5000"]) as tx:
        tx.execute_query(query("INSERT INTO a (x) VALUES ({})", param("x", 1)))
        tx.execute_query(query("UPDATE b SET n = n + 1"))
    # committed here, or rolled back if the block raised

A Transaction is not thread-safe.  It must be driven by a single caller;
concurrent ``execute_query`` / ``commit`` / ``rollback`` calls on the same
instance are outside its contract and are not guarded by a lock.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pitwall.compose.query import Query
from pitwall.errors import InvalidTransaction, NoTransactionInProgress
from pitwall.execute.diagnostics import Tracer, log_db_exception
from pitwall.execute.executor import BEGIN, COMMIT, ROLLBACK, execute_statement
from pitwall.execute.options import TransactionOptions, resolve_options
from pitwall.execute.protocols import Connection, ConnectionPool

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    """Lifecycle states of a :class:`Transaction`."""

    NOT_STARTED = "NOT_STARTED"
    STARTED = "STARTED"
    ROLLED_BACK = "ROLLED_BACK"
    COMMITTED = "COMMITTED"
    FAILED_TO_ROLLBACK = "FAILED_TO_ROLLBACK"


def _new_transaction_id() -> str:
    return str(uuid.uuid4())


class Transaction:
    """A database transaction bound to one held connection.

    Create instances with :func:`begin_transaction`; the constructor does not
    touch the database.

    Args:
        pool: Connection source.
        options: Validated transaction options.
        transaction_id: Identifier used in traces; a UUID4 by default.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        options: TransactionOptions,
        transaction_id: str | None = None,
    ) -> None:
        self._pool = pool
        self._options = options
        self._id = transaction_id or _new_transaction_id()
        self._connection: Connection | None = None
        self._in_progress = False
        self._state = TransactionState.NOT_STARTED
        self._was_commit_called = False
        self._was_rollback_called = False
        self._execution_count = 0
        self._query_log: list[str] = []
        self._enable_query_logging = options.enable_query_logging
        self._disable_rollback_and_commit = options.disable_rollback_and_commit
        self._trace = Tracer(self._id, options.enable_console_tracing, logger)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def execute_query(self, query: Query) -> Any:
        """Execute ``query`` on the held connection and return its rows.

        On failure the transaction is rolled back and the connection
        released before the error is re-raised.

        Raises:
            NoTransactionInProgress: If the transaction has already ended.
        """
        connection = self._ensure_in_progress()
        self._execution_count += 1
        if self._enable_query_logging:
            self._log_statement(query.dump())
        try:
            rows = connection.query(query.sql, list(query.values))
        except Exception as exc:
            log_db_exception(exc, self._options.suppress_error_logging, query)
            self._abort()
            raise
        self._trace("query executed")
        return rows

    def commit(self) -> None:
        """Commit the transaction, or roll it back when ``auto_rollback`` is set.

        Raises:
            NoTransactionInProgress: If the transaction has already ended.
        """
        self._was_commit_called = True
        self._ensure_in_progress()
        if self._disable_rollback_and_commit:
            self._trace("disable_rollback_and_commit is set, commit ignored")
            return

        self._trace("commit")
        try:
            if self._options.auto_rollback:
                self._trace("commit -> auto_rollback override")
                self._issue(ROLLBACK)
                self._state = TransactionState.ROLLED_BACK
            else:
                self._issue(COMMIT)
                self._state = TransactionState.COMMITTED
        except Exception as exc:
            log_db_exception(exc, self._options.suppress_error_logging)
            self._abort()
            raise
        finally:
            self._finish()

    def rollback(self) -> None:
        """Roll the transaction back.

        A failing rollback leaves the transaction in ``FAILED_TO_ROLLBACK``;
        the connection is released either way.

        Raises:
            NoTransactionInProgress: If the transaction has already ended.
        """
        self._was_rollback_called = True
        self._ensure_in_progress()
        if self._disable_rollback_and_commit:
            self._trace("disable_rollback_and_commit is set, rollback ignored")
            return

        self._trace("rollback")
        try:
            self._issue(ROLLBACK)
            self._state = TransactionState.ROLLED_BACK
        except Exception as exc:
            log_db_exception(exc, self._options.suppress_error_logging)
            self._state = TransactionState.FAILED_TO_ROLLBACK
            raise
        finally:
            self._finish()

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> Transaction:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if not self._in_progress:
            return
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_in_progress(self) -> bool:
        return self._in_progress

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def was_commit_called(self) -> bool:
        return self._was_commit_called

    @property
    def was_rollback_called(self) -> bool:
        return self._was_rollback_called

    @property
    def execution_count(self) -> int:
        """Number of :meth:`execute_query` calls, failed ones included."""
        return self._execution_count

    @property
    def query_log(self) -> tuple[str, ...]:
        """Statements issued while query logging was enabled, in order."""
        return tuple(self._query_log)

    @property
    def auto_rollback(self) -> bool:
        return self._options.auto_rollback

    @property
    def suppress_error_logging(self) -> bool:
        return self._options.suppress_error_logging

    @property
    def enable_tracing(self) -> bool:
        return self._options.enable_console_tracing

    @property
    def enable_query_logging(self) -> bool:
        return self._enable_query_logging

    @enable_query_logging.setter
    def enable_query_logging(self, value: bool) -> None:
        self._enable_query_logging = bool(value)

    @property
    def disable_rollback_and_commit(self) -> bool:
        return self._disable_rollback_and_commit

    @disable_rollback_and_commit.setter
    def disable_rollback_and_commit(self, value: bool) -> None:
        self._disable_rollback_and_commit = bool(value)

    def dump_queries(self) -> str:
        """Log every recorded statement and return them newline-joined."""
        for statement in self._query_log:
            logger.info("%s", statement)
        return "\n".join(self._query_log)

    def __repr__(self) -> str:
        return f"<Transaction id={self._id} state={self._state.value}>"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start(self) -> None:
        suppress = self._options.suppress_error_logging
        try:
            connection = self._pool.connect()
        except Exception as exc:
            log_db_exception(exc, suppress)
            raise

        self._connection = connection
        self._in_progress = True
        self._state = TransactionState.STARTED
        self._trace("client connected")

        try:
            self._issue(BEGIN)
            self._trace("transaction begun")
            if self._options.preamble:
                self._trace("running preamble")
            for statement in self._options.preamble:
                _, text = execute_statement(connection, statement)
                self._log_statement(text)
        except Exception as exc:
            log_db_exception(exc, suppress)
            self._abort()
            raise

    def _ensure_in_progress(self) -> Connection:
        if not self._in_progress or self._connection is None:
            raise NoTransactionInProgress(self._id)
        return self._connection

    def _issue(self, text: str) -> Any:
        # Only statements that succeeded are recorded.
        rows = self._ensure_in_progress().query(text)
        self._log_statement(text)
        return rows

    def _log_statement(self, text: str) -> None:
        if self._enable_query_logging:
            self._query_log.append(text)

    def _abort(self) -> None:
        """Roll back after a failure, then release the connection."""
        try:
            self._issue(ROLLBACK)
        except Exception as exc:
            log_db_exception(exc, self._options.suppress_error_logging)
            self._state = TransactionState.FAILED_TO_ROLLBACK
            raise
        else:
            self._state = TransactionState.ROLLED_BACK
            self._trace("rolled back because of exception")
        finally:
            self._finish()

    def _finish(self) -> None:
        self._in_progress = False
        connection, self._connection = self._connection, None
        if connection is not None:
            connection.release()
            self._trace("client released")


def begin_transaction(
    pool: ConnectionPool,
    id_factory: Callable[[], str] = _new_transaction_id,
) -> Callable[..., Transaction]:
    """Return a function that starts transactions on ``pool``.

    The returned callable accepts :class:`TransactionOptions`, an equivalent
    mapping, and/or keyword overrides, and returns a started
    :class:`Transaction`::

        begin = begin_transaction(pool)
        tx = begin(enable_query_logging=True)

    Args:
        pool: Connection source.
        id_factory: Produces transaction identifiers.

    Returns:
        ``begin(options=None, **overrides) -> Transaction``.
    """

    def begin(
        options: TransactionOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> Transaction:
        opts = resolve_options(TransactionOptions, options, overrides)
        transaction = Transaction(pool, opts, transaction_id=id_factory())
        transaction._start()
        return transaction

    return begin


def is_valid_transaction(value: Any) -> bool:
    """Return True if ``value`` is a :class:`Transaction`."""
    return isinstance(value, Transaction)


def validate_transaction(value: Any) -> None:
    """Raise :class:`~pitwall.errors.InvalidTransaction` unless ``value`` is a Transaction."""
    if not is_valid_transaction(value):
        raise InvalidTransaction(type(value).__name__)
