"""pitwall – composable parameterized SQL with explicit transaction control.

Build queries from fragments, never from string concatenation.

Public API
----------
``query``
    Compose a :class:`Query` from a template and interpolated values
    (raw text, parameters, nested queries, lists of either).

``param``
    Create a named :class:`Parameter` (or one per element of a list).

``cond`` / ``cond_fn`` / ``comment``
    Conditionally included and no-op fragments.

``make_executor``
    Run one Query inside an implicit ``begin`` / ``commit`` bracket.

``begin_transaction``
    Start a :class:`Transaction` that holds a connection across many queries.

Example::

    import pitwall
    from pitwall.adapters.postgres import PostgresPool

    pool = PostgresPool(dsn)
    q = pitwall.query(
        "SELECT * FROM orders WHERE customer_id = {cid} {recent}",
        cid=pitwall.param("cid", 42),
        recent=pitwall.cond(only_recent)("AND created_at > now() - interval '7 days'"),
    )
    rows = pitwall.make_executor(pool)(q)
"""

from __future__ import annotations

import logging

from pitwall.compose.builder import QueryComposer, query
from pitwall.compose.helpers import comment, cond, cond_fn
from pitwall.compose.parameter import Parameter, param
from pitwall.compose.query import Query
from pitwall.compose.text import canonicalize
from pitwall.errors import (
    ArrayOfUndefined,
    EmptySql,
    ExecutionError,
    InconsistentArrayTypes,
    InvalidParameter,
    InvalidQueryTemplate,
    InvalidTransaction,
    NoTransactionInProgress,
    PitwallError,
    QueryBuildError,
    UnhandledArrayType,
    UnhandledCase,
)
from pitwall.execute.executor import QueryExecutor, make_executor
from pitwall.execute.options import ExecutorOptions, TransactionOptions
from pitwall.execute.protocols import Connection, ConnectionPool
from pitwall.execute.transaction import (
    Transaction,
    TransactionState,
    begin_transaction,
    is_valid_transaction,
    validate_transaction,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Composition
    "query",
    "param",
    "cond",
    "cond_fn",
    "comment",
    "canonicalize",
    "Query",
    "Parameter",
    "QueryComposer",
    # Execution
    "make_executor",
    "QueryExecutor",
    "ExecutorOptions",
    "begin_transaction",
    "Transaction",
    "TransactionOptions",
    "TransactionState",
    "is_valid_transaction",
    "validate_transaction",
    # Collaborator protocols
    "Connection",
    "ConnectionPool",
    # Errors
    "PitwallError",
    "QueryBuildError",
    "InvalidQueryTemplate",
    "InvalidParameter",
    "InconsistentArrayTypes",
    "ArrayOfUndefined",
    "UnhandledArrayType",
    "UnhandledCase",
    "ExecutionError",
    "EmptySql",
    "NoTransactionInProgress",
    "InvalidTransaction",
]
