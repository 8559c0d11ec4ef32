"""pitwall execution layer: single statements and explicit transactions."""
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

__all__ = [
    "Connection",
    "ConnectionPool",
    "ExecutorOptions",
    "QueryExecutor",
    "Transaction",
    "TransactionOptions",
    "TransactionState",
    "begin_transaction",
    "is_valid_transaction",
    "make_executor",
    "validate_transaction",
]
