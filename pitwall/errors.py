"""Custom exception hierarchy for pitwall.

All public errors inherit from PitwallError so callers can catch the base
class for any pitwall-specific failure.  Each error carries a stable
machine-readable ``code``; branch on the code, never on the message text.

Errors raised by the database client itself are never wrapped; they
propagate to the caller unchanged.
"""
from __future__ import annotations

from typing import Any

LIBRARY_NAME = "pitwall"


class PitwallError(Exception):
    """Base exception for all pitwall errors.

    Args:
        message: Human-readable description.
        code: Machine-readable error code (e.g. ``EMPTY_SQL``).
        details: Extra context about the failure.
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


# ---------------------------------------------------------------------------
# Query composition
# ---------------------------------------------------------------------------


class QueryBuildError(PitwallError):
    """Base for errors raised while composing a Query."""


class InvalidQueryTemplate(QueryBuildError):
    """Raised when the template is missing, empty or malformed."""

    def __init__(self, reason: str | None = None) -> None:
        message = (
            f"{LIBRARY_NAME}: invalid query template. "
            "This likely means you have an empty query."
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(
            message,
            code="INVALID_QUERY_TEMPLATE",
            details={"reason": reason} if reason else {},
        )


class InvalidParameter(QueryBuildError):
    """Raised when a parameter is created without a usable name."""

    def __init__(self, name: Any) -> None:
        super().__init__(
            f"{LIBRARY_NAME}: parameter name must be a non-empty string, got {name!r}.",
            code="INVALID_PARAMETER",
            details={"name": name},
        )


class InconsistentArrayTypes(QueryBuildError):
    """Raised when an interpolated list mixes queries and parameters."""

    def __init__(self) -> None:
        super().__init__(
            f"{LIBRARY_NAME}: When providing an array of values, "
            "all values must be the same type.",
            code="INCONSISTENT_ARRAY_TYPES",
        )


class ArrayOfUndefined(QueryBuildError):
    """Raised when an interpolated list starts with ``None``.

    Usually a list comprehension or ``map`` whose function forgot to return
    the sub-query.
    """

    def __init__(self) -> None:
        super().__init__(
            f"{LIBRARY_NAME}: Invalid query building. Array of None. "
            "Make sure you are returning a value, "
            "e.g. `[query(...) for row in rows]`.",
            code="ARRAY_OF_UNDEFINED",
        )


class UnhandledArrayType(QueryBuildError):
    """Raised when an interpolated list holds neither queries nor parameters."""

    def __init__(self, value_type: str) -> None:
        super().__init__(
            f"{LIBRARY_NAME}: query builder unhandled array of types: {value_type}. "
            "Maybe you intended to use param() or query()?",
            code="UNHANDLED_ARRAY_TYPE",
            details={"value_type": value_type},
        )


class UnhandledCase(QueryBuildError):
    """Raised when an interpolated value has an unsupported type."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"{LIBRARY_NAME}: query builder unhandled case: {value!r}",
            code="UNHANDLED_CASE",
            details={"value": value, "value_type": type(value).__name__},
        )


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class ExecutionError(PitwallError):
    """Base for errors raised by the executor and transactions."""


class EmptySql(ExecutionError):
    """Raised when asked to execute a Query whose SQL is empty."""

    def __init__(self) -> None:
        super().__init__(
            f"{LIBRARY_NAME} query execution error: Empty SQL",
            code="EMPTY_SQL",
        )


class NoTransactionInProgress(ExecutionError):
    """Raised when operating on a transaction that is not in progress."""

    def __init__(self, transaction_id: str | None = None) -> None:
        super().__init__(
            f"{LIBRARY_NAME}: no transaction in progress",
            code="NO_TRANSACTION_IN_PROGRESS",
            details={"transaction_id": transaction_id} if transaction_id else {},
        )


class InvalidTransaction(ExecutionError):
    """Raised by :func:`~pitwall.execute.transaction.validate_transaction`."""

    def __init__(self, value_type: str) -> None:
        super().__init__(
            f"{LIBRARY_NAME}: invalid transaction",
            code="INVALID_TRANSACTION",
            details={"value_type": value_type},
        )
