"""Configuration models for the executor and transactions.

Both factories accept an options instance, a plain mapping, or keyword
overrides, merged over the documented defaults::

    execute(q, ExecutorOptions(auto_rollback=True))
    execute(q, {"auto_rollback": True})
    execute(q, auto_rollback=True)

Unknown keys are rejected by pydantic.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar, Union

from pydantic import BaseModel, ConfigDict, InstanceOf

from pitwall.compose.query import Query

#: A preamble entry: raw SQL text, or a Query executed with its parameters.
PreambleStatement = Union[str, InstanceOf[Query]]

_OptionsT = TypeVar("_OptionsT", bound="ExecutorOptions")


class ExecutorOptions(BaseModel):
    """Options for a single-statement execution.

    Attributes:
        auto_rollback: Roll back instead of committing after the statement
            succeeds (dry runs and tests).
        suppress_error_logging: Do not log the failing query and error.
        preamble: Statements run after ``begin;`` and before the main
            statement, e.g. ``SET LOCAL`` settings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    auto_rollback: bool = False
    suppress_error_logging: bool = False
    preamble: tuple[PreambleStatement, ...] = ()


class TransactionOptions(ExecutorOptions):
    """Options for :func:`~pitwall.execute.transaction.begin_transaction`.

    Attributes:
        auto_rollback: Make :meth:`Transaction.commit` roll back instead.
        enable_console_tracing: Log each lifecycle step of the transaction.
        enable_query_logging: Record the text (or dump) of every statement
            issued in :attr:`Transaction.query_log`.
        disable_rollback_and_commit: Turn ``commit()`` and ``rollback()``
            into no-ops that only record they were called.  For test
            harnesses that wrap code under test in an outer transaction.
    """

    enable_console_tracing: bool = False
    enable_query_logging: bool = False
    disable_rollback_and_commit: bool = False


def resolve_options(
    model: type[_OptionsT],
    options: _OptionsT | Mapping[str, Any] | None,
    overrides: Mapping[str, Any],
) -> _OptionsT:
    """Merge ``options`` and keyword ``overrides`` into a validated ``model``."""
    # Iterating a model yields (field, value) pairs without serialising Queries.
    base: dict[str, Any] = dict(options) if options is not None else {}
    return model(**{**base, **overrides})
