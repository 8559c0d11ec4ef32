"""Diagnostic logging shared by the executor and transactions."""
from __future__ import annotations

import logging

from pitwall.compose.query import Query

logger = logging.getLogger(__name__)

TRACE_PREFIX = "pitwall trace:"


def log_db_exception(
    error: BaseException,
    suppress_error_logging: bool = False,
    query: Query | None = None,
) -> None:
    """Log a failed statement and the error it raised.

    Args:
        error: The exception raised by the database client.
        suppress_error_logging: When True, log nothing.
        query: The statement that failed, dumped with literal values.
    """
    if suppress_error_logging:
        return
    if query is not None:
        logger.error("Failed query:\n%s", query.dump())
    logger.error("DB Error: %s", error)


class Tracer:
    """Writes transaction lifecycle messages when tracing is enabled.

    Args:
        transaction_id: Included in every message.
        enabled: When False, :meth:`__call__` does nothing.
        log: Logger to write to; defaults to this module's logger.
    """

    def __init__(
        self,
        transaction_id: str,
        enabled: bool = False,
        log: logging.Logger | None = None,
    ) -> None:
        self.transaction_id = transaction_id
        self.enabled = enabled
        self._log = log or logger

    def __call__(self, message: str) -> None:
        if self.enabled:
            self._log.info("%s [%s] %s", TRACE_PREFIX, self.transaction_id, message)
