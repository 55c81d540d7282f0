"""Logging for sqlinclude.

Every module logs through a child of the ``sqlinclude`` logger. Records carry
their context in an ``extra_fields`` mapping, and the fields naming a
statement (its name, operation kind, location, source or file path) are lifted
to top-level keys by :class:`StructuredFormatter` so compile and execution
logs can be filtered per statement.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlinclude._serialization import encode_json

if TYPE_CHECKING:
    from collections.abc import Iterable
    from logging import LogRecord
    from typing import TextIO

__all__ = (
    "ROOT_LOGGER_NAME",
    "STATEMENT_FIELDS",
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
)

ROOT_LOGGER_NAME = "sqlinclude"

STATEMENT_FIELDS = ("statement", "operation", "location", "source", "path")
"""Extra fields emitted as top-level keys of a structured record, in this order"""

SQL_FIELD = "sql"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

correlation_id_var: ContextVar[str | None] = ContextVar("sqlinclude_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    """Tag records logged in the current context, e.g. with a request ID.

    Args:
        correlation_id: The correlation ID to set, or None to clear
    """
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line.

    Statement fields (see ``STATEMENT_FIELDS``) become top-level keys. Any
    other extra field is nested under ``context``. The SQL text logged by
    executing operations is dropped unless ``include_sql`` is set, as it can be
    long and may embed literals.
    """

    def __init__(self, include_sql: bool = False, datefmt: str | None = None) -> None:
        super().__init__(datefmt=datefmt)
        self.include_sql = include_sql

    def format(self, record: LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = dict(getattr(record, "extra_fields", None) or {})
        if not self.include_sql:
            context.pop(SQL_FIELD, None)
        for key in STATEMENT_FIELDS:
            value = context.pop(key, None)
            if value is not None:
                entry[key] = value

        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return encode_json(entry)


class CorrelationIDFilter(logging.Filter):
    """Copy the context's correlation ID onto each record."""

    def filter(self, record: LogRecord) -> bool:
        if correlation_id := get_correlation_id():
            record.correlation_id = correlation_id  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the ``sqlinclude`` logger, or one of its children.

    Args:
        name: Child name such as ``"compiler"``; already qualified names are kept.

    Returns:
        The logger, with a :class:`CorrelationIDFilter` attached.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())

    return logger


def configure_logging(
    level: int | str = logging.INFO,
    *,
    structured: bool = True,
    include_sql: bool = False,
    stream: TextIO | None = None,
    handlers: Iterable[logging.Handler] | None = None,
) -> logging.Logger:
    """Send compiler, loader and operation logs to ``stream``.

    Replaces the handlers of the ``sqlinclude`` logger and stops propagation
    to the root logger.

    Args:
        level: Level name or number; ``"DEBUG"`` also logs every operation call.
        structured: JSON lines when true, plain text otherwise.
        include_sql: Add the executed SQL text to structured operation logs.
        stream: Output stream, ``sys.stdout`` by default.
        handlers: Additional handlers, attached with their own formatters.

    Returns:
        The configured ``sqlinclude`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    formatter: logging.Formatter = StructuredFormatter(include_sql) if structured else logging.Formatter(TEXT_FORMAT)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for handler in handlers or ():
        logger.addHandler(handler)

    logger.propagate = False

    logger.debug(
        "sqlinclude logging configured",
        extra={
            "extra_fields": {
                "level": logging.getLevelName(logger.level),
                "structured": structured,
                "include_sql": include_sql,
                "handlers_count": len(logger.handlers),
            }
        },
    )
    return logger
