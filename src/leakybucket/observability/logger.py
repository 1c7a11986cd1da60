"""Structured JSON logger for leakybucket.

Every log record is emitted as a single-line JSON object so that bucket
activity can be shipped to a log pipeline without extra parsing.

Typical structured output::

    {"ts": "2025-07-01T12:00:00.123456+00:00", "level": "INFO",
     "logger": "leakybucket.bucket", "message": "fill rejected",
     "bucket_id": "api-user-42", "drops": 3, "used": 9.5, "capacity": 10}

Loggers inside the ``leakybucket`` namespace carry no handler of their
own.  They propagate to the ``leakybucket`` logger, which holds the single
JSON handler, so a host application tunes or silences the whole package in
one place::

    import logging
    logging.getLogger("leakybucket").setLevel(logging.INFO)

Usage::

    from leakybucket.observability import get_logger

    log = get_logger("leakybucket.adapters.local")
    log.info("bucket saved", extra={"extra_fields": {"bucket_id": "abc"}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from leakybucket.errors import LeakyBucketError

PACKAGE_LOGGER = "leakybucket"


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys:

    * ``ts`` -- ISO-8601 UTC time the record was created
    * ``level`` -- Python log level name
    * ``logger`` -- Logger name
    * ``message`` -- Formatted log message

    Extra structured fields passed via ``extra={"extra_fields": {...}}`` are
    merged into the top-level object.  When the record carries an
    exception it is serialised under ``exception``; a
    :class:`~leakybucket.errors.LeakyBucketError` also contributes its
    ``error_code`` and ``error_context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "extra_fields", None) or {})

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            entry["exception"] = self.formatException(record.exc_info)
            if isinstance(exc, LeakyBucketError):
                entry["error_code"] = exc.code
                entry["error_context"] = exc.context

        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


# Names that already have a JSON handler attached.
_configured_loggers: set[str] = set()


def _in_package(name: str) -> bool:
    return name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")


def _attach_handler(logger: logging.Logger, level: int | str, stream: Any | None) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _configured_loggers.add(logger.name)


def get_logger(
    name: str = PACKAGE_LOGGER,
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"leakybucket"``.
    level:
        Minimum log level, as an ``int`` or a case-insensitive string.
        Applied only when the handler is first attached.  Defaults to
        ``WARNING`` so an embedded bucket stays quiet unless the host
        application lowers it.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        For names under ``leakybucket``, the named logger with the handler
        attached to the ``leakybucket`` package logger.  For any other
        name, the named logger with its own handler.  Repeated calls never
        add duplicate handlers.
    """
    logger = logging.getLogger(name)
    owner = logging.getLogger(PACKAGE_LOGGER) if _in_package(name) else logger

    if owner.name not in _configured_loggers:
        _attach_handler(owner, level, stream)

    return logger
