# -*- coding: utf-8 -*-
"""Location: ./sources_populator/services/logging_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Logging Service Implementation.

Configures the standard library logging stack once per process and hands out
named loggers. Two output formats are supported:

- ``json``: one JSON object per line with ``ts``, ``level``, ``logger``, ``msg``
  and any structured fields passed through ``extra=``.
- ``text``: ``%(asctime)s - %(name)s - %(levelname)s - %(message)s``.

Usage:
    from sources_populator.services.logging_service import LoggingService

    logging_service = LoggingService()
    logging_service.configure("info", "json")
    logger = logging_service.get_logger(__name__)
    logger.info("Source created", extra={"id": "42"})
"""

# Standard
from datetime import datetime, timezone
import logging
import sys
from typing import Any, Dict, Optional, TextIO

# Third-Party
import orjson

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record.

        Args:
            record: Log record

        Returns:
            str: JSON document.

        Examples:
            >>> record = logging.makeLogRecord({"msg": "Source created", "levelname": "INFO", "name": "x", "id": "7"})
            >>> doc = orjson.loads(JsonFormatter().format(record))
            >>> doc["level"], doc["msg"], doc["id"]
            ('info', 'Source created', '7')
        """
        document: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                document[key] = value
        if record.exc_info:
            document["error"] = self.formatException(record.exc_info)

        return orjson.dumps(document, default=str).decode("utf-8")


class LoggingService:
    """Configure process-wide logging and provide named loggers."""

    def __init__(self, stream: Optional[TextIO] = None):
        """Initialize the service.

        Args:
            stream: Output stream, stdout by default
        """
        self._stream = stream
        self._handler: Optional[logging.Handler] = None
        self._previous_level: Optional[int] = None

    def configure(self, level: str = "info", fmt: str = "json") -> None:
        """Install the root handler.

        Calling it again replaces the handler installed by the previous call.

        Args:
            level: Log level name (debug, info, warning, error)
            fmt: ``json`` or ``text``
        """
        root = logging.getLogger()
        if self._handler is not None:
            root.removeHandler(self._handler)
        else:
            self._previous_level = root.level

        handler = logging.StreamHandler(self._stream or sys.stdout)
        handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
        root.addHandler(handler)
        root.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._handler = handler

        # Request lines from the HTTP stack duplicate our own debug records.
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    def get_logger(self, name: str) -> logging.Logger:
        """Return a named logger.

        Args:
            name: Logger name, usually ``__name__``

        Returns:
            logging.Logger: The logger.
        """
        return logging.getLogger(name)

    def shutdown(self) -> None:
        """Flush and detach the root handler installed by :meth:`configure`, restoring the previous level."""
        if self._handler is not None:
            self._handler.flush()
            root = logging.getLogger()
            root.removeHandler(self._handler)
            root.setLevel(self._previous_level)
            self._handler = None
