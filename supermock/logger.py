"""
Structured JSON Logging.

Every log line is one JSON object.  Lines written while Flask is handling
a request carry the request method and path.  Structured ``extra`` fields
whose key names a credential (password, token, passcode) are masked before
they reach any handler.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

from flask import has_request_context, request

REDACTED: str = "***"
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "passcode",
    "passcode_hash",
    "token",
    "access_token",
    "authorization",
    "service_role_key",
})


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return lowered in SENSITIVE_KEYS or lowered.endswith("_token")


class JSONFormatter(logging.Formatter):
    """Render a ``LogRecord`` as a single JSON line.

    Keys: ``timestamp`` (UTC ISO-8601), ``level``, ``logger``, ``message``,
    and when present ``request``, ``extra`` and ``exception``.
    """

    _RECORD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if has_request_context():
            entry["request"] = {"method": request.method, "path": request.path}

        extra = {
            key: REDACTED if _is_sensitive(key) else str(value)
            for key, value in record.__dict__.items()
            if key not in self._RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


class StructuredLogger:
    """Injectable wrapper around a named ``logging.Logger``.

    Handlers are attached once per logger name: stdout always, plus a
    rotating file when ``LOG_FILE`` is writable.  Unset arguments fall
    back to ``AppConfig``.

    Usage::

        log = StructuredLogger(name="supermock.http")
        log.info("Member created", extra={"center_id": center_id})
    """

    def __init__(
        self,
        name: str = "supermock",
        level: Optional[int] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Deferred so settings load on first logger, not on import.
        from supermock.config import get_config
        cfg = get_config()

        self._level: int = level if level is not None else cfg.log_level
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(self._level)

        if not self._logger.handlers:
            formatter = JSONFormatter()
            self._attach(logging.StreamHandler(stream or sys.stdout), formatter)
            self._attach_file(
                log_file or cfg.LOG_FILE,
                max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
                formatter,
            )

    def _attach(self, handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setLevel(self._level)
        handler.setFormatter(formatter)
        self._logger.addHandler(handler)

    def _attach_file(
        self,
        log_file: str,
        max_bytes: int,
        backup_count: int,
        formatter: logging.Formatter,
    ) -> None:
        try:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                filename=str(path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Could not open log file '%s': %s. Logging to console only.",
                log_file,
                exc,
            )
            return
        self._attach(handler, formatter)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.exception(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "supermock") -> StructuredLogger:
    """``StructuredLogger`` with every setting taken from ``AppConfig``."""
    return StructuredLogger(name=name)
