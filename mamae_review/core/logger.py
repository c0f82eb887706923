"""
Structured logging for the Mamãe Review service.

Every entry carries the service name, environment and the correlation ID
of the current request. Business events go in `metadata` under an "event"
key, e.g. metadata={"event": "review_created", "productId": ...}.

Output goes to the console (colored, or JSON with LOG_FORMAT=json) and
optionally to a JSON log file.
"""

import json
import logging
import os
import sys
from datetime import datetime, UTC
from typing import Any, Dict, Optional, Union

from mamae_review.core.config import config
from mamae_review.utils.correlation_id import get_correlation_id

SERVICE_NAME = config.service_name
LOG_LEVEL = getattr(logging, config.log_level.upper(), logging.INFO)
JSON_OUTPUT = config.log_format.lower() == "json"

Metadata = Optional[Dict[str, Any]]
ErrorInfo = Optional[Union[str, Exception]]


class StructuredLogger:
    """
    Thin wrapper over the stdlib logger that builds structured entries.

    Usage:
        logger.info(
            "Added review",
            correlation_id=correlation_id,
            user_id=user.user_id,
            metadata={"event": "review_created", "productId": product_id},
        )
    """

    def __init__(self, name: str = SERVICE_NAME, environment: str = config.environment):
        self.service_name = name
        self.environment = environment
        self._logger = logging.getLogger(name)
        self._configure_handlers()

    def _configure_handlers(self):
        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(LOG_LEVEL)

        if config.log_to_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(JSONFormatter() if JSON_OUTPUT else ConsoleFormatter())
            root.addHandler(console)

        if config.log_to_file:
            log_dir = os.path.dirname(config.log_file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(config.log_file_path)
            # Files are always JSON
            file_handler.setFormatter(JSONFormatter())
            root.addHandler(file_handler)

    def _build_log_entry(
        self,
        level: str,
        message: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
        metadata: Metadata = None,
        **extra
    ) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level.upper(),
            "service": self.service_name,
            "environment": self.environment,
            "message": message,
            "correlationId": correlation_id or get_correlation_id(),
        }
        if user_id:
            entry["userId"] = user_id
        if metadata:
            entry["metadata"] = metadata
        entry.update(extra)
        return entry

    def _log(self, level: int, message: str, **fields):
        if not self._logger.isEnabledFor(level):
            return

        entry = self._build_log_entry(logging.getLevelName(level), message, **fields)
        if JSON_OUTPUT:
            self._logger.log(level, json.dumps(entry, default=str))
        else:
            # LogRecord reserves "message"
            entry.pop("message")
            self._logger.log(level, message, extra=entry)

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, error: ErrorInfo = None, metadata: Metadata = None, **fields):
        """Log an error; `error` is folded into metadata as type and message"""
        self._log(logging.ERROR, message, metadata=_with_error(metadata, error), **fields)

    def critical(self, message: str, error: ErrorInfo = None, metadata: Metadata = None, **fields):
        self._log(logging.CRITICAL, message, metadata=_with_error(metadata, error), **fields)


def _with_error(metadata: Metadata, error: ErrorInfo) -> Dict[str, Any]:
    metadata = dict(metadata or {})
    if isinstance(error, Exception):
        metadata["error"] = {"type": type(error).__name__, "message": str(error)}
    elif error:
        metadata["error"] = {"message": str(error)}
    return metadata


class JSONFormatter(logging.Formatter):
    """One JSON object per line"""

    STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "taskName"}

    def format(self, record):
        message = record.getMessage()
        if message.startswith("{"):
            # Serialized by StructuredLogger
            return message

        data = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": message,
        }
        data.update({k: v for k, v in vars(record).items() if k not in self.STANDARD_ATTRS})
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored single-line output for development"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{color}[{timestamp}] {record.levelname}{self.RESET} - "

        correlation_id = getattr(record, "correlationId", None)
        if correlation_id:
            line += f"[{correlation_id}] "
        line += record.getMessage()

        event = (getattr(record, "metadata", None) or {}).get("event")
        if event:
            line += f" ({event})"
        return line


logger = StructuredLogger()
