"""Logging configuration for the PocketLedger application."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pocketledger.core.config import Settings, get_settings

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "location": f"{record.funcName}:{record.lineno}",
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_handlers(settings: Settings) -> list[logging.Handler]:
    """Console always; error/combined files only outside serverless deployments."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    # Vercel functions have a read-only filesystem
    if not settings.is_vercel:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)
        handlers.append(logging.FileHandler(log_dir / "combined.log", encoding="utf-8"))

    return handlers


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Configure and return the application logger."""
    logger = logging.getLogger("pocketledger")

    if logger.handlers:
        return logger

    settings = settings or get_settings()
    level = logging.INFO if settings.is_production else logging.DEBUG
    logger.setLevel(level)

    formatter = JsonFormatter()
    for handler in build_handlers(settings):
        if handler.level == logging.NOTSET:
            handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False

    return logger


def reset_logging() -> None:
    """Close and detach all handlers so the next ``setup_logging`` starts fresh."""
    logger = logging.getLogger("pocketledger")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def get_logger(name: str = "pocketledger") -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class LogContext:
    """Context manager for structured logging with additional context."""

    def __init__(self, logger: logging.Logger, operation: str, **context: Any) -> None:
        self.logger = logger
        self.operation = operation
        self.context = context

    def __enter__(self) -> "LogContext":
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> bool:
        if exc_type is not None:
            self.logger.error(
                f"Failed {self.operation}: {exc_val}",
                extra=self.context,
                exc_info=True,
            )
        else:
            self.logger.debug(f"Completed {self.operation}", extra=self.context)
        return False
