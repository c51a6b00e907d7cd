"""Logging setup for the builder.

Records may carry context fields (``store_key``, ``export_format``,
``activity_id``), bound once with :func:`with_context` or passed per call
through ``extra=``. Both formatters render the same context; JSON output
also keeps a structured ``payload`` dict when one is attached.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

ROOT_LOGGER_NAME = "repair_builder"

CONTEXT_FIELDS = ("store_key", "export_format", "activity_id")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields set on ``record``, in a fixed order, empty ones skipped."""
    return {k: getattr(record, k) for k in CONTEXT_FIELDS if getattr(record, k, None)}


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        doc: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        doc.update(record_context(record))

        payload = getattr(record, "payload", None)
        if isinstance(payload, Mapping):
            doc["payload"] = dict(payload)
        if record.exc_info:
            doc["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(doc, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """``LEVEL logger [key=value ...] message``, then any traceback."""

    def format(self, record: logging.LogRecord) -> str:
        head = f"{record.levelname} {record.name}"
        context = " ".join(f"{k}={v}" for k, v in record_context(record).items())
        if context:
            head = f"{head} [{context}]"

        line = f"{head} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


@dataclass(frozen=True)
class LoggingOptions:
    """Configure logging behavior."""

    level: str = "INFO"
    json_logs: bool = False

    # stderr, so exports written to stdout stay clean
    enable_console: bool = True
    log_file: Path | None = None


def _build_handlers(options: LoggingOptions) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if options.enable_console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if options.log_file is not None:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(options.log_file, encoding="utf-8"))
    return handlers


def setup_logger(options: LoggingOptions | None = None) -> logging.Logger:
    """
    Configure the package logger.

    Calling again with equal options is a no-op; different options replace
    the existing handlers.
    """
    options = options or LoggingOptions()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, options.level.upper(), logging.INFO))
    logger.propagate = False

    if getattr(logger, "_repair_builder_options", None) == options:
        return logger

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    formatter = JsonFormatter() if options.json_logs else TextFormatter()
    for handler in _build_handlers(options):
        handler.setLevel(logger.level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger._repair_builder_options = options
    return logger


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter whose bound context sits under each call's ``extra``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def with_context(logger: logging.Logger, **context: Any) -> ContextAdapter:
    """
    Bind context fields to ``logger``. Empty values are dropped.

    Raises:
        TypeError: for names outside ``CONTEXT_FIELDS``
    """
    unknown = sorted(set(context) - set(CONTEXT_FIELDS))
    if unknown:
        raise TypeError(f"Unknown log context field(s): {', '.join(unknown)}")
    return ContextAdapter(logger, {k: v for k, v in context.items() if v})
