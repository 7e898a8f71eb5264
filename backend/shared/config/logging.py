"""
Structured logging for the florist core.

Log calls take keyword context next to the message:

    logger.info("Order saved", order_id=order.id, account=mask_account_id(account_id))

Development output is one coloured line per record with the context as
``key=value`` pairs; production output is one JSON object per line.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, TextIO

from shared.config.settings import settings

# Attribute on LogRecord that carries the keyword context
CONTEXT_ATTR = "context"

_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


def _record_context(record: logging.LogRecord) -> Mapping[str, Any]:
    return getattr(record, CONTEXT_ATTR, None) or {}


class JsonLogFormatter(logging.Formatter):
    """One JSON document per record, for log aggregation."""

    def __init__(self, include_source: bool = False):
        super().__init__()
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        context = _record_context(record)
        if context:
            entry["context"] = dict(context)
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        if self.include_source:
            entry["src"] = f"{record.pathname}:{record.lineno}"
        return json.dumps(entry, default=str)


class ConsoleLogFormatter(logging.Formatter):
    """Readable single-line records; colours only on a terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.use_color:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{clock} {level} {record.name}: {record.getMessage()}"

        context = _record_context(record)
        if context:
            line += "  " + " ".join(f"{key}={value}" for key, value in context.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """Logger whose methods accept arbitrary keyword context."""

    def _log(
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: Optional[Mapping[str, object]] = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **context: Any,
    ) -> None:
        merged = dict(extra or {})
        merged[CONTEXT_ATTR] = context
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=merged,
            stack_info=stack_info,
            stacklevel=stacklevel,
        )


logging.setLoggerClass(StructuredLogger)


def setup_logging(json_output: Optional[bool] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure the root logger once at startup (the CLI does it in its callback).

    Args:
        json_output: Force JSON records; defaults to True in production.
        stream: Destination; defaults to stderr so command output stays clean.
    """
    stream = stream or sys.stderr
    level = logging.DEBUG if settings.debug else logging.INFO
    if json_output is None:
        json_output = settings.environment == "production"

    handler = logging.StreamHandler(stream)
    if json_output:
        handler.setFormatter(JsonLogFormatter(include_source=settings.debug))
    else:
        handler.setFormatter(ConsoleLogFormatter(use_color=stream.isatty()))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Module logger.

    Usage:
        logger = get_logger(__name__)
        logger.error("Inventory update failed", template_id=template.id, exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def mask_account_id(account_id: Optional[str]) -> str:
    """First 8 characters of an account id, enough to correlate one session's lines."""
    if not account_id:
        return "<local>"
    if len(account_id) <= 8:
        return account_id[0] + "***"
    return f"{account_id[:8]}..."
