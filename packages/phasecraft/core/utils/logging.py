"""Logging setup for phasecraft.

Text logs by default; ``structured=True`` switches to one JSON object per
line, which keeps the ``extra=`` fields the HTTP client attaches (method,
url, status, timing) machine-readable. Logs go to stderr so stdout stays
free for CLI output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from phasecraft.core.config.models import LoggingConfig

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_QUIET_LOGGERS = ("httpx", "httpcore")


class StructuredJSONFormatter(logging.Formatter):
    """Render each record as ``{"level", "message", "timestamp", "context"}``.

    ``context`` holds the logger name, module, function and line, any
    ``extra=`` fields, and error details when the record carries exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        context: dict[str, Any] = {
            "logger_name": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        context.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, _ = record.exc_info
            context["error_type"] = exc_type.__name__
            context["error_message"] = str(exc)
            context["stack_trace"] = self.formatException(record.exc_info)

        entry = {
            "level": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "context": context,
        }
        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    filename: str | None = None,
    structured: bool = False,
) -> None:
    """(Re)configure the root logger.

    Safe to call repeatedly; existing root handlers are replaced.

    Args:
        level: Level name, case-insensitive
        format_string: ``logging.Formatter`` format (ignored when structured)
        filename: Log file; stderr when None
        structured: Emit JSON lines instead of text

    Examples:
        >>> configure_logging(level="debug")
        >>> configure_logging(filename="run.jsonl", structured=True)
    """
    handler: logging.Handler = (
        logging.FileHandler(filename, encoding="utf-8")
        if filename
        else logging.StreamHandler(sys.stderr)
    )
    handler.setFormatter(
        StructuredJSONFormatter()
        if structured
        else logging.Formatter(format_string or DEFAULT_FORMAT)
    )
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_from(config: LoggingConfig, *, verbose: bool = False) -> None:
    """Apply the ``logging`` config section; ``verbose`` forces DEBUG."""
    configure_logging(
        level="DEBUG" if verbose else config.level,
        format_string=config.format,
        structured=config.structured,
    )
