# src/logging/logger.py — v1
"""Log formatters and setup for the ``jmsmigrate`` logger tree.

Both formatters read the run/message context. Structured details passed
with ``extra={"data": {...}}`` are emitted under "data" in JSON output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from jmsmigrate.logging.context import get_context

ROOT_LOGGER = "jmsmigrate"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; context fields sit at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **get_context().as_dict(),
        }
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Operator console format: ``HH:MM:SS [LEVEL] [msg N] (stage) text``."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        head = f"{datetime.now(timezone.utc):%H:%M:%S} [{record.levelname:8s}]"
        if ctx.ordinal is not None:
            head += f" [msg {ctx.ordinal}]"
        if ctx.stage:
            head += f" ({ctx.stage})"
        text = f"{head} {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            text += "\n" + self.formatException(record.exc_info)
        return text


def _formatter_for(log_format: str) -> logging.Formatter:
    return JsonFormatter() if log_format == "json" else TextFormatter()


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> None:
    """(Re)configure the ``jmsmigrate`` logger.

    Console output goes to stderr so stdout stays free for the report.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Optional log file, rotated by size.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from jmsmigrate.logging.handlers import create_rotating_handler

        handlers.append(
            create_rotating_handler(log_file, rotation=rotation, retention=retention)
        )

    formatter = _formatter_for(log_format)
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
