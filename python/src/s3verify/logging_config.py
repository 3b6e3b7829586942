"""Logging setup for s3verify runs.

Steps log with ``extra=`` fields (operation, method, bucket, key, status).
Both formatters surface those fields: the text formatter as a bracketed
suffix, the JSON formatter as top-level keys.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Extra record attributes set by test steps, in display order.
STEP_FIELDS = ("operation", "method", "bucket", "key", "status")

# Client libraries that log every connection and signature at DEBUG/INFO.
CLIENT_LOGGERS = ("botocore", "urllib3")


def step_context(record: logging.LogRecord) -> dict:
    """Return the step fields present on *record*, in display order."""
    return {
        name: getattr(record, name)
        for name in STEP_FIELDS
        if getattr(record, name, None) is not None
    }


class StepTextFormatter(logging.Formatter):
    """Human-readable lines with the step context appended.

    ``2026-01-01 12:00:00,000 INFO s3verify.step: PutObject passed [operation=PutObject bucket=b1]``
    """

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = step_context(record)
        if not context:
            return line
        suffix = " ".join(f"{k}={v}" for k, v in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{suffix}]{sep}{tail}"


class JSONFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, message, step fields.

    A failed step's exception is reported as ``error`` (its class name) and
    ``exception`` (the formatted traceback).
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(step_context(record))
        if record.exc_info and record.exc_info[1] is not None:
            entry["error"] = type(record.exc_info[1]).__name__
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Log level name. Unknown names fall back to INFO.
        fmt: 'text' or 'json'.

    Client library loggers stay at WARNING unless *level* is DEBUG, so a
    normal run shows step results and not connection chatter.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(numeric_level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if fmt == "json" else StepTextFormatter())
    root.addHandler(handler)

    client_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)
