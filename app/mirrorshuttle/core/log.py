"""Logging setup and structured events.

Every operational event is emitted through :func:`log_event`, which attaches
its key/value fields to the log record. Two output formats are supported:

- human: Rich handler on stderr, fields appended as ``key=value``
- JSON: one JSON object per line on stderr, for programmatic parsing
"""

import json
import logging
from typing import IO, Any

from rich.console import Console
from rich.logging import RichHandler

# Root logger name shared by all mirrorshuttle modules
LOGGER_NAME = "mirrorshuttle"

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

DEFAULT_LOG_LEVEL = "info"


def parse_log_level(name: str) -> int:
    """Translate a log level name into a logging level.

    Args:
        name: Level name (debug, info, warn, warning, error).

    Returns:
        The numeric logging level.

    Raises:
        ValueError: If the name is not recognized.
    """
    key = name.strip().lower()
    if key not in LOG_LEVELS:
        msg = f"log level has a not recognized value: {name!r}"
        raise ValueError(msg)
    return LOG_LEVELS[key]


def log_event(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    """Emit a structured event.

    Args:
        logger: Logger to emit through.
        level: Logging level of the event.
        message: Short event name (e.g. "file moved").
        **fields: Structured fields attached to the record.
    """
    logger.log(level, message, extra={"fields": fields}, stacklevel=2)


class EventFormatter(logging.Formatter):
    """Formatter appending structured fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields: dict[str, Any] = getattr(record, "fields", {})
        if not fields:
            return message
        pairs = " ".join(f"{key}={_render_value(value)}" for key, value in fields.items())
        return f"{message} {pairs}"


class JsonFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        payload.update(getattr(record, "fields", {}))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value) if (not value or " " in value) else value
    return str(value)


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    json_output: bool = False,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure the mirrorshuttle logger.

    Replaces any handler installed by a previous call, so it is safe to
    call once per CLI invocation.

    Args:
        level: Log level name.
        json_output: Emit JSON lines instead of Rich-formatted output.
        stream: Output stream; defaults to stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler: logging.Handler
    if json_output:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter())
    else:
        console = Console(file=stream) if stream is not None else Console(stderr=True)
        handler = RichHandler(
            console=console,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            log_time_format="%X",
        )
        handler.setFormatter(EventFormatter("%(message)s"))

    logger.addHandler(handler)
    logger.setLevel(parse_log_level(level))
    return logger
