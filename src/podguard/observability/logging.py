"""
Logging setup for podguard.

Library modules log through ``logging.getLogger(__name__)`` and never
install handlers themselves. The CLI calls ``configure_logging`` (or
``configure_logging_from_env``) to attach a single handler to the
``podguard`` logger in either a human-readable or a JSON-lines format.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER_NAME = "podguard"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset({
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info", "exc_info", "exc_text",
    "thread", "threadName", "message", "taskName",
})


class StructuredFormatter(logging.Formatter):
    """Formatter that writes one JSON object per record."""

    def __init__(
        self,
        include_timestamp: bool = True,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        """
        Initialize structured formatter.

        Args:
            include_timestamp: Include an ISO-8601 UTC timestamp
            include_location: Include file, line and function
            extra_fields: Fields added to every record
        """
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = (
                datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
            )

        log_data["level"] = record.levelname.lower()
        log_data["logger"] = record.name
        log_data["message"] = record.getMessage()

        if self.include_location:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                log_data[key] = value

        log_data.update(self.extra_fields)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Formatter for terminal output, coloured when writing to a TTY."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        use_colors: bool = True,
        include_timestamp: bool = True,
        stream: TextIO | None = None,
    ):
        """
        Initialize human-readable formatter.

        Args:
            use_colors: Use ANSI colors when the stream is a terminal
            include_timestamp: Include timestamp in output
            stream: Stream the handler writes to, used for the TTY check
        """
        super().__init__()
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, "isatty") and stream.isatty()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        parts = []

        if self.include_timestamp:
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            parts.append(f"[{timestamp}]")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"
        parts.append(f"{level:>8}")

        parts.append(f"{record.name}:")
        parts.append(record.getMessage())

        output = " ".join(parts)

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


class PodguardLogger:
    """
    Logger wrapper that names audit events.

    Keyword arguments are passed as ``extra`` so the structured formatter
    emits them as JSON keys.
    """

    def __init__(self, name: str, level: int | None = None):
        """
        Initialize the logger.

        Args:
            name: Logger name
            level: Optional level to set on the underlying logger
        """
        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(level)

    def _log(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **kwargs: Any,
    ) -> None:
        self.logger.log(level, message, exc_info=exc_info, extra=kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def evaluation_started(self, controller_name: str, kind: str, container_name: str) -> None:
        """Log the start of a container evaluation."""
        self.debug(
            "Evaluation started",
            event_type="evaluation.started",
            controller_name=controller_name,
            kind=kind,
            container_name=container_name,
        )

    def evaluation_completed(
        self,
        controller_name: str,
        container_name: str,
        successes: int,
        warnings: int,
        errors: int,
    ) -> None:
        """Log the end of a container evaluation with its counts."""
        self.debug(
            "Evaluation completed",
            event_type="evaluation.completed",
            controller_name=controller_name,
            container_name=container_name,
            successes=successes,
            warnings=warnings,
            errors=errors,
        )

    def rule_exempted(
        self,
        rule_id: str,
        controller_name: str,
        exemption_count: int = 1,
    ) -> None:
        """Log a rule skipped by one or more exemptions."""
        self.debug(
            "Rule exempted",
            event_type="rule.exempted",
            rule_id=rule_id,
            controller_name=controller_name,
            exemption_count=exemption_count,
        )

    def workload_validated(
        self,
        name: str,
        kind: str,
        container_count: int,
        warnings: int,
        errors: int,
    ) -> None:
        """Log a validated workload."""
        self.info(
            "Workload validated",
            event_type="workload.validated",
            workload_name=name,
            kind=kind,
            container_count=container_count,
            warnings=warnings,
            errors=errors,
        )


def configure_logging(
    level: str = "WARNING",
    format: str = "human",
    output: str = "stderr",
    extra_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure logging for podguard.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (human, json)
        output: Output destination (stderr, stdout)
        extra_fields: Extra fields to include in structured logs

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    stream = sys.stdout if output == "stdout" else sys.stderr
    handler = logging.StreamHandler(stream)

    if format == "json":
        formatter: logging.Formatter = StructuredFormatter(extra_fields=extra_fields)
    else:
        formatter = HumanReadableFormatter(stream=stream)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def configure_logging_from_env(default_level: str = "WARNING") -> None:
    """
    Configure logging from ``PODGUARD_LOG_LEVEL`` and ``PODGUARD_LOG_FORMAT``.

    Args:
        default_level: Level used when the variable is unset
    """
    configure_logging(
        level=os.getenv("PODGUARD_LOG_LEVEL", default_level),
        format=os.getenv("PODGUARD_LOG_FORMAT", "human"),
    )


def get_logger(name: str) -> PodguardLogger:
    """
    Get a podguard logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        PodguardLogger instance
    """
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return PodguardLogger(name)
    return PodguardLogger(f"{ROOT_LOGGER_NAME}.{name}")
