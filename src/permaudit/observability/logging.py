"""
Logging configuration for Graph Permission Audit.

Provides JSON and human-readable formatters for the "permaudit" logger
hierarchy and an event logger for analysis lifecycle events.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "permaudit"

# LogRecord attributes that are not user-supplied extra fields
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES
    }


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per log record.

    Extra fields passed through ``extra=`` (app_id, event_type...) are
    emitted as top-level keys.
    """

    def __init__(
        self,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        """
        Initialize structured formatter.

        Args:
            include_location: Include file/line location
            extra_fields: Additional fields to include in every log
        """
        super().__init__()
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_location:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))
        log_data.update(self.extra_fields)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable logs for terminals.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_context: bool = True):
        """
        Initialize human-readable formatter.

        Args:
            use_colors: Use ANSI colors when writing to a terminal
            include_context: Append extra fields as key=value pairs
        """
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single text line."""
        timestamp = datetime.fromtimestamp(record.created, timezone.utc)
        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"

        output = f"[{timestamp:%Y-%m-%d %H:%M:%S}] {level:>8} {record.name}: {record.getMessage()}"

        if self.include_context:
            context = _extra_fields(record)
            if context:
                output += " " + " ".join(f"{k}={v}" for k, v in sorted(context.items()))

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


class AuditLogger:
    """
    Event logger for permission analysis runs.

    Wraps a standard logger and attaches persistent context fields plus
    an event_type to every lifecycle event.
    """

    def __init__(self, name: str):
        """
        Initialize audit logger.

        Args:
            name: Logger name below the "permaudit" hierarchy
        """
        self.logger = logging.getLogger(name)
        self._context: dict[str, Any] = {}

    def set_context(self, **kwargs: Any) -> None:
        """Set persistent context fields for all logs."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        """Clear context fields."""
        self._context.clear()

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        self.logger.log(level, message, extra={**self._context, **kwargs})

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def catalog_loaded(self, endpoint_counts: dict[str, int]) -> None:
        """Log catalog load event."""
        self.info(
            "Permission catalog loaded",
            event_type="catalog.loaded",
            endpoint_counts=endpoint_counts,
        )

    def analysis_started(self, run_id: str, application_count: int) -> None:
        """Log batch analysis start event."""
        self.info(
            "Permission analysis started",
            event_type="analysis.started",
            run_id=run_id,
            application_count=application_count,
        )

    def analysis_completed(
        self,
        run_id: str,
        analyzed_count: int,
        skipped_count: int,
        duration_seconds: float,
    ) -> None:
        """Log batch analysis completion event."""
        self.info(
            "Permission analysis completed",
            event_type="analysis.completed",
            run_id=run_id,
            analyzed_count=analyzed_count,
            skipped_count=skipped_count,
            duration_seconds=duration_seconds,
        )

    def application_analyzed(
        self,
        app_id: str,
        optimal_count: int,
        excess_count: int,
        unmatched_count: int,
    ) -> None:
        """Log single application result."""
        self.debug(
            "Application analyzed",
            event_type="application.analyzed",
            app_id=app_id,
            optimal_count=optimal_count,
            excess_count=excess_count,
            unmatched_count=unmatched_count,
        )

    def application_skipped(self, app_id: str, reason: str) -> None:
        """Log skipped application event."""
        self.warning(
            f"Skipping application {app_id}: {reason}",
            event_type="application.skipped",
            app_id=app_id,
            reason=reason,
        )


def configure_logging(
    level: str = "INFO",
    format: str = "human",
    output: str = "stderr",
    extra_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure the "permaudit" logger hierarchy.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (human, json)
        output: Output destination (stderr, stdout)
        extra_fields: Extra fields to include in structured logs
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout if output == "stdout" else sys.stderr)
    if format == "json":
        handler.setFormatter(StructuredFormatter(extra_fields=extra_fields))
    else:
        handler.setFormatter(HumanReadableFormatter())

    root_logger.addHandler(handler)


def get_logger(name: str) -> AuditLogger:
    """
    Get an audit logger below the "permaudit" hierarchy.

    Args:
        name: Logger name (typically module name)

    Returns:
        AuditLogger instance
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return AuditLogger(name)


# Configure logging from environment on import
configure_logging(
    level=os.getenv("PERMAUDIT_LOG_LEVEL", "INFO"),
    format=os.getenv("PERMAUDIT_LOG_FORMAT", "human"),
)
