"""
Observability for Graph Permission Audit.

Provides logging configuration and lifecycle event logging for
permission analysis runs.
"""

from permaudit.observability.logging import (
    AuditLogger,
    HumanReadableFormatter,
    ROOT_LOGGER_NAME,
    StructuredFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "AuditLogger",
    "HumanReadableFormatter",
    "ROOT_LOGGER_NAME",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]
