"""
Observability for podguard.

Provides log formatters, the event-aware logger wrapper and the functions
the CLI uses to configure logging.
"""

from podguard.observability.logging import (
    HumanReadableFormatter,
    PodguardLogger,
    StructuredFormatter,
    configure_logging,
    configure_logging_from_env,
    get_logger,
)

__all__ = [
    "HumanReadableFormatter",
    "PodguardLogger",
    "StructuredFormatter",
    "configure_logging",
    "configure_logging_from_env",
    "get_logger",
]
