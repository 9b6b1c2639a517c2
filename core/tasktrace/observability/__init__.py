"""
Observability module for tasktrace's own diagnostic logging.

- Structured JSON logging for production
- Human-readable logging for development
- Transaction correlation through record extras, no global context
"""

from tasktrace.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    strip_ansi_codes,
)

__all__ = [
    "configure_logging",
    "HumanReadableFormatter",
    "StructuredFormatter",
    "strip_ansi_codes",
]
