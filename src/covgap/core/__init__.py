"""Core module exports."""

from covgap.core.errors import (
    ConfigError,
    CoverageError,
    CovGapError,
    ErrorCode,
)
from covgap.core.logging import (
    configure_logging,
    get_log_file_path,
    get_logger,
)
from covgap.core.progress import banner, get_console, pluralize, status

__all__ = [
    # Errors
    "CovGapError",
    "ConfigError",
    "CoverageError",
    "ErrorCode",
    # Logging
    "configure_logging",
    "get_log_file_path",
    "get_logger",
    # Progress
    "banner",
    "get_console",
    "pluralize",
    "status",
]
