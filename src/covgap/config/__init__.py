"""Config module exports."""

from covgap.config.loader import load_config
from covgap.config.models import (
    CovGapConfig,
    LoggingConfig,
    LogOutputConfig,
    ReportConfig,
)

__all__ = [
    "load_config",
    "CovGapConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ReportConfig",
]
