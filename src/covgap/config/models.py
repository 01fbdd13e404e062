"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI flags)
2. Environment variables (COVGAP__SECTION__KEY)
3. Repo YAML (.covgap.yaml)
4. Global YAML (~/.config/covgap/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    COVGAP__<SECTION>__<KEY>=<VALUE>

Examples:
    COVGAP__LOGGING__LEVEL=DEBUG
    COVGAP__REPORT__OUTPUT=markdown
    COVGAP__REPORT__LIMIT=50
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
OutputFormat = Literal["table", "json", "markdown"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVGAP__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. The CLI switches to DEBUG with --verbose.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ReportConfig(BaseModel):
    """Defaults for the `cover report` command.

    Env vars:
        COVGAP__REPORT__OUTPUT: Output format (table, json, markdown)
        COVGAP__REPORT__LIMIT: Maximum number of rows to print
        COVGAP__REPORT__ABSOLUTE_PATHS: Show absolute file paths
        COVGAP__REPORT__BASE_PATH: Base directory for relative paths
    """

    output: OutputFormat = Field(
        default="table",
        description="Output format for missing coverage rows.",
    )
    limit: int | None = Field(
        default=None,
        description="Maximum number of rows to output. None prints every row.",
    )
    absolute_paths: bool = Field(
        default=False,
        description="Show absolute file paths instead of paths relative to base_path.",
    )
    base_path: str | None = Field(
        default=None,
        description="Base directory for relative paths. Default: current directory.",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for source files to leave out of the report.",
    )

    @field_validator("output", mode="before")
    @classmethod
    def normalize_output(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError(f"Limit must be >= 0, got {v}")
        return v


class CovGapConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
