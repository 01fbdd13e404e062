"""covgap error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 7xxx: Coverage
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Coverage (7xxx)
    COVERAGE_PARSE_ERROR = 7001
    COVERAGE_MERGE_CONFLICT = 7002
    COVERAGE_INVALID_ARGUMENT = 7003
    COVERAGE_FILE_NOT_FOUND = 7004
    COVERAGE_NO_MATCHES = 7005
    COVERAGE_FILE_UNREADABLE = 7006


@dataclass(frozen=True, slots=True)
class CovGapError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'COVERAGE_MERGE_CONFLICT')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CovGapError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class CoverageError(CovGapError):
    """Errors raised while reading, merging, or reporting coverage."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_PARSE_ERROR,
            message=f"Failed to parse '{path}': {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_xml(cls, reason: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_PARSE_ERROR,
            message=f"Invalid Cobertura XML: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def merge_conflict(cls, line: int, reason: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_MERGE_CONFLICT,
            message=f"Cannot merge line {line}: {reason}",
            details={"line": line, "reason": reason},
        )

    @classmethod
    def invalid_argument(cls, name: str, reason: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_INVALID_ARGUMENT,
            message=f"Invalid argument '{name}': {reason}",
            details={"argument": name, "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_FILE_NOT_FOUND,
            message=f"File not found: {path}",
            details={"path": path},
        )

    @classmethod
    def no_matches(cls, pattern: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_NO_MATCHES,
            message=f"No files matched the pattern: {pattern}",
            details={"pattern": pattern},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_FILE_UNREADABLE,
            message=f"Cannot open file: {path}",
            details={"path": path, "reason": reason},
        )
