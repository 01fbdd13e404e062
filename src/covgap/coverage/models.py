"""Cobertura coverage data model.

Mirrors the Cobertura hierarchy: report -> package -> class -> method -> line
-> branch condition. Lines that a class declares outside of every method are
kept on the class itself (``class_lines``). All entities are immutable; every
change produces a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LineScope(Enum):
    """Whether a line belongs to a method or directly to its class."""

    METHOD = "method"
    CLASS = "class"


@dataclass(frozen=True, slots=True)
class BranchCondition:
    """One outcome of a branch point, from a ``<condition>`` element."""

    number: int
    type: str  # e.g. "jump", "switch"
    coverage: str  # e.g. "50%"


@dataclass(frozen=True, slots=True)
class LineCoverage:
    """Coverage of a single source line."""

    number: int
    hits: int
    is_branch: bool = False
    condition_coverage: str | None = None  # e.g. "50% (1/2)"
    conditions: tuple[BranchCondition, ...] = ()
    file_path: str | None = None
    scope: LineScope = LineScope.METHOD


@dataclass(frozen=True, slots=True)
class MethodCoverage:
    """Method-level coverage."""

    name: str
    signature: str
    lines: tuple[LineCoverage, ...] = ()
    line_rate: float = 0.0
    branch_rate: float = 0.0
    complexity: int = 0
    total_lines: int = 0
    covered_lines: int = 0


@dataclass(frozen=True, slots=True)
class ClassCoverage:
    """Class-level coverage.

    ``class_lines`` holds the lines that appear under the class but not within
    any of its methods (field initializers, for example).
    """

    name: str
    file_path: str | None
    methods: tuple[MethodCoverage, ...] = ()
    class_lines: tuple[LineCoverage, ...] = ()
    line_rate: float = 0.0
    branch_rate: float = 0.0
    complexity: int = 0
    total_lines: int = 0
    covered_lines: int = 0


@dataclass(frozen=True, slots=True)
class PackageCoverage:
    """Package (namespace) level coverage."""

    name: str
    classes: tuple[ClassCoverage, ...] = ()
    line_rate: float = 0.0
    branch_rate: float = 0.0
    complexity: int = 0
    total_lines: int = 0
    covered_lines: int = 0


@dataclass(frozen=True, slots=True)
class CoverageReport:
    """A complete Cobertura report, parsed or merged.

    ``lines_covered``/``lines_valid``/``branches_covered``/``branches_valid``
    carry the values declared by the producer; ``total_lines`` and
    ``covered_lines`` are always computed from the packages.
    """

    packages: tuple[PackageCoverage, ...] = ()
    sources: tuple[str, ...] = ()
    line_rate: float = 0.0
    branch_rate: float = 0.0
    complexity: int = 0
    timestamp: int = 0
    version: str = ""
    lines_covered: int = 0
    lines_valid: int = 0
    branches_covered: int = 0
    branches_valid: int = 0
    total_lines: int = 0
    covered_lines: int = 0

    @classmethod
    def empty(cls) -> CoverageReport:
        """A report with no packages and every numeric field zeroed."""
        return cls()
