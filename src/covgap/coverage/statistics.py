"""Coverage statistics used when recomputing merged reports."""

from __future__ import annotations

import math
from collections.abc import Sequence

from covgap.core.errors import CoverageError
from covgap.coverage.models import LineCoverage, MethodCoverage


def line_rate(lines: Sequence[LineCoverage]) -> float:
    """Fraction of lines with at least one hit (0.0 when there are none)."""
    if lines is None:
        raise CoverageError.invalid_argument("lines", "must not be None")
    if not lines:
        return 0.0
    covered = sum(1 for line in lines if line.hits > 0)
    return covered / len(lines)


def branch_rate(lines: Sequence[LineCoverage]) -> float:
    """Fraction of branch conditions with non-zero coverage.

    Only branch lines that carry at least one condition take part. Returns
    0.0 when no such line exists.
    """
    if lines is None:
        raise CoverageError.invalid_argument("lines", "must not be None")

    branch_lines = [line for line in lines if line.is_branch and line.conditions]
    if not branch_lines:
        return 0.0

    total = sum(len(line.conditions) for line in branch_lines)
    covered = sum(
        1
        for line in branch_lines
        for condition in line.conditions
        if parse_coverage_percent(condition.coverage) > 0
    )
    return covered / total


def sum_complexity(methods: Sequence[MethodCoverage]) -> int:
    """Total cyclomatic complexity of the given methods."""
    if methods is None:
        raise CoverageError.invalid_argument("methods", "must not be None")
    return sum(method.complexity for method in methods)


def parse_coverage_percent(value: str | None) -> float:
    """Parse a percentage such as ``"50%"`` or ``"50"``.

    Empty, missing, unparseable, or non-finite input yields 0.0.
    """
    if not value:
        return 0.0
    try:
        result = float(value.rstrip("%"))
    except ValueError:
        return 0.0
    return result if math.isfinite(result) else 0.0


def format_percent(value: float) -> str:
    """Serialize a percentage value as a coverage string (``75.0`` -> ``"75%"``)."""
    if value.is_integer():
        return f"{int(value)}%"
    return f"{value!r}%"
