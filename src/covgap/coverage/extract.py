"""Missing coverage extraction.

Walks a (merged) report and produces one row per reportable gap:

- runs of uncovered plain lines inside one method (or among the class-level
  lines) are grouped into a single row
- every branch line with incomplete branch coverage gets a row of its own,
  and ends the run of plain lines before it

Rows are sorted by file, class, method (class-level rows first) and first
line number.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from covgap.core.errors import CoverageError
from covgap.coverage.models import BranchCondition, CoverageReport, LineCoverage

UNKNOWN_BRANCH_COVERAGE = "unknown"


@dataclass(frozen=True, slots=True)
class MissingCoverageRow:
    """One reportable unit of missing coverage."""

    file: str
    class_name: str
    method: str | None  # None for class-level lines
    line_numbers: tuple[int, ...]
    hits: int = 0
    branch_coverage: str | None = None  # e.g. "50% (1/2)"
    branch_conditions: str | None = None  # e.g. "[0:jump 0%,1:jump 100%]"

    @property
    def is_branch(self) -> bool:
        return self.branch_coverage is not None


def has_incomplete_branch_coverage(line: LineCoverage) -> bool:
    """True if a branch line has at least one outcome that was never fully taken.

    Individual conditions take precedence over the ``condition-coverage``
    summary. A branch line carrying neither counts as incomplete.
    """
    if not line.is_branch:
        return False
    if line.conditions:
        return any(c.coverage.upper() != "100%" for c in line.conditions)
    if line.condition_coverage:
        return not line.condition_coverage.upper().startswith("100%")
    return True


def format_branch_conditions(conditions: Sequence[BranchCondition]) -> str | None:
    if not conditions:
        return None
    return "[" + ",".join(f"{c.number}:{c.type} {c.coverage}" for c in conditions) + "]"


def _plain_row(
    file: str, class_name: str, method: str | None, numbers: list[int]
) -> MissingCoverageRow:
    return MissingCoverageRow(
        file=file,
        class_name=class_name,
        method=method,
        line_numbers=tuple(numbers),
    )


def _branch_row(
    file: str, class_name: str, method: str | None, line: LineCoverage
) -> MissingCoverageRow:
    return MissingCoverageRow(
        file=file,
        class_name=class_name,
        method=method,
        line_numbers=(line.number,),
        branch_coverage=line.condition_coverage or UNKNOWN_BRANCH_COVERAGE,
        branch_conditions=format_branch_conditions(line.conditions),
    )


def _extract_from_lines(
    lines: Sequence[LineCoverage],
    file: str,
    class_name: str,
    method: str | None,
) -> list[MissingCoverageRow]:
    rows: list[MissingCoverageRow] = []
    buffer: list[int] = []

    for line in sorted(lines, key=lambda ln: ln.number):
        if has_incomplete_branch_coverage(line):
            if buffer:
                rows.append(_plain_row(file, class_name, method, buffer))
                buffer = []
            rows.append(_branch_row(file, class_name, method, line))
        elif line.hits == 0:
            buffer.append(line.number)

    if buffer:
        rows.append(_plain_row(file, class_name, method, buffer))

    return rows


def _sort_key(row: MissingCoverageRow) -> tuple[str, str, str, int]:
    return (row.file, row.class_name, row.method or "", row.line_numbers[0])


def extract_missing(report: CoverageReport) -> list[MissingCoverageRow]:
    """Extract every missing coverage row from a report.

    Args:
        report: The (usually merged) coverage report.

    Returns:
        Rows sorted by file, class, method and first line number.

    Raises:
        CoverageError: If ``report`` is None.
    """
    if report is None:
        raise CoverageError.invalid_argument("report", "must not be None")

    rows: list[MissingCoverageRow] = []
    for package in report.packages:
        for cls in package.classes:
            file = cls.file_path or ""
            rows.extend(_extract_from_lines(cls.class_lines, file, cls.name, None))
            for method in cls.methods:
                rows.extend(_extract_from_lines(method.lines, file, cls.name, method.name))

    return sorted(rows, key=_sort_key)
