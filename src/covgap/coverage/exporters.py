"""Missing coverage exporters.

Three output formats share one protocol:
- table: pipe-separated lines with a header, for terminals and grep
- markdown: a markdown table, for PR comments and job summaries
- json: a compact array of objects, for tools

All exporters truncate to ``limit`` rows and rewrite only the file column
through the optional path transformer.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Protocol

from covgap.core.errors import CoverageError
from covgap.coverage.extract import MissingCoverageRow
from covgap.coverage.paths import PathTransformer
from covgap.coverage.ranges import format_line_ranges


class CoverageExporter(Protocol):
    """Protocol for missing coverage exporters."""

    @property
    def format_id(self) -> str:
        """Format identifier (e.g., 'table', 'json')."""
        ...

    def export(
        self,
        rows: Sequence[MissingCoverageRow],
        limit: int | None = None,
        path_transformer: PathTransformer | None = None,
    ) -> str:
        """Render rows as a string.

        Raises:
            CoverageError: If rows is None or limit is negative.
        """
        ...


def _select_rows(
    rows: Sequence[MissingCoverageRow], limit: int | None
) -> Sequence[MissingCoverageRow]:
    if rows is None:
        raise CoverageError.invalid_argument("rows", "must not be None")
    if limit is None:
        return rows
    if limit < 0:
        raise CoverageError.invalid_argument("limit", f"must be >= 0, got {limit}")
    return rows[:limit]


def _display_file(row: MissingCoverageRow, path_transformer: PathTransformer | None) -> str:
    return path_transformer.transform(row.file) if path_transformer else row.file


def _escape_pipe(value: str) -> str:
    return value.replace("|", "\\|")


def _text_fields(
    row: MissingCoverageRow, path_transformer: PathTransformer | None
) -> list[str]:
    return [
        _escape_pipe(_display_file(row, path_transformer)),
        _escape_pipe(row.class_name),
        _escape_pipe(row.method or ""),
        _escape_pipe(format_line_ranges(row.line_numbers)),
        str(row.hits),
        _escape_pipe(row.branch_coverage or ""),
        _escape_pipe(row.branch_conditions or ""),
    ]


class TableExporter:
    """Pipe-separated table."""

    HEADER = "File|Class|Method|Lines|Hits|BranchCoverage|BranchConditions"

    @property
    def format_id(self) -> str:
        return "table"

    def export(
        self,
        rows: Sequence[MissingCoverageRow],
        limit: int | None = None,
        path_transformer: PathTransformer | None = None,
    ) -> str:
        lines = [self.HEADER]
        for row in _select_rows(rows, limit):
            lines.append("|".join(_text_fields(row, path_transformer)))
        return "\n".join(lines).rstrip()


class MarkdownExporter:
    """Markdown table."""

    HEADER = "| File | Class | Method | Lines | Hits | Branch Coverage | Branch Conditions |"
    SEPARATOR = "|------|-------|--------|-------|------|-----------------|-------------------|"

    @property
    def format_id(self) -> str:
        return "markdown"

    def export(
        self,
        rows: Sequence[MissingCoverageRow],
        limit: int | None = None,
        path_transformer: PathTransformer | None = None,
    ) -> str:
        lines = [self.HEADER, self.SEPARATOR]
        for row in _select_rows(rows, limit):
            lines.append("| " + " | ".join(_text_fields(row, path_transformer)) + " |")
        return "\n".join(lines).rstrip()


class JsonExporter:
    """Compact JSON array with camelCase keys; null values are omitted."""

    @property
    def format_id(self) -> str:
        return "json"

    def export(
        self,
        rows: Sequence[MissingCoverageRow],
        limit: int | None = None,
        path_transformer: PathTransformer | None = None,
    ) -> str:
        payload = [self._to_dict(row, path_transformer) for row in _select_rows(rows, limit)]
        return json.dumps(payload, separators=(",", ":"))

    @staticmethod
    def _to_dict(
        row: MissingCoverageRow, path_transformer: PathTransformer | None
    ) -> dict[str, Any]:
        data: dict[str, Any] = {
            "file": _display_file(row, path_transformer),
            "class": row.class_name,
            "method": row.method,
            "lines": format_line_ranges(row.line_numbers),
            # Hits only carries meaning next to branch details
            "hits": row.hits if row.is_branch else None,
            "branchCoverage": row.branch_coverage,
            "branchConditions": row.branch_conditions,
        }
        return {key: value for key, value in data.items() if value is not None}


# Format ID to exporter mapping
EXPORTER_BY_FORMAT: dict[str, CoverageExporter] = {
    e.format_id: e for e in (TableExporter(), JsonExporter(), MarkdownExporter())
}


def get_exporter(format_id: str) -> CoverageExporter:
    """Look up an exporter by format id (case-insensitive).

    Raises:
        CoverageError: If the format is unknown.
    """
    exporter = EXPORTER_BY_FORMAT.get(format_id.lower())
    if exporter is None:
        valid = ", ".join(sorted(EXPORTER_BY_FORMAT))
        raise CoverageError.invalid_argument(
            "format_id", f"unknown output format {format_id!r}. Valid formats: {valid}"
        )
    return exporter
