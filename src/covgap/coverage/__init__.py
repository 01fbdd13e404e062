"""Cobertura coverage merging and missing coverage reporting.

This package provides:
- Cobertura XML parsing into an immutable coverage model
- Hit-summing merge across reports
- Extraction of missing coverage rows (uncovered lines, partial branches)
- Table, markdown and JSON exporters

Usage:
    from covgap.coverage import extract_missing, get_exporter, merge_reports, parse_artifact

    reports = [parse_artifact(path) for path in paths]
    merged = merge_reports(reports)
    rows = extract_missing(merged)
    print(get_exporter("table").export(rows))
"""

from covgap.coverage.exporters import (
    EXPORTER_BY_FORMAT,
    CoverageExporter,
    JsonExporter,
    MarkdownExporter,
    TableExporter,
    get_exporter,
)
from covgap.coverage.extract import MissingCoverageRow, extract_missing
from covgap.coverage.files import filter_excluded, read_report, resolve_files
from covgap.coverage.merge import merge, merge_reports
from covgap.coverage.models import (
    BranchCondition,
    ClassCoverage,
    CoverageReport,
    LineCoverage,
    LineScope,
    MethodCoverage,
    PackageCoverage,
)
from covgap.coverage.parsers import CoberturaParser, parse_artifact
from covgap.coverage.paths import NullPathTransformer, PathTransformer, RelativePathTransformer
from covgap.coverage.ranges import format_line_ranges

__all__ = [
    # Models
    "BranchCondition",
    "ClassCoverage",
    "CoverageReport",
    "LineCoverage",
    "LineScope",
    "MethodCoverage",
    "PackageCoverage",
    # Parsing
    "CoberturaParser",
    "parse_artifact",
    # Files
    "filter_excluded",
    "read_report",
    "resolve_files",
    # Merge
    "merge",
    "merge_reports",
    # Extraction
    "MissingCoverageRow",
    "extract_missing",
    "format_line_ranges",
    # Paths
    "NullPathTransformer",
    "PathTransformer",
    "RelativePathTransformer",
    # Export
    "EXPORTER_BY_FORMAT",
    "CoverageExporter",
    "JsonExporter",
    "MarkdownExporter",
    "TableExporter",
    "get_exporter",
]
