"""Cobertura parsing entry points.

This module provides:
- CoberturaParser: the XML parser
- parse_artifact: parse one file, attributing failures to that file
"""

from pathlib import Path

from covgap.core.errors import CoverageError, ErrorCode
from covgap.core.logging import get_logger
from covgap.coverage.models import CoverageReport

from .cobertura import CoberturaParser, resolve_file_path

__all__ = [
    "CoberturaParser",
    "parse_artifact",
    "resolve_file_path",
]

log = get_logger("coverage.parsers")

_PARSER = CoberturaParser()


def parse_artifact(path: Path) -> CoverageReport:
    """Parse a Cobertura XML file into a CoverageReport.

    Args:
        path: Path to the coverage file.

    Returns:
        Parsed CoverageReport.

    Raises:
        CoverageError: If the file is missing or unreadable, or if the content
            is not valid Cobertura XML (reported with the offending path).
    """
    try:
        report = _PARSER.parse(path)
    except CoverageError as e:
        if e.code is not ErrorCode.COVERAGE_PARSE_ERROR:
            raise
        raise CoverageError.parse_error(str(path), e.message) from e

    log.debug(
        "coverage_parsed",
        path=str(path),
        packages=len(report.packages),
        total_lines=report.total_lines,
    )
    return report
