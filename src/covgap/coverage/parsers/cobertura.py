"""Cobertura XML format parser.

Cobertura XML is produced by many coverage tools across languages:
- Python: coverage.py
- .NET: coverlet, dotnet-coverage
- Go: gocover-cobertura
- Java: cobertura-maven-plugin

Structure:
<coverage line-rate="0.85" branch-rate="0.50" version="1.9" timestamp="...">
  <sources>
    <source>/repo/src</source>
  </sources>
  <packages>
    <package name="...">
      <classes>
        <class name="..." filename="..." line-rate="..." complexity="...">
          <methods>
            <method name="..." signature="..." line-rate="...">
              <lines>
                <line number="1" hits="1" branch="false"/>
                <line number="2" hits="0" branch="true" condition-coverage="50% (1/2)">
                  <conditions>
                    <condition number="0" type="jump" coverage="50%"/>
                  </conditions>
                </line>
              </lines>
            </method>
          </methods>
          <lines>
            <line number="1" hits="1"/>
          </lines>
        </class>
      </classes>
    </package>
  </packages>
</coverage>

Producers differ in how strict they are, so numeric attributes that are
missing or malformed fall back to defaults instead of failing the parse.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from pathlib import Path

from covgap.core.errors import CoverageError
from covgap.coverage.models import (
    BranchCondition,
    ClassCoverage,
    CoverageReport,
    LineCoverage,
    LineScope,
    MethodCoverage,
    PackageCoverage,
)


def _int_attr(elem: ET.Element, name: str, default: int = 0) -> int:
    value = elem.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _float_attr(elem: ET.Element, name: str, default: float = 0.0) -> float:
    value = elem.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _bool_attr(elem: ET.Element, name: str, default: bool = False) -> bool:
    value = elem.get(name)
    if not value:
        return default
    return value.lower() == "true"


def _children(parent: ET.Element, container: str, tag: str) -> list[ET.Element]:
    """Direct ``<container>/<tag>`` children of parent."""
    holder = parent.find(container)
    if holder is None:
        return []
    return holder.findall(tag)


def _strip_namespaces(root: ET.Element) -> None:
    for elem in root.iter():
        if "}" in elem.tag:
            elem.tag = elem.tag.split("}", 1)[1]


class CoberturaParser:
    """Parser for Cobertura XML format."""

    @property
    def format_id(self) -> str:
        return "cobertura"

    def can_parse(self, path: Path) -> bool:
        """Check if file looks like Cobertura XML."""
        if not path.is_file():
            return False

        # Content sniff: look for <coverage> root with line-rate attribute
        try:
            with path.open("rb") as f:
                header = f.read(2048).decode("utf-8", errors="ignore")
        except OSError:
            return False
        return "<coverage" in header and "line-rate=" in header

    def parse(self, path: Path) -> CoverageReport:
        """Parse a Cobertura XML file into a CoverageReport.

        Raises:
            CoverageError: If the file is missing, unreadable, or not Cobertura XML.
        """
        if not path.is_file():
            raise CoverageError.file_not_found(str(path))

        try:
            tree = ET.parse(path)
        except ET.ParseError as e:
            raise CoverageError.invalid_xml(str(e)) from e
        except OSError as e:
            raise CoverageError.unreadable(str(path), str(e)) from e

        return self._parse_root(tree.getroot())

    def parse_string(self, content: str) -> CoverageReport:
        """Parse Cobertura XML content into a CoverageReport."""
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise CoverageError.invalid_xml(str(e)) from e
        return self._parse_root(root)

    def _parse_root(self, root: ET.Element) -> CoverageReport:
        _strip_namespaces(root)
        if root.tag != "coverage":
            raise CoverageError.invalid_xml("missing 'coverage' root element")

        sources = tuple(
            text
            for text in ((s.text or "").strip() for s in _children(root, "sources", "source"))
            if text
        )
        packages = tuple(
            self._parse_package(elem, sources) for elem in _children(root, "packages", "package")
        )

        total = sum(p.total_lines for p in packages)
        covered = sum(p.covered_lines for p in packages)

        return CoverageReport(
            packages=packages,
            sources=sources,
            line_rate=_float_attr(root, "line-rate"),
            branch_rate=_float_attr(root, "branch-rate"),
            complexity=_int_attr(root, "complexity"),
            timestamp=_int_attr(root, "timestamp"),
            version=root.get("version", ""),
            lines_covered=_int_attr(root, "lines-covered", covered),
            lines_valid=_int_attr(root, "lines-valid", total),
            branches_covered=_int_attr(root, "branches-covered"),
            branches_valid=_int_attr(root, "branches-valid"),
            total_lines=total,
            covered_lines=covered,
        )

    def _parse_package(self, elem: ET.Element, sources: Sequence[str]) -> PackageCoverage:
        classes = tuple(
            self._parse_class(cls, sources) for cls in _children(elem, "classes", "class")
        )
        return PackageCoverage(
            name=elem.get("name", ""),
            classes=classes,
            line_rate=_float_attr(elem, "line-rate"),
            branch_rate=_float_attr(elem, "branch-rate"),
            complexity=_int_attr(elem, "complexity"),
            total_lines=sum(c.total_lines for c in classes),
            covered_lines=sum(c.covered_lines for c in classes),
        )

    def _parse_class(self, elem: ET.Element, sources: Sequence[str]) -> ClassCoverage:
        file_path = resolve_file_path(elem.get("filename"), sources)

        methods = tuple(
            self._parse_method(m, file_path) for m in _children(elem, "methods", "method")
        )

        # A line belongs to the class only if no method declares it
        method_line_numbers = {line.number for m in methods for line in m.lines}
        class_lines = tuple(
            line
            for line in (
                self._parse_line(ln, file_path, LineScope.CLASS)
                for ln in _children(elem, "lines", "line")
            )
            if line.number not in method_line_numbers
        )

        total = sum(m.total_lines for m in methods) + len(class_lines)
        covered = sum(m.covered_lines for m in methods) + sum(
            1 for line in class_lines if line.hits > 0
        )

        return ClassCoverage(
            name=elem.get("name", ""),
            file_path=file_path,
            methods=methods,
            class_lines=class_lines,
            line_rate=_float_attr(elem, "line-rate"),
            branch_rate=_float_attr(elem, "branch-rate"),
            complexity=_int_attr(elem, "complexity"),
            total_lines=total,
            covered_lines=covered,
        )

    def _parse_method(self, elem: ET.Element, file_path: str | None) -> MethodCoverage:
        lines = tuple(
            self._parse_line(ln, file_path, LineScope.METHOD)
            for ln in _children(elem, "lines", "line")
        )
        return MethodCoverage(
            name=elem.get("name", ""),
            signature=elem.get("signature", ""),
            lines=lines,
            line_rate=_float_attr(elem, "line-rate"),
            branch_rate=_float_attr(elem, "branch-rate"),
            complexity=_int_attr(elem, "complexity"),
            total_lines=len(lines),
            covered_lines=sum(1 for line in lines if line.hits > 0),
        )

    def _parse_line(self, elem: ET.Element, file_path: str | None, scope: LineScope) -> LineCoverage:
        conditions = tuple(
            BranchCondition(
                number=_int_attr(c, "number"),
                type=c.get("type", ""),
                coverage=c.get("coverage", ""),
            )
            for c in _children(elem, "conditions", "condition")
        )
        return LineCoverage(
            number=_int_attr(elem, "number"),
            hits=_int_attr(elem, "hits"),
            is_branch=_bool_attr(elem, "branch"),
            condition_coverage=elem.get("condition-coverage"),
            conditions=conditions,
            file_path=file_path,
            scope=scope,
        )


def resolve_file_path(filename: str | None, sources: Sequence[str]) -> str | None:
    """Resolve a class filename against the report's source roots.

    Absolute filenames are returned as-is. Relative ones resolve to the first
    source root under which the file exists, falling back to the raw name.
    """
    if not filename:
        return None

    if Path(filename).is_absolute():
        return filename

    for source in sources:
        candidate = Path(source) / filename
        if candidate.is_file():
            return str(candidate)

    return filename
