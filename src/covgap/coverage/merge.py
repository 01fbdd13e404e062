"""Coverage report merging with hit-summing semantics.

Reports from several test runs (parallel shards, separate test projects) are
combined by grouping entities on a stable identity key at every level of the
tree and merging each group:

- packages by name
- classes by (name, file path)
- methods by (name, signature)
- lines by (number, scope): hits are summed
- branch conditions by number: the highest coverage percentage wins

Groups with a single member are kept as-is. Every merged list is sorted by
its key, so the result does not depend on the order of the inputs (apart
from the report version, which is taken from the first input).
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable

from covgap.core.errors import CoverageError
from covgap.core.logging import get_logger
from covgap.coverage.models import (
    BranchCondition,
    ClassCoverage,
    CoverageReport,
    LineCoverage,
    MethodCoverage,
    PackageCoverage,
)
from covgap.coverage.statistics import (
    branch_rate,
    format_percent,
    line_rate,
    parse_coverage_percent,
    sum_complexity,
)

log = get_logger("coverage.merge")


def _group_by[T, K: Hashable](items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Group items by key, preserving first-seen key order and member order."""
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def _rate(covered: int, total: int) -> float:
    return covered / total if total > 0 else 0.0


def _class_key(cls: ClassCoverage) -> tuple[str, bool, str]:
    # None and "" are distinct file paths
    return (cls.name, cls.file_path is not None, cls.file_path or "")


def merge_conditions(conditions: Iterable[BranchCondition]) -> tuple[BranchCondition, ...]:
    """Merge branch conditions by number, keeping the highest coverage."""
    merged = []
    for number, group in _group_by(conditions, lambda c: c.number).items():
        if len(group) == 1:
            merged.append(group[0])
            continue
        best = max(parse_coverage_percent(c.coverage) for c in group)
        merged.append(
            BranchCondition(number=number, type=group[0].type, coverage=format_percent(best))
        )
    return tuple(sorted(merged, key=lambda c: c.number))


def _merge_line_group(lines: list[LineCoverage]) -> LineCoverage:
    if len(lines) == 1:
        return lines[0]

    first = lines[0]
    if len({line.is_branch for line in lines}) > 1:
        raise CoverageError.merge_conflict(first.number, "conflicting branch flags")

    # First reported summary wins; it is not recomputed from merged conditions.
    condition_coverage = None
    if first.is_branch:
        condition_coverage = next(
            (line.condition_coverage for line in lines if line.condition_coverage is not None),
            None,
        )

    return LineCoverage(
        number=first.number,
        hits=sum(line.hits for line in lines),
        is_branch=first.is_branch,
        condition_coverage=condition_coverage,
        conditions=merge_conditions(c for line in lines for c in line.conditions),
        file_path=first.file_path,
        scope=first.scope,
    )


def merge_lines(lines: Iterable[LineCoverage]) -> tuple[LineCoverage, ...]:
    """Merge lines sharing (number, scope), sorted by line number.

    Raises:
        CoverageError: If lines sharing a key disagree on being a branch.
    """
    groups = _group_by(lines, lambda line: (line.number, line.scope))
    merged = [_merge_line_group(group) for group in groups.values()]
    return tuple(sorted(merged, key=lambda line: (line.number, line.scope.value)))


def _merge_method_group(methods: list[MethodCoverage]) -> MethodCoverage:
    if len(methods) == 1:
        return methods[0]

    first = methods[0]
    lines = merge_lines(line for method in methods for line in method.lines)
    covered = sum(1 for line in lines if line.hits > 0)

    return MethodCoverage(
        name=first.name,
        signature=first.signature,
        lines=lines,
        line_rate=line_rate(lines),
        branch_rate=branch_rate(lines),
        # Complexity describes the method body, so duplicates are not summed
        complexity=max(method.complexity for method in methods),
        total_lines=len(lines),
        covered_lines=covered,
    )


def merge_methods(methods: Iterable[MethodCoverage]) -> tuple[MethodCoverage, ...]:
    """Merge methods sharing (name, signature), sorted by that key."""
    groups = _group_by(methods, lambda m: (m.name, m.signature))
    merged = [_merge_method_group(group) for group in groups.values()]
    return tuple(sorted(merged, key=lambda m: (m.name, m.signature)))


def _merge_class_group(classes: list[ClassCoverage]) -> ClassCoverage:
    if len(classes) == 1:
        return classes[0]

    first = classes[0]
    methods = merge_methods(m for cls in classes for m in cls.methods)
    class_lines = merge_lines(line for cls in classes for line in cls.class_lines)

    total = sum(m.total_lines for m in methods) + len(class_lines)
    covered = sum(m.covered_lines for m in methods) + sum(
        1 for line in class_lines if line.hits > 0
    )

    return ClassCoverage(
        name=first.name,
        file_path=first.file_path,
        methods=methods,
        class_lines=class_lines,
        line_rate=_rate(covered, total),
        branch_rate=0.0,
        complexity=sum_complexity(methods),
        total_lines=total,
        covered_lines=covered,
    )


def merge_classes(classes: Iterable[ClassCoverage]) -> tuple[ClassCoverage, ...]:
    """Merge classes sharing (name, file path), sorted by that key."""
    groups = _group_by(classes, _class_key)
    merged = [_merge_class_group(group) for group in groups.values()]
    return tuple(sorted(merged, key=_class_key))


def _merge_package_group(name: str, packages: list[PackageCoverage]) -> PackageCoverage:
    if len(packages) == 1:
        return packages[0]

    classes = merge_classes(cls for package in packages for cls in package.classes)
    total = sum(c.total_lines for c in classes)
    covered = sum(c.covered_lines for c in classes)

    return PackageCoverage(
        name=name,
        classes=classes,
        line_rate=_rate(covered, total),
        branch_rate=0.0,
        complexity=sum(c.complexity for c in classes),
        total_lines=total,
        covered_lines=covered,
    )


def merge_packages(packages: Iterable[PackageCoverage]) -> tuple[PackageCoverage, ...]:
    """Merge packages sharing a name, sorted by name."""
    groups = _group_by(packages, lambda p: p.name)
    merged = [_merge_package_group(name, group) for name, group in groups.items()]
    return tuple(sorted(merged, key=lambda p: p.name))


def merge_reports(reports: Iterable[CoverageReport]) -> CoverageReport:
    """Merge multiple CoverageReport objects into one.

    Args:
        reports: CoverageReport objects to merge.

    Returns:
        An empty report for no inputs, the input itself for a single report,
        otherwise the merged report.

    Raises:
        CoverageError: If ``reports`` is None, or two reports disagree on
            whether a line is a branch.
    """
    if reports is None:
        raise CoverageError.invalid_argument("reports", "must not be None")

    reports_list = list(reports)

    if not reports_list:
        return CoverageReport.empty()

    if len(reports_list) == 1:
        return reports_list[0]

    sources = tuple(dict.fromkeys(source for r in reports_list for source in r.sources))
    packages = merge_packages(p for r in reports_list for p in r.packages)

    total = sum(p.total_lines for p in packages)
    covered = sum(p.covered_lines for p in packages)

    log.debug(
        "coverage_merged",
        reports=len(reports_list),
        packages=len(packages),
        total_lines=total,
        covered_lines=covered,
    )

    return CoverageReport(
        packages=packages,
        sources=sources,
        line_rate=_rate(covered, total),
        # Report-level branch totals are not recomputed after a merge
        branch_rate=0.0,
        complexity=sum(p.complexity for p in packages),
        timestamp=max(r.timestamp for r in reports_list),
        version=reports_list[0].version,
        lines_covered=covered,
        lines_valid=total,
        branches_covered=0,
        branches_valid=0,
        total_lines=total,
        covered_lines=covered,
    )


def merge(*reports: CoverageReport) -> CoverageReport:
    """Convenience function to merge reports as varargs."""
    return merge_reports(reports)
