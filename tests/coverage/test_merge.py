"""Tests for coverage/merge.py."""

from __future__ import annotations

import pytest

from covgap.core.errors import CoverageError, ErrorCode
from covgap.coverage.merge import (
    merge,
    merge_conditions,
    merge_lines,
    merge_reports,
)
from covgap.coverage.models import (
    BranchCondition,
    ClassCoverage,
    CoverageReport,
    LineCoverage,
    LineScope,
    MethodCoverage,
    PackageCoverage,
)


def _line(number: int, hits: int, **kwargs: object) -> LineCoverage:
    return LineCoverage(number=number, hits=hits, file_path="File.cs", **kwargs)  # type: ignore[arg-type]


def _method(name: str, lines: list[LineCoverage], *, signature: str = "()", complexity: int = 1) -> MethodCoverage:
    return MethodCoverage(
        name=name,
        signature=signature,
        lines=tuple(lines),
        complexity=complexity,
        total_lines=len(lines),
        covered_lines=sum(1 for ln in lines if ln.hits > 0),
    )


def _class(
    name: str,
    methods: list[MethodCoverage],
    *,
    file_path: str | None = "File.cs",
    class_lines: list[LineCoverage] | None = None,
) -> ClassCoverage:
    extra = class_lines or []
    return ClassCoverage(
        name=name,
        file_path=file_path,
        methods=tuple(methods),
        class_lines=tuple(extra),
        total_lines=sum(m.total_lines for m in methods) + len(extra),
        covered_lines=sum(m.covered_lines for m in methods) + sum(1 for ln in extra if ln.hits > 0),
    )


def _package(name: str, classes: list[ClassCoverage]) -> PackageCoverage:
    return PackageCoverage(
        name=name,
        classes=tuple(classes),
        total_lines=sum(c.total_lines for c in classes),
        covered_lines=sum(c.covered_lines for c in classes),
    )


def _report(
    packages: list[PackageCoverage],
    *,
    sources: tuple[str, ...] = (),
    timestamp: int = 0,
    version: str = "1.0",
) -> CoverageReport:
    return CoverageReport(
        packages=tuple(packages),
        sources=sources,
        timestamp=timestamp,
        version=version,
        total_lines=sum(p.total_lines for p in packages),
        covered_lines=sum(p.covered_lines for p in packages),
    )


def _single_line_report(line: LineCoverage, *, package: str = "Pkg") -> CoverageReport:
    return _report([_package(package, [_class("MyClass", [_method("MyMethod", [line])])])])


def _only_line(report: CoverageReport) -> LineCoverage:
    (package,) = report.packages
    (cls,) = package.classes
    (method,) = cls.methods
    (line,) = method.lines
    return line


class TestMergeTrivialInputs:
    """Zero and one input."""

    def test_empty_input_returns_zeroed_report(self) -> None:
        result = merge_reports([])

        assert result == CoverageReport.empty()
        assert result.packages == ()
        assert result.sources == ()
        assert result.version == ""
        assert result.total_lines == 0
        assert result.covered_lines == 0
        assert result.line_rate == 0.0
        assert result.timestamp == 0

    def test_single_report_returned_unchanged(self) -> None:
        report = _single_line_report(_line(10, 3))

        assert merge_reports([report]) is report

    def test_none_raises_invalid_argument(self) -> None:
        with pytest.raises(CoverageError) as exc_info:
            merge_reports(None)  # type: ignore[arg-type]

        assert exc_info.value.code is ErrorCode.COVERAGE_INVALID_ARGUMENT

    def test_accepts_generator(self) -> None:
        reports = (_single_line_report(_line(10, n)) for n in (1, 2))

        result = merge_reports(reports)

        assert _only_line(result).hits == 3

    def test_varargs_wrapper(self) -> None:
        a = _single_line_report(_line(10, 1))
        b = _single_line_report(_line(10, 4))

        assert merge(a, b) == merge_reports([a, b])


class TestLineMerge:
    """Line-level merge rules."""

    def test_hits_are_summed(self) -> None:
        a = _single_line_report(_line(10, 5))
        b = _single_line_report(_line(10, 3))

        result = merge_reports([a, b])

        assert _only_line(result).hits == 8

    def test_conflicting_branch_flags_raise(self) -> None:
        a = _single_line_report(_line(10, 1, is_branch=True))
        b = _single_line_report(_line(10, 1, is_branch=False))

        with pytest.raises(CoverageError) as exc_info:
            merge_reports([a, b])

        assert exc_info.value.code is ErrorCode.COVERAGE_MERGE_CONFLICT
        assert exc_info.value.details["line"] == 10

    def test_same_number_different_scope_kept_apart(self) -> None:
        lines = [
            _line(10, 0, scope=LineScope.METHOD),
            _line(10, 2, scope=LineScope.CLASS),
        ]

        merged = merge_lines(lines)

        assert len(merged) == 2
        assert {ln.scope for ln in merged} == {LineScope.METHOD, LineScope.CLASS}

    def test_lines_sorted_by_number(self) -> None:
        merged = merge_lines([_line(30, 1), _line(10, 1), _line(20, 1), _line(10, 2)])

        assert [ln.number for ln in merged] == [10, 20, 30]
        assert merged[0].hits == 3

    def test_condition_coverage_first_non_null(self) -> None:
        lines = [
            _line(10, 1, is_branch=True, condition_coverage=None),
            _line(10, 1, is_branch=True, condition_coverage="50% (1/2)"),
            _line(10, 1, is_branch=True, condition_coverage="100% (2/2)"),
        ]

        (merged,) = merge_lines(lines)

        assert merged.condition_coverage == "50% (1/2)"

    def test_non_branch_line_has_no_condition_coverage(self) -> None:
        lines = [
            _line(10, 1, condition_coverage="50% (1/2)"),
            _line(10, 1, condition_coverage="50% (1/2)"),
        ]

        (merged,) = merge_lines(lines)

        assert merged.condition_coverage is None

    def test_single_line_group_unchanged(self) -> None:
        line = _line(10, 0, is_branch=True, condition_coverage="0% (0/2)")

        assert merge_lines([line]) == (line,)


class TestConditionMerge:
    """Branch condition merge rules."""

    def test_highest_coverage_wins(self) -> None:
        conditions = [
            BranchCondition(number=0, type="jump", coverage="25%"),
            BranchCondition(number=0, type="jump", coverage="75%"),
        ]

        (merged,) = merge_conditions(conditions)

        assert merged.coverage == "75%"
        assert merged.type == "jump"

    def test_fractional_coverage_keeps_fraction(self) -> None:
        conditions = [
            BranchCondition(number=0, type="jump", coverage="33.5%"),
            BranchCondition(number=0, type="jump", coverage="12%"),
        ]

        (merged,) = merge_conditions(conditions)

        assert merged.coverage == "33.5%"

    def test_unparseable_coverage_counts_as_zero(self) -> None:
        conditions = [
            BranchCondition(number=1, type="switch", coverage="bogus"),
            BranchCondition(number=1, type="switch", coverage="0%"),
        ]

        (merged,) = merge_conditions(conditions)

        assert merged.coverage == "0%"

    def test_single_condition_unchanged(self) -> None:
        condition = BranchCondition(number=0, type="jump", coverage="50% (1/2)")

        assert merge_conditions([condition]) == (condition,)

    def test_conditions_sorted_by_number(self) -> None:
        conditions = [
            BranchCondition(number=2, type="jump", coverage="0%"),
            BranchCondition(number=0, type="jump", coverage="100%"),
            BranchCondition(number=1, type="jump", coverage="50%"),
        ]

        merged = merge_conditions(conditions)

        assert [c.number for c in merged] == [0, 1, 2]

    def test_conditions_merged_through_reports(self) -> None:
        a = _single_line_report(
            _line(
                10,
                1,
                is_branch=True,
                conditions=(BranchCondition(0, "jump", "25%"),),
            )
        )
        b = _single_line_report(
            _line(
                10,
                1,
                is_branch=True,
                conditions=(BranchCondition(0, "jump", "75%"), BranchCondition(1, "jump", "0%")),
            )
        )

        line = _only_line(merge_reports([a, b]))

        assert line.conditions == (
            BranchCondition(0, "jump", "75%"),
            BranchCondition(1, "jump", "0%"),
        )


class TestStructuralMerge:
    """Package, class and method grouping."""

    def test_packages_grouped_by_name(self) -> None:
        a = _report([_package("Pkg", [_class("A", [_method("M", [_line(1, 1)])])])])
        b = _report([_package("Pkg", [_class("B", [_method("M", [_line(1, 0)])])])])

        result = merge_reports([a, b])

        assert len(result.packages) == 1
        assert [c.name for c in result.packages[0].classes] == ["A", "B"]

    def test_same_class_name_different_files_kept_distinct(self) -> None:
        a = _report([_package("Pkg", [_class("A", [], file_path="A.cs", class_lines=[_line(1, 1)])])])
        b = _report(
            [_package("Pkg", [_class("A", [], file_path="A.g.cs", class_lines=[_line(1, 1)])])]
        )

        result = merge_reports([a, b])

        classes = result.packages[0].classes
        assert len(classes) == 2
        assert {c.file_path for c in classes} == {"A.cs", "A.g.cs"}

    def test_none_file_path_is_its_own_identity(self) -> None:
        a = _report([_package("Pkg", [_class("A", [], file_path=None, class_lines=[_line(1, 1)])])])
        b = _report([_package("Pkg", [_class("A", [], file_path="", class_lines=[_line(1, 1)])])])
        c = _report([_package("Pkg", [_class("A", [], file_path=None, class_lines=[_line(1, 2)])])])

        result = merge_reports([a, b, c])

        classes = result.packages[0].classes
        assert len(classes) == 2
        merged_none = next(cls for cls in classes if cls.file_path is None)
        assert merged_none.class_lines[0].hits == 3

    def test_methods_grouped_by_name_and_signature(self) -> None:
        a = _report(
            [
                _package(
                    "Pkg",
                    [
                        _class(
                            "A",
                            [
                                _method("M", [_line(1, 1)], signature="(int)"),
                                _method("M", [_line(5, 1)], signature="(string)"),
                            ],
                        )
                    ],
                )
            ]
        )
        b = _report([_package("Pkg", [_class("A", [_method("M", [_line(1, 2)], signature="(int)")])])])

        result = merge_reports([a, b])

        methods = result.packages[0].classes[0].methods
        assert [(m.name, m.signature) for m in methods] == [("M", "(int)"), ("M", "(string)")]
        assert methods[0].lines[0].hits == 3

    def test_method_complexity_is_max_not_sum(self) -> None:
        a = _report([_package("Pkg", [_class("A", [_method("M", [_line(1, 1)], complexity=3)])])])
        b = _report([_package("Pkg", [_class("A", [_method("M", [_line(1, 1)], complexity=5)])])])

        result = merge_reports([a, b])

        cls = result.packages[0].classes[0]
        assert cls.methods[0].complexity == 5
        assert cls.complexity == 5
        assert result.packages[0].complexity == 5
        assert result.complexity == 5

    def test_method_branch_rate_recomputed(self) -> None:
        branch = dict(is_branch=True)
        a = _report(
            [
                _package(
                    "Pkg",
                    [
                        _class(
                            "A",
                            [
                                _method(
                                    "M",
                                    [_line(1, 1, conditions=(BranchCondition(0, "jump", "0%"),), **branch)],
                                )
                            ],
                        )
                    ],
                )
            ]
        )
        b = _report(
            [
                _package(
                    "Pkg",
                    [
                        _class(
                            "A",
                            [
                                _method(
                                    "M",
                                    [
                                        _line(
                                            1,
                                            1,
                                            conditions=(
                                                BranchCondition(0, "jump", "0%"),
                                                BranchCondition(1, "jump", "100%"),
                                            ),
                                            **branch,
                                        )
                                    ],
                                )
                            ],
                        )
                    ],
                )
            ]
        )

        result = merge_reports([a, b])

        assert result.packages[0].classes[0].methods[0].branch_rate == 0.5


class TestTotals:
    """Aggregate recomputation."""

    def test_totals_recomputed_bottom_up(self) -> None:
        a = _report(
            [
                _package(
                    "Pkg",
                    [_class("A", [_method("M", [_line(1, 1), _line(2, 0)])], class_lines=[_line(9, 0)])],
                )
            ]
        )
        b = _report(
            [
                _package(
                    "Pkg",
                    [_class("A", [_method("M", [_line(2, 4), _line(3, 0)])], class_lines=[_line(9, 1)])],
                )
            ]
        )

        result = merge_reports([a, b])

        cls = result.packages[0].classes[0]
        assert cls.methods[0].total_lines == 3
        assert cls.methods[0].covered_lines == 2
        assert cls.total_lines == 4
        assert cls.covered_lines == 3
        assert cls.line_rate == 0.75
        assert result.total_lines == 4
        assert result.covered_lines == 3
        assert result.lines_valid == 4
        assert result.lines_covered == 3
        assert result.line_rate == 0.75

    def test_branch_rates_are_placeholders_after_merge(self) -> None:
        a = _single_line_report(_line(10, 1))
        b = _single_line_report(_line(10, 1))

        result = merge_reports([a, b])

        assert result.branch_rate == 0.0
        assert result.branches_covered == 0
        assert result.branches_valid == 0

    def test_zero_lines_rate_is_zero(self) -> None:
        a = _report([_package("Pkg", [_class("A", [])])])
        b = _report([_package("Pkg", [_class("A", [])])])

        result = merge_reports([a, b])

        assert result.line_rate == 0.0
        assert result.packages[0].line_rate == 0.0

    def test_metadata_version_first_timestamp_max(self) -> None:
        a = _report([], timestamp=100, version="1.9", sources=("/src", "/lib"))
        b = _report([], timestamp=300, version="2.0", sources=("/lib", "/test"))
        c = _report([], timestamp=200, version="3.0")

        result = merge_reports([a, b, c])

        assert result.version == "1.9"
        assert result.timestamp == 300
        assert result.sources == ("/src", "/lib", "/test")


class TestOrderIndependence:
    """Merging [A, B] and [B, A] must agree on everything but tie-breaks."""

    @staticmethod
    def _reports() -> tuple[CoverageReport, CoverageReport]:
        a = _report(
            [
                _package("Zeta", [_class("Z", [_method("Run", [_line(1, 0), _line(2, 1)])])]),
                _package("Alpha", [_class("A", [_method("Go", [_line(5, 0)])])]),
            ]
        )
        b = _report(
            [
                _package("Alpha", [_class("A", [_method("Go", [_line(5, 2), _line(6, 0)])])]),
                _package("Beta", [_class("B", [], class_lines=[_line(1, 0)])]),
            ]
        )
        return a, b

    def test_totals_and_packages_match(self) -> None:
        a, b = self._reports()

        ab = merge_reports([a, b])
        ba = merge_reports([b, a])

        assert ab.total_lines == ba.total_lines == 5
        assert ab.covered_lines == ba.covered_lines == 2
        assert len(ab.packages) == len(ba.packages) == 3

    def test_package_order_is_stable(self) -> None:
        a, b = self._reports()

        ab = merge_reports([a, b])
        ba = merge_reports([b, a])

        assert [p.name for p in ab.packages] == ["Alpha", "Beta", "Zeta"]
        assert ab.packages == ba.packages
