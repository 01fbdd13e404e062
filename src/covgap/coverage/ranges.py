"""Line-range formatting for missing coverage output."""

from __future__ import annotations

from collections.abc import Iterable


def _format_range(start: int, end: int) -> str:
    return str(start) if start == end else f"{start}-{end}"


def format_line_ranges(line_numbers: Iterable[int]) -> str:
    """Collapse line numbers into bracketed range notation.

    Input may be unsorted and contain duplicates.

    Examples:
        [] -> "[]"
        [42] -> "[42]"
        [42, 43] -> "[42-43]"
        [42, 44] -> "[42, 44]"
        [10, 11, 12, 15, 20, 25, 26, 27] -> "[10-12, 15, 20, 25-27]"
    """
    numbers = sorted(set(line_numbers))
    if not numbers:
        return "[]"

    ranges: list[str] = []
    start = end = numbers[0]
    for number in numbers[1:]:
        if number == end + 1:
            end = number
            continue
        ranges.append(_format_range(start, end))
        start = end = number
    ranges.append(_format_range(start, end))

    return f"[{', '.join(ranges)}]"
