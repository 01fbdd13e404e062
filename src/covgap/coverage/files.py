"""Coverage file resolution and source-file exclusion.

Inputs may be explicit file paths or glob patterns (``*``, ``?``, ``[``),
with ``**`` matching any number of directories.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from pathlib import Path, PurePath

from covgap.core.errors import CoverageError
from covgap.core.logging import get_logger
from covgap.coverage.extract import MissingCoverageRow
from covgap.coverage.models import CoverageReport
from covgap.coverage.parsers import CoberturaParser, parse_artifact

log = get_logger("coverage.files")

_GLOB_CHARS = ("*", "?", "[")


def is_glob_pattern(value: str) -> bool:
    return any(ch in value for ch in _GLOB_CHARS)


def _absolute(path: Path, base_path: Path) -> Path:
    if path.is_absolute():
        return path
    return (base_path / path).resolve()


def _resolve_glob(pattern: str, base_path: Path) -> list[Path]:
    pure = PurePath(pattern)
    if pure.is_absolute():
        root = Path(pure.anchor)
        relative = pure.relative_to(pure.anchor).as_posix()
    else:
        root = base_path
        relative = pure.as_posix()

    matches = sorted(p.resolve() for p in root.glob(relative) if p.is_file())
    if not matches:
        raise CoverageError.no_matches(pattern)
    return matches


def resolve_files(paths_or_patterns: Iterable[str], base_path: Path | None = None) -> list[Path]:
    """Resolve explicit paths and glob patterns to absolute file paths.

    Args:
        paths_or_patterns: File paths and/or glob patterns.
        base_path: Directory relative entries are resolved against.
            Defaults to the current working directory.

    Returns:
        Absolute paths, de-duplicated, in argument order (glob matches sorted).

    Raises:
        CoverageError: If an explicit file does not exist or a pattern
            matches no files.
    """
    if paths_or_patterns is None:
        raise CoverageError.invalid_argument("paths_or_patterns", "must not be None")

    base = base_path or Path.cwd()
    resolved: list[Path] = []

    for entry in paths_or_patterns:
        if is_glob_pattern(entry):
            resolved.extend(_resolve_glob(entry, base))
            continue

        path = _absolute(Path(entry), base)
        if not path.is_file():
            raise CoverageError.file_not_found(entry)
        resolved.append(path)

    return list(dict.fromkeys(resolved))


def read_report(path: Path) -> CoverageReport:
    """Parse one resolved coverage file.

    Raises:
        CoverageError: If the file cannot be opened or parsed.
    """
    if not CoberturaParser().can_parse(path):
        log.warning("coverage_file_not_sniffed", path=str(path))
    return parse_artifact(path)


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate a ``[...]`` class starting at ``start``; returns (regex, next index)."""
    end = start + 1
    if end < len(pattern) and pattern[end] == "!":
        end += 1
    if end < len(pattern) and pattern[end] == "]":
        end += 1
    end = pattern.find("]", end)
    if end < 0:
        return re.escape("["), start + 1

    body = pattern[start + 1 : end].replace("\\", "\\\\")
    if body.startswith("!"):
        body = "^" + body[1:]
    elif body.startswith("^"):
        body = "\\" + body
    return f"[{body}]", end + 1


@lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Compile a path glob where ``*`` and ``?`` stay within one segment.

    ``**/`` matches zero or more leading directories and a bare ``**``
    matches anything, separators included.
    """
    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        elif pattern[i] == "[":
            translated, i = _translate_class(pattern, i)
            parts.append(translated)
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


def matches_glob(path: str, pattern: str) -> bool:
    """Check if a ``/``-separated path matches a glob pattern, with ** support."""
    return _glob_regex(pattern).match(path) is not None


_ROOT_PREFIX = re.compile(r"^(?:[A-Za-z]:)?/+")


def is_excluded(file_path: str, patterns: Sequence[str]) -> bool:
    """True if the file path, or its bare file name, matches any pattern.

    The path is matched without its root (``/`` or a drive letter), so
    ``src/*.cs`` and ``**/Migrations/*`` work against absolute paths too.
    """
    normalized = _ROOT_PREFIX.sub("", file_path.replace("\\", "/"))
    name = normalized.rsplit("/", 1)[-1]
    return any(
        matches_glob(normalized, pattern) or matches_glob(name, pattern) for pattern in patterns
    )


def filter_excluded(
    rows: Sequence[MissingCoverageRow], patterns: Sequence[str]
) -> list[MissingCoverageRow]:
    """Drop rows whose source file matches one of the exclude patterns."""
    if not patterns:
        return list(rows)
    return [row for row in rows if not is_excluded(row.file, patterns)]
