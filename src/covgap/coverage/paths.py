"""Display transformations for source file paths."""

from __future__ import annotations

import os
from typing import Protocol

from covgap.core.errors import CoverageError


class PathTransformer(Protocol):
    """Rewrites a file path for display."""

    def transform(self, path: str) -> str: ...


class NullPathTransformer:
    """Returns paths unchanged (used for --absolute-paths)."""

    def transform(self, path: str) -> str:
        if path is None:
            raise CoverageError.invalid_argument("path", "must not be None")
        return path


class RelativePathTransformer:
    """Makes paths relative to a base directory."""

    def __init__(self, base_path: str) -> None:
        if base_path is None or not base_path.strip():
            raise CoverageError.invalid_argument("base_path", "must not be blank")
        self._base_path = base_path

    @property
    def base_path(self) -> str:
        return self._base_path

    def transform(self, path: str) -> str:
        if path is None:
            raise CoverageError.invalid_argument("path", "must not be None")
        try:
            return os.path.relpath(path, self._base_path)
        except ValueError:
            # Different drive on Windows: nothing to be relative to
            return path
