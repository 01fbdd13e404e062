"""Configuration constants.

Values here are part of the command's output contract and are not
user-configurable. For configurable values, see models.py.
"""

PROG_NAME = "cover"
"""Name of the console script."""

BANNER_TITLE = "Code Coverage Reporter"
"""Title printed when `cover` runs without a sub-command."""

COVERAGE_OK_MESSAGE = "Code coverage OK"
"""Printed instead of a report when no missing coverage remains."""

REPO_CONFIG_FILENAME = ".covgap.yaml"
"""Per-repository config file, looked up in the working directory."""

OUTPUT_FORMATS: tuple[str, ...] = ("table", "json", "markdown")
"""Supported report output formats, default first."""
