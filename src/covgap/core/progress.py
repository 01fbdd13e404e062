"""User-facing status output for CLI operations.

Status lines go to stderr through a shared Rich console so that report
output on stdout stays machine-readable.

Usage::

    from covgap.core.progress import status

    status("Processing 3 files:")
    status("Merged 3 reports.", style="success")  # ✓ Merged 3 reports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

# Console for output
_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from covgap.core.logging import get_logger

    return get_logger("progress")


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{escape(message)}", highlight=False)

    _get_logger().debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Args:
        count: The number of items
        singular: Singular form (e.g., "file")
        plural: Plural form (default: singular + "s")

    Returns:
        Formatted string like "1 file" or "3 files"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def banner(title: str, subtitle: str, *, console: Console | None = None) -> None:
    """Print the application banner (title panel plus a dim subtitle)."""
    c = console or _console
    c.print(
        Panel(Text(title, style="bold green", justify="center"), expand=False),
        highlight=False,
    )
    c.print(Text(subtitle, style="grey50"), highlight=False)
