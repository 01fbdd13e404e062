"""Structured logging for covgap.

structlog renders through stdlib logging so every configured output gets its
own handler, level and renderer. Module-level loggers from ``get_logger`` are
lazy proxies: they pick up whatever ``configure_logging`` installed, even when
the module was imported first.

Report output owns stdout and the rich status console owns the terminal's
stderr, so console handlers drop the debug echoes of status lines.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from covgap.config.models import LoggingConfig, LogOutputConfig

_CONSOLE_DESTINATIONS = frozenset({"stderr", "stdout"})

# Loggers whose events repeat text already printed on the rich console
_CONSOLE_ECHO_LOGGERS = frozenset({"progress"})

_log_file_path: Path | None = None


def get_log_file_path() -> Path | None:
    """First file output of the active configuration, for "See log" pointers."""
    return _log_file_path


class ConsoleEchoFilter(logging.Filter):
    """Drops events on console handlers that only echo rich status output."""

    def filter(self, record: logging.LogRecord) -> bool:
        event = record.msg
        if isinstance(event, dict):
            return event.get("logger") not in _CONSOLE_ECHO_LOGGERS
        return True


def _level(name: str | None, default: int) -> int:
    if not name:
        return default
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]


def _build_handler(
    output: LogOutputConfig, level: int, shared: list[structlog.types.Processor]
) -> logging.Handler:
    handler: logging.Handler
    stream = None
    if output.destination in _CONSOLE_DESTINATIONS:
        stream = sys.stderr if output.destination == "stderr" else sys.stdout
        handler = logging.StreamHandler(stream)
        handler.addFilter(ConsoleEchoFilter())
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")

    renderer: Any
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        colors = stream is not None and stream.isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)
    )
    handler.setLevel(level)
    return handler


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Install logging handlers, replacing any from an earlier call.

    Args:
        config: Logging configuration with outputs. Takes precedence over
            ``json_format`` and ``level``.
        json_format: Render JSON on stderr when no config is given.
        level: Root level when no config is given.
    """
    global _log_file_path
    from covgap.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    root_level = _level(config.level, logging.INFO)
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.setLevel(root_level)

    file_outputs = [o for o in config.outputs if o.destination not in _CONSOLE_DESTINATIONS]
    _log_file_path = Path(file_outputs[0].destination) if file_outputs else None
    for output in config.outputs:
        root.addHandler(_build_handler(output, _level(output.level, root_level), shared))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Lazy logger proxy; ``name`` is bound as the ``logger`` key on first use."""
    if name:
        return structlog.get_logger(logger=name)  # type: ignore[no-any-return]
    return structlog.get_logger()  # type: ignore[no-any-return]
