"""Logging for reforge.

Events are structlog key/value records routed through the ``reforge``
stdlib logger. Console output goes to stderr so that command output on
stdout can be piped. Commands bind their name and project root with
`bind_command`; every event logged while they run carries both.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import structlog

LOGGER_NAME = "reforge"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is when a record is emitted."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def _renderer(json_format: bool):
    if json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Union[str, Path]] = None,
    json_format: bool = False,
):
    """Configure the ``reforge`` logger hierarchy.

    Safe to call more than once: handlers from an earlier call are
    replaced, not stacked. Loggers outside ``reforge`` are left alone.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file, parent directories are created
        json_format: If True, render JSON lines; otherwise a console format
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root = logging.getLogger(LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(numeric_level)
    root.propagate = False

    handlers = [_StderrHandler()]
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(json_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Logger inside the ``reforge`` hierarchy.

    Modules pass ``__name__``; names outside the package are nested under
    ``reforge`` so that `setup_logging` still governs them.
    """
    if not name:
        name = LOGGER_NAME
    elif name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return structlog.get_logger(name)


def bind_command(command: str, **context) -> None:
    """Replace the bound logging context with one command's."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(command=command, **context)
