"""
Structured logging for the costing engine.

Calculators log through ``get_logger(__name__)`` with keyword context::

    logger.debug("Batch cost computed", total_cost=5610.71)

The keywords travel in the record's ``extra`` payload together with the
scoped batch number and calculator name set by ``log_context``. Console
output goes through Rich; an optional log file receives JSON Lines.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

ROOT_LOGGER = "seacost"

_batch_id_var: ContextVar[str | None] = ContextVar("batch_id", default=None)
_calculator_var: ContextVar[str | None] = ContextVar("calculator", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "batch_id": _batch_id_var,
    "calculator": _calculator_var,
}

# Keywords the stdlib logger understands itself
_LOGGING_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})

_configured = False


def get_batch_id() -> str | None:
    """Batch number of the batch being processed, if any."""
    return _batch_id_var.get()


def get_calculator() -> str | None:
    """Name of the calculator currently running, if any."""
    return _calculator_var.get()


def current_context() -> dict[str, str]:
    """The context fields that are set, by name."""
    context: dict[str, str] = {}
    for name, var in _CONTEXT_VARS.items():
        value = var.get()
        if value:
            context[name] = value
    return context


@contextmanager
def log_context(
    batch_id: str | None = None,
    calculator: str | None = None,
) -> Generator[None, None, None]:
    """Set the batch number and/or calculator for the enclosed block.

    None leaves the outer value in place. Previous values are restored on
    exit, so blocks nest.
    """
    tokens = [
        (var, var.set(value))
        for var, value in ((_batch_id_var, batch_id), (_calculator_var, calculator))
        if value is not None
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line: level, logger, message, context, extra."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **current_context(),
        }
        if hasattr(record, "extra"):
            entry["extra"] = record.extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextRichHandler(RichHandler):
    """RichHandler that prefixes the level with the batch and calculator."""

    def get_level_text(self, record: logging.LogRecord) -> Text:
        level_text = super().get_level_text(record)
        context = current_context()
        if not context:
            return level_text

        prefix = []
        if "batch_id" in context:
            prefix.append(f"[dim]{context['batch_id'][:12]}[/dim]")
        if "calculator" in context:
            prefix.append(f"[cyan]{context['calculator']}[/cyan]")
        return Text.from_markup(f"{level_text} {' '.join(prefix)}")


class ContextLogger:
    """Wraps a stdlib logger; keyword arguments become the ``extra`` payload."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        options = {k: kwargs.pop(k) for k in list(kwargs) if k in _LOGGING_KWARGS}
        payload = {**current_context(), **kwargs.pop("extra", {}), **kwargs}
        self._logger.log(level, msg, *args, extra={"extra": payload}, **options)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)


def setup_logging(
    log_level: str = "WARNING",
    log_file: Path | None = None,
    console_output: bool = True,
) -> None:
    """Configure the ``seacost`` logger tree.

    Args:
        log_level: Level for the logger and the console handler.
        log_file: Optional JSON Lines file; receives every level.
        console_output: Whether to log to stderr through Rich.
    """
    global _configured

    level = getattr(logging, log_level.upper())
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()
    root.propagate = False

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(logging.DEBUG)
        root.addHandler(file_handler)

    if console_output:
        console_handler = ContextRichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=True,
        )
        console_handler.setLevel(level)
        root.addHandler(console_handler)

    _configured = True


def get_logger(name: str) -> ContextLogger:
    """Context-aware logger under the ``seacost`` namespace.

    Configures default logging on first use.
    """
    if not _configured:
        setup_logging()
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return ContextLogger(logging.getLogger(name))
