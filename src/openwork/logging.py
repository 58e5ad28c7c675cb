"""Centralized logging for openwork (buffering, routing, and CLI formatting)."""

from __future__ import annotations

import logging
import time
from collections import deque
from enum import Enum
from typing import Any, ClassVar, TypeAlias

from pydantic import BaseModel, ConfigDict
from rich.text import Text
from typing_extensions import override

from openwork.models import LogEntry
from openwork.utils import PrefixedLogHandler, console

LogBuffer: TypeAlias = deque[LogEntry]


class LogComponent(str, Enum):
    """Where a log originated (used for filtering and prefixes)."""

    SERVER = "server"
    SUPERVISOR = "supervisor"
    RESOLVER = "resolver"
    DOCTOR = "doctor"
    PROCESS_CONTROL = "process_control"
    INSTALLER = "installer"
    CONFIG = "config"
    SKILLS = "skills"
    PACKAGES = "packages"


_COMPONENT_COLORS: dict[LogComponent, str] = {
    LogComponent.SERVER: "bright_blue",
    LogComponent.SUPERVISOR: "green",
    LogComponent.PROCESS_CONTROL: "green",
    LogComponent.RESOLVER: "cyan",
    LogComponent.DOCTOR: "cyan",
}


class _LogState(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True)

    buffer: LogBuffer | None = None
    configured: bool = False
    level: int = logging.INFO


_STATE = _LogState()


def _now_timestamp(created: float | None = None) -> str:
    t = time.localtime(created if created is not None else time.time())
    return time.strftime("%Y-%m-%d %H:%M:%S", t)


class _BufferedLogHandler(logging.Handler):
    buffer_component: LogComponent

    def __init__(self, *, component: LogComponent):
        super().__init__()
        self.buffer_component = component

    @override
    def emit(self, record: logging.LogRecord) -> None:
        try:
            if _STATE.buffer is None:
                return
            _STATE.buffer.append(
                LogEntry(
                    timestamp=_now_timestamp(record.created),
                    level=record.levelname,
                    component=self.buffer_component.value,
                    content=self.format(record),
                )
            )
        except Exception:
            self.handleError(record)


def configure_logging(
    *,
    buffer: LogBuffer | None = None,
    echo: bool = False,
    level: int = logging.INFO,
) -> None:
    """Configure all openwork loggers.

    Args:
        buffer: In-memory buffer that receives every record (host server mode)
        echo: Also print records to the console with a component prefix
        level: Minimum level for all component loggers
    """
    _STATE.buffer = buffer
    _STATE.level = level

    for component in LogComponent:
        logger = logging.getLogger(f"openwork.{component.value}")
        logger.setLevel(level)
        logger.handlers.clear()
        if buffer is not None:
            handler = _BufferedLogHandler(component=component)
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)
        if echo:
            prefixed = PrefixedLogHandler(
                f"[{component.value}]", _COMPONENT_COLORS.get(component, "magenta")
            )
            prefixed.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(prefixed)
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
        logger.propagate = False

    _STATE.configured = True


def configured_level() -> int:
    """Level passed to the last configure_logging call (INFO if never configured)."""
    return _STATE.level


def get_logger(component: LogComponent) -> logging.Logger:
    """Get the logger for a component (do not call stdlib logging directly)."""
    logger = logging.getLogger(f"openwork.{component.value}")
    if not _STATE.configured:
        # Avoid "No handlers could be found" warnings in contexts that don't configure logging.
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
    return logger


def buffered_entries() -> list[LogEntry]:
    """Return a copy of the buffered log entries (empty when not buffering)."""
    if _STATE.buffer is None:
        return []
    return list(_STATE.buffer)


def print_log_entry(
    entry: LogEntry | dict[str, Any],  # pyright: ignore[reportExplicitAny]
    *,
    raw_output: bool = False,
) -> None:
    """Print a single log entry with a `[component]` prefix."""
    if isinstance(entry, dict):
        entry = LogEntry.model_validate(entry)

    if raw_output:
        print(entry.content)
        return

    level_style = (
        "red"
        if entry.level in ("ERROR", "CRITICAL")
        else "yellow"
        if entry.level == "WARNING"
        else "bright_blue"
    )

    ts = Text(entry.timestamp, style="dim")
    sep = Text(" | ")
    prefix = Text(f"[{entry.component}]", style=level_style)
    content = Text(entry.content)
    console.print(ts + sep + prefix + sep + content)
