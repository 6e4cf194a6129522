"""Leveled run narration to the console and an append-only session log file."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Protocol

import click

_RUN_LOGGER = logging.getLogger("simple_iac_deployer.run")
_RUN_LOGGER.addHandler(logging.NullHandler())


class LogLevel(str, Enum):
    """Severity of one narrated run event."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"
    DEBUG = "DEBUG"


_CONSOLE_STYLES: dict[LogLevel, dict[str, object]] = {
    LogLevel.INFO: {"fg": "cyan"},
    LogLevel.WARNING: {"fg": "yellow"},
    LogLevel.ERROR: {"fg": "red", "bold": True},
    LogLevel.SUCCESS: {"fg": "green"},
    LogLevel.DEBUG: {"dim": True},
}

_STDLIB_LEVELS: dict[LogLevel, int] = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


class LogSink(Protocol):  # pylint: disable=too-few-public-methods
    """Destination for formatted log lines."""

    def write(self, level: LogLevel, timestamp: datetime, message: str) -> None: ...


class NullSink:  # pylint: disable=too-few-public-methods
    """Sink that drops everything. Replaces sinks that failed."""

    def write(self, level: LogLevel, timestamp: datetime, message: str) -> None:
        return None


class ConsoleSink:  # pylint: disable=too-few-public-methods
    """Color-coded console output through click."""

    def __init__(self, *, verbose: bool = False) -> None:
        self._verbose = verbose

    def write(self, level: LogLevel, timestamp: datetime, message: str) -> None:
        if level is LogLevel.DEBUG and not self._verbose:
            return
        prefix = f"[{timestamp:%H:%M:%S}] [{level.value}]"
        click.secho(
            f"{prefix} {message}",
            err=level in (LogLevel.ERROR, LogLevel.WARNING),
            **_CONSOLE_STYLES[level],  # type: ignore[arg-type]
        )


class FileSink:  # pylint: disable=too-few-public-methods
    """Appends one line per event to the session log file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def write(self, level: LogLevel, timestamp: datetime, message: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{timestamp:%Y-%m-%d %H:%M:%S}] [{level.value}] {message}\n")


class RunLogger:
    """Best-effort run logger. Logging never raises into the pipeline."""

    def __init__(
        self,
        sinks: Sequence[LogSink],
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._sinks: list[LogSink] = list(sinks)
        self._clock = clock

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        timestamp = self._clock()
        _RUN_LOGGER.log(_STDLIB_LEVELS[level], message)
        for index, sink in enumerate(self._sinks):
            try:
                sink.write(level, timestamp, message)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                self._sinks[index] = NullSink()
                _RUN_LOGGER.warning("Log sink %s disabled after write failure: %s", sink, exc)

    def info(self, message: str) -> None:
        self.log(message, LogLevel.INFO)

    def warning(self, message: str) -> None:
        self.log(message, LogLevel.WARNING)

    def error(self, message: str) -> None:
        self.log(message, LogLevel.ERROR)

    def success(self, message: str) -> None:
        self.log(message, LogLevel.SUCCESS)

    def debug(self, message: str) -> None:
        self.log(message, LogLevel.DEBUG)


def session_log_path(log_dir: Path, environment: str, started_at: datetime) -> Path:
    """Build the timestamped session log file path for one run."""
    return log_dir / f"deploy-{environment}-{started_at:%Y%m%d-%H%M%S}.log"


def create_session_logger(log_path: Path, *, verbose: bool = False) -> RunLogger:
    """Create the standard console plus file logger for a run."""
    return RunLogger([ConsoleSink(verbose=verbose), FileSink(log_path)])
