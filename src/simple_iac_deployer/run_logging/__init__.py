"""Run logging exports."""

from .session_logger import (
    ConsoleSink,
    FileSink,
    LogLevel,
    LogSink,
    NullSink,
    RunLogger,
    create_session_logger,
    session_log_path,
)

__all__ = [
    "ConsoleSink",
    "FileSink",
    "LogLevel",
    "LogSink",
    "NullSink",
    "RunLogger",
    "create_session_logger",
    "session_log_path",
]
