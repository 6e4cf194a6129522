"""Synchronous external tool invocation."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class ToolInvocationError(Exception):
    """Raised when a tool cannot be started at all (missing binary, OS failure)."""


@dataclass(frozen=True)
class ToolResult:
    """Completed tool invocation. A non-zero exit code is a normal result."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def last_error_line(self) -> str:
        """Return the last non-empty stderr line, falling back to stdout and exit code."""
        for stream in (self.stderr, self.stdout):
            lines = [line.strip() for line in stream.splitlines() if line.strip()]
            if lines:
                return lines[-1]
        return f"exit code {self.returncode}"


class ToolRunner(Protocol):  # pylint: disable=too-few-public-methods
    """Capability used by every pipeline step to reach external tools."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        stream: bool = False,
    ) -> ToolResult: ...


class SubprocessToolRunner:  # pylint: disable=too-few-public-methods
    """Real tool runner backed by `subprocess.run`."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        stream: bool = False,
    ) -> ToolResult:
        command = tuple(args)
        merged_env = {**os.environ, **env} if env else None
        try:
            completed = subprocess.run(
                list(command),
                cwd=cwd,
                env=merged_env,
                capture_output=not stream,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ToolInvocationError(f"Command not found: {command[0]}") from exc
        except OSError as exc:
            raise ToolInvocationError(
                f"Command could not be started: {command[0]} ({exc.strerror or exc})"
            ) from exc
        return ToolResult(
            args=command,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
