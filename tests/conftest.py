"""Shared test doubles for tool invocation, prompting and logging."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from pathlib import Path

import pytest
from simple_iac_deployer.run_logging import LogLevel, RunLogger
from simple_iac_deployer.tool_invocation import ToolResult

SUBSCRIPTIONS = [
    {
        "id": "11111111-1111-1111-1111-111111111111",
        "name": "Contoso Dev",
        "tenantId": "tenant-a",
        "state": "Enabled",
        "isDefault": True,
    },
    {
        "id": "22222222-2222-2222-2222-222222222222",
        "name": "Contoso Prod",
        "tenantId": "tenant-a",
        "state": "Enabled",
        "isDefault": False,
    },
]


class ScriptedToolRunner:
    """Answers tool invocations by longest matching argument prefix.

    Unscripted commands succeed with empty output. Scripting the same prefix
    several times queues the answers; the last one repeats.
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, ...], list[ToolResult | BaseException]] = {}
        self.calls: list[tuple[str, ...]] = []
        self.envs: list[dict[str, str]] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        raises: BaseException | None = None,
    ) -> ScriptedToolRunner:
        answer: ToolResult | BaseException = raises or ToolResult(
            args=prefix, returncode=returncode, stdout=stdout, stderr=stderr
        )
        self._responses.setdefault(tuple(prefix), []).append(answer)
        return self

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        stream: bool = False,
    ) -> ToolResult:
        command = tuple(args)
        self.calls.append(command)
        self.envs.append(dict(env or {}))
        prefix = self._match(command)
        if prefix is None:
            return ToolResult(args=command, returncode=0)
        queue = self._responses[prefix]
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, BaseException):
            raise answer
        return ToolResult(
            args=command,
            returncode=answer.returncode,
            stdout=answer.stdout,
            stderr=answer.stderr,
        )

    def called(self, *prefix: str) -> bool:
        return self.count(*prefix) > 0

    def count(self, *prefix: str) -> int:
        return sum(1 for call in self.calls if call[: len(prefix)] == prefix)

    def _match(self, command: tuple[str, ...]) -> tuple[str, ...] | None:
        candidates = [prefix for prefix in self._responses if command[: len(prefix)] == prefix]
        if not candidates:
            return None
        return max(candidates, key=len)


class ScriptedPrompter:
    """Returns queued answers and records every question."""

    def __init__(self, answers: Sequence[str]) -> None:
        self._answers = list(answers)
        self.questions: list[str] = []

    def ask(self, text: str) -> str:
        self.questions.append(text)
        if not self._answers:
            raise AssertionError(f"Unexpected prompt: {text}")
        return self._answers.pop(0)


class ListSink:
    """Log sink collecting (level, message) pairs."""

    def __init__(self) -> None:
        self.records: list[tuple[LogLevel, str]] = []

    def write(self, level: LogLevel, timestamp: datetime, message: str) -> None:
        self.records.append((level, message))

    def messages(self, level: LogLevel | None = None) -> list[str]:
        return [message for lvl, message in self.records if level is None or lvl is level]


def script_healthy_azure(
    runner: ScriptedToolRunner,
    *,
    resource_group_exists: bool = True,
    container_exists: bool = True,
    resources: Sequence[Mapping[str, str]] = (),
    outputs: Mapping[str, object] | None = None,
) -> ScriptedToolRunner:
    """Script a logged-in session with an existing backend."""
    runner.on("az", "account", "list", stdout=json.dumps(SUBSCRIPTIONS))
    runner.on("az", "group", "exists", stdout="true" if resource_group_exists else "false")
    runner.on("az", "storage", "account", "keys", "list", stdout="secret-key==\n")
    runner.on(
        "az",
        "storage",
        "container",
        "exists",
        stdout=json.dumps({"exists": container_exists}),
    )
    runner.on("az", "resource", "list", stdout=json.dumps(list(resources)))
    runner.on(
        "terraform",
        "output",
        stdout=json.dumps(
            outputs
            if outputs is not None
            else {"app_url": {"value": "https://app.example.com", "sensitive": False}}
        ),
    )
    return runner


@pytest.fixture
def tool_runner() -> ScriptedToolRunner:
    return ScriptedToolRunner()


@pytest.fixture
def healthy_runner() -> ScriptedToolRunner:
    return script_healthy_azure(ScriptedToolRunner())


@pytest.fixture
def make_prompter() -> Callable[[Sequence[str]], ScriptedPrompter]:
    return ScriptedPrompter


@pytest.fixture
def log_sink() -> ListSink:
    return ListSink()


@pytest.fixture
def run_logger(log_sink: ListSink) -> RunLogger:
    return RunLogger([log_sink])


@pytest.fixture
def subscriptions() -> list[dict[str, object]]:
    return [dict(entry) for entry in SUBSCRIPTIONS]
