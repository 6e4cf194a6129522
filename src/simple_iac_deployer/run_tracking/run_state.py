"""Mutable state of one deployment run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from simple_iac_deployer.result_collection import OutputMap, ResourceRecord


class StepStatus(str, Enum):
    """Progress of one pipeline step."""

    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    SKIPPED = "Skipped"


class RunStatus(str, Enum):
    """Overall outcome rendered in reports."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass
class StepRecord:
    name: str
    status: StepStatus
    started_at: datetime
    finished_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class RunState:  # pylint: disable=too-many-instance-attributes
    """Run bookkeeping passed explicitly through the pipeline.

    `success` is False exactly when at least one error was recorded.
    """

    started_at: datetime = field(default_factory=_utc_now)
    success: bool = True
    cancelled: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    steps: list[StepRecord] = field(default_factory=list)
    resources: list[ResourceRecord] = field(default_factory=list)
    outputs: OutputMap = field(default_factory=dict)
    finished_at: datetime | None = None
    clock: Callable[[], datetime] = field(default=_utc_now, repr=False, compare=False)

    @property
    def status(self) -> RunStatus:
        if self.errors:
            return RunStatus.FAILED
        if self.cancelled:
            return RunStatus.CANCELLED
        return RunStatus.SUCCESS

    @property
    def duration_seconds(self) -> float:
        end = self.finished_at or self.clock()
        return (end - self.started_at).total_seconds()

    def start_step(self, name: str) -> StepRecord:
        step = StepRecord(name=name, status=StepStatus.RUNNING, started_at=self.clock())
        self.steps.append(step)
        return step

    def complete_step(self, step: StepRecord) -> None:
        step.status = StepStatus.COMPLETED
        step.finished_at = self.clock()

    def fail_step(self, step: StepRecord) -> None:
        step.status = StepStatus.FAILED
        step.finished_at = self.clock()

    def skip_step(self, name: str) -> StepRecord:
        now = self.clock()
        step = StepRecord(name=name, status=StepStatus.SKIPPED, started_at=now, finished_at=now)
        self.steps.append(step)
        return step

    def record_error(self, message: str) -> None:
        self.errors.append(message)
        self.success = False

    def record_warning(self, message: str) -> None:
        self.warnings.append(message)

    def finalize(self) -> None:
        if self.finished_at is None:
            self.finished_at = self.clock()
        self.success = not self.errors
