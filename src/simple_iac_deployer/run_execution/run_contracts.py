"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from simple_iac_deployer.configuration import Configuration
from simple_iac_deployer.run_tracking import RunState, RunStatus

ENVIRONMENTS: tuple[str, ...] = ("dev", "staging", "prod")
DEFAULT_LOCATION = "eastus"


@dataclass(frozen=True)
class DeploymentRequest:  # pylint: disable=too-many-instance-attributes
    """Input contract for executing one deployment run."""

    environment: str = "dev"
    location: str = DEFAULT_LOCATION
    subscription_id: str | None = None
    unattended: bool = False
    skip_backend: bool = False
    report_only: bool = False
    verbose: bool = False
    configuration: Configuration = field(default_factory=Configuration)

    @property
    def mode(self) -> str:
        if self.report_only:
            action = "report-only"
        elif self.skip_backend:
            action = "deploy (existing backend)"
        else:
            action = "deploy"
        return f"{action}, {'unattended' if self.unattended else 'interactive'}"


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one finished run."""

    state: RunState
    report_path: Path | None
    log_path: Path

    @property
    def status(self) -> RunStatus:
        return self.state.status

    @property
    def exit_code(self) -> int:
        if self.state.errors or self.report_path is None:
            return 1
        return 0
