"""Terraform init/plan/apply state machine."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from simple_iac_deployer.configuration import TerraformSettings
from simple_iac_deployer.deployment_errors import ApplyFailed, InitFailed, PlanFailed
from simple_iac_deployer.operator_prompts import Prompter, confirm_literal
from simple_iac_deployer.remote_state import BackendConfig, BackendCredentials
from simple_iac_deployer.run_logging import RunLogger
from simple_iac_deployer.tool_invocation import ToolRunner


class DriverState(str, Enum):
    """Lifecycle of one plan/apply cycle."""

    NOT_STARTED = "NotStarted"
    INITIALIZED = "Initialized"
    PLANNED = "Planned"
    AWAITING_CONFIRMATION = "AwaitingConfirmation"
    APPLYING = "Applying"
    APPLIED = "Applied"
    FAILED = "Failed"


class InvalidDriverTransition(Exception):
    """Raised when an operation is called from a state that does not allow it."""


@dataclass(frozen=True)
class PlanResult:
    plan_path: Path
    duration_seconds: float


@dataclass(frozen=True)
class ApplyResult:
    plan_path: Path
    duration_seconds: float


class PlanApplyDriver:  # pylint: disable=too-many-instance-attributes
    """Runs Terraform against the configured working directory.

    Plan only writes the plan artifact. Apply consumes that artifact and is the
    only operation that changes infrastructure.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        runner: ToolRunner,
        logger: RunLogger,
        settings: TerraformSettings,
        *,
        environment: str,
        location: str,
        tool_env: Mapping[str, str] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.runner = runner
        self.logger = logger
        self.settings = settings
        self.environment = environment
        self.location = location
        self.tool_env = dict(tool_env or {})
        self.clock = clock
        self.state = DriverState.NOT_STARTED
        self._confirmed = False

    @property
    def plan_path(self) -> Path:
        return self.settings.working_dir / self.settings.plan_file

    def init(
        self,
        backend: BackendConfig | None = None,
        credentials: BackendCredentials | None = None,
    ) -> None:
        self._require(DriverState.NOT_STARTED, operation="init")
        args = [self.settings.binary, "init", "-input=false"]
        env = dict(self.tool_env)
        if backend is not None:
            args += ["-reconfigure", *backend.backend_config_args()]
        if credentials is not None:
            env.update(credentials.as_environment())
        self.logger.info("Running terraform init")
        result = self.runner.run(args, cwd=self.settings.working_dir, env=env, stream=True)
        if not result.ok:
            self.state = DriverState.FAILED
            raise InitFailed(f"terraform init failed: {result.last_error_line()}")
        self.state = DriverState.INITIALIZED
        self.logger.success("Terraform initialized")

    def plan(self) -> PlanResult:
        self._require(DriverState.INITIALIZED, operation="plan")
        args = [
            self.settings.binary,
            "plan",
            "-input=false",
            f"-out={self.settings.plan_file}",
            "-var",
            f"environment={self.environment}",
            "-var",
            f"location={self.location}",
        ]
        for name, value in self.settings.variables.items():
            args += ["-var", f"{name}={value}"]
        self.logger.info("Running terraform plan")
        started = self.clock()
        result = self.runner.run(
            args, cwd=self.settings.working_dir, env=dict(self.tool_env), stream=True
        )
        if not result.ok:
            self.state = DriverState.FAILED
            raise PlanFailed(f"terraform plan failed: {result.last_error_line()}")
        self.state = DriverState.PLANNED
        self.logger.success(f"Plan saved to {self.plan_path}")
        return PlanResult(plan_path=self.plan_path, duration_seconds=self.clock() - started)

    def confirm(self, prompter: Prompter) -> bool:
        """Ask the operator to approve the saved plan."""
        self._require(DriverState.PLANNED, operation="confirm")
        self.state = DriverState.AWAITING_CONFIRMATION
        self._confirmed = confirm_literal(
            prompter, f"Apply this plan to '{self.environment}'?"
        )
        return self._confirmed

    def apply(self) -> ApplyResult:
        if self.state is DriverState.AWAITING_CONFIRMATION and not self._confirmed:
            raise InvalidDriverTransition("apply called without operator confirmation")
        self._require(DriverState.PLANNED, DriverState.AWAITING_CONFIRMATION, operation="apply")
        self.state = DriverState.APPLYING
        self.logger.info("Running terraform apply")
        started = self.clock()
        result = self.runner.run(
            [self.settings.binary, "apply", "-input=false", self.settings.plan_file],
            cwd=self.settings.working_dir,
            env=dict(self.tool_env),
            stream=True,
        )
        if not result.ok:
            self.state = DriverState.FAILED
            raise ApplyFailed(f"terraform apply failed: {result.last_error_line()}")
        self.state = DriverState.APPLIED
        self.logger.success("Terraform apply completed")
        return ApplyResult(plan_path=self.plan_path, duration_seconds=self.clock() - started)

    def _require(self, *allowed: DriverState, operation: str) -> None:
        if self.state not in allowed:
            raise InvalidDriverTransition(
                f"Cannot {operation} from state {self.state.value}"
            )
