"""Tests for run execution domain entities."""

from __future__ import annotations

from pathlib import Path

from simple_iac_deployer.run_execution import DeploymentRequest, RunOutcome
from simple_iac_deployer.run_tracking import RunState, RunStatus


def test_deployment_request_defaults_to_interactive_dev_deploy() -> None:
    request = DeploymentRequest()

    assert request.environment == "dev"
    assert request.location == "eastus"
    assert request.unattended is False
    assert request.mode == "deploy, interactive"


def test_deployment_request_mode_describes_variant() -> None:
    assert DeploymentRequest(report_only=True, unattended=True).mode == "report-only, unattended"
    assert DeploymentRequest(skip_backend=True).mode == "deploy (existing backend), interactive"


def test_run_outcome_exit_code_follows_errors_and_report() -> None:
    ok_state = RunState()
    failed_state = RunState()
    failed_state.record_error("PlanFailed: terraform plan failed")

    ok = RunOutcome(state=ok_state, report_path=Path("/tmp/r.html"), log_path=Path("/tmp/d.log"))
    failed = RunOutcome(
        state=failed_state, report_path=Path("/tmp/r.html"), log_path=Path("/tmp/d.log")
    )
    unreported = RunOutcome(state=RunState(), report_path=None, log_path=Path("/tmp/d.log"))

    assert ok.exit_code == 0
    assert ok.status is RunStatus.SUCCESS
    assert failed.exit_code == 1
    assert failed.status is RunStatus.FAILED
    assert unreported.exit_code == 1


def test_cancelled_run_exits_cleanly() -> None:
    outcome = RunOutcome(
        state=RunState(cancelled=True), report_path=Path("/tmp/r.html"), log_path=Path("/tmp/d.log")
    )

    assert outcome.status is RunStatus.CANCELLED
    assert outcome.exit_code == 0
