"""Tests for the Terraform plan/apply state machine."""

from __future__ import annotations

from pathlib import Path

import pytest
from simple_iac_deployer.configuration import TerraformSettings
from simple_iac_deployer.deployment_errors import ApplyFailed, InitFailed, PlanFailed
from simple_iac_deployer.provisioning import DriverState, InvalidDriverTransition, PlanApplyDriver
from simple_iac_deployer.remote_state import BackendConfig, BackendCredentials

_BACKEND = BackendConfig(
    resource_group_name="rg-tfstate-dev",
    storage_account_name="sttfstatedev001",
    container_name="tfstate",
    location="eastus",
    state_key="dev.terraform.tfstate",
)


def _driver(tool_runner, run_logger, tmp_path: Path, **settings) -> PlanApplyDriver:
    return PlanApplyDriver(
        tool_runner,
        run_logger,
        TerraformSettings(working_dir=tmp_path, **settings),
        environment="dev",
        location="eastus",
        tool_env={"ARM_SUBSCRIPTION_ID": "sub-1"},
    )


def test_init_passes_backend_settings_and_key_through_environment(
    tool_runner, run_logger, tmp_path: Path
) -> None:
    driver = _driver(tool_runner, run_logger, tmp_path)

    driver.init(_BACKEND, BackendCredentials(access_key="secret=="))

    init_call = tool_runner.calls[0]
    assert init_call[:3] == ("terraform", "init", "-input=false")
    assert "-backend-config=storage_account_name=sttfstatedev001" in init_call
    assert all("secret==" not in arg for arg in init_call)
    assert tool_runner.envs[0]["ARM_ACCESS_KEY"] == "secret=="
    assert tool_runner.envs[0]["ARM_SUBSCRIPTION_ID"] == "sub-1"
    assert driver.state is DriverState.INITIALIZED


def test_init_without_backend_is_plain(tool_runner, run_logger, tmp_path: Path) -> None:
    _driver(tool_runner, run_logger, tmp_path).init()

    assert tool_runner.calls == [("terraform", "init", "-input=false")]


def test_failed_init_raises(tool_runner, run_logger, tmp_path: Path) -> None:
    tool_runner.on(
        "terraform", "init", returncode=1, stderr="Error: Failed to get existing workspaces"
    )
    driver = _driver(tool_runner, run_logger, tmp_path)

    with pytest.raises(InitFailed, match="existing workspaces"):
        driver.init(_BACKEND)

    assert driver.state is DriverState.FAILED


def test_plan_writes_artifact_with_environment_and_extra_variables(
    tool_runner, run_logger, tmp_path: Path
) -> None:
    driver = _driver(tool_runner, run_logger, tmp_path, variables={"owner": "platform"})
    driver.init()

    result = driver.plan()

    plan_call = tool_runner.calls[-1]
    assert plan_call[:4] == ("terraform", "plan", "-input=false", "-out=tfplan")
    assert "environment=dev" in plan_call
    assert "location=eastus" in plan_call
    assert "owner=platform" in plan_call
    assert result.plan_path == tmp_path / "tfplan"
    assert driver.state is DriverState.PLANNED
    assert not tool_runner.called("terraform", "apply")


def test_failed_plan_moves_to_failed_and_blocks_apply(
    tool_runner, run_logger, tmp_path: Path
) -> None:
    tool_runner.on("terraform", "plan", returncode=1, stderr="Error: Unsupported argument")
    driver = _driver(tool_runner, run_logger, tmp_path)
    driver.init()

    with pytest.raises(PlanFailed, match="Unsupported argument"):
        driver.plan()

    assert driver.state is DriverState.FAILED
    with pytest.raises(InvalidDriverTransition):
        driver.apply()
    assert not tool_runner.called("terraform", "apply")


def test_apply_right_after_plan_uses_saved_artifact(
    tool_runner, run_logger, tmp_path: Path
) -> None:
    driver = _driver(tool_runner, run_logger, tmp_path, plan_file="dev.tfplan")
    driver.init()
    driver.plan()

    driver.apply()

    assert tool_runner.calls[-1] == ("terraform", "apply", "-input=false", "dev.tfplan")
    assert driver.state is DriverState.APPLIED


def test_confirmed_plan_can_be_applied(
    tool_runner, run_logger, tmp_path: Path, make_prompter
) -> None:
    driver = _driver(tool_runner, run_logger, tmp_path)
    driver.init()
    driver.plan()

    assert driver.confirm(make_prompter(["yes"])) is True
    driver.apply()

    assert driver.state is DriverState.APPLIED


def test_declined_plan_cannot_be_applied(
    tool_runner, run_logger, tmp_path: Path, make_prompter
) -> None:
    driver = _driver(tool_runner, run_logger, tmp_path)
    driver.init()
    driver.plan()

    assert driver.confirm(make_prompter(["no"])) is False
    assert driver.state is DriverState.AWAITING_CONFIRMATION
    with pytest.raises(InvalidDriverTransition):
        driver.apply()
    assert not tool_runner.called("terraform", "apply")


def test_failed_apply_raises(tool_runner, run_logger, tmp_path: Path) -> None:
    tool_runner.on("terraform", "apply", returncode=1, stderr="Error: quota exceeded")
    driver = _driver(tool_runner, run_logger, tmp_path)
    driver.init()
    driver.plan()

    with pytest.raises(ApplyFailed, match="quota exceeded"):
        driver.apply()

    assert driver.state is DriverState.FAILED


def test_plan_before_init_is_rejected(tool_runner, run_logger, tmp_path: Path) -> None:
    with pytest.raises(InvalidDriverTransition, match="NotStarted"):
        _driver(tool_runner, run_logger, tmp_path).plan()
