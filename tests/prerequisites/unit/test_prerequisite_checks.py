"""Tests for required tool checks."""

from __future__ import annotations

import pytest
from simple_iac_deployer.deployment_errors import MissingPrerequisite
from simple_iac_deployer.prerequisites import check_prerequisites, required_tools
from simple_iac_deployer.tool_invocation import ToolInvocationError


def test_all_tools_available_checks_in_fixed_order(tool_runner, run_logger) -> None:
    check_prerequisites(tool_runner, run_logger)

    assert [call[0] for call in tool_runner.calls] == ["az", "terraform"]


def test_first_failing_tool_short_circuits(tool_runner, run_logger) -> None:
    tool_runner.on("az", "version", returncode=1, stderr="az: broken install")

    with pytest.raises(MissingPrerequisite) as excinfo:
        check_prerequisites(tool_runner, run_logger)

    assert excinfo.value.tool_name == "Azure CLI"
    assert "broken install" in str(excinfo.value)
    assert not tool_runner.called("terraform")


def test_missing_binary_is_reported_as_missing_prerequisite(tool_runner, run_logger) -> None:
    tool_runner.on("terraform", "version", raises=ToolInvocationError("Command not found"))

    with pytest.raises(MissingPrerequisite, match="Terraform"):
        check_prerequisites(tool_runner, run_logger)


def test_custom_binaries_are_checked(tool_runner, run_logger) -> None:
    check_prerequisites(tool_runner, run_logger, required_tools("/opt/az", "tofu"))

    assert tool_runner.calls[0][0] == "/opt/az"
    assert tool_runner.calls[1] == ("tofu", "version")
