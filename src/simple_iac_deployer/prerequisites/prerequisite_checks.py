"""Required external tool checks."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from simple_iac_deployer.deployment_errors import MissingPrerequisite
from simple_iac_deployer.run_logging import RunLogger
from simple_iac_deployer.tool_invocation import ToolInvocationError, ToolRunner


@dataclass(frozen=True)
class RequiredTool:
    """External tool and the command proving it is callable."""

    name: str
    version_command: tuple[str, ...]


def required_tools(
    az_binary: str = "az", terraform_binary: str = "terraform"
) -> tuple[RequiredTool, ...]:
    """Return the fixed, ordered list of tools the pipeline depends on."""
    return (
        RequiredTool(name="Azure CLI", version_command=(az_binary, "version", "--output", "json")),
        RequiredTool(name="Terraform", version_command=(terraform_binary, "version")),
    )


def check_prerequisites(
    runner: ToolRunner,
    logger: RunLogger,
    tools: Sequence[RequiredTool] | None = None,
) -> None:
    """Verify every required tool in order and stop at the first unusable one."""
    for tool in tools if tools is not None else required_tools():
        logger.debug(f"Checking {tool.name}: {' '.join(tool.version_command)}")
        try:
            result = runner.run(tool.version_command)
        except ToolInvocationError as exc:
            raise MissingPrerequisite(tool.name, str(exc)) from exc
        if not result.ok:
            raise MissingPrerequisite(tool.name, result.last_error_line())
        logger.success(f"{tool.name} is available")
