"""Best-effort collection of Terraform outputs and tagged live resources."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from simple_iac_deployer.run_logging import RunLogger
from simple_iac_deployer.tool_invocation import ToolInvocationError, ToolRunner

SENSITIVE_PLACEHOLDER = "(sensitive)"

OutputMap = dict[str, str]


@dataclass(frozen=True)
class ResourceRecord:
    """Snapshot of one live resource."""

    name: str
    type: str
    resource_group: str
    location: str


class ResultCollector:
    """Reads deployment results. Failures degrade to warnings, never errors."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        runner: ToolRunner,
        logger: RunLogger,
        *,
        terraform_dir: Path,
        terraform_binary: str = "terraform",
        az_binary: str = "az",
        tool_env: Mapping[str, str] | None = None,
    ) -> None:
        self._runner = runner
        self._logger = logger
        self._terraform_dir = terraform_dir
        self._terraform = terraform_binary
        self._az = az_binary
        self._tool_env = dict(tool_env or {})
        self.warnings: list[str] = []

    def collect_outputs(self) -> OutputMap:
        try:
            result = self._runner.run(
                (self._terraform, "output", "-json"),
                cwd=self._terraform_dir,
                env=self._tool_env,
            )
        except ToolInvocationError as exc:
            return self._warn_outputs(str(exc))
        if not result.ok:
            return self._warn_outputs(result.last_error_line())
        try:
            payload = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            return self._warn_outputs(f"invalid JSON ({exc})")
        if not isinstance(payload, Mapping):
            return self._warn_outputs("unexpected output format")
        outputs = flatten_outputs(payload)
        self._logger.info(f"Collected {len(outputs)} Terraform output(s)")
        return outputs

    def collect_resources(self, environment: str) -> list[ResourceRecord]:
        try:
            result = self._runner.run(
                (
                    self._az,
                    "resource",
                    "list",
                    "--tag",
                    f"environment={environment}",
                    "--output",
                    "json",
                )
            )
        except ToolInvocationError as exc:
            return self._warn_resources(str(exc))
        if not result.ok:
            return self._warn_resources(result.last_error_line())
        try:
            payload = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as exc:
            return self._warn_resources(f"invalid JSON ({exc})")
        if not isinstance(payload, list):
            return self._warn_resources("unexpected resource list format")
        resources = [_to_resource_record(entry) for entry in payload if isinstance(entry, Mapping)]
        self._logger.info(f"Found {len(resources)} resource(s) tagged environment={environment}")
        return resources

    def _warn_outputs(self, detail: str) -> OutputMap:
        self._warn(f"Could not read Terraform outputs: {detail}")
        return {}

    def _warn_resources(self, detail: str) -> list[ResourceRecord]:
        self._warn(f"Could not list deployed resources: {detail}")
        return []

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        self._logger.warning(message)


def flatten_outputs(payload: Mapping[str, Any]) -> OutputMap:
    """Turn `terraform output -json` into display strings, keeping declaration order."""
    outputs: OutputMap = {}
    for name, entry in payload.items():
        if isinstance(entry, Mapping) and "value" in entry:
            if entry.get("sensitive"):
                outputs[name] = SENSITIVE_PLACEHOLDER
                continue
            outputs[name] = _display_value(entry["value"])
        else:
            outputs[name] = _display_value(entry)
    return outputs


def _display_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    if isinstance(value, Sequence) and not isinstance(value, str | bytes):
        return ", ".join(_display_value(item) for item in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_resource_record(entry: Mapping[str, Any]) -> ResourceRecord:
    return ResourceRecord(
        name=str(entry.get("name") or ""),
        type=str(entry.get("type") or ""),
        resource_group=str(entry.get("resourceGroup") or ""),
        location=str(entry.get("location") or ""),
    )
