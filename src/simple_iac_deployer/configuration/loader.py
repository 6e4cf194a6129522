"""Configuration loader service."""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .config_scaffold_builder import DEFAULT_CONFIG_FILENAME
from .runtime_settings import (
    AzureSettings,
    BackendSettings,
    Configuration,
    OutputSettings,
    TerraformSettings,
)

_STORAGE_ACCOUNT_NAME = re.compile(r"^[a-z0-9]{3,24}$")


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def resolve_configuration(
    config_path: Path | str | None, *, cwd: Path | None = None
) -> Configuration:
    """Load an explicit configuration, the default file when present, or built-in defaults."""
    if config_path is not None:
        return load_configuration(config_path)
    base = cwd or Path.cwd()
    default_path = base / DEFAULT_CONFIG_FILENAME
    if default_path.exists():
        return load_configuration(default_path)
    return Configuration(
        terraform=TerraformSettings(working_dir=base.resolve()),
        output=OutputSettings(
            report_dir=(base / "reports").resolve(),
            log_dir=(base / "logs").resolve(),
        ),
    )


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.resolve().parent
    return Configuration(
        path=path.resolve(),
        terraform=_parse_terraform_section(parsed.get("terraform"), base_path),
        azure=_parse_azure_section(parsed.get("azure")),
        backend=_parse_backend_section(parsed.get("backend")),
        output=_parse_output_section(parsed.get("output"), base_path),
    )


def _parse_terraform_section(value: Any, base_path: Path) -> TerraformSettings:
    section = _optional_mapping(value, "terraform")
    working_dir = _optional_string(section.get("working_dir"), "terraform.working_dir") or "."
    binary = _optional_string(section.get("binary"), "terraform.binary") or "terraform"
    plan_file = _optional_string(section.get("plan_file"), "terraform.plan_file") or "tfplan"
    variables = _optional_mapping(section.get("variables"), "terraform.variables")
    normalized_variables: dict[str, str] = {}
    for name, raw in variables.items():
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("terraform.variables keys must be non-empty strings.")
        if isinstance(raw, Mapping | list) or raw is None:
            raise ConfigurationError(f"terraform.variables.{name} must be a scalar value.")
        normalized_variables[name.strip()] = _scalar_to_string(raw)
    return TerraformSettings(
        working_dir=_resolve_path(base_path, working_dir),
        binary=binary,
        plan_file=plan_file,
        variables=normalized_variables,
    )


def _parse_azure_section(value: Any) -> AzureSettings:
    section = _optional_mapping(value, "azure")
    binary = _optional_string(section.get("binary"), "azure.binary") or "az"
    return AzureSettings(binary=binary)


def _parse_backend_section(value: Any) -> BackendSettings:
    section = _optional_mapping(value, "backend")
    storage_account_name = _optional_string(
        section.get("storage_account_name"), "backend.storage_account_name"
    )
    if storage_account_name is not None:
        storage_account_name = storage_account_name.lower()
        if not _STORAGE_ACCOUNT_NAME.match(storage_account_name):
            raise ConfigurationError(
                "backend.storage_account_name must be 3-24 lowercase letters and digits."
            )
    return BackendSettings(
        resource_group_name=_optional_string(
            section.get("resource_group_name"), "backend.resource_group_name"
        ),
        storage_account_name=storage_account_name,
        container_name=_optional_string(section.get("container_name"), "backend.container_name")
        or "tfstate",
    )


def _parse_output_section(value: Any, base_path: Path) -> OutputSettings:
    section = _optional_mapping(value, "output")
    report_dir = _optional_string(section.get("report_dir"), "output.report_dir") or "reports"
    log_dir = _optional_string(section.get("log_dir"), "output.log_dir") or "logs"
    open_report = section.get("open_report", True)
    if not isinstance(open_report, bool):
        raise ConfigurationError("output.open_report must be a boolean.")
    return OutputSettings(
        report_dir=_resolve_path(base_path, report_dir),
        log_dir=_resolve_path(base_path, log_dir),
        open_report=open_report,
    )


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _scalar_to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
