"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class TerraformSettings:
    """Where the Terraform definitions live and how to call Terraform."""

    working_dir: Path = Path(".")
    binary: str = "terraform"
    plan_file: str = "tfplan"
    variables: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AzureSettings:
    """Azure CLI invocation settings."""

    binary: str = "az"


@dataclass(frozen=True)
class BackendSettings:
    """Caller-supplied backend identity. Unset names are derived per environment."""

    resource_group_name: str | None = None
    storage_account_name: str | None = None
    container_name: str = "tfstate"


@dataclass(frozen=True)
class OutputSettings:
    """Locations of run artifacts."""

    report_dir: Path = Path("reports")
    log_dir: Path = Path("logs")
    open_report: bool = True


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path | None = None
    terraform: TerraformSettings = field(default_factory=TerraformSettings)
    azure: AzureSettings = field(default_factory=AzureSettings)
    backend: BackendSettings = field(default_factory=BackendSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
