"""Remote state backend entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BackendConfig:
    """Identity of the storage holding Terraform state for one environment."""

    resource_group_name: str
    storage_account_name: str
    container_name: str
    location: str
    state_key: str

    def backend_config_args(self) -> tuple[str, ...]:
        """Return `terraform init` backend settings. Never includes the access key."""
        return (
            f"-backend-config=resource_group_name={self.resource_group_name}",
            f"-backend-config=storage_account_name={self.storage_account_name}",
            f"-backend-config=container_name={self.container_name}",
            f"-backend-config=key={self.state_key}",
        )


@dataclass(frozen=True)
class BackendCredentials:
    """Secret material for the backend. Kept out of reports and logs."""

    access_key: str

    def __repr__(self) -> str:
        return "BackendCredentials(access_key='***')"

    def as_environment(self) -> dict[str, str]:
        return {"ARM_ACCESS_KEY": self.access_key}
