"""Remote state backend exports."""

from .backend_models import BackendConfig, BackendCredentials
from .backend_provisioner import (
    BackendProvisioner,
    default_resource_group_name,
    generate_storage_account_name,
    state_key_for,
)

__all__ = [
    "BackendConfig",
    "BackendCredentials",
    "BackendProvisioner",
    "default_resource_group_name",
    "generate_storage_account_name",
    "state_key_for",
]
