"""Create-if-absent provisioning of the Terraform state backend."""

from __future__ import annotations

import json
import random
import re

from simple_iac_deployer.configuration import BackendSettings
from simple_iac_deployer.deployment_errors import BackendProvisioningError, BackendStage
from simple_iac_deployer.run_logging import RunLogger
from simple_iac_deployer.tool_invocation import ToolInvocationError, ToolResult, ToolRunner

from .backend_models import BackendConfig, BackendCredentials

STORAGE_ACCOUNT_PREFIX = "sttfstate"
STORAGE_ACCOUNT_MAX_LENGTH = 24
STORAGE_ACCOUNT_SUFFIX_DIGITS = 6
STORAGE_KEY_VARIABLE = "AZURE_STORAGE_KEY"
_STORAGE_ACCOUNT_NAME = re.compile(r"^[a-z0-9]{3,24}$")


def default_resource_group_name(environment: str) -> str:
    return f"rg-tfstate-{environment}"


def state_key_for(environment: str) -> str:
    return f"{environment}.terraform.tfstate"


def generate_storage_account_name(environment: str, rng: random.Random | None = None) -> str:
    """Build a globally-unique-ish storage account name for an environment.

    Storage account names are 3-24 lowercase alphanumerics, so the environment
    part is stripped of other characters and truncated to leave room for the
    random numeric suffix.
    """
    source = rng or random.Random()
    env_part = re.sub(r"[^a-z0-9]", "", environment.lower())
    room = STORAGE_ACCOUNT_MAX_LENGTH - len(STORAGE_ACCOUNT_PREFIX) - STORAGE_ACCOUNT_SUFFIX_DIGITS
    suffix = "".join(str(source.randint(0, 9)) for _ in range(STORAGE_ACCOUNT_SUFFIX_DIGITS))
    return f"{STORAGE_ACCOUNT_PREFIX}{env_part[:room]}{suffix}"


class BackendProvisioner:
    """Ensures the resource group, storage account and container for state exist."""

    def __init__(
        self,
        runner: ToolRunner,
        logger: RunLogger,
        *,
        settings: BackendSettings | None = None,
        az_binary: str = "az",
        rng: random.Random | None = None,
    ) -> None:
        self._runner = runner
        self._logger = logger
        self._settings = settings or BackendSettings()
        self._az = az_binary
        self._rng = rng

    def resolve_config(self, environment: str, location: str) -> BackendConfig:
        """Derive backend names for an environment without touching the cloud."""
        storage_account_name = self._settings.storage_account_name
        if not storage_account_name:
            storage_account_name = generate_storage_account_name(environment, self._rng)
        if not _STORAGE_ACCOUNT_NAME.match(storage_account_name):
            raise BackendProvisioningError(
                BackendStage.STORAGE_ACCOUNT_CREATE,
                f"Invalid storage account name '{storage_account_name}'",
            )
        return BackendConfig(
            resource_group_name=self._settings.resource_group_name
            or default_resource_group_name(environment),
            storage_account_name=storage_account_name,
            container_name=self._settings.container_name,
            location=location,
            state_key=state_key_for(environment),
        )

    def ensure_backend(
        self, environment: str, location: str
    ) -> tuple[BackendConfig, BackendCredentials]:
        """Create whatever part of the backend is missing and return its identity."""
        config = self.resolve_config(environment, location)
        self._logger.info(
            f"Ensuring Terraform backend {config.storage_account_name}/{config.container_name} "
            f"in resource group {config.resource_group_name}"
        )
        self._ensure_resource_group(config, environment)
        self._ensure_storage_account(config)
        credentials = self._retrieve_credentials(config)
        self._ensure_container(config, credentials)
        self._logger.success("Terraform backend is ready")
        return config, credentials

    def _ensure_resource_group(self, config: BackendConfig, environment: str) -> None:
        exists = self._az_call(
            BackendStage.RESOURCE_GROUP_CREATE,
            "group",
            "exists",
            "--name",
            config.resource_group_name,
        )
        if exists.ok and exists.stdout.strip().lower() == "true":
            self._logger.info(f"Resource group {config.resource_group_name} already exists")
            return
        self._logger.info(f"Creating resource group {config.resource_group_name}")
        created = self._az_call(
            BackendStage.RESOURCE_GROUP_CREATE,
            "group",
            "create",
            "--name",
            config.resource_group_name,
            "--location",
            config.location,
            "--tags",
            f"environment={environment}",
            "purpose=terraform-state",
            "--output",
            "none",
        )
        if not created.ok:
            raise BackendProvisioningError(
                BackendStage.RESOURCE_GROUP_CREATE, created.last_error_line()
            )

    def _ensure_storage_account(self, config: BackendConfig) -> None:
        if self._settings.storage_account_name:
            shown = self._az_call(
                BackendStage.STORAGE_ACCOUNT_CREATE,
                "storage",
                "account",
                "show",
                "--name",
                config.storage_account_name,
                "--resource-group",
                config.resource_group_name,
                "--output",
                "none",
            )
            if shown.ok:
                self._logger.info(f"Storage account {config.storage_account_name} already exists")
                return
        self._logger.info(f"Creating storage account {config.storage_account_name}")
        created = self._az_call(
            BackendStage.STORAGE_ACCOUNT_CREATE,
            "storage",
            "account",
            "create",
            "--name",
            config.storage_account_name,
            "--resource-group",
            config.resource_group_name,
            "--location",
            config.location,
            "--sku",
            "Standard_LRS",
            "--kind",
            "StorageV2",
            "--encryption-services",
            "blob",
            "--min-tls-version",
            "TLS1_2",
            "--allow-blob-public-access",
            "false",
            "--output",
            "none",
        )
        if not created.ok:
            raise BackendProvisioningError(
                BackendStage.STORAGE_ACCOUNT_CREATE, created.last_error_line()
            )

    def _retrieve_credentials(self, config: BackendConfig) -> BackendCredentials:
        keys = self._az_call(
            BackendStage.KEY_RETRIEVAL,
            "storage",
            "account",
            "keys",
            "list",
            "--resource-group",
            config.resource_group_name,
            "--account-name",
            config.storage_account_name,
            "--query",
            "[0].value",
            "--output",
            "tsv",
        )
        access_key = keys.stdout.strip() if keys.ok else ""
        if not access_key:
            detail = keys.last_error_line() if not keys.ok else "no key returned"
            raise BackendProvisioningError(BackendStage.KEY_RETRIEVAL, detail)
        return BackendCredentials(access_key=access_key)

    def _ensure_container(self, config: BackendConfig, credentials: BackendCredentials) -> None:
        account_args = (
            "--name",
            config.container_name,
            "--account-name",
            config.storage_account_name,
        )
        # The key travels through the child environment, never argv.
        key_env = {STORAGE_KEY_VARIABLE: credentials.access_key}
        exists = self._az_call(
            BackendStage.CONTAINER_CREATE,
            "storage",
            "container",
            "exists",
            *account_args,
            "--output",
            "json",
            env=key_env,
        )
        if exists.ok and _container_exists(exists.stdout):
            self._logger.info(f"Container {config.container_name} already exists")
            return
        self._logger.info(f"Creating container {config.container_name}")
        created = self._az_call(
            BackendStage.CONTAINER_CREATE,
            "storage",
            "container",
            "create",
            *account_args,
            "--output",
            "none",
            env=key_env,
        )
        if not created.ok:
            raise BackendProvisioningError(BackendStage.CONTAINER_CREATE, created.last_error_line())

    def _az_call(
        self, stage: BackendStage, *args: str, env: dict[str, str] | None = None
    ) -> ToolResult:
        try:
            return self._runner.run((self._az, *args), env=env)
        except ToolInvocationError as exc:
            raise BackendProvisioningError(stage, str(exc)) from exc


def _container_exists(stdout: str) -> bool:
    try:
        payload = json.loads(stdout or "{}")
    except json.JSONDecodeError:
        return False
    return isinstance(payload, dict) and bool(payload.get("exists"))
