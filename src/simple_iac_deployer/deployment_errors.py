"""Deployment failure taxonomy shared by all pipeline steps."""

from __future__ import annotations

from enum import Enum


class DeploymentError(Exception):
    """Base class for fatal pipeline failures recorded in the run state."""


class MissingPrerequisite(DeploymentError):
    """Raised when a required external tool cannot be invoked."""

    def __init__(self, tool_name: str, detail: str | None = None) -> None:
        self.tool_name = tool_name
        message = f"Required tool '{tool_name}' is not available"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NotAuthenticated(DeploymentError):
    """Raised when no cloud CLI session exists."""


class AuthenticationFailed(DeploymentError):
    """Raised when interactive re-authentication did not yield a usable session."""


class AccountNotFound(DeploymentError):
    """Raised when an explicit subscription identifier matches no listed account."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Subscription '{identifier}' not found among available accounts")


class ActivationFailed(DeploymentError):
    """Raised when the cloud CLI rejects switching the active subscription."""


class BackendStage(str, Enum):
    """Remote state provisioning stage that failed."""

    RESOURCE_GROUP_CREATE = "ResourceGroupCreate"
    STORAGE_ACCOUNT_CREATE = "StorageAccountCreate"
    KEY_RETRIEVAL = "KeyRetrieval"
    CONTAINER_CREATE = "ContainerCreate"


class BackendProvisioningError(DeploymentError):
    """Raised when one remote state provisioning stage fails."""

    def __init__(self, stage: BackendStage, detail: str) -> None:
        self.stage = stage
        super().__init__(f"Backend provisioning failed at {stage.value}: {detail}")


class InitFailed(DeploymentError):
    """Raised when `terraform init` exits non-zero."""


class PlanFailed(DeploymentError):
    """Raised when `terraform plan` exits non-zero."""


class ApplyFailed(DeploymentError):
    """Raised when `terraform apply` exits non-zero."""


class UnexpectedError(DeploymentError):
    """Wraps any failure outside the known taxonomy."""


class RunCancelled(Exception):
    """Raised when the operator declines to continue. Not a failure."""
