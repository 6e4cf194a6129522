"""Run execution domain exports."""

from .deployment_run_use_case import execute_deployment_run
from .run_contracts import DEFAULT_LOCATION, ENVIRONMENTS, DeploymentRequest, RunOutcome

__all__ = [
    "DEFAULT_LOCATION",
    "ENVIRONMENTS",
    "DeploymentRequest",
    "RunOutcome",
    "execute_deployment_run",
]
