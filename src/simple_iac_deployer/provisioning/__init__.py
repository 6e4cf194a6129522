"""Plan/apply driver exports."""

from .plan_apply_driver import (
    ApplyResult,
    DriverState,
    InvalidDriverTransition,
    PlanApplyDriver,
    PlanResult,
)

__all__ = [
    "ApplyResult",
    "DriverState",
    "InvalidDriverTransition",
    "PlanApplyDriver",
    "PlanResult",
]
