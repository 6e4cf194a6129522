"""Run tracking exports."""

from .run_state import RunState, RunStatus, StepRecord, StepStatus

__all__ = ["RunState", "RunStatus", "StepRecord", "StepStatus"]
