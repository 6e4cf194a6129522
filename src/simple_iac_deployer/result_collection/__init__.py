"""Result collection exports."""

from .result_collector import (
    SENSITIVE_PLACEHOLDER,
    OutputMap,
    ResourceRecord,
    ResultCollector,
    flatten_outputs,
)

__all__ = [
    "SENSITIVE_PLACEHOLDER",
    "OutputMap",
    "ResourceRecord",
    "ResultCollector",
    "flatten_outputs",
]
