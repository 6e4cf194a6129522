"""Prerequisite checking exports."""

from .prerequisite_checks import RequiredTool, check_prerequisites, required_tools

__all__ = ["RequiredTool", "check_prerequisites", "required_tools"]
