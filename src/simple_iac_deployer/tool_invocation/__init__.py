"""Tool invocation exports."""

from .tool_runner import SubprocessToolRunner, ToolInvocationError, ToolResult, ToolRunner

__all__ = ["SubprocessToolRunner", "ToolInvocationError", "ToolResult", "ToolRunner"]
