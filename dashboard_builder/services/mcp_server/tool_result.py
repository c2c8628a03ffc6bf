"""
Tool Result Helpers

Standard helpers for building ToolResponse objects. Use
ToolResponse.to_call_tool_result() to hand them to an MCP host.
"""

from typing import Any

from dashboard_builder.models.contracts.tools import ToolResponse


def success_result(message: str, data: Any = None) -> ToolResponse:
    """
    Create a successful tool response.

    Args:
        message: Human-readable summary for the agent
        data: Structured payload (JSON-compatible)
    """
    return ToolResponse(success=True, message=message, data=data)


def error_result(error_message: str, data: Any = None) -> ToolResponse:
    """
    Create an error tool response.

    Args:
        error_message: Human-readable error description
        data: Optional payload (e.g. explicit None for lookups)
    """
    return ToolResponse(success=False, error=error_message, data=data)
