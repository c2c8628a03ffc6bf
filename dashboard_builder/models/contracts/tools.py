"""
Tool contract models.
"""

import json
from typing import Any

from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel, Field


class ToolResponse(BaseModel):
    """Uniform result of every dashboard tool call."""

    success: bool
    message: str | None = Field(default=None, description="Human-readable summary")
    data: Any = Field(default=None, description="Structured payload")
    error: str | None = Field(default=None, description="Error description when success is False")

    def to_dict(self) -> dict[str, Any]:
        """Dump for the host, omitting unset message/error."""
        result: dict[str, Any] = {"success": self.success}
        if self.message is not None:
            result["message"] = self.message
        if self.error is not None:
            result["error"] = self.error
        if self.data is not None or not self.success:
            result["data"] = self.data
        return result

    def to_call_tool_result(self) -> CallToolResult:
        """
        Convert to an MCP CallToolResult.

        The display text is the message (or "Error: ..." on failure); the
        full response is the structured content.
        """
        text = (self.message or "OK") if self.success else f"Error: {self.error}"
        return CallToolResult(
            content=[TextContent(type="text", text=text)],
            structuredContent=json.loads(json.dumps(self.to_dict(), default=str)),
            isError=not self.success,
        )


class ToolDefinition(BaseModel):
    """Tool description handed to the agent host."""

    name: str
    description: str
    input_schema: dict[str, Any]
