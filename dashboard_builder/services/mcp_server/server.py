"""
Dashboard MCP Server

Exposes the dashboard tool catalog to an agent host.

Architecture:
    - DashboardContext: The session's DashboardService handed to every tool
    - execute_tool: Dispatch a tool call by id with a single params dict
    - DashboardMCPServer: Low-level MCP server with the registered tools

Usage:
    context = DashboardContext(dashboard=DashboardService(), session_id="abc")
    response = await execute_tool(context, "get_grid_info", {})

    # For an MCP host
    server = DashboardMCPServer(context).get_server()
"""

import logging
from dataclasses import dataclass
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from pydantic.alias_generators import to_snake

# Import tools module to trigger registration via @system_tool decorators
import dashboard_builder.services.mcp_server.tools  # noqa: F401

from dashboard_builder.models.contracts.tools import ToolDefinition, ToolResponse
from dashboard_builder.services.dashboard_service import DashboardService
from dashboard_builder.services.mcp_server.tool_registry import (
    get_all_system_tools,
    get_system_tool,
)
from dashboard_builder.services.mcp_server.tool_result import error_result

logger = logging.getLogger(__name__)


@dataclass
class DashboardContext:
    """
    Context for dashboard tool execution.

    Every tool receives this context and mutates state only through
    `dashboard`.
    """

    dashboard: DashboardService
    session_id: str = "default"


def get_tool_definitions() -> list[ToolDefinition]:
    """Definitions for every registered tool, in registration order."""
    return [
        ToolDefinition(
            name=metadata.id,
            description=metadata.description,
            input_schema=metadata.input_schema,
        )
        for metadata in get_all_system_tools()
    ]


async def execute_tool(
    context: DashboardContext,
    tool_id: str,
    params: dict[str, Any] | None = None,
) -> ToolResponse:
    """
    Invoke a tool by id.

    Schema properties (camelCase) present in `params` are passed to the
    implementation as snake_case keyword arguments; unknown keys are ignored.
    Never raises.
    """
    metadata = get_system_tool(tool_id)
    if metadata is None or metadata.implementation is None:
        return error_result(f"Unknown tool: {tool_id}")

    if params is None:
        params = {}
    if not isinstance(params, dict):
        return error_result(f"Parameters for {tool_id} must be an object")

    schema = metadata.input_schema
    missing = [key for key in schema.get("required", []) if key not in params]
    if missing:
        return error_result(f"Missing required parameter(s) for {tool_id}: {', '.join(missing)}")

    kwargs: dict[str, Any] = {}
    for key in schema.get("properties", {}):
        if key in params:
            kwargs[to_snake(key)] = params[key]

    try:
        return await metadata.implementation(context, **kwargs)
    except Exception as e:
        logger.exception(f"Unhandled error in tool {tool_id}: {e}")
        return error_result(str(e) or type(e).__name__)


class DashboardMCPServer:
    """
    MCP server bound to one dashboard session.

    Usage:
        server = DashboardMCPServer(context).get_server()
        async with stdio_server() as (read, write):
            await server.run(read, write, server.create_initialization_options())
    """

    def __init__(self, context: DashboardContext, *, name: str = "dashboard-builder"):
        self.context = context
        self._name = name
        self._server: Server | None = None

    def get_tool_names(self) -> list[str]:
        return [definition.name for definition in get_tool_definitions()]

    def get_server(self) -> Server:
        """
        Get the low-level MCP server with all tools registered.

        The server is cached for reuse.
        """
        if self._server is not None:
            return self._server

        server: Server = Server(self._name)
        context = self.context

        @server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return [
                types.Tool(
                    name=definition.name,
                    description=definition.description,
                    inputSchema=definition.input_schema,
                )
                for definition in get_tool_definitions()
            ]

        @server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
            response = await execute_tool(context, name, arguments)
            return response.to_call_tool_result()

        self._server = server
        logger.info(f"Created MCP server '{self._name}' with {len(self.get_tool_names())} tools")
        return server
