"""
Dashboard MCP Server Module

Exposes the dashboard tool catalog to agent hosts.

Usage:
    from dashboard_builder.services.mcp_server import DashboardContext, execute_tool

    context = DashboardContext(dashboard=service, session_id=session_id)
    response = await execute_tool(context, "create_component", params)
"""

from dashboard_builder.services.mcp_server.server import (
    DashboardContext,
    DashboardMCPServer,
    execute_tool,
    get_tool_definitions,
)

__all__ = ["DashboardContext", "DashboardMCPServer", "execute_tool", "get_tool_definitions"]
