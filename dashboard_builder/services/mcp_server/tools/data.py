"""
Component Data MCP Tools

Tools for fetching component data, refreshing the dashboard and managing
the data cache and GraphQL endpoint.
"""

import logging
from typing import Any

from dashboard_builder.core.exceptions import DashboardError
from dashboard_builder.models.contracts.tools import ToolResponse
from dashboard_builder.services.mcp_server.tool_decorator import system_tool
from dashboard_builder.services.mcp_server.tool_registry import ToolCategory
from dashboard_builder.services.mcp_server.tool_result import error_result, success_result

logger = logging.getLogger(__name__)


@system_tool(
    id="fetch_component_data",
    name="Fetch Component Data",
    description=(
        "Fetch data for a component from its data source, apply its transforms "
        "and store the result on the component."
    ),
    category=ToolCategory.DATA,
    input_schema={
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "Component ID"},
        },
        "required": ["id"],
    },
)
async def fetch_component_data(context: Any, id: str) -> ToolResponse:
    """Fetch data for one component."""
    logger.info(f"fetch_component_data called with id={id}")

    try:
        data = await context.dashboard.fetch_component_data(id)
    except DashboardError as e:
        return error_result(e.message)
    except Exception as e:
        logger.exception(f"Error fetching data for component {id}: {e}")
        return error_result(str(e) or "Failed to fetch data")

    return success_result(f'Data fetched successfully for component "{id}"', data)


@system_tool(
    id="refresh_all_components",
    name="Refresh All Components",
    description=(
        "Re-fetch data for every component concurrently. Failures are recorded "
        "on the affected components only."
    ),
    category=ToolCategory.DATA,
)
async def refresh_all_components(context: Any) -> ToolResponse:
    """Refresh every component."""
    try:
        summary = await context.dashboard.refresh_all_components()
    except Exception as e:
        logger.exception(f"Error refreshing components: {e}")
        return error_result(f"Failed to refresh components: {e}")

    return success_result(
        f"Refreshed {summary.refreshed_count} components",
        summary.to_dict(),
    )


@system_tool(
    id="clear_data_cache",
    name="Clear Data Cache",
    description="Clear cached data for one component, or for all components when no id is given.",
    category=ToolCategory.DATA,
    input_schema={
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "Component ID (omit to clear everything)"},
        },
        "required": [],
    },
)
async def clear_data_cache(context: Any, id: str | None = None) -> ToolResponse:
    """Clear the data cache."""
    try:
        context.dashboard.clear_cache(id)
    except DashboardError as e:
        return error_result(e.message)

    if id:
        return success_result(f'Cache cleared for component "{id}"')
    return success_result("Cache cleared for all components")


@system_tool(
    id="set_graphql_endpoint",
    name="Set GraphQL Endpoint",
    description="Set the default GraphQL endpoint used by graphql sources without their own endpoint.",
    category=ToolCategory.DATA,
    input_schema={
        "type": "object",
        "properties": {
            "endpoint": {"type": "string", "description": "GraphQL endpoint URL"},
        },
        "required": ["endpoint"],
    },
)
async def set_graphql_endpoint(context: Any, endpoint: str) -> ToolResponse:
    """Set the dashboard GraphQL endpoint."""
    try:
        endpoint = context.dashboard.set_graphql_endpoint(endpoint)
    except DashboardError as e:
        return error_result(e.message)

    return success_result(
        "GraphQL endpoint configured successfully",
        {"endpoint": endpoint},
    )
