"""
Dashboard Layout MCP Tools

Tools for reading the dashboard and configuring its CSS grid.
"""

import logging
from typing import Any

from dashboard_builder.core.exceptions import DashboardError
from dashboard_builder.models.contracts.dashboard import ComponentSummary
from dashboard_builder.models.contracts.tools import ToolResponse
from dashboard_builder.services.grid_layout import extract_grid_areas, get_grid_stats
from dashboard_builder.services.mcp_server.tool_decorator import system_tool
from dashboard_builder.services.mcp_server.tool_registry import ToolCategory
from dashboard_builder.services.mcp_server.tool_result import error_result, success_result

logger = logging.getLogger(__name__)


@system_tool(
    id="get_dashboard",
    name="Get Dashboard",
    description="Get the complete dashboard state: grid, components, metadata and schema.",
    category=ToolCategory.DASHBOARD,
)
async def get_dashboard(context: Any) -> ToolResponse:
    """Get the complete dashboard state."""
    return success_result(
        "Dashboard state retrieved successfully",
        context.dashboard.state.to_dict(),
    )


@system_tool(
    id="set_grid_layout",
    name="Set Grid Layout",
    description=(
        "Configure the dashboard CSS grid. templateAreas is a list of row strings "
        "of whitespace-separated area names ('.' marks an empty cell). Every row "
        "must have the same number of columns and each named area must form a "
        "single rectangle. Fails if an existing component's area would disappear."
    ),
    category=ToolCategory.DASHBOARD,
    input_schema={
        "type": "object",
        "properties": {
            "columns": {
                "type": "string",
                "description": "grid-template-columns value (e.g. '1fr 1fr 1fr')",
            },
            "rows": {
                "type": "string",
                "description": "grid-template-rows value (e.g. 'auto 1fr')",
            },
            "gap": {
                "type": "string",
                "description": "Grid gap (e.g. '16px')",
            },
            "templateAreas": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Rows of area names, e.g. ['header header', 'sidebar main']",
            },
        },
        "required": ["columns", "rows", "gap", "templateAreas"],
    },
)
async def set_grid_layout(
    context: Any,
    columns: str,
    rows: str,
    gap: str,
    template_areas: list[str],
) -> ToolResponse:
    """Replace the grid layout."""
    logger.info(f"set_grid_layout called with {len(template_areas or [])} rows")

    try:
        grid = context.dashboard.set_grid_layout(
            {"columns": columns, "rows": rows, "gap": gap, "templateAreas": template_areas}
        )
    except DashboardError as e:
        return error_result(e.message)
    except Exception as e:
        logger.exception(f"Error setting grid layout: {e}")
        return error_result(f"Failed to set grid layout: {e}")

    return success_result(
        "Grid layout configured successfully",
        {
            **grid.to_dict(),
            "gridAreas": extract_grid_areas(grid.template_areas),
            "stats": get_grid_stats(context.dashboard.state).to_dict(),
        },
    )


@system_tool(
    id="get_grid_info",
    name="Get Grid Info",
    description="Get the grid layout, area usage stats and a summary of every component.",
    category=ToolCategory.DASHBOARD,
)
async def get_grid_info(context: Any) -> ToolResponse:
    """Get grid, stats and component summaries."""
    state = context.dashboard.state
    summaries = [
        ComponentSummary(
            id=c.id, type=c.type, grid_area=c.grid_area, title=c.title
        ).to_dict()
        for c in state.components.values()
    ]

    return success_result(
        "Grid information retrieved successfully",
        {
            "grid": state.grid.to_dict(),
            "stats": get_grid_stats(state).to_dict(),
            "components": summaries,
        },
    )
