"""
Dashboard Component MCP Tools

Tools for creating, updating, removing and reading dashboard components.
"""

import logging
from typing import Any

from dashboard_builder.core.exceptions import ComponentNotFoundError, DashboardError
from dashboard_builder.models.contracts.dashboard import COMPONENT_TYPES
from dashboard_builder.models.contracts.tools import ToolResponse
from dashboard_builder.services.grid_layout import get_grid_stats
from dashboard_builder.services.mcp_server.tool_decorator import system_tool
from dashboard_builder.services.mcp_server.tool_registry import ToolCategory
from dashboard_builder.services.mcp_server.tool_result import error_result, success_result

logger = logging.getLogger(__name__)


DATA_CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "description": (
        "Data source descriptor: {source: {type: 'postgresql'|'graphql'|'static', ...}, "
        "template?: {template, context?}, queryTransform?: {query, params?}, "
        "cache?: {enabled, ttl?}}. Templates are Jinja2 and receive the fetched "
        "value as `data`; queryTransform SQL reads the rows from table `data`."
    ),
    "properties": {
        "source": {"type": "object"},
        "template": {"type": "object"},
        "queryTransform": {"type": "object"},
        "cache": {"type": "object"},
    },
    "required": ["source"],
}


@system_tool(
    id="create_component",
    name="Create Component",
    description=(
        "Create a component in an unoccupied grid area. Use get_grid_info first "
        "to see which areas are available."
    ),
    category=ToolCategory.COMPONENTS,
    input_schema={
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "Unique component ID"},
            "type": {
                "type": "string",
                "enum": list(COMPONENT_TYPES),
                "description": "Component type",
            },
            "gridArea": {"type": "string", "description": "Grid area name to place the component in"},
            "title": {"type": "string", "description": "Display title"},
            "description": {"type": "string", "description": "Display description"},
            "dataConfig": DATA_CONFIG_SCHEMA,
            "data": {"description": "Initial data payload (defaults to {})"},
            "options": {"type": "object", "description": "Presentational options"},
            "style": {"type": "object", "description": "Style overrides"},
        },
        "required": ["id", "type", "gridArea", "title", "dataConfig"],
    },
)
async def create_component(
    context: Any,
    id: str,
    type: str,
    grid_area: str,
    data_config: dict[str, Any],
    title: str = "",
    description: str | None = None,
    data: Any = None,
    options: Any = None,
    style: dict[str, Any] | None = None,
) -> ToolResponse:
    """Create a component in a free grid area."""
    logger.info(f"create_component called with id={id}, type={type}, area={grid_area}")

    try:
        component = context.dashboard.create_component(
            {
                "id": id,
                "type": type,
                "gridArea": grid_area,
                "title": title,
                "description": description,
                "dataConfig": data_config,
                "data": data,
                "options": options,
                "style": style,
            }
        )
    except DashboardError as e:
        return error_result(e.message)
    except Exception as e:
        logger.exception(f"Error creating component: {e}")
        return error_result(f"Failed to create component: {e}")

    stats = get_grid_stats(context.dashboard.state)
    if stats.available_areas > 0:
        suggestion = (
            f"{stats.available_areas} grid area(s) still available: "
            f"{', '.join(stats.available_area_names)}"
        )
    else:
        suggestion = "All grid areas are now occupied"

    return success_result(
        f'Component "{component.id}" created successfully in grid area "{component.grid_area}"',
        {
            "component": component.to_dict(),
            "gridStats": stats.to_dict(),
            "suggestion": suggestion,
        },
    )


@system_tool(
    id="update_component",
    name="Update Component",
    description=(
        "Update a component. With `path` (e.g. '$.data.rows[0].total' or "
        "'$.title') the value in `updates` is written at that path; without it "
        "`updates` is merged into the component. The id cannot change."
    ),
    category=ToolCategory.COMPONENTS,
    input_schema={
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "Component ID"},
            "path": {"type": "string", "description": "Optional JSON path to update"},
            "updates": {"description": "Value to write at path, or fields to merge"},
        },
        "required": ["id", "updates"],
    },
)
async def update_component(
    context: Any,
    id: str,
    updates: Any = None,
    path: str | None = None,
) -> ToolResponse:
    """Update a component by path or shallow merge."""
    logger.info(f"update_component called with id={id}, path={path}")

    try:
        component = context.dashboard.update_component(id, updates, path=path)
    except DashboardError as e:
        return error_result(e.message)
    except Exception as e:
        logger.exception(f"Error updating component: {e}")
        return error_result(f"Failed to update component: {e}")

    return success_result(
        f'Component "{id}" updated successfully',
        {"component": component.to_dict()},
    )


@system_tool(
    id="remove_component",
    name="Remove Component",
    description="Remove a component from the dashboard, freeing its grid area.",
    category=ToolCategory.COMPONENTS,
    input_schema={
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "Component ID"},
        },
        "required": ["id"],
    },
)
async def remove_component(context: Any, id: str) -> ToolResponse:
    """Remove a component."""
    logger.info(f"remove_component called with id={id}")

    try:
        context.dashboard.remove_component(id)
    except DashboardError as e:
        return error_result(e.message)
    except Exception as e:
        logger.exception(f"Error removing component: {e}")
        return error_result(f"Failed to remove component: {e}")

    return success_result(f'Component "{id}" removed successfully')


@system_tool(
    id="get_component",
    name="Get Component",
    description="Get a single component including its data and fetch metadata.",
    category=ToolCategory.COMPONENTS,
    input_schema={
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "Component ID"},
        },
        "required": ["id"],
    },
)
async def get_component(context: Any, id: str) -> ToolResponse:
    """Get a component by ID."""
    try:
        component = context.dashboard.get_component(id)
    except ComponentNotFoundError as e:
        return error_result(e.message, data=None)

    return success_result(
        f'Component "{id}" retrieved successfully',
        component.to_dict(),
    )
