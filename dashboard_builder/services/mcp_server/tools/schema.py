"""
PostgreSQL Schema MCP Tools

Tools for storing and querying an introspected PostgreSQL schema snapshot,
so the agent can write source queries against real tables.
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
    id="set_postgres_schema",
    name="Set PostgreSQL Schema",
    description="Store an introspected PostgreSQL schema: {schemas: [...], tables: [{name, schema, columns}]}.",
    category=ToolCategory.SCHEMA,
    input_schema={
        "type": "object",
        "properties": {
            "schema": {
                "type": "object",
                "description": "Schema snapshot with schemas and tables lists",
            },
        },
        "required": ["schema"],
    },
)
async def set_postgres_schema(context: Any, schema: dict[str, Any]) -> ToolResponse:
    """Store the schema snapshot."""
    try:
        stored = context.dashboard.set_postgres_schema(schema)
    except DashboardError as e:
        return error_result(e.message)

    return success_result("PostgreSQL schema configured successfully", stored.to_dict())


@system_tool(
    id="get_postgres_schema",
    name="Get PostgreSQL Schema",
    description="Get the stored PostgreSQL schema snapshot.",
    category=ToolCategory.SCHEMA,
)
async def get_postgres_schema(context: Any) -> ToolResponse:
    """Get the schema snapshot."""
    try:
        schema = context.dashboard.get_postgres_schema()
    except DashboardError as e:
        return error_result(e.message, data=None)

    return success_result("PostgreSQL schema retrieved successfully", schema.to_dict())


@system_tool(
    id="query_postgres_schema",
    name="Query PostgreSQL Schema",
    description=(
        "Look up a table by name (optionally within schemaName), list the tables "
        "of a schema, or list all schemas when neither is given."
    ),
    category=ToolCategory.SCHEMA,
    input_schema={
        "type": "object",
        "properties": {
            "schemaName": {"type": "string", "description": "Schema name filter"},
            "tableName": {"type": "string", "description": "Exact table name"},
        },
        "required": [],
    },
)
async def query_postgres_schema(
    context: Any,
    schema_name: str | None = None,
    table_name: str | None = None,
) -> ToolResponse:
    """Query the stored schema."""
    try:
        result = context.dashboard.query_postgres_schema(schema_name, table_name)
    except DashboardError as e:
        return error_result(e.message)

    if table_name:
        return success_result(f'Table "{table_name}" found', result.to_dict())
    if schema_name:
        return success_result(
            f'Found {len(result)} table(s) in schema "{schema_name}"',
            [table.to_dict() for table in result],
        )
    return success_result("Schemas retrieved successfully", result)
