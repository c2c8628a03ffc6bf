"""
Template Generator MCP Tools

Pure helpers that produce data templates for common component shapes.
The returned template goes in a component's dataConfig.template.template.
"""

import logging
from typing import Any

from dashboard_builder.models.contracts.tools import ToolResponse
from dashboard_builder.services.mcp_server.tool_decorator import system_tool
from dashboard_builder.services.mcp_server.tool_registry import ToolCategory
from dashboard_builder.services.mcp_server.tool_result import error_result, success_result
from dashboard_builder.services.template_generators import (
    create_chart_data_template,
    create_stat_card_template,
    create_table_data_template,
)

logger = logging.getLogger(__name__)


@system_tool(
    id="generate_chart_template",
    name="Generate Chart Template",
    description="Generate a chart data template (labels + datasets) from row field names.",
    category=ToolCategory.TEMPLATES,
    input_schema={
        "type": "object",
        "properties": {
            "labelField": {"type": "string", "description": "Row field used for labels"},
            "valueFields": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Row fields, one dataset each",
            },
            "datasetLabels": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Optional dataset labels (default: the field names)",
            },
        },
        "required": ["labelField", "valueFields"],
    },
)
async def generate_chart_template(
    context: Any,
    label_field: str,
    value_fields: list[str],
    dataset_labels: list[str] | None = None,
) -> ToolResponse:
    """Generate a chart data template."""
    try:
        template = create_chart_data_template(label_field, value_fields, dataset_labels)
    except (TypeError, ValueError) as e:
        return error_result(f"Failed to generate chart template: {e}")

    return success_result("Chart template generated successfully", {"template": template})


@system_tool(
    id="generate_table_template",
    name="Generate Table Template",
    description="Generate a table data template (columns + rows) from column descriptors.",
    category=ToolCategory.TEMPLATES,
    input_schema={
        "type": "object",
        "properties": {
            "columns": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "key": {"type": "string"},
                        "label": {"type": "string"},
                    },
                    "required": ["key", "label"],
                },
                "description": "Column descriptors",
            },
        },
        "required": ["columns"],
    },
)
async def generate_table_template(context: Any, columns: list[dict[str, Any]]) -> ToolResponse:
    """Generate a table data template."""
    try:
        template = create_table_data_template(columns)
    except (KeyError, TypeError) as e:
        return error_result(f"Failed to generate table template: columns need a key ({e})")

    return success_result("Table template generated successfully", {"template": template})


@system_tool(
    id="generate_stat_card_template",
    name="Generate Stat Card Template",
    description="Generate a stat card template from the first row's value, label and trend fields.",
    category=ToolCategory.TEMPLATES,
    input_schema={
        "type": "object",
        "properties": {
            "valueField": {"type": "string", "description": "Row field holding the value"},
            "labelField": {"type": "string", "description": "Optional row field for the label"},
            "trendField": {"type": "string", "description": "Optional row field for the trend"},
        },
        "required": ["valueField"],
    },
)
async def generate_stat_card_template(
    context: Any,
    value_field: str,
    label_field: str | None = None,
    trend_field: str | None = None,
) -> ToolResponse:
    """Generate a stat card template."""
    template = create_stat_card_template(value_field, label_field, trend_field)
    return success_result("Stat card template generated successfully", {"template": template})
