"""
Dashboard Builder Models

Pydantic contracts (dashboard state, component payloads, tool results):
    from dashboard_builder.models import DashboardState, DashboardComponent
    from dashboard_builder.models.contracts.dashboard import GridLayout  # Granular access
"""

from dashboard_builder.models.contracts.component_data import (
    PAYLOAD_MODELS,
    ChartData,
    GaugeData,
    HeatmapData,
    MetricCardData,
    StatCardData,
    TableData,
    parse_component_data,
)
from dashboard_builder.models.contracts.dashboard import (
    COMPONENT_TYPES,
    CacheConfig,
    ComponentDataConfig,
    ComponentMetadata,
    ComponentSummary,
    DashboardComponent,
    DashboardMetadata,
    DashboardState,
    GraphQLSource,
    GridLayout,
    GridStats,
    GridValidationResult,
    PostgreSQLSource,
    PostgresSchema,
    PostgresTable,
    QueryTransform,
    StaticSource,
    TemplateTransform,
)
from dashboard_builder.models.contracts.tools import ToolDefinition, ToolResponse

__all__ = [
    # Component payloads
    "PAYLOAD_MODELS",
    "ChartData",
    "GaugeData",
    "HeatmapData",
    "MetricCardData",
    "StatCardData",
    "TableData",
    "parse_component_data",
    # Dashboard state
    "COMPONENT_TYPES",
    "CacheConfig",
    "ComponentDataConfig",
    "ComponentMetadata",
    "ComponentSummary",
    "DashboardComponent",
    "DashboardMetadata",
    "DashboardState",
    "GraphQLSource",
    "GridLayout",
    "GridStats",
    "GridValidationResult",
    "PostgreSQLSource",
    "PostgresSchema",
    "PostgresTable",
    "QueryTransform",
    "StaticSource",
    "TemplateTransform",
    # Tools
    "ToolDefinition",
    "ToolResponse",
]
