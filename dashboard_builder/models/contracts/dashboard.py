"""
Dashboard state contract models.

This module is the single source of truth for:
- Grid layout (GridLayout)
- Components and their metadata (DashboardComponent, ComponentMetadata)
- Data source descriptors (ComponentDataConfig and the DataSource union)
- The root aggregate (DashboardState)
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union, get_args

from pydantic import AliasChoices, ConfigDict, Field, model_validator

from dashboard_builder.models.contracts.base import CamelModel, utc_now_iso


# -----------------------------------------------------------------------------
# Literal Types
# -----------------------------------------------------------------------------

ComponentType = Literal[
    "chart",
    "table",
    "stat-card",
    "metric-card",
    "gauge",
    "heatmap",
]

FetchStatus = Literal["idle", "loading", "success", "error"]

COMPONENT_TYPES: tuple[str, ...] = get_args(ComponentType)


# -----------------------------------------------------------------------------
# Data Source Descriptors
# -----------------------------------------------------------------------------


class PostgreSQLSource(CamelModel):
    """SQL query forwarded to the query execution endpoint."""

    type: Literal["postgresql"] = Field(default="postgresql", description="Source type")
    query: str = Field(description="SQL query text")
    params: Any | None = Field(default=None, description="Query parameters")
    schema_name: str | None = Field(
        default=None, alias="schema", description="Database schema to run against"
    )


class GraphQLSource(CamelModel):
    """GraphQL query posted to an endpoint."""

    type: Literal["graphql"] = Field(default="graphql", description="Source type")
    query: str = Field(description="GraphQL query document")
    variables: dict[str, Any] | None = Field(default=None, description="Query variables")
    endpoint: str | None = Field(
        default=None, description="Endpoint override (defaults to the dashboard endpoint)"
    )


class StaticSource(CamelModel):
    """Inline data returned verbatim."""

    type: Literal["static"] = Field(default="static", description="Source type")
    data: Any = Field(default=None, description="Static payload")


DataSource = Annotated[
    Union[PostgreSQLSource, GraphQLSource, StaticSource],
    Field(discriminator="type"),
]


class TemplateTransform(CamelModel):
    """Template applied to the fetched data (rendered with `data` in context)."""

    template: str = Field(description="Template source")
    context: dict[str, Any] | None = Field(
        default=None, description="Extra variables merged into the template context"
    )


class QueryTransform(CamelModel):
    """SQL query run over the fetched rows (exposed as table `data`)."""

    query: str = Field(description="SQL over the in-memory rows")
    params: Any | None = Field(default=None, description="Bound query parameters")


class CacheConfig(CamelModel):
    enabled: bool = Field(default=False, description="Cache fetched data per component")
    ttl: int | None = Field(default=None, ge=0, description="Cache TTL in milliseconds")


class ComponentDataConfig(CamelModel):
    """Declarative description of where component data comes from."""

    source: DataSource
    template: TemplateTransform | None = Field(
        default=None,
        validation_alias=AliasChoices("template", "handlebarsTemplate"),
        serialization_alias="template",
    )
    query_transform: QueryTransform | None = Field(
        default=None,
        validation_alias=AliasChoices("queryTransform", "query_transform", "alasqlTransform"),
        serialization_alias="queryTransform",
    )
    cache: CacheConfig | None = None


# -----------------------------------------------------------------------------
# Components
# -----------------------------------------------------------------------------


class ComponentMetadata(CamelModel):
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str | None = None
    fetch_status: FetchStatus = "idle"
    last_fetched_at: str | None = None
    error: str | None = None


class DashboardComponent(CamelModel):
    """A single dashboard unit bound to one grid area and one data source."""

    model_config = ConfigDict(extra="forbid")  # Reject unknown fields

    id: str = Field(min_length=1, description="Unique component identifier")
    type: ComponentType = Field(description="Component type")
    grid_area: str = Field(description="Grid area the component occupies")
    title: str = Field(default="", description="Display title")
    description: str | None = Field(default=None, description="Display description")
    data_config: ComponentDataConfig = Field(description="Data source descriptor")
    data: Any = Field(default_factory=dict, description="Last fetched or manually set payload")
    options: Any | None = Field(default=None, description="Presentational options")
    style: dict[str, Any] | None = Field(default=None, description="Style overrides")
    metadata: ComponentMetadata = Field(default_factory=ComponentMetadata)


class ComponentSummary(CamelModel):
    id: str
    type: ComponentType
    grid_area: str
    title: str


# -----------------------------------------------------------------------------
# Grid
# -----------------------------------------------------------------------------


class GridLayout(CamelModel):
    """CSS-grid style layout: track sizes plus named template areas."""

    columns: str = Field(default="", description="grid-template-columns value")
    rows: str = Field(default="", description="grid-template-rows value")
    gap: str = Field(default="16px", description="Gap between cells")
    template_areas: list[str] = Field(
        default_factory=list,
        description='Row templates, e.g. ["header header", "sidebar main"]',
    )


class GridStats(CamelModel):
    total_areas: int
    used_areas: int
    available_areas: int
    available_area_names: list[str]


class GridValidationResult(CamelModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# PostgreSQL Schema Snapshot
# -----------------------------------------------------------------------------


class PostgresTable(CamelModel):
    """Introspected table. Unknown keys from the introspection are kept."""

    model_config = ConfigDict(extra="allow")

    name: str
    schema_name: str | None = Field(default=None, alias="schema")
    columns: list[Any] = Field(default_factory=list)


class PostgresSchema(CamelModel):
    model_config = ConfigDict(extra="allow")

    schemas: list[Any] = Field(default_factory=list)
    tables: list[PostgresTable] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Dashboard State
# -----------------------------------------------------------------------------


class DashboardMetadata(CamelModel):
    name: str = "New Dashboard"
    description: str = "Ask AI to create your dashboard"
    created_at: str = Field(default_factory=utc_now_iso)


class DashboardState(CamelModel):
    """Root aggregate: the single live dashboard of a session."""

    grid: GridLayout = Field(default_factory=GridLayout)
    components: dict[str, DashboardComponent] = Field(default_factory=dict)
    metadata: DashboardMetadata = Field(default_factory=DashboardMetadata)
    postgres_schema: PostgresSchema | None = None
    graphql_endpoint: str | None = None

    @model_validator(mode="after")
    def _keys_match_ids(self) -> "DashboardState":
        for key, component in self.components.items():
            if key != component.id:
                raise ValueError(
                    f'Component key "{key}" does not match component id "{component.id}"'
                )
        return self
