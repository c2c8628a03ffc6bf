"""
Core Exceptions

Custom exceptions for the dashboard builder.

Validation errors are raised by DashboardService before any state change and
converted to error ToolResponses by the tool layer. Transform errors are
raised by the DataFetcher and surface as a component fetch error.
"""


class DashboardError(Exception):
    """Base class for all dashboard builder errors."""

    def __init__(self, message: str = "Dashboard error"):
        self.message = message
        super().__init__(self.message)


class DashboardValidationError(DashboardError):
    """
    Raised when a mutation is rejected before it is applied.

    Covers bad grid layouts, invalid or occupied grid areas, duplicate ids
    and updates that would break a state invariant.
    """


class ComponentNotFoundError(DashboardValidationError):
    """Raised when a component id does not exist in the dashboard."""

    def __init__(self, component_id: str):
        self.component_id = component_id
        super().__init__(f'Component "{component_id}" not found')


class SchemaNotConfiguredError(DashboardValidationError):
    """Raised when a schema query runs before set_postgres_schema."""

    def __init__(self, message: str = "No PostgreSQL schema configured"):
        super().__init__(message)


class PathError(DashboardError):
    """Raised when a path-addressed write cannot be applied."""


class DataFetchError(DashboardError):
    """Raised when component data cannot be produced."""


class TransformError(DataFetchError):
    """Raised when a post-processing step fails."""


class TemplateTransformError(TransformError):
    """Template compile or render failure."""


class QueryTransformError(TransformError):
    """Row-set query failure."""
