"""
Dashboard Service

Owns the single live DashboardState of a session and is its only writer.

Every mutation reads one snapshot of the state, builds a new state and swaps
it in. Rejected mutations raise DashboardValidationError before the swap,
so a reader never observes a partially applied change. Models are treated
as immutable: updates go through model_copy / model_validate, never
attribute assignment on live objects.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import ValidationError

from dashboard_builder.core.exceptions import (
    ComponentNotFoundError,
    DashboardError,
    DashboardValidationError,
    DataFetchError,
    PathError,
    SchemaNotConfiguredError,
)
from dashboard_builder.models.contracts.base import utc_now_iso
from dashboard_builder.models.contracts.dashboard import (
    DashboardComponent,
    DashboardState,
    GridLayout,
    PostgresSchema,
    PostgresTable,
)
from dashboard_builder.services.data_fetcher import (
    DataFetcher,
    describe_soft_error,
    is_soft_error,
)
from dashboard_builder.services.grid_layout import (
    extract_grid_areas,
    find_component_in_area,
    is_valid_grid_area,
    normalize_template_areas,
    validate_grid_layout,
)
from dashboard_builder.services.json_path import set_value_at_path

logger = logging.getLogger(__name__)

StateListener = Callable[[DashboardState], None]

# Marks "leave component.data as is" in fetch bookkeeping; None is a valid payload
_UNSET: Any = object()


@dataclass
class RefreshSummary:
    """Outcome of refresh_all_components."""

    refreshed_count: int = 0
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "refreshedCount": self.refreshed_count,
            "succeeded": self.succeeded,
            "failed": self.failed,
        }


def _format_validation_error(prefix: str, error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in error.errors()
    )
    return f"{prefix}: {details}"


def _camel_key(key: str) -> str:
    """grid_area -> gridArea; camelCase keys pass through."""
    if "_" not in key:
        return key
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def check_state_invariants(state: DashboardState) -> list[str]:
    """Return invariant violations for a state (empty when consistent)."""
    errors: list[str] = []
    areas = set(extract_grid_areas(state.grid.template_areas))
    owners: dict[str, str] = {}
    for component in state.components.values():
        if component.grid_area not in areas:
            errors.append(
                f'Component "{component.id}" is in unknown grid area "{component.grid_area}"'
            )
        elif component.grid_area in owners:
            errors.append(
                f'Grid area "{component.grid_area}" is used by both '
                f'"{owners[component.grid_area]}" and "{component.id}"'
            )
        else:
            owners[component.grid_area] = component.id
    return errors


class DashboardService:
    """
    State owner and mutation entry point for one dashboard.

    Usage:
        service = DashboardService()
        service.set_grid_layout({"columns": "1fr 1fr", "rows": "auto 1fr",
                                 "gap": "16px", "templateAreas": ["h h", "a b"]})
        service.create_component({"id": "c1", "type": "table", "gridArea": "a", ...})
        await service.fetch_component_data("c1")
    """

    def __init__(
        self,
        state: DashboardState | None = None,
        fetcher: DataFetcher | None = None,
    ):
        self._state = state or DashboardState()
        self._fetcher = fetcher or DataFetcher.from_settings()
        self._listeners: list[StateListener] = []

    # =========================================================================
    # State access
    # =========================================================================

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def fetcher(self) -> DataFetcher:
        return self._fetcher

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback run after every committed change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, new_state: DashboardState) -> None:
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def replace_state(self, state: DashboardState) -> None:
        """
        Replace the whole state (session restore).

        Raises:
            DashboardValidationError: The state violates a layout invariant
        """
        errors = check_state_invariants(state)
        if errors:
            raise DashboardValidationError(f"Invalid dashboard state: {', '.join(errors)}")
        self._commit(state)

    def _require(self, component_id: str) -> DashboardComponent:
        component = self._state.components.get(component_id)
        if component is None:
            raise ComponentNotFoundError(component_id)
        return component

    def _put_component(self, state: DashboardState, component: DashboardComponent) -> DashboardState:
        return state.model_copy(
            update={"components": {**state.components, component.id: component}}
        )

    # =========================================================================
    # Grid
    # =========================================================================

    def set_grid_layout(self, layout: GridLayout | dict[str, Any]) -> GridLayout:
        """
        Replace the grid layout.

        Raises:
            DashboardValidationError: Invalid layout, or components would be
                left in areas missing from the new layout
        """
        raw = layout.to_dict() if isinstance(layout, GridLayout) else dict(layout)
        template_areas = raw.get("templateAreas", raw.get("template_areas"))
        if isinstance(template_areas, (list, tuple)):
            raw["templateAreas"] = normalize_template_areas(template_areas)
            raw.pop("template_areas", None)

        validation = validate_grid_layout(raw)
        if not validation.valid:
            raise DashboardValidationError(f"Invalid grid layout: {', '.join(validation.errors)}")

        new_grid = GridLayout.model_validate(raw)
        current = self._state
        new_areas = extract_grid_areas(new_grid.template_areas)

        orphaned = [c for c in current.components.values() if c.grid_area not in new_areas]
        if orphaned:
            raise DashboardValidationError(
                f"Cannot update grid layout: {len(orphaned)} component(s) would be orphaned. "
                f"Components in areas: {', '.join(c.grid_area for c in orphaned)} "
                f"({', '.join(c.id for c in orphaned)}) "
                f"which are not in new grid areas: {', '.join(new_areas)}"
            )

        self._commit(current.model_copy(update={"grid": new_grid}))
        logger.info(f"Grid layout set with {len(new_areas)} areas")
        return new_grid

    # =========================================================================
    # Components
    # =========================================================================

    def create_component(self, spec: dict[str, Any]) -> DashboardComponent:
        """
        Create a component in a free grid area.

        Metadata is always generated here (fetchStatus=idle, createdAt=now).

        Raises:
            DashboardValidationError: Invalid fields, duplicate id, unknown
                or occupied grid area
        """
        fields = {_camel_key(k): v for k, v in spec.items() if _camel_key(k) != "metadata"}
        if fields.get("data") is None:
            fields.pop("data", None)
        fields["metadata"] = {"createdAt": utc_now_iso(), "fetchStatus": "idle"}

        try:
            component = DashboardComponent.model_validate(fields)
        except ValidationError as e:
            raise DashboardValidationError(_format_validation_error("Invalid component", e)) from e

        current = self._state
        if component.id in current.components:
            raise DashboardValidationError(
                f'Component with ID "{component.id}" already exists. '
                f"Use update_component to modify it."
            )

        if not is_valid_grid_area(component.grid_area, current.grid.template_areas):
            available = extract_grid_areas(current.grid.template_areas)
            raise DashboardValidationError(
                f'Grid area "{component.grid_area}" not found in template areas. '
                f"Available areas: {', '.join(available) or '(none - set a grid layout first)'}"
            )

        occupant = find_component_in_area(component.grid_area, current.components)
        if occupant is not None:
            raise DashboardValidationError(
                f'Grid area "{component.grid_area}" is already occupied by component '
                f'"{occupant.id}". Remove it first or choose a different grid area.'
            )

        self._commit(self._put_component(current, component))
        logger.info(f"Created {component.type} component {component.id} in {component.grid_area}")
        return component

    def update_component(
        self,
        component_id: str,
        updates: Any = None,
        path: str | None = None,
    ) -> DashboardComponent:
        """
        Update a component.

        With `path`, `updates` is written at that path of the component
        record (e.g. "$.data.rows[0].total"). Without it, `updates` is
        shallow-merged into the component and metadata.updatedAt stamped.

        Raises:
            ComponentNotFoundError: Unknown id
            DashboardValidationError: The result is not a valid component,
                changes the id, or moves it to an unknown or occupied area
        """
        current = self._state
        component = current.components.get(component_id)
        if component is None:
            raise ComponentNotFoundError(component_id)

        record = component.to_dict()

        if path:
            try:
                new_record = set_value_at_path(record, path, updates)
            except PathError as e:
                raise DashboardValidationError(e.message) from e
            if not isinstance(new_record, dict) or new_record.get("id") != component_id:
                raise DashboardValidationError("Component id cannot be changed")
        else:
            if not isinstance(updates, dict):
                raise DashboardValidationError("updates must be an object when no path is given")
            new_record = {
                **record,
                **{_camel_key(k): v for k, v in updates.items()},
                "id": component_id,
                "metadata": {**record["metadata"], "updatedAt": utc_now_iso()},
            }

        try:
            updated = DashboardComponent.model_validate(new_record)
        except ValidationError as e:
            raise DashboardValidationError(_format_validation_error("Invalid component update", e)) from e

        if updated.grid_area != component.grid_area:
            if not is_valid_grid_area(updated.grid_area, current.grid.template_areas):
                raise DashboardValidationError(
                    f'Grid area "{updated.grid_area}" not found in template areas'
                )
            occupant = find_component_in_area(updated.grid_area, current.components, exclude_id=component_id)
            if occupant is not None:
                raise DashboardValidationError(
                    f'Grid area "{updated.grid_area}" is already occupied by component "{occupant.id}"'
                )

        self._commit(self._put_component(current, updated))
        logger.debug(f"Updated component {component_id}" + (f" at {path}" if path else ""))
        return updated

    def remove_component(self, component_id: str) -> DashboardComponent:
        current = self._state
        component = current.components.get(component_id)
        if component is None:
            raise ComponentNotFoundError(component_id)

        remaining = {k: v for k, v in current.components.items() if k != component_id}
        self._commit(current.model_copy(update={"components": remaining}))
        self._fetcher.clear_cache(component_id)
        logger.info(f"Removed component {component_id}")
        return component

    def get_component(self, component_id: str) -> DashboardComponent:
        return self._require(component_id)

    # =========================================================================
    # Data fetching
    # =========================================================================

    def _update_fetch_state(self, component_id: str, data: Any = _UNSET, **metadata: Any) -> None:
        """
        Apply fetch bookkeeping to the latest state.

        A component removed while its fetch was in flight stays removed.
        """
        current = self._state
        component = current.components.get(component_id)
        if component is None:
            return

        update: dict[str, Any] = {"metadata": component.metadata.model_copy(update=metadata)}
        if data is not _UNSET:
            update["data"] = data
        self._commit(self._put_component(current, component.model_copy(update=update)))

    def _record_success(self, component_id: str, data: Any) -> None:
        self._update_fetch_state(
            component_id,
            data=data,
            fetch_status="success",
            last_fetched_at=utc_now_iso(),
            error=None,
        )

    def _record_failure(self, component_id: str, message: str) -> None:
        self._update_fetch_state(component_id, fetch_status="error", error=message)

    async def fetch_component_data(self, component_id: str) -> Any:
        """
        Fetch data for one component and store it.

        On failure the component keeps its previous data and gets
        fetchStatus=error with the error message.

        Raises:
            ComponentNotFoundError: Unknown id
            DataFetchError: The source failed or a transform failed
        """
        component = self._require(component_id)
        self._update_fetch_state(component_id, fetch_status="loading")

        try:
            data = await self._fetcher.fetch_data(
                component_id, component.data_config, self._state.graphql_endpoint
            )
        except DashboardError as e:
            self._record_failure(component_id, e.message)
            raise
        except Exception as e:
            self._record_failure(component_id, str(e) or type(e).__name__)
            raise

        if is_soft_error(data):
            message = describe_soft_error(data)
            self._record_failure(component_id, message)
            raise DataFetchError(message)

        self._record_success(component_id, data)
        return data

    async def refresh_all_components(self) -> RefreshSummary:
        """
        Fetch every component concurrently.

        Each fetch settles independently; results are applied per component
        id, so one failing source does not affect the others.
        """
        snapshot = self._state
        component_ids = list(snapshot.components)

        for component_id in component_ids:
            self._update_fetch_state(component_id, fetch_status="loading")

        results = await asyncio.gather(
            *(
                self._fetcher.fetch_data(
                    component_id,
                    snapshot.components[component_id].data_config,
                    snapshot.graphql_endpoint,
                )
                for component_id in component_ids
            ),
            return_exceptions=True,
        )

        summary = RefreshSummary(refreshed_count=len(component_ids))
        for component_id, result in zip(component_ids, results):
            if isinstance(result, BaseException):
                message = result.message if isinstance(result, DashboardError) else str(result)
                message = message or type(result).__name__
            elif is_soft_error(result):
                message = describe_soft_error(result)
            else:
                self._record_success(component_id, result)
                summary.succeeded.append(component_id)
                continue

            logger.warning(f"Refresh failed for component {component_id}: {message}")
            self._record_failure(component_id, message)
            summary.failed[component_id] = message

        logger.info(
            f"Refreshed {summary.refreshed_count} components "
            f"({len(summary.failed)} failed)"
        )
        return summary

    def clear_cache(self, component_id: str | None = None) -> None:
        if component_id is not None:
            self._require(component_id)
        self._fetcher.clear_cache(component_id)

    # =========================================================================
    # Schema and endpoints
    # =========================================================================

    def set_postgres_schema(self, schema: PostgresSchema | dict[str, Any]) -> PostgresSchema:
        try:
            parsed = schema if isinstance(schema, PostgresSchema) else PostgresSchema.model_validate(schema)
        except ValidationError as e:
            raise DashboardValidationError(_format_validation_error("Invalid schema", e)) from e

        self._commit(self._state.model_copy(update={"postgres_schema": parsed}))
        logger.info(f"PostgreSQL schema set with {len(parsed.tables)} tables")
        return parsed

    def get_postgres_schema(self) -> PostgresSchema:
        schema = self._state.postgres_schema
        if schema is None:
            raise SchemaNotConfiguredError()
        return schema

    def query_postgres_schema(
        self,
        schema_name: str | None = None,
        table_name: str | None = None,
    ) -> PostgresTable | list[PostgresTable] | list[Any]:
        """
        Look up a table (optionally within a schema), all tables of a
        schema, or the schema list when neither is given.

        Raises:
            SchemaNotConfiguredError: No schema stored
            DashboardValidationError: Named table not found
        """
        schema = self.get_postgres_schema()

        if table_name:
            for table in schema.tables:
                if table.name == table_name and (not schema_name or table.schema_name == schema_name):
                    return table
            raise DashboardValidationError(f'Table "{table_name}" not found in schema')

        if schema_name:
            return [t for t in schema.tables if t.schema_name == schema_name]

        return schema.schemas

    def set_graphql_endpoint(self, endpoint: str) -> str:
        if not isinstance(endpoint, str) or not endpoint.strip():
            raise DashboardValidationError("endpoint must be a non-empty string")
        endpoint = endpoint.strip()
        self._commit(self._state.model_copy(update={"graphql_endpoint": endpoint}))
        return endpoint
