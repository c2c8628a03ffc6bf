"""
Data Fetcher

Resolves a component's data source into data:

1. Source resolution (postgresql / graphql / static)
2. Template transform (optional)
3. Query transform (optional)
4. Per-component caching with a TTL

Source failures (endpoint missing, non-2xx, timeout, transport error) are
returned as a soft error value {"error": reason} so a broken source only
degrades its own component. Transform failures raise TransformError.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from dashboard_builder.config import get_settings
from dashboard_builder.core.exceptions import DataFetchError
from dashboard_builder.models.contracts.dashboard import (
    ComponentDataConfig,
    DataSource,
    GraphQLSource,
    PostgreSQLSource,
    StaticSource,
)
from dashboard_builder.services.row_query import RowSetQueryEngine, apply_query_transform
from dashboard_builder.services.templating import apply_template

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_MS = 60000


@dataclass
class CacheEntry:
    data: Any
    timestamp: float  # milliseconds


def _now_ms() -> float:
    return time.time() * 1000


def soft_error(reason: Any) -> dict[str, Any]:
    return {"error": reason}


def is_soft_error(value: Any) -> bool:
    """True for the {"error": ...} value produced by a failed source."""
    return isinstance(value, dict) and set(value) == {"error"}


def describe_soft_error(value: dict[str, Any]) -> str:
    """Human-readable message for a soft error value."""
    reason = value.get("error")
    if isinstance(reason, list):
        messages = [
            item.get("message", str(item)) if isinstance(item, dict) else str(item)
            for item in reason
        ]
        return "; ".join(messages) or "Unknown error"
    return str(reason) if reason else "Unknown error"


class DataFetcher:
    """
    Fetches and transforms component data.

    One instance per dashboard session; its cache is private to it.
    """

    def __init__(
        self,
        postgres_endpoint: str | None = None,
        graphql_endpoint: str | None = None,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        default_ttl_ms: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        query_engine: RowSetQueryEngine | None = None,
        clock: Callable[[], float] = _now_ms,
    ):
        settings = get_settings()
        self.postgres_endpoint = postgres_endpoint
        self.graphql_endpoint = graphql_endpoint
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds
        self.default_ttl_ms = (
            default_ttl_ms if default_ttl_ms is not None else DEFAULT_CACHE_TTL_MS
        )
        self._transport = transport
        self._query_engine = query_engine
        self._clock = clock
        self._cache: dict[str, CacheEntry] = {}

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "DataFetcher":
        """Create a fetcher configured from environment settings."""
        settings = get_settings()
        return cls(
            postgres_endpoint=settings.postgres_query_endpoint,
            graphql_endpoint=settings.graphql_endpoint,
            base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            default_ttl_ms=settings.cache_ttl_ms,
            **kwargs,
        )

    # =========================================================================
    # Public API
    # =========================================================================

    async def fetch_data(
        self,
        component_id: str,
        config: ComponentDataConfig,
        graphql_endpoint: str | None = None,
    ) -> Any:
        """
        Fetch data for a component according to its data config.

        Args:
            component_id: Cache key
            config: The component's data source descriptor
            graphql_endpoint: Dashboard-level GraphQL endpoint, used when the
                source does not name one

        Returns:
            Transformed data, or a soft error value if the source failed

        Raises:
            TransformError: A template or query transform failed
            DataFetchError: The source type is not supported
        """
        cache_enabled = bool(config.cache and config.cache.enabled)
        if cache_enabled:
            cached = self._get_from_cache(component_id, config.cache.ttl)  # type: ignore[union-attr]
            if cached is not None:
                logger.debug(f"Cache hit for component {component_id}")
                return cached.data

        data = await self.fetch_from_source(config.source, graphql_endpoint)

        if is_soft_error(data):
            # Nothing to transform; do not cache failures
            return data

        if config.template:
            data = apply_template(data, config.template.template, config.template.context)

        if config.query_transform:
            data = apply_query_transform(
                data,
                config.query_transform.query,
                config.query_transform.params,
                engine=self._query_engine,
            )

        if cache_enabled:
            self._set_cache(component_id, data)

        return data

    async def fetch_from_source(
        self, source: DataSource, graphql_endpoint: str | None = None
    ) -> Any:
        if isinstance(source, PostgreSQLSource):
            return await self._fetch_from_postgresql(source)
        if isinstance(source, GraphQLSource):
            return await self._fetch_from_graphql(source, graphql_endpoint)
        if isinstance(source, StaticSource):
            return source.data
        raise DataFetchError(f"Unknown data source type: {getattr(source, 'type', source)!r}")

    def clear_cache(self, component_id: str | None = None) -> None:
        """Clear the cache for one component, or all components."""
        if component_id:
            self._cache.pop(component_id, None)
        else:
            self._cache.clear()

    # =========================================================================
    # Sources
    # =========================================================================

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {"timeout": self.timeout_seconds}
        if self.base_url:
            kwargs["base_url"] = self.base_url
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def _post_json(self, endpoint: str, body: dict[str, Any]) -> httpx.Response | dict[str, Any]:
        """POST JSON; returns the response or a soft error value."""
        try:
            async with self._client() as client:
                response = await client.post(endpoint, json=body)
        except httpx.TimeoutException:
            logger.warning(f"Request to {endpoint} timed out after {self.timeout_seconds}s")
            return soft_error(f"Request timed out after {self.timeout_seconds}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Request to {endpoint} failed: {e}")
            return soft_error(str(e) or type(e).__name__)

        if not response.is_success:
            logger.warning(f"Request to {endpoint} failed: {response.status_code} {response.reason_phrase}")
            return soft_error(response.reason_phrase or f"HTTP {response.status_code}")

        return response

    async def _fetch_from_postgresql(self, source: PostgreSQLSource) -> Any:
        if not self.postgres_endpoint:
            logger.warning("PostgreSQL query endpoint not configured")
            return soft_error("PostgreSQL endpoint not configured")

        response = await self._post_json(
            self.postgres_endpoint,
            {"query": source.query, "params": source.params, "schema": source.schema_name},
        )
        if isinstance(response, dict):
            return response

        try:
            result = response.json()
        except ValueError as e:
            logger.warning(f"PostgreSQL endpoint returned invalid JSON: {e}")
            return soft_error("Invalid JSON response from PostgreSQL endpoint")

        if isinstance(result, dict) and "data" in result:
            return result["data"]
        return result

    async def _fetch_from_graphql(
        self, source: GraphQLSource, default_endpoint: str | None = None
    ) -> Any:
        endpoint = source.endpoint or default_endpoint or self.graphql_endpoint
        if not endpoint:
            logger.warning("GraphQL endpoint not configured")
            return soft_error("GraphQL endpoint not configured")

        response = await self._post_json(
            endpoint, {"query": source.query, "variables": source.variables}
        )
        if isinstance(response, dict):
            return response

        try:
            result = response.json()
        except ValueError as e:
            logger.warning(f"GraphQL endpoint returned invalid JSON: {e}")
            return soft_error("Invalid JSON response from GraphQL endpoint")

        if not isinstance(result, dict):
            return soft_error("Unexpected GraphQL response shape")

        if result.get("errors"):
            logger.warning(f"GraphQL errors: {result['errors']}")
            return soft_error(result["errors"])

        return result.get("data")

    # =========================================================================
    # Cache
    # =========================================================================

    def _get_from_cache(self, component_id: str, ttl: int | None) -> CacheEntry | None:
        entry = self._cache.get(component_id)
        if entry is None:
            return None

        max_age = ttl if ttl else self.default_ttl_ms
        if self._clock() - entry.timestamp > max_age:
            del self._cache[component_id]
            return None

        return entry

    def _set_cache(self, component_id: str, data: Any) -> None:
        self._cache[component_id] = CacheEntry(data=data, timestamp=self._clock())
