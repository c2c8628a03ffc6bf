"""
Pytest fixtures for dashboard builder tests.

This module provides:
1. Settings isolation (cached settings cleared around each test)
2. A standard header/sidebar/main grid
3. A DashboardService whose HTTP sources are unreachable
"""

import httpx
import pytest

from dashboard_builder.config import get_settings
from dashboard_builder.models.contracts.dashboard import DashboardState, GridLayout
from dashboard_builder.services.dashboard_service import DashboardService
from dashboard_builder.services.data_fetcher import DataFetcher


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings are lru_cached; clear so env patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def grid_layout() -> GridLayout:
    return GridLayout(
        columns="200px 1fr",
        rows="auto 1fr",
        gap="16px",
        template_areas=["header header", "sidebar main"],
    )


@pytest.fixture
def offline_transport() -> httpx.MockTransport:
    """Transport that fails every request as unreachable."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def service(grid_layout, offline_transport) -> DashboardService:
    """Service with the header/sidebar/main grid and no components."""
    fetcher = DataFetcher(
        postgres_endpoint="http://db.test/query",
        transport=offline_transport,
    )
    return DashboardService(state=DashboardState(grid=grid_layout), fetcher=fetcher)
