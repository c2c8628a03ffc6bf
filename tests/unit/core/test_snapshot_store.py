"""Unit tests for the Redis dashboard snapshot store."""

import json
from unittest.mock import AsyncMock

import pytest

from dashboard_builder.core.exceptions import DashboardError
from dashboard_builder.core.snapshot_store import (
    LATEST_VERSION,
    DashboardSnapshotStore,
    snapshot_key,
)
from dashboard_builder.models.contracts.dashboard import DashboardState


def make_fake_redis() -> AsyncMock:
    """AsyncMock Redis backed by a dict, enough for get/set/exists/sadd/smembers."""
    data: dict[str, str] = {}
    sets: dict[str, set[str]] = {}
    mock_redis = AsyncMock()

    async def _set(key, value, ex=None):
        data[key] = value
        return True

    async def _sadd(key, *members):
        sets.setdefault(key, set()).update(members)
        return len(members)

    mock_redis.set = AsyncMock(side_effect=_set)
    mock_redis.get = AsyncMock(side_effect=lambda key: data.get(key))
    mock_redis.exists = AsyncMock(side_effect=lambda key: int(key in data))
    mock_redis.sadd = AsyncMock(side_effect=_sadd)
    mock_redis.smembers = AsyncMock(side_effect=lambda key: set(sets.get(key, set())))
    mock_redis.data = data
    return mock_redis


@pytest.fixture
def dashboard_state() -> DashboardState:
    return DashboardState.model_validate(
        {
            "grid": {"columns": "1fr", "rows": "auto", "gap": "8px", "templateAreas": ["main"]},
            "components": {
                "c1": {
                    "id": "c1",
                    "type": "stat-card",
                    "gridArea": "main",
                    "title": "Orders",
                    "dataConfig": {
                        "source": {"type": "postgresql", "query": "SELECT 1", "schema": "sales"},
                        "queryTransform": {"query": "SELECT * FROM data"},
                    },
                    "data": {"value": 3, "label": "Orders"},
                }
            },
            "graphqlEndpoint": "http://gql.test/graphql",
        }
    )


class TestSnapshotKeys:
    """Tests for key layout."""

    def test_key_format(self):
        assert snapshot_key("s1", "v2") == "dashboard:snapshot:s1:v2"


class TestSaveAndLoad:
    """Tests for saving and loading versions."""

    @pytest.mark.asyncio
    async def test_round_trip_through_latest(self, dashboard_state):
        mock_redis = make_fake_redis()
        store = DashboardSnapshotStore(client=mock_redis)

        await store.save_dashboard_version("s1", "v1", dashboard_state)
        loaded = await store.load_latest_dashboard("s1")

        assert loaded == dashboard_state
        assert loaded.components["c1"].data_config.source.schema_name == "sales"

    @pytest.mark.asyncio
    async def test_stored_as_camel_case_json(self, dashboard_state):
        mock_redis = make_fake_redis()
        store = DashboardSnapshotStore(client=mock_redis)

        await store.save_dashboard_version("s1", "v1", dashboard_state)

        stored = json.loads(mock_redis.data["dashboard:snapshot:s1:v1"])
        assert stored["components"]["c1"]["gridArea"] == "main"
        assert stored["grid"]["templateAreas"] == ["main"]
        assert "dashboard:snapshot:s1:__latest" in mock_redis.data

    @pytest.mark.asyncio
    async def test_latest_tag_written_once(self, dashboard_state):
        mock_redis = make_fake_redis()
        store = DashboardSnapshotStore(client=mock_redis)

        await store.save_dashboard_version("s1", LATEST_VERSION, dashboard_state)

        assert mock_redis.set.await_count == 1

    @pytest.mark.asyncio
    async def test_ttl_passed_to_redis(self, dashboard_state):
        mock_redis = make_fake_redis()
        store = DashboardSnapshotStore(client=mock_redis, ttl_seconds=3600)

        await store.save_dashboard_version("s1", LATEST_VERSION, dashboard_state)

        assert mock_redis.set.await_args.kwargs["ex"] == 3600

    @pytest.mark.asyncio
    async def test_missing_session_returns_none(self):
        store = DashboardSnapshotStore(client=make_fake_redis())
        assert await store.load_latest_dashboard("nobody") is None

    @pytest.mark.asyncio
    async def test_has_version_and_list_versions(self, dashboard_state):
        store = DashboardSnapshotStore(client=make_fake_redis())
        await store.save_dashboard_version("s1", "v2", dashboard_state)
        await store.save_dashboard_version("s1", "v1", dashboard_state)

        assert await store.has_version("s1", "v1") is True
        assert await store.has_version("s1", "v9") is False
        assert await store.list_versions("s1") == ["v1", "v2"]

    @pytest.mark.asyncio
    async def test_corrupt_snapshot_raises(self):
        mock_redis = make_fake_redis()
        mock_redis.data[snapshot_key("s1", LATEST_VERSION)] = '{"components": 5}'
        store = DashboardSnapshotStore(client=mock_redis)

        with pytest.raises(DashboardError):
            await store.load_latest_dashboard("s1")

    @pytest.mark.asyncio
    async def test_save_failure_propagates(self, dashboard_state):
        mock_redis = make_fake_redis()
        mock_redis.set = AsyncMock(side_effect=ConnectionError("redis down"))
        store = DashboardSnapshotStore(client=mock_redis)

        with pytest.raises(ConnectionError):
            await store.save_dashboard_version("s1", "v1", dashboard_state)
