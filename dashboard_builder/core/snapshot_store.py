"""
Dashboard Snapshot Store

Persists versions of a session's DashboardState in Redis as JSON.

Keys:
    dashboard:snapshot:{session_id}:{version_tag}   - serialized state
    dashboard:snapshot:{session_id}:versions        - set of saved tags

Every save also writes the "__latest" tag, which load_latest_dashboard reads.
"""

import logging

import redis.asyncio as redis
from pydantic import ValidationError

from dashboard_builder.config import get_settings
from dashboard_builder.core.exceptions import DashboardError
from dashboard_builder.models.contracts.dashboard import DashboardState

logger = logging.getLogger(__name__)

# Redis key prefix
SNAPSHOT_KEY_PREFIX = "dashboard:snapshot:"
VERSIONS_KEY_SUFFIX = ":versions"

LATEST_VERSION = "__latest"


def snapshot_key(session_id: str, version_tag: str) -> str:
    return f"{SNAPSHOT_KEY_PREFIX}{session_id}:{version_tag}"


def versions_key(session_id: str) -> str:
    return f"{SNAPSHOT_KEY_PREFIX}{session_id}{VERSIONS_KEY_SUFFIX}"


class DashboardSnapshotStore:
    """
    Redis-backed key-value store for dashboard versions.

    Usage:
        store = DashboardSnapshotStore()
        await store.save_dashboard_version(session_id, "v1", state)
        state = await store.load_latest_dashboard(session_id)
    """

    def __init__(self, client: redis.Redis | None = None, ttl_seconds: int | None = None):
        self._redis = client
        self._ttl_seconds = ttl_seconds if ttl_seconds is not None else get_settings().snapshot_ttl_seconds

    async def _get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            settings = get_settings()
            self._redis = redis.from_url(
                settings.redis_url,
                decode_responses=True,
            )
        return self._redis

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def save_dashboard_version(
        self,
        session_id: str,
        version_tag: str,
        state: DashboardState,
    ) -> None:
        """
        Save a state under a version tag and as the session's latest version.

        Args:
            session_id: Dashboard session
            version_tag: Version name (e.g. "v3" or "__latest")
            state: State to serialize
        """
        redis_client = await self._get_redis()
        payload = state.model_dump_json(by_alias=True)

        tags = [version_tag] if version_tag == LATEST_VERSION else [version_tag, LATEST_VERSION]
        try:
            for tag in tags:
                await redis_client.set(snapshot_key(session_id, tag), payload, ex=self._ttl_seconds)
            await redis_client.sadd(versions_key(session_id), version_tag)
            logger.debug(f"Saved dashboard {session_id} version {version_tag}")
        except Exception as e:
            logger.error(f"Failed to save dashboard {session_id} version {version_tag}: {e}")
            raise

    async def load_dashboard_version(
        self,
        session_id: str,
        version_tag: str,
    ) -> DashboardState | None:
        """
        Load a saved version.

        Returns:
            The stored state, or None if the version does not exist

        Raises:
            DashboardError: The stored snapshot is not a valid dashboard
        """
        redis_client = await self._get_redis()
        data = await redis_client.get(snapshot_key(session_id, version_tag))
        if data is None:
            return None

        try:
            return DashboardState.model_validate_json(data)
        except ValidationError as e:
            logger.error(f"Invalid snapshot for dashboard {session_id} version {version_tag}: {e}")
            raise DashboardError(
                f"Stored dashboard {session_id} version {version_tag} is invalid"
            ) from e

    async def load_latest_dashboard(self, session_id: str) -> DashboardState | None:
        return await self.load_dashboard_version(session_id, LATEST_VERSION)

    async def has_version(self, session_id: str, version_tag: str) -> bool:
        redis_client = await self._get_redis()
        return bool(await redis_client.exists(snapshot_key(session_id, version_tag)))

    async def list_versions(self, session_id: str) -> list[str]:
        """Saved version tags for a session, sorted."""
        redis_client = await self._get_redis()
        members = await redis_client.smembers(versions_key(session_id))
        return sorted(members)
