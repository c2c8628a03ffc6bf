"""
Debounced Autosave

Saves the most recent dashboard state once changes stop arriving for the
debounce delay. Each schedule() cancels the pending save and starts a new
timer, so a burst of changes produces a single write.
"""

import asyncio
import logging

from dashboard_builder.config import get_settings
from dashboard_builder.core.snapshot_store import LATEST_VERSION, DashboardSnapshotStore
from dashboard_builder.models.contracts.dashboard import DashboardState

logger = logging.getLogger(__name__)


class DebouncedAutosaver:
    """
    Usage:
        saver = DebouncedAutosaver(store, session_id)
        service.subscribe(saver.schedule)
        ...
        await saver.flush()
    """

    def __init__(
        self,
        store: DashboardSnapshotStore,
        session_id: str,
        *,
        delay_seconds: float | None = None,
        version_tag: str = LATEST_VERSION,
    ):
        self.store = store
        self.session_id = session_id
        self.delay_seconds = (
            delay_seconds if delay_seconds is not None else get_settings().autosave_debounce_seconds
        )
        self.version_tag = version_tag
        self._pending_state: DashboardState | None = None
        self._task: asyncio.Task[None] | None = None
        self._write_task: asyncio.Task[None] | None = None
        self._write_lock = asyncio.Lock()

    @property
    def has_pending(self) -> bool:
        return any(task is not None and not task.done() for task in (self._task, self._write_task))

    def schedule(self, state: DashboardState) -> None:
        """Record the latest state and restart the debounce timer."""
        self._pending_state = state
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(
            self._save_after_delay(),
            name=f"dashboard-autosave-{self.session_id}",
        )

    async def _save_after_delay(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        # Once started, a write outlives the timer that launched it
        self._write_task = asyncio.create_task(
            self._save_pending(),
            name=f"dashboard-autosave-write-{self.session_id}",
        )
        await asyncio.shield(self._write_task)

    async def _save_pending(self) -> None:
        async with self._write_lock:
            state = self._pending_state
            if state is None:
                return
            self._pending_state = None
            try:
                await self.store.save_dashboard_version(self.session_id, self.version_tag, state)
                logger.debug(f"Autosaved dashboard {self.session_id}")
            except Exception as e:
                # Keep the state so the next flush retries it
                if self._pending_state is None:
                    self._pending_state = state
                logger.error(f"Autosave failed for dashboard {self.session_id}: {e}")

    async def _stop_timer(self) -> None:
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _wait_for_write(self) -> None:
        task, self._write_task = self._write_task, None
        if task is not None:
            await task

    async def cancel(self) -> None:
        """Drop the pending save without writing it. A write already under way completes."""
        self._pending_state = None
        await self._stop_timer()
        await self._wait_for_write()

    async def flush(self) -> None:
        """Write the pending state now instead of waiting for the timer."""
        await self._stop_timer()
        await self._wait_for_write()
        await self._save_pending()
