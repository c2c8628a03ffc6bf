"""
Dashboard Session

Wires one session together: restores the latest saved dashboard (or starts
an empty one), builds the DashboardService and tool context, and autosaves
every committed change.
"""

import logging
from dataclasses import dataclass

from dashboard_builder.core.snapshot_store import DashboardSnapshotStore
from dashboard_builder.services.autosave import DebouncedAutosaver
from dashboard_builder.services.dashboard_service import DashboardService
from dashboard_builder.services.data_fetcher import DataFetcher
from dashboard_builder.services.mcp_server.server import DashboardContext

logger = logging.getLogger(__name__)


@dataclass
class DashboardSession:
    session_id: str
    service: DashboardService
    context: DashboardContext
    autosaver: DebouncedAutosaver | None = None

    async def close(self) -> None:
        """Write any pending autosave."""
        if self.autosaver is not None:
            await self.autosaver.flush()


async def open_dashboard_session(
    session_id: str,
    store: DashboardSnapshotStore | None = None,
    *,
    fetcher: DataFetcher | None = None,
    autosave: bool = True,
) -> DashboardSession:
    """
    Open a dashboard session.

    The latest saved version is restored when one exists; otherwise the
    session starts from an empty dashboard.
    """
    store = store or DashboardSnapshotStore()

    state = await store.load_latest_dashboard(session_id)
    service = DashboardService(fetcher=fetcher)
    if state is not None:
        service.replace_state(state)
        logger.info(
            f"Restored dashboard {session_id} with {len(state.components)} components"
        )
    else:
        logger.info(f"Starting new dashboard {session_id}")

    autosaver = None
    if autosave:
        autosaver = DebouncedAutosaver(store, session_id)
        service.subscribe(autosaver.schedule)

    return DashboardSession(
        session_id=session_id,
        service=service,
        context=DashboardContext(dashboard=service, session_id=session_id),
        autosaver=autosaver,
    )
