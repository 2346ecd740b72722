"""Last-request-wins refresh of the dashboard after filter changes.

Each filter change starts exactly one load task. Every task is tagged with
a generation number; when a task finishes after a newer one has been
started its result is discarded, so a slow response for an old filter can
never overwrite a fresher snapshot. Superseded tasks are left to finish
on their own rather than cancelled mid-query.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ekraf_radar.config import Settings
from ekraf_radar.domain.gateway import RecordStoreGateway
from ekraf_radar.domain.models import DashboardSnapshot, FilterState, MetricSelector
from ekraf_radar.use_cases.dashboard import load_dashboard

logger = logging.getLogger(__name__)

SnapshotConsumer = Callable[[DashboardSnapshot], None]


class DashboardRefresher:
    """Coordinator observer that keeps views on the newest snapshot.

    Must be triggered from inside a running event loop.
    """

    def __init__(
        self,
        gateway: RecordStoreGateway,
        consumer: SnapshotConsumer,
        *,
        settings: Settings | None = None,
        metric: MetricSelector = MetricSelector.INVESTMENT,
    ) -> None:
        self._gateway = gateway
        self._consumer = consumer
        self._settings = settings or Settings()
        self._metric = metric
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self.discarded = 0

    @property
    def generation(self) -> int:
        return self._generation

    def __call__(self, state: FilterState) -> None:
        self.refresh(state)

    def refresh(self, state: FilterState) -> asyncio.Task[None]:
        """Start loading for state; supersedes every earlier request."""
        self._generation += 1
        task = asyncio.get_running_loop().create_task(
            self._load(state, self._generation)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until no load task is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _load(self, state: FilterState, generation: int) -> None:
        snapshot = await load_dashboard(
            state, self._gateway, settings=self._settings, metric=self._metric
        )
        if generation != self._generation:
            self.discarded += 1
            logger.debug(
                "Discarding stale snapshot (generation %d, current %d)",
                generation, self._generation,
            )
            return
        self._consumer(snapshot)
