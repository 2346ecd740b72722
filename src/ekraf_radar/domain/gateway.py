"""Record Store Gateway contract.

The engine only depends on this protocol. Implementations raise
DataUnavailableError for transport/storage failures and never return
partial results.
"""

from __future__ import annotations

from typing import Protocol

from ekraf_radar.domain.models import (
    DashboardMetric,
    FilterState,
    RecordPage,
    RegionMetric,
)


class RecordStoreGateway(Protocol):
    """Read access to investment records and their aggregates."""

    async def fetch_dashboard_metrics(self, state: FilterState) -> DashboardMetric:
        """Totals for the filter scope (growth against the prior year)."""
        ...

    async def fetch_region_metrics(self, state: FilterState) -> list[RegionMetric]:
        """Per-region aggregates for the filter scope, growth not applied."""
        ...

    async def fetch_available_years(self) -> list[int]:
        """Years present in the store, most recent first."""
        ...

    async def fetch_cities(self) -> list[str]:
        """Region names present in the store, sorted."""
        ...

    async def fetch_records(
        self, state: FilterState, *, page: int = 1, page_size: int = 10
    ) -> RecordPage:
        """One page of raw records for the table view."""
        ...
