"""Pydantic request/response models for the API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ekraf_radar.domain.models import (
    CapitalStatus,
    DashboardMetric,
    FilterState,
    MetricSelector,
    RegionMetric,
    SnapshotStatus,
    SortDirection,
    Subsector,
    VisualEncoding,
)
from ekraf_radar.use_cases.map_layers import MapLayer

# --- Request ---

class DashboardRequest(BaseModel):
    """Filter selection plus the metric driving ranking and map colors."""

    year: int | None = Field(None, ge=2000, le=2100, description="Fiscal year")
    subsector: Subsector | None = None
    city: str | None = Field(None, max_length=100, description="Region (kota/kabupaten)")
    status: CapitalStatus | None = None
    search: str | None = Field(
        None, max_length=200, description="Company name, NIB or KBLI code"
    )
    metric: MetricSelector = MetricSelector.INVESTMENT
    direction: SortDirection = SortDirection.DESC

    def to_filter(self) -> FilterState:
        return FilterState(
            year=self.year,
            subsector=self.subsector,
            city=self.city or None,
            status=self.status,
            search=self.search or None,
        )


# --- Response ---

class QueryMetadata(BaseModel):
    """Transparency metadata for each response."""

    warnings: list[str] = []
    skipped_regions: list[str] = []
    query_time_ms: int = 0


class DashboardResponse(BaseModel):
    """Metric cards, ranking table and map overlay from one snapshot."""

    status: SnapshotStatus
    filter: FilterState
    dashboard: DashboardMetric = DashboardMetric()
    regions: list[RegionMetric] = []
    ranking: list[dict[str, Any]] = []
    encodings: list[VisualEncoding] = []
    map_layers: list[MapLayer] = []
    metadata: QueryMetadata = QueryMetadata()


class FilterOptionsResponse(BaseModel):
    """Options for the filter controls."""

    year: list[int] = []
    subsector: list[str] = []
    city: list[str] = []
    status: list[str] = []
