"""GET endpoints for health, filter options, raw records and breakdowns."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from ekraf_radar.api.schemas import FilterOptionsResponse
from ekraf_radar.config import Settings
from ekraf_radar.domain.aggregation import quarterly_trend, status_pivot, subsector_summary
from ekraf_radar.domain.errors import DataUnavailableError
from ekraf_radar.domain.filters import filter_options
from ekraf_radar.domain.models import (
    CapitalStatus,
    FilterState,
    MetricSelector,
    RecordPage,
    Subsector,
)
from ekraf_radar.domain.regions import load_registry
from ekraf_radar.infrastructure.repositories.records_repo import RecordRepository

router = APIRouter(tags=["Data"])
logger = logging.getLogger(__name__)


def _unavailable(e: DataUnavailableError) -> HTTPException:
    logger.warning("Data endpoint failed (%s): %s", e.source, e)
    return HTTPException(
        status_code=503,
        detail={"error": "data_unavailable", "warnings": [f"Data unavailable: {e}"]},
    )


def _filter_from_query(
    year: int | None,
    subsector: Subsector | None,
    city: str | None,
    status: CapitalStatus | None,
    search: str | None,
) -> FilterState:
    return FilterState(
        year=year,
        subsector=subsector,
        city=city or None,
        status=status,
        search=search or None,
    )


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Service health check with record store and boundary status."""
    settings = Settings()
    records_db = Path(settings.records_db_path)
    geometry = settings.geometry_path

    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "data_sources": {
            "records_db": {
                "available": records_db.exists(),
                "path": settings.records_db_path,
                "size_mb": round(records_db.stat().st_size / 1_048_576, 1)
                if records_db.exists()
                else 0,
            },
            "region_geometry": {
                "available": geometry.exists(),
                "regions": len(load_registry(geometry)) if geometry.exists() else 0,
            },
        },
    }


@router.get("/api/v1/filters", response_model=FilterOptionsResponse)
async def filters() -> FilterOptionsResponse:
    """Subsectors and capital statuses (fixed) plus years and cities from the store."""
    repo = RecordRepository(Settings().records_db_path)
    try:
        years, cities = await asyncio.gather(
            repo.fetch_available_years(), repo.fetch_cities()
        )
    except DataUnavailableError as e:
        raise _unavailable(e) from e
    return FilterOptionsResponse(**filter_options(years, cities))


@router.get("/api/v1/records", response_model=RecordPage)
async def records(
    year: int | None = Query(None),
    subsector: Subsector | None = Query(None),
    city: str | None = Query(None, max_length=100),
    status: CapitalStatus | None = Query(None),
    search: str | None = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=100),
) -> RecordPage:
    """Paginated raw records for the data table."""
    settings = Settings()
    repo = RecordRepository(settings.records_db_path)
    state = _filter_from_query(year, subsector, city, status, search)
    try:
        return await repo.fetch_records(
            state, page=page, page_size=page_size or settings.default_page_size
        )
    except DataUnavailableError as e:
        raise _unavailable(e) from e


@router.get("/api/v1/regions/pivot")
async def region_pivot(
    metric: MetricSelector = Query(MetricSelector.COMPANIES),
    subsector: Subsector | None = Query(None),
    city: str | None = Query(None, max_length=100),
) -> dict[str, Any]:
    """Region x year table split into PMA / PMDN (all years)."""
    repo = RecordRepository(Settings().records_db_path)
    state = FilterState(subsector=subsector, city=city or None)
    try:
        scope = await repo.fetch_scope_records(state, ignore_year=True)
    except DataUnavailableError as e:
        raise _unavailable(e) from e
    return {"metric": metric.value, **status_pivot(scope, metric)}


@router.get("/api/v1/subsectors")
async def subsectors(
    year: int | None = Query(None),
    city: str | None = Query(None, max_length=100),
    status: CapitalStatus | None = Query(None),
) -> list[dict[str, Any]]:
    """Companies, investment and workers per subsector."""
    repo = RecordRepository(Settings().records_db_path)
    state = FilterState(year=year, city=city or None, status=status)
    try:
        scope = await repo.fetch_scope_records(state)
    except DataUnavailableError as e:
        raise _unavailable(e) from e
    return subsector_summary(scope)


@router.get("/api/v1/trend")
async def trend(
    subsector: Subsector | None = Query(None),
    city: str | None = Query(None, max_length=100),
) -> list[dict[str, Any]]:
    """Quarterly investment, foreign (PMA) vs. domestic (PMDN)."""
    repo = RecordRepository(Settings().records_db_path)
    state = FilterState(subsector=subsector, city=city or None)
    try:
        scope = await repo.fetch_scope_records(state, ignore_year=True)
    except DataUnavailableError as e:
        raise _unavailable(e) from e
    return quarterly_trend(scope)
