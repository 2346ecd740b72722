"""POST /api/v1/dashboard — metric cards, ranking and map overlay."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, HTTPException

from ekraf_radar.api.schemas import DashboardRequest, DashboardResponse, QueryMetadata
from ekraf_radar.config import Settings
from ekraf_radar.domain.aggregation import ranking_shares
from ekraf_radar.domain.encoding import EncodingBounds
from ekraf_radar.domain.models import DashboardMetric
from ekraf_radar.domain.regions import load_registry
from ekraf_radar.infrastructure.repositories.records_repo import RecordRepository
from ekraf_radar.use_cases.dashboard import load_dashboard
from ekraf_radar.use_cases.map_layers import build_map_layers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Dashboard"])


@router.post("/dashboard", response_model=DashboardResponse)
async def dashboard(request: DashboardRequest) -> DashboardResponse:
    """
    Dashboard for one filter selection, computed from a single snapshot:
    - Metric cards: companies, investment, workers, growth vs. prior year
    - Ranking: regions by the selected metric with share of the total
    - Map: polygon style + popup per region with known boundary

    Returns 503 when the record store cannot be read, so clients never
    show zeros for a failed load.
    """
    t0 = time.monotonic()
    settings = Settings()
    repo = RecordRepository(settings.records_db_path)
    state = request.to_filter()

    snapshot = await load_dashboard(state, repo, settings=settings, metric=request.metric)
    if not snapshot.available:
        raise HTTPException(
            status_code=503,
            detail={"error": "data_unavailable", "warnings": list(snapshot.warnings)},
        )

    bounds = EncodingBounds.from_settings(settings)
    layers, skipped = build_map_layers(
        snapshot, load_registry(settings.geometry_path), bounds
    )

    ranking = ranking_shares(snapshot.regions, request.metric, request.direction)

    elapsed_ms = int((time.monotonic() - t0) * 1000)
    logger.info(
        "Dashboard %s: %d regions, %d drawn (%d ms)",
        state.model_dump(exclude_none=True), len(snapshot.regions), len(layers), elapsed_ms,
    )

    return DashboardResponse(
        status=snapshot.status,
        filter=snapshot.filter,
        dashboard=snapshot.dashboard or DashboardMetric(),
        regions=list(snapshot.regions),
        ranking=ranking,
        encodings=list(snapshot.encodings),
        map_layers=layers,
        metadata=QueryMetadata(
            warnings=list(snapshot.warnings),
            skipped_regions=skipped,
            query_time_ms=elapsed_ms,
        ),
    )
