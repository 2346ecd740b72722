"""Dashboard pipeline: fetch -> aggregate -> encode for one filter state."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from ekraf_radar.config import Settings
from ekraf_radar.domain.aggregation import apply_growth, scope_metrics, summarize_dashboard
from ekraf_radar.domain.encoding import EncodingBounds, encode_regions
from ekraf_radar.domain.errors import DataUnavailableError
from ekraf_radar.domain.filters import prior_year_state
from ekraf_radar.domain.gateway import RecordStoreGateway
from ekraf_radar.domain.models import (
    DashboardSnapshot,
    FilterState,
    InvestmentRecord,
    MetricSelector,
    RegionMetric,
)

logger = logging.getLogger(__name__)


def build_snapshot(
    state: FilterState,
    regions: Sequence[RegionMetric],
    prior_regions: Sequence[RegionMetric] = (),
    *,
    metric: MetricSelector = MetricSelector.INVESTMENT,
    bounds: EncodingBounds | None = None,
    warnings: Iterable[str] = (),
) -> DashboardSnapshot:
    """Assemble a consistent snapshot from current and prior-year metrics.

    regions must already carry growth; an empty scope is a valid result
    (all-zero dashboard, growth None), not an error.
    """
    return DashboardSnapshot(
        status="ok" if regions else "empty",
        filter=state,
        dashboard=summarize_dashboard(regions, prior_regions),
        regions=tuple(regions),
        encodings=tuple(encode_regions(regions, metric, bounds)),
        warnings=tuple(warnings),
    )


def snapshot_from_records(
    records: Iterable[InvestmentRecord],
    state: FilterState,
    *,
    metric: MetricSelector = MetricSelector.INVESTMENT,
    bounds: EncodingBounds | None = None,
) -> DashboardSnapshot:
    """Snapshot computed directly from raw records (no store round trip)."""
    current, prior = scope_metrics(records, state)
    return build_snapshot(state, current, prior, metric=metric, bounds=bounds)


def unavailable_snapshot(state: FilterState, reason: str) -> DashboardSnapshot:
    """Snapshot for a failed load: no metrics, one explanatory warning."""
    return DashboardSnapshot(
        status="unavailable",
        filter=state,
        warnings=(f"Data unavailable: {reason}",),
    )


async def _fetch_scope(
    state: FilterState, gateway: RecordStoreGateway, warnings: list[str]
) -> tuple[list[RegionMetric], list[RegionMetric]]:
    years = await gateway.fetch_available_years()
    if state.year is not None and state.year not in years:
        warnings.append(f"No data for year {state.year}")
        return [], []

    prior_state = prior_year_state(state)
    if prior_state is not None and prior_state.year in years:
        current, prior = await asyncio.gather(
            gateway.fetch_region_metrics(state),
            gateway.fetch_region_metrics(prior_state),
        )
        return list(current), list(prior)

    return list(await gateway.fetch_region_metrics(state)), []


async def load_dashboard(
    state: FilterState,
    gateway: RecordStoreGateway,
    *,
    settings: Settings | None = None,
    metric: MetricSelector = MetricSelector.INVESTMENT,
) -> DashboardSnapshot:
    """Fetch and aggregate the dashboard for one filter state.

    Args:
        state: Filter selection
        gateway: Record store access
        settings: Optional — Settings instance (default: newly created)
        metric: Metric driving the visual encoding

    Returns:
        DashboardSnapshot with status "ok", "empty" or "unavailable".
        Store failures and timeouts never surface as zero metrics.
    """
    if settings is None:
        settings = Settings()
    warnings: list[str] = []

    try:
        current, prior = await asyncio.wait_for(
            _fetch_scope(state, gateway, warnings),
            timeout=settings.fetch_timeout_seconds,
        )
    except DataUnavailableError as e:
        logger.warning("Dashboard fetch failed (%s): %s", e.source, e)
        return unavailable_snapshot(state, str(e))
    except TimeoutError:
        logger.warning(
            "Dashboard fetch timed out after %.1fs", settings.fetch_timeout_seconds
        )
        return unavailable_snapshot(
            state, f"no answer within {settings.fetch_timeout_seconds:g}s"
        )

    return build_snapshot(
        state,
        apply_growth(current, prior),
        prior,
        metric=metric,
        bounds=EncodingBounds.from_settings(settings),
        warnings=warnings,
    )
