"""Deterministic aggregation of investment records.

Pure functions without I/O, so results are reproducible.
The same record set always yields the same RegionMetric values; the
store may deliver raw records (build_region_metrics) or pre-aggregated
region metrics (apply_growth + summarize_dashboard), both paths end in
the same functions.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

from ekraf_radar.domain.filters import matches, prior_year_state
from ekraf_radar.domain.models import (
    CapitalStatus,
    DashboardMetric,
    FilterState,
    InvestmentRecord,
    MetricSelector,
    RegionMetric,
    SortDirection,
)

_ZERO = Decimal("0")


def growth_rate(current: Decimal, prior: Decimal | None) -> float | None:
    """
    Year-over-year growth of total investment.

    Formula: (current - prior) / prior * 100

    Returns a signed percentage (e.g. 25.0 for +25%).
    Returns None (not 0.0) when there is no prior value or it is zero,
    so callers can show "no data" instead of a misleading 0%.
    """
    if prior is None or prior == 0:
        return None
    return float((current - prior) / prior * 100)


def aggregate_regions(
    records: Iterable[InvestmentRecord], *, year: int | None = None
) -> list[RegionMetric]:
    """Group already-filtered records by region in a single pass.

    Every record is counted exactly once. The result is sorted by region
    name; growth is left unset.
    """
    counts: dict[str, int] = defaultdict(int)
    amounts: dict[str, Decimal] = defaultdict(lambda: _ZERO)
    workers: dict[str, int] = defaultdict(int)

    for record in records:
        counts[record.region] += 1
        amounts[record.region] += record.investment_amount
        workers[record.region] += record.workers_count

    return [
        RegionMetric(
            region=region,
            year=year,
            company_count=counts[region],
            total_investment=amounts[region],
            total_workers=workers[region],
        )
        for region in sorted(counts)
    ]


def apply_growth(
    current: Iterable[RegionMetric], prior: Iterable[RegionMetric] = ()
) -> list[RegionMetric]:
    """Attach prior-year growth to every current region metric."""
    prior_totals = {m.region: m.total_investment for m in prior}
    return sorted(
        (
            m.model_copy(
                update={
                    "growth_rate": growth_rate(
                        m.total_investment, prior_totals.get(m.region)
                    )
                }
            )
            for m in current
        ),
        key=lambda m: m.region,
    )


def scope_metrics(
    records: Iterable[InvestmentRecord], state: FilterState
) -> tuple[list[RegionMetric], list[RegionMetric]]:
    """(current, prior) region metrics for the filter scope.

    Prior-year figures come from the same record set under the same
    non-year filters; current metrics carry growth against them. An
    unknown year simply matches nothing.
    """
    pool = list(records)
    current = aggregate_regions(
        (r for r in pool if matches(r, state)), year=state.year
    )
    prior: list[RegionMetric] = []
    prior_state = prior_year_state(state)
    if prior_state is not None:
        prior = aggregate_regions(
            (r for r in pool if matches(r, prior_state)), year=prior_state.year
        )
    return apply_growth(current, prior), prior


def build_region_metrics(
    records: Iterable[InvestmentRecord], state: FilterState
) -> list[RegionMetric]:
    """RegionMetrics for the filter scope, with growth against the prior year."""
    current, _ = scope_metrics(records, state)
    return current


def summarize_dashboard(
    regions: Sequence[RegionMetric],
    prior_regions: Sequence[RegionMetric] | None = None,
) -> DashboardMetric:
    """Dashboard totals as the sum over all regions in scope."""
    total_investment = sum((m.total_investment for m in regions), _ZERO)
    prior_total: Decimal | None = None
    if prior_regions:
        prior_total = sum((m.total_investment for m in prior_regions), _ZERO)

    return DashboardMetric(
        total_companies=sum(m.company_count for m in regions),
        total_investment=total_investment,
        total_workers=sum(m.total_workers for m in regions),
        growth_rate=growth_rate(total_investment, prior_total),
    )


def rank_regions(
    regions: Iterable[RegionMetric],
    metric: MetricSelector = MetricSelector.INVESTMENT,
    direction: SortDirection = SortDirection.DESC,
) -> list[RegionMetric]:
    """Sort regions by a metric; ties go to the region name, ascending."""
    if direction is SortDirection.DESC:
        return sorted(regions, key=lambda m: (-m.value(metric), m.region))
    return sorted(regions, key=lambda m: (m.value(metric), m.region))


def ranking_shares(
    regions: Iterable[RegionMetric],
    metric: MetricSelector = MetricSelector.INVESTMENT,
    direction: SortDirection = SortDirection.DESC,
) -> list[dict[str, Any]]:
    """Ranking table with each region's share of the scope total.

    percentage is None when the scope total is zero.
    """
    ranked = rank_regions(regions, metric, direction)
    total = sum((m.value(metric) for m in ranked), _ZERO)

    rows: list[dict[str, Any]] = []
    for position, m in enumerate(ranked, start=1):
        value = m.value(metric)
        rows.append({
            "rank": position,
            "region": m.region,
            "value": value,
            "percentage": round(float(value / total * 100), 2) if total else None,
        })
    return rows


def _record_value(record: InvestmentRecord, metric: MetricSelector) -> Decimal:
    if metric is MetricSelector.COMPANIES:
        return Decimal(1)
    if metric is MetricSelector.WORKERS:
        return Decimal(record.workers_count)
    return record.investment_amount


def status_pivot(
    records: Iterable[InvestmentRecord],
    metric: MetricSelector = MetricSelector.COMPANIES,
) -> dict[str, Any]:
    """Region x year pivot split by capital status.

    Returns {"years": [...], "rows": [...]} where each row holds one
    region with a {PMA, PMDN, total} cell per year (zero-filled) and a
    grand_total cell.
    """
    cells: dict[str, dict[int, dict[str, Decimal]]] = defaultdict(dict)
    years: set[int] = set()

    for record in records:
        years.add(record.year)
        cell = cells[record.region].setdefault(
            record.year, {s.value: _ZERO for s in CapitalStatus}
        )
        cell[record.status.value] += _record_value(record, metric)

    ordered_years = sorted(years)
    rows: list[dict[str, Any]] = []
    for region in sorted(cells):
        by_year: dict[int, dict[str, Decimal]] = {}
        grand = {s.value: _ZERO for s in CapitalStatus}
        for year in ordered_years:
            cell = cells[region].get(year, {s.value: _ZERO for s in CapitalStatus})
            by_year[year] = {**cell, "total": sum(cell.values(), _ZERO)}
            for status, value in cell.items():
                grand[status] += value
        rows.append({
            "region": region,
            "years": by_year,
            "grand_total": {**grand, "total": sum(grand.values(), _ZERO)},
        })

    return {"years": ordered_years, "rows": rows}


def subsector_summary(records: Iterable[InvestmentRecord]) -> list[dict[str, Any]]:
    """Companies, investment and workers per subsector (most companies first)."""
    summary: dict[str, dict[str, Any]] = {}
    for record in records:
        entry = summary.setdefault(
            record.subsector.value,
            {"subsector": record.subsector.value, "companies": 0,
             "investment": _ZERO, "workers": 0},
        )
        entry["companies"] += 1
        entry["investment"] += record.investment_amount
        entry["workers"] += record.workers_count

    return sorted(summary.values(), key=lambda e: (-e["companies"], e["subsector"]))


def quarterly_trend(records: Iterable[InvestmentRecord]) -> list[dict[str, Any]]:
    """Investment per quarter, split into foreign (PMA) and domestic (PMDN)."""
    trend: dict[tuple[int, int], dict[str, Any]] = {}
    for record in records:
        key = (record.year, record.quarter)
        entry = trend.setdefault(key, {
            "year": record.year,
            "quarter": record.quarter,
            "label": f"Q{record.quarter} {record.year}",
            "pma": _ZERO,
            "pmdn": _ZERO,
        })
        bucket = "pma" if record.status is CapitalStatus.PMA else "pmdn"
        entry[bucket] += record.investment_amount

    return [trend[key] for key in sorted(trend)]
