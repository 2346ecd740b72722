"""Display labels for metric cards, tables and map popups."""

from __future__ import annotations

from decimal import Decimal

from ekraf_radar.domain.models import RegionMetric

NO_DATA = "No data"


def format_investment(amount: Decimal | int | float | None) -> str:
    """Rupiah amount in T (trillion), B, M steps."""
    if amount is None:
        return "N/A"
    value = Decimal(amount)
    magnitude = abs(value)
    if magnitude >= 1_000_000_000_000:
        return f"Rp {value / 1_000_000_000_000:,.1f}T"
    if magnitude >= 1_000_000_000:
        return f"Rp {value / 1_000_000_000:,.1f}B"
    if magnitude >= 1_000_000:
        return f"Rp {value / 1_000_000:,.1f}M"
    return f"Rp {value:,.0f}"


def format_growth(rate: float | None) -> str:
    """Signed percentage, or an explicit no-data label (never "0%")."""
    if rate is None:
        return NO_DATA
    return f"{rate:+.1f}%"


def region_popup(metric: RegionMetric) -> str:
    """Popup text for one region on the map."""
    lines = [
        metric.region,
        f"Companies: {metric.company_count:,}",
        f"Investment: {format_investment(metric.total_investment)}",
        f"Workers: {metric.total_workers:,}",
        f"Growth: {format_growth(metric.growth_rate)}",
    ]
    return "\n".join(lines)
