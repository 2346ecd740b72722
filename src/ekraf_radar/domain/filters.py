"""Filter predicates and filter options (pure functions, no I/O)."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ekraf_radar.domain.models import (
    CapitalStatus,
    FilterState,
    InvestmentRecord,
    Subsector,
)

FILTER_FIELDS = frozenset(FilterState.model_fields)


def matches_search(record: InvestmentRecord, search: str | None) -> bool:
    """Case-insensitive substring match on company name, NIB or KBLI code."""
    if not search or not search.strip():
        return True
    needle = search.strip().lower()
    return any(
        needle in value.lower()
        for value in (record.company_name, record.nib, record.kbli_code)
    )


def matches(
    record: InvestmentRecord, state: FilterState, *, ignore_year: bool = False
) -> bool:
    """True if the record satisfies every specified filter dimension."""
    if not ignore_year and state.year is not None and record.year != state.year:
        return False
    if state.subsector is not None and record.subsector != state.subsector:
        return False
    if state.city and record.region != state.city:
        return False
    if state.status is not None and record.status != state.status:
        return False
    return matches_search(record, state.search)


def filter_records(
    records: Iterable[InvestmentRecord], state: FilterState
) -> list[InvestmentRecord]:
    """Conjunctive filter over all dimensions of the state."""
    return [r for r in records if matches(r, state)]


def prior_year_state(state: FilterState) -> FilterState | None:
    """Same scope one year earlier, or None without a year selection."""
    if state.year is None:
        return None
    return state.model_copy(update={"year": state.year - 1})


def filter_options(years: Iterable[int], cities: Iterable[str]) -> dict[str, list[Any]]:
    """Filter surface for the UI.

    Subsectors and capital statuses are fixed enumerations; years
    (most recent first) and cities come from the store.
    """
    return {
        "year": sorted(set(years), reverse=True),
        "subsector": [s.value for s in Subsector],
        "city": sorted({c for c in cities if c}),
        "status": [s.value for s in CapitalStatus],
    }
