"""Repository for the local investment record database (ekraf.db)."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

import aiosqlite
from pydantic import ValidationError

from ekraf_radar.config import Settings
from ekraf_radar.domain.aggregation import aggregate_regions, apply_growth, summarize_dashboard
from ekraf_radar.domain.errors import DataUnavailableError
from ekraf_radar.domain.filters import prior_year_state
from ekraf_radar.domain.models import (
    DashboardMetric,
    FilterState,
    InvestmentRecord,
    RecordPage,
    RegionMetric,
)

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS investment_records (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        company_name TEXT NOT NULL,
        nib TEXT DEFAULT '',
        kbli_code TEXT DEFAULT '',
        kbli_title TEXT DEFAULT '',
        subsector TEXT NOT NULL,
        region TEXT NOT NULL,
        investment_amount TEXT NOT NULL DEFAULT '0',
        workers_count INTEGER NOT NULL DEFAULT 0,
        status TEXT NOT NULL,
        year INTEGER NOT NULL,
        quarter INTEGER NOT NULL DEFAULT 1
    )
"""

_COLUMNS = (
    "company_name, nib, kbli_code, kbli_title, subsector, region, "
    "investment_amount, workers_count, status, year, quarter"
)


def _fold(value: str | None) -> str | None:
    """Case folding shared with the in-memory search (Unicode-aware)."""
    return str(value).lower() if value is not None else None


def _escape_like(term: str) -> str:
    """LIKE wildcards in user input are matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _where(state: FilterState, *, ignore_year: bool = False) -> tuple[str, list[Any]]:
    """WHERE clause for all set filter dimensions (conjunctive)."""
    clauses: list[str] = []
    params: list[Any] = []

    if state.year is not None and not ignore_year:
        clauses.append("year = ?")
        params.append(state.year)
    if state.subsector is not None:
        clauses.append("subsector = ?")
        params.append(state.subsector.value)
    if state.city:
        clauses.append("region = ?")
        params.append(state.city)
    if state.status is not None:
        clauses.append("status = ?")
        params.append(state.status.value)
    if state.search and state.search.strip():
        # SQLite's LIKE folds ASCII only; fold both sides in Python instead
        pattern = f"%{_escape_like(state.search.strip().lower())}%"
        clauses.append(
            "(py_lower(company_name) LIKE ? ESCAPE '\\' "
            "OR py_lower(nib) LIKE ? ESCAPE '\\' "
            "OR py_lower(kbli_code) LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern, pattern, pattern])

    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _to_record(row: aiosqlite.Row) -> InvestmentRecord:
    return InvestmentRecord(
        company_name=row["company_name"],
        nib=row["nib"] or "",
        kbli_code=row["kbli_code"] or "",
        kbli_title=row["kbli_title"] or "",
        subsector=row["subsector"],
        region=row["region"],
        # str() first: REAL columns must not leak binary float artefacts
        investment_amount=Decimal(str(row["investment_amount"] or "0")),
        workers_count=row["workers_count"] or 0,
        status=row["status"],
        year=row["year"],
        quarter=row["quarter"] or 1,
    )


def _to_records(rows: Iterable[aiosqlite.Row]) -> list[InvestmentRecord]:
    """Convert rows, skipping (and logging) rows that violate the model."""
    records: list[InvestmentRecord] = []
    for row in rows:
        try:
            records.append(_to_record(row))
        except (ValidationError, ArithmeticError) as e:
            logger.warning("Skipping malformed record %r: %s", row["company_name"], e)
    return records


class RecordRepository:
    """Async SQLite access to the investment records (read-only)."""

    def __init__(self, db_path: str | None = None) -> None:
        self._db_path = db_path or Settings().records_db_path

    async def _fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[aiosqlite.Row]:
        try:
            async with aiosqlite.connect(f"file:{self._db_path}?mode=ro", uri=True) as db:
                db.row_factory = aiosqlite.Row
                await db.create_function("py_lower", 1, _fold, deterministic=True)
                cursor = await db.execute(sql, list(params))
                return list(await cursor.fetchall())
        except (aiosqlite.Error, OSError) as e:
            logger.warning("Record store query failed: %s", e)
            raise DataUnavailableError(str(e), source="sqlite") from e

    async def _select_records(
        self, state: FilterState, *, ignore_year: bool = False
    ) -> list[InvestmentRecord]:
        where, params = _where(state, ignore_year=ignore_year)
        rows = await self._fetchall(
            f"SELECT {_COLUMNS} FROM investment_records{where}", params
        )
        return _to_records(rows)

    async def fetch_scope_records(
        self, state: FilterState, *, ignore_year: bool = False
    ) -> list[InvestmentRecord]:
        """All records of the scope (pivot, subsector and trend views)."""
        return await self._select_records(state, ignore_year=ignore_year)

    async def fetch_region_metrics(self, state: FilterState) -> list[RegionMetric]:
        """Per-region aggregates; amounts are summed as Decimal in Python."""
        records = await self._select_records(state)
        return aggregate_regions(records, year=state.year)

    async def fetch_dashboard_metrics(self, state: FilterState) -> DashboardMetric:
        current = await self.fetch_region_metrics(state)
        prior: list[RegionMetric] = []
        prior_state = prior_year_state(state)
        if prior_state is not None:
            prior = await self.fetch_region_metrics(prior_state)
        return summarize_dashboard(apply_growth(current, prior), prior)

    async def fetch_available_years(self) -> list[int]:
        rows = await self._fetchall(
            "SELECT DISTINCT year FROM investment_records "
            "WHERE year IS NOT NULL ORDER BY year DESC"
        )
        return [int(row["year"]) for row in rows]

    async def fetch_cities(self) -> list[str]:
        rows = await self._fetchall(
            "SELECT DISTINCT region FROM investment_records "
            "WHERE region IS NOT NULL AND region != '' ORDER BY region"
        )
        return [row["region"] for row in rows]

    async def fetch_records(
        self, state: FilterState, *, page: int = 1, page_size: int = 10
    ) -> RecordPage:
        """One page of records, newest year first."""
        page = max(1, page)
        where, params = _where(state)

        count_rows = await self._fetchall(
            f"SELECT COUNT(*) AS total FROM investment_records{where}", params
        )
        total = int(count_rows[0]["total"]) if count_rows else 0

        rows = await self._fetchall(
            f"SELECT {_COLUMNS} FROM investment_records{where} "
            "ORDER BY year DESC, quarter DESC, id DESC LIMIT ? OFFSET ?",
            [*params, page_size, (page - 1) * page_size],
        )
        return RecordPage(
            items=_to_records(rows),
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size) if page_size else 0,
        )
