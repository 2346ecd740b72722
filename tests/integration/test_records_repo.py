"""Integration tests for the record repository with a temporary SQLite file."""

import sqlite3
from decimal import Decimal
from pathlib import Path

import pytest

from ekraf_radar.domain.errors import DataUnavailableError
from ekraf_radar.domain.filters import matches_search
from ekraf_radar.domain.models import CapitalStatus, FilterState, Subsector
from ekraf_radar.infrastructure.repositories.records_repo import SCHEMA, RecordRepository

ROWS = [
    # company, nib, kbli, subsector, region, amount, workers, status, year, quarter
    ("PT Kopi Priangan", "9120001", "56303", "KULINER", "Kota Bandung", "1000000000.10", 12, "PMDN", 2023, 2),
    ("PT Kopi Priangan", "9120001", "56303", "KULINER", "Kota Bandung", "1250000000.20", 15, "PMDN", 2024, 1),
    ("PT Batik Nusa", "9120002", "14111", "FESYEN", "Kota Bandung", "500000000", 30, "PMA", 2024, 3),
    ("PT Studio 100%", "9120003", "59111", "FILM", "Kota Bogor", "750000000", 8, "PMA", 2024, 4),
    ("CV Aplikasi_Kita", "9120004", "62019", "APLIKASI", "Kabupaten Bekasi", "200000000", 5, "PMDN", 2024, 2),
    ("PT Game Jabar", "9120005", "58200", "GAME DEVELOPER", "Kota Depok", "300000000", 20, "PMDN", 2022, 1),
]


@pytest.fixture()
def records_db(tmp_path: Path) -> str:
    """Temporary record store with a few companies in 2022-2024."""
    db_path = str(tmp_path / "ekraf.db")
    conn = sqlite3.connect(db_path)
    conn.execute(SCHEMA)
    conn.executemany(
        "INSERT INTO investment_records (company_name, nib, kbli_code, subsector, region, "
        "investment_amount, workers_count, status, year, quarter) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        ROWS,
    )
    conn.commit()
    conn.close()
    return db_path


class TestRecordRepository:
    """Tests for RecordRepository against SQLite."""

    async def test_available_years_descending(self, records_db: str):
        repo = RecordRepository(records_db)
        assert await repo.fetch_available_years() == [2024, 2023, 2022]

    async def test_cities_sorted(self, records_db: str):
        repo = RecordRepository(records_db)
        assert await repo.fetch_cities() == [
            "Kabupaten Bekasi", "Kota Bandung", "Kota Bogor", "Kota Depok",
        ]

    async def test_region_metrics(self, records_db: str):
        repo = RecordRepository(records_db)
        regions = await repo.fetch_region_metrics(FilterState(year=2024))
        by_region = {m.region: m for m in regions}
        assert set(by_region) == {"Kabupaten Bekasi", "Kota Bandung", "Kota Bogor"}
        assert by_region["Kota Bandung"].company_count == 2
        assert by_region["Kota Bandung"].total_investment == Decimal("1750000000.20")
        assert by_region["Kota Bandung"].total_workers == 45

    async def test_filters_combined(self, records_db: str):
        repo = RecordRepository(records_db)
        state = FilterState(year=2024, status=CapitalStatus.PMA, subsector=Subsector.FILM)
        regions = await repo.fetch_region_metrics(state)
        assert [m.region for m in regions] == ["Kota Bogor"]

    async def test_search_matches_name_nib_and_kbli(self, records_db: str):
        repo = RecordRepository(records_db)
        by_name = await repo.fetch_scope_records(FilterState(search="batik"))
        by_nib = await repo.fetch_scope_records(FilterState(search="9120004"))
        by_kbli = await repo.fetch_scope_records(FilterState(search="58200"))
        assert [r.company_name for r in by_name] == ["PT Batik Nusa"]
        assert [r.company_name for r in by_nib] == ["CV Aplikasi_Kita"]
        assert [r.company_name for r in by_kbli] == ["PT Game Jabar"]

    async def test_search_wildcards_are_literal(self, records_db: str):
        repo = RecordRepository(records_db)
        percent = await repo.fetch_scope_records(FilterState(search="100%"))
        underscore = await repo.fetch_scope_records(FilterState(search="_"))
        assert [r.company_name for r in percent] == ["PT Studio 100%"]
        assert [r.company_name for r in underscore] == ["CV Aplikasi_Kita"]

    async def test_search_folds_non_ascii_like_in_memory(self, records_db: str):
        conn = sqlite3.connect(records_db)
        conn.execute(
            "INSERT INTO investment_records (company_name, subsector, region, status, year) "
            "VALUES ('PT Ölmühle Sunda', 'KULINER', 'Kota Bandung', 'PMDN', 2024)"
        )
        conn.commit()
        conn.close()

        repo = RecordRepository(records_db)
        state = FilterState(search="ÖLMÜHLE")
        records = await repo.fetch_scope_records(state)
        assert [r.company_name for r in records] == ["PT Ölmühle Sunda"]
        assert all(matches_search(r, state.search) for r in records)

    async def test_ignore_year(self, records_db: str):
        repo = RecordRepository(records_db)
        state = FilterState(year=2024, city="Kota Bandung")
        records = await repo.fetch_scope_records(state, ignore_year=True)
        assert sorted(r.year for r in records) == [2023, 2024, 2024]

    async def test_dashboard_metrics_with_growth(self, records_db: str):
        repo = RecordRepository(records_db)
        state = FilterState(year=2024, city="Kota Bandung", status=CapitalStatus.PMDN)
        dashboard = await repo.fetch_dashboard_metrics(state)
        assert dashboard.total_companies == 1
        assert dashboard.growth_rate == pytest.approx(25.0, abs=0.01)

    async def test_dashboard_metrics_without_prior(self, records_db: str):
        repo = RecordRepository(records_db)
        dashboard = await repo.fetch_dashboard_metrics(FilterState(year=2022))
        assert dashboard.total_companies == 1
        assert dashboard.growth_rate is None

    async def test_pagination(self, records_db: str):
        repo = RecordRepository(records_db)
        first = await repo.fetch_records(FilterState(), page=1, page_size=4)
        second = await repo.fetch_records(FilterState(), page=2, page_size=4)
        assert first.total == 6
        assert first.total_pages == 2
        assert len(first.items) == 4
        assert len(second.items) == 2
        # Newest year first, then latest quarter
        assert (first.items[0].year, first.items[0].quarter) == (2024, 4)
        assert second.items[-1].year == 2022

    async def test_page_beyond_end(self, records_db: str):
        repo = RecordRepository(records_db)
        page = await repo.fetch_records(FilterState(), page=9, page_size=4)
        assert page.items == []
        assert page.total == 6

    async def test_malformed_row_skipped(self, records_db: str):
        conn = sqlite3.connect(records_db)
        conn.execute(
            "INSERT INTO investment_records (company_name, subsector, region, status, year) "
            "VALUES ('PT Rusak', 'BUKAN SUBSEKTOR', 'Kota Bandung', 'PMDN', 2024)"
        )
        conn.commit()
        conn.close()

        repo = RecordRepository(records_db)
        records = await repo.fetch_scope_records(FilterState(year=2024))
        assert "PT Rusak" not in {r.company_name for r in records}
        assert len(records) == 4

    async def test_missing_db_raises(self, tmp_path: Path):
        repo = RecordRepository(str(tmp_path / "missing.db"))
        with pytest.raises(DataUnavailableError) as exc_info:
            await repo.fetch_available_years()
        assert exc_info.value.source == "sqlite"

    async def test_missing_table_raises(self, tmp_path: Path):
        db_path = str(tmp_path / "empty.db")
        sqlite3.connect(db_path).close()
        repo = RecordRepository(db_path)
        with pytest.raises(DataUnavailableError):
            await repo.fetch_region_metrics(FilterState())
