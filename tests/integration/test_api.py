"""Integration tests for the FastAPI endpoints."""

import sqlite3
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from ekraf_radar.app import create_app
from ekraf_radar.infrastructure.repositories.records_repo import SCHEMA


@pytest.fixture()
def _mock_db(tmp_path: Path):
    """Creates a mock record store and patches Settings."""
    db_path = str(tmp_path / "ekraf.db")
    conn = sqlite3.connect(db_path)
    conn.execute(SCHEMA)
    rows = [
        ("PT Kopi Priangan", "9120001", "KULINER", "Kota Bandung", "100", 10, "PMDN", 2023, 1),
        ("PT Kopi Priangan", "9120001", "KULINER", "Kota Bandung", "125", 12, "PMDN", 2024, 1),
        ("PT Batik Nusa", "9120002", "FESYEN", "Kota Bogor", "300", 30, "PMA", 2024, 2),
        ("PT Game Jabar", "9120003", "GAME DEVELOPER", "Kota Atlantis", "50", 4, "PMDN", 2024, 3),
    ]
    conn.executemany(
        "INSERT INTO investment_records (company_name, nib, subsector, region, "
        "investment_amount, workers_count, status, year, quarter) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        rows,
    )
    conn.commit()
    conn.close()

    with patch.dict("os.environ", {"RECORDS_DB_PATH": db_path}):
        yield


@pytest.fixture()
def client(_mock_db):
    """FastAPI TestClient with mock DB."""
    app = create_app()
    return TestClient(app)


@pytest.fixture()
def client_no_db():
    """FastAPI TestClient without a record store."""
    with patch.dict("os.environ", {"RECORDS_DB_PATH": "/nonexistent/ekraf.db"}):
        app = create_app()
        yield TestClient(app)


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_200(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data

    def test_health_shows_sources(self, client: TestClient):
        sources = client.get("/health").json()["data_sources"]
        assert sources["records_db"]["available"] is True
        assert sources["region_geometry"]["regions"] == 27

    def test_health_without_db(self, client_no_db: TestClient):
        response = client_no_db.get("/health")
        assert response.status_code == 200
        assert response.json()["data_sources"]["records_db"]["available"] is False


class TestFiltersEndpoint:
    """Tests for GET /api/v1/filters."""

    def test_options(self, client: TestClient):
        response = client.get("/api/v1/filters")
        assert response.status_code == 200
        data = response.json()
        assert data["year"] == [2024, 2023]
        assert data["city"] == ["Kota Atlantis", "Kota Bandung", "Kota Bogor"]
        assert "FESYEN" in data["subsector"]
        assert data["status"] == ["PMDN", "PMA"]

    def test_no_db_returns_503(self, client_no_db: TestClient):
        response = client_no_db.get("/api/v1/filters")
        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "data_unavailable"


class TestDashboardEndpoint:
    """Tests for POST /api/v1/dashboard."""

    def test_dashboard_returns_200(self, client: TestClient):
        response = client.post("/api/v1/dashboard", json={"year": 2024})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["dashboard"]["total_companies"] == 3
        assert Decimal(str(data["dashboard"]["total_investment"])) == Decimal("475")
        assert len(data["regions"]) == 3

    def test_ranking_by_investment(self, client: TestClient):
        data = client.post("/api/v1/dashboard", json={"year": 2024}).json()
        assert [row["region"] for row in data["ranking"]] == [
            "Kota Bogor", "Kota Bandung", "Kota Atlantis",
        ]
        assert data["ranking"][0]["rank"] == 1

    def test_ranking_ascending(self, client: TestClient):
        data = client.post(
            "/api/v1/dashboard", json={"year": 2024, "direction": "asc"}
        ).json()
        assert data["ranking"][0]["region"] == "Kota Atlantis"

    def test_region_without_geometry_skipped(self, client: TestClient):
        data = client.post("/api/v1/dashboard", json={"year": 2024}).json()
        assert data["metadata"]["skipped_regions"] == ["Kota Atlantis"]
        assert {layer["region"] for layer in data["map_layers"]} == {
            "Kota Bandung", "Kota Bogor",
        }

    def test_growth_in_regions(self, client: TestClient):
        data = client.post("/api/v1/dashboard", json={"year": 2024}).json()
        by_region = {m["region"]: m for m in data["regions"]}
        assert by_region["Kota Bandung"]["growth_rate"] == pytest.approx(25.0)
        assert by_region["Kota Bogor"]["growth_rate"] is None

    def test_unknown_year_is_empty(self, client: TestClient):
        response = client.post("/api/v1/dashboard", json={"year": 2010})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "empty"
        assert data["dashboard"]["total_companies"] == 0
        assert data["metadata"]["warnings"] == ["No data for year 2010"]

    def test_invalid_metric_returns_422(self, client: TestClient):
        response = client.post("/api/v1/dashboard", json={"metric": "revenue"})
        assert response.status_code == 422

    def test_year_out_of_range_returns_422(self, client: TestClient):
        response = client.post("/api/v1/dashboard", json={"year": 1900})
        assert response.status_code == 422

    def test_no_db_returns_503(self, client_no_db: TestClient):
        response = client_no_db.post("/api/v1/dashboard", json={"year": 2024})
        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["error"] == "data_unavailable"
        assert detail["warnings"][0].startswith("Data unavailable")


class TestRecordsEndpoint:
    """Tests for GET /api/v1/records."""

    def test_paging(self, client: TestClient):
        response = client.get("/api/v1/records", params={"page": 1, "page_size": 2})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert data["total_pages"] == 2
        assert len(data["items"]) == 2

    def test_search(self, client: TestClient):
        data = client.get("/api/v1/records", params={"search": "batik"}).json()
        assert [item["company_name"] for item in data["items"]] == ["PT Batik Nusa"]

    def test_page_size_limit(self, client: TestClient):
        response = client.get("/api/v1/records", params={"page_size": 500})
        assert response.status_code == 422


class TestBreakdownEndpoints:
    """Tests for pivot, subsector and trend views."""

    def test_pivot(self, client: TestClient):
        response = client.get("/api/v1/regions/pivot")
        assert response.status_code == 200
        data = response.json()
        assert data["metric"] == "companies"
        assert data["years"] == [2023, 2024]
        bandung = next(row for row in data["rows"] if row["region"] == "Kota Bandung")
        assert Decimal(str(bandung["grand_total"]["total"])) == Decimal("2")

    def test_subsectors(self, client: TestClient):
        data = client.get("/api/v1/subsectors", params={"year": 2024}).json()
        assert {e["subsector"] for e in data} == {"KULINER", "FESYEN", "GAME DEVELOPER"}

    def test_trend(self, client: TestClient):
        data = client.get("/api/v1/trend").json()
        assert [e["label"] for e in data] == ["Q1 2023", "Q1 2024", "Q2 2024", "Q3 2024"]
