"""Create a demo investment database for local development.

Usage:
    python scripts/create_demo_db.py
    python scripts/create_demo_db.py --output data/ekraf.db --seed 7

Writes a handful of companies per region for the years 2020-2025,
split into foreign (PMA) and domestic (PMDN) capital, so every API
endpoint has something to show without the production data.
"""

from __future__ import annotations

import argparse
import random
import sqlite3
import time
from decimal import Decimal
from pathlib import Path

from ekraf_radar.domain.models import CapitalStatus, Subsector
from ekraf_radar.infrastructure.repositories.records_repo import SCHEMA

TARGET = Path("data/ekraf.db")

DEMO_REGIONS = [
    "Kota Bandung",
    "Kabupaten Bandung",
    "Kota Bekasi",
    "Kabupaten Bekasi",
    "Kota Bogor",
    "Kabupaten Bogor",
    "Kota Depok",
    "Kota Cimahi",
    "Kabupaten Karawang",
    "Kota Cirebon",
]

# KBLI code and title per subsector
KBLI = {
    Subsector.FESYEN: ("14111", "Industri Pakaian Jadi"),
    Subsector.KRIYA: ("32902", "Industri Kerajinan"),
    Subsector.KULINER: ("56101", "Restoran"),
    Subsector.APLIKASI: ("62019", "Aktivitas Pemrograman Komputer Lainnya"),
    Subsector.FILM: ("59111", "Produksi Film"),
    Subsector.PERIKLANAN: ("73100", "Periklanan"),
    Subsector.GAME_DEVELOPER: ("58200", "Penerbitan Piranti Lunak"),
    Subsector.FOTOGRAFI: ("74201", "Aktivitas Fotografi"),
}

YEARS = range(2020, 2026)
COMPANIES_PER_REGION = 4


def _demo_rows(rng: random.Random) -> list[tuple]:
    rows = []
    subsectors = list(KBLI)
    for region in DEMO_REGIONS:
        for i in range(COMPANIES_PER_REGION):
            subsector = rng.choice(subsectors)
            kbli_code, kbli_title = KBLI[subsector]
            status = CapitalStatus.PMA if i % 3 == 0 else CapitalStatus.PMDN
            name = f"PT {region.split()[-1]} {subsector.value.title()} {i + 1}"
            nib = f"{rng.randrange(10**12, 10**13)}"
            for year in YEARS:
                quarter = rng.randint(1, 4)
                # Millions of rupiah, growing a little each year
                base = rng.randint(50, 5_000) * (1 + (year - YEARS.start) / 10)
                amount = Decimal(int(base)) * Decimal(1_000_000)
                rows.append((
                    name, nib, kbli_code, kbli_title, subsector.value, region,
                    str(amount), rng.randint(3, 250), status.value, year, quarter,
                ))
    return rows


def main(output: Path, seed: int) -> None:
    t0 = time.time()
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.exists():
        output.unlink()
        print(f"Removed existing {output}")

    rows = _demo_rows(random.Random(seed))

    conn = sqlite3.connect(str(output))
    conn.execute(SCHEMA)
    conn.executemany(
        "INSERT INTO investment_records (company_name, nib, kbli_code, kbli_title, "
        "subsector, region, investment_amount, workers_count, status, year, quarter) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        rows,
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_records_year ON investment_records(year)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_records_region ON investment_records(region)")
    conn.commit()

    count = conn.execute("SELECT COUNT(*) FROM investment_records").fetchone()[0]
    years = conn.execute(
        "SELECT MIN(year), MAX(year) FROM investment_records"
    ).fetchone()
    conn.close()

    size_kb = output.stat().st_size / 1024
    print(f"  {count} records, years {years[0]}-{years[1]}, {len(DEMO_REGIONS)} regions")
    print(f"Created {output} ({size_kb:.0f} KB) in {time.time() - t0:.1f}s")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a demo investment database")
    parser.add_argument("--output", type=Path, default=TARGET, help="SQLite file to write")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()
    main(args.output, args.seed)
