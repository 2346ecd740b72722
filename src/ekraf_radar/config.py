"""Central configuration via Pydantic Settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

_BUNDLED_GEOMETRY = Path(__file__).parent / "data" / "west_java_regions.geojson"


class Settings(BaseSettings):
    """Application settings, loaded from environment / .env file."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Record store (relative to the working directory)
    records_db_path: str = "data/ekraf.db"

    # Region boundaries (empty = bundled West Java file)
    region_geometry_path: str = ""

    # Upper bound for one gateway round trip, then "data unavailable"
    fetch_timeout_seconds: float = 10.0

    default_page_size: int = 10

    # Visual encoding bounds
    fill_opacity_floor: float = 0.4
    fill_opacity_ceiling: float = 0.7
    stroke_opacity_floor: float = 0.3
    stroke_opacity_ceiling: float = 0.8
    stroke_weight: float = 2.0
    emphasis_stroke_weight: float = 4.0
    emphasis_stroke_opacity: float = 1.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def records_db_available(self) -> bool:
        return Path(self.records_db_path).exists()

    @property
    def geometry_path(self) -> Path:
        """Configured GeoJSON file, falling back to the bundled one."""
        if self.region_geometry_path:
            return Path(self.region_geometry_path)
        return _BUNDLED_GEOMETRY
