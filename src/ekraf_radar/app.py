"""FastAPI application factory."""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ekraf_radar.api.dashboard import router as dashboard_router
from ekraf_radar.api.data import router as data_router
from ekraf_radar.config import Settings
from ekraf_radar.domain.regions import load_registry

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Structured logging with timestamp, level and module name."""
    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root = logging.getLogger("ekraf_radar")
    root.setLevel(logging.INFO)
    # create_app may run several times (tests); one handler is enough
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        root.addHandler(handler)
    # Avoids duplicate log lines under uvicorn
    root.propagate = False


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    _configure_logging()
    settings = Settings()

    app = FastAPI(
        title="Ekraf Radar API",
        description="West Java creative-economy investment by region, year and subsector.",
        version="0.1.0",
    )

    # CORS (configurable via CORS_ORIGINS env variable)
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(dashboard_router)
    app.include_router(data_router)

    # Startup: check record store and region boundaries
    @app.on_event("startup")
    async def _check_data_sources() -> None:
        if settings.records_db_available:
            logger.info("Records DB: %s", settings.records_db_path)
        else:
            logger.warning("Records DB not found: %s", settings.records_db_path)

        if settings.geometry_path.exists():
            registry = load_registry(settings.geometry_path)
            logger.info("Region boundaries: %d regions", len(registry))
        else:
            logger.warning("Region boundary file not found: %s", settings.geometry_path)

    return app


def main() -> None:
    """Run the API with uvicorn on the configured host/port."""
    settings = Settings()
    uvicorn.run(
        "ekraf_radar.app:create_app", factory=True, host=settings.host, port=settings.port
    )
