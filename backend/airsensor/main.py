"""
PurpleAir Sensor Engine - Backend API
=====================================
FastAPI application that hosts one SensorEngine.

HOW TO RUN:
    pip install -e .
    cp .env.example .env   # then fill in your sensor
    python -m airsensor
    # or: uvicorn airsensor.main:app --port 8000 (uvicorn's own log setup)

API DOCUMENTATION:
    - Swagger UI: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from airsensor import __version__
from airsensor.config import get_request_timeout, load_engine_config
from airsensor.models import CharacteristicsResponse, EngineConfig, SensorReading
from airsensor.routers import sensor_router, set_sensor_engine
from airsensor.services import PurpleAirService, SensorEngine

logger = logging.getLogger(__name__)


def _presenter(config: EngineConfig):
    """Callback the engine calls after every poll: log what the host now shows."""

    def on_update(reading: Optional[SensorReading]):
        if reading is None:
            logger.warning(f"[{config.name}] No current reading, sensor marked inactive")
            return
        shown = CharacteristicsResponse.from_reading(
            reading, config.aqi_instead_of_density, active=True
        )
        logger.info(f"[{config.name}] Updated: {shown.model_dump(mode='json')}")

    return on_update


def create_app(
    config: Optional[EngineConfig] = None,
    service: Optional[PurpleAirService] = None,
    start_polling: bool = True,
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        config: Sensor config (read from the environment at startup if None)
        service: Fetcher to use (a PurpleAirService by default)
        start_polling: Start the interval job at startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        STARTUP:
            1. Load config (if not given)
            2. Build the engine and hand it to the router
            3. Start polling

        SHUTDOWN:
            1. Stop the poll job
            2. Close the HTTP client
        """
        engine_config = config or load_engine_config()
        engine = SensorEngine(
            engine_config,
            service=service or PurpleAirService(request_timeout=get_request_timeout()),
            on_update=_presenter(engine_config),
        )
        set_sensor_engine(engine)
        if start_polling:
            engine.start()

        logger.info(f"Sensor engine started for {engine_config.name} ({engine_config.source.value})")

        yield  # Application runs here

        logger.info("Shutting down...")
        await engine.shutdown()
        set_sensor_engine(None)

    app = FastAPI(
        title="PurpleAir Sensor Engine",
        description="Polls a PurpleAir sensor and serves the latest corrected reading and AQI.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.include_router(sensor_router)

    @app.get("/", tags=["info"])
    async def root():
        """Basic info about the service."""
        return {
            "name": "PurpleAir Sensor Engine",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health", tags=["info"])
    async def health():
        """Is the server up?"""
        return {"status": "healthy"}

    return app


app = create_app()
