"""
Sensor API Router
=================

The host side of the engine: how the outside world sees the reading.

ALL ENDPOINTS:
-------------
GET    /api/sensor                  - Engine status + last reading
GET    /api/sensor/characteristics  - Reading mapped onto display fields
POST   /api/sensor/refresh          - Poll right now (30s guard still applies)
"""

from fastapi import APIRouter, Depends, HTTPException

from airsensor.models import CharacteristicsResponse, SensorStatusResponse
from airsensor.services import SensorEngine


router = APIRouter(prefix="/api/sensor", tags=["sensor"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

_sensor_engine = None  # This gets set when the app starts


def set_sensor_engine(engine):
    """Called at startup (and cleared at shutdown) to hand us the engine."""
    global _sensor_engine
    _sensor_engine = engine


def get_sensor_engine() -> SensorEngine:
    """Get the engine for use in endpoints."""
    if _sensor_engine is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _sensor_engine


def _status(engine: SensorEngine) -> SensorStatusResponse:
    config = engine.config
    return SensorStatusResponse(
        name=config.name,
        sensor=config.sensor,
        source=config.source,
        active=engine.is_active(),
        update_interval_ms=config.update_interval_ms,
        last_reading=engine.last_reading,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=SensorStatusResponse)
async def get_sensor_status(engine: SensorEngine = Depends(get_sensor_engine)):
    """
    Current status of the sensor.

    `active` is false when there's no reading yet, the last poll failed,
    or the reading is older than one update interval.
    """
    return _status(engine)


@router.get("/characteristics", response_model=CharacteristicsResponse)
async def get_characteristics(engine: SensorEngine = Depends(get_sensor_engine)):
    """
    The reading the way a dashboard / HomeKit bridge would show it.

    pm2_5_density carries the AQI when AQI_INSTEAD_OF_DENSITY is on.
    """
    reading = engine.last_reading
    return CharacteristicsResponse.from_reading(
        reading,
        aqi_instead_of_density=engine.config.aqi_instead_of_density,
        active=engine.is_active(),
    )


@router.post("/refresh", response_model=SensorStatusResponse)
async def refresh(engine: SensorEngine = Depends(get_sensor_engine)):
    """
    Poll the sensor right now and return the new status.

    If the last reading is younger than 30 seconds this is a no-op.
    """
    await engine.update()
    return _status(engine)
