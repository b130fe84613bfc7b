"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from airsensor.models import EngineConfig, SensorReading
"""

from .sensor import (
    # Selectors
    Averages,
    Conversion,
    AirQualityCategory,
    SensorSource,

    # How to reach the sensor
    EngineConfig,

    # Raw JSON, tagged by source
    CloudPayload,
    LocalPayload,
    RawPayload,

    # The clean reading
    SensorReading,

    # What the API sends back
    SensorStatusResponse,
    CharacteristicsResponse,
)

__all__ = [
    "Averages",
    "Conversion",
    "AirQualityCategory",
    "SensorSource",
    "EngineConfig",
    "CloudPayload",
    "LocalPayload",
    "RawPayload",
    "SensorReading",
    "SensorStatusResponse",
    "CharacteristicsResponse",
]
