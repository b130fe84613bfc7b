"""
Services Package
================

These are the "workers" that do the actual work.

- PurpleAirService: Talks to the sensor (cloud API or local /json)
- normalize: Turns raw JSON into a SensorReading
- SensorEngine: The boss that schedules polls and caches the reading
"""

from .purple_air_service import PurpleAirService
from .normalizer import normalize, parse_purple_air_json
from .freshness import is_reading_active
from .sensor_engine import SensorEngine

__all__ = [
    "PurpleAirService",
    "normalize",
    "parse_purple_air_json",
    "is_reading_active",
    "SensorEngine",
]
