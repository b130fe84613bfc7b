"""
Utility modules for the sensor engine.

The AQI math lives in airsensor.utils.aqi and is imported from there.
"""

from airsensor.utils.validation import (
    validate_ip_address,
    validate_sensor_index,
    validate_update_interval,
    parse_bool,
)

__all__ = [
    "validate_ip_address",
    "validate_sensor_index",
    "validate_update_interval",
    "parse_bool",
]
