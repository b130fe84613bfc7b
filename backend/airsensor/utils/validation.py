"""
Input Validation Utilities
===========================

Common validation functions for sensor configuration.
"""

import ipaddress
import re


def validate_ip_address(ip: str) -> bool:
    """
    Validate an IP address string.

    Args:
        ip: IP address string (e.g., "192.168.1.100")

    Returns:
        True if valid, False otherwise
    """
    try:
        ipaddress.ip_address(ip)
        return True
    except ValueError:
        return False


def validate_sensor_index(sensor: str) -> bool:
    """
    Validate a PurpleAir sensor index (the number in the map URL).

    Args:
        sensor: Sensor index string (e.g., "12345")

    Returns:
        True if it's a positive whole number, False otherwise
    """
    if not sensor:
        return False
    return bool(re.match(r'^[0-9]{1,12}$', sensor.strip()))


def validate_update_interval(interval_ms: int) -> bool:
    """
    Validate a polling interval.

    Args:
        interval_ms: Interval in milliseconds

    Returns:
        True if positive, False otherwise
    """
    return interval_ms > 0


def parse_bool(value: str) -> bool:
    """Interpret "1", "true", "yes" and "on" (any case) as True."""
    return value.strip().lower() in {"1", "true", "yes", "on"}
