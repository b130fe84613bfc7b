"""
Configuration
=============

Everything comes from environment variables (a .env file is loaded
first, if there is one).

Environment Variables:
    PURPLEAIR_NAME          Friendly name for logs (default: "PurpleAir")
    PURPLEAIR_SENSOR        Sensor index for the cloud API (e.g. "12345")
    PURPLEAIR_READ_KEY      Read key for private sensors
    PURPLEAIR_API_KEY       PurpleAir API key (sent as X-API-Key)
    PURPLEAIR_LOCAL_IP      Sensor IP on the local network (wins over cloud)
    PURPLEAIR_AVERAGES      realtime, 10m, 30m, 60m, 6h, 24h or 1w
    PURPLEAIR_CONVERSION    None, AQandU, LRAPA, EPA or WOODSMOKE
    UPDATE_INTERVAL_SECS    Seconds between polls (default: 300)
    AQI_INSTEAD_OF_DENSITY  Show AQI in the density field (default: false)
    VERBOSE_LOGGING         Log every poll at INFO (default: false)
    REQUEST_TIMEOUT         Seconds to wait for the sensor (default: 30)
    LOG_LEVEL               Python log level (default: INFO)
    HOST / PORT             Where the API listens (default: 0.0.0.0:8000)

Empty values count as "not set".
"""

import logging
import os
import sys
from typing import Mapping, Optional

from dotenv import load_dotenv

from airsensor.models import Averages, Conversion, EngineConfig
from airsensor.utils.validation import parse_bool

DEFAULT_UPDATE_INTERVAL_SECS = 300

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def _get(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = env.get(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _get_number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _get(env, name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_engine_config(env: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """
    Build the EngineConfig from the environment.

    Args:
        env: Variables to read (defaults to os.environ after loading .env)

    Raises:
        ValueError: A value is missing or doesn't make sense
    """
    if env is None:
        load_dotenv()
        env = os.environ

    averages_raw = _get(env, "PURPLEAIR_AVERAGES", Averages.REALTIME.value)
    conversion_raw = _get(env, "PURPLEAIR_CONVERSION", Conversion.NONE.value)
    try:
        averages = Averages(averages_raw)
    except ValueError:
        choices = ", ".join(a.value for a in Averages)
        raise ValueError(f"PURPLEAIR_AVERAGES must be one of {choices}, got {averages_raw!r}") from None
    try:
        conversion = Conversion(conversion_raw)
    except ValueError:
        choices = ", ".join(c.value for c in Conversion)
        raise ValueError(f"PURPLEAIR_CONVERSION must be one of {choices}, got {conversion_raw!r}") from None

    interval_secs = _get_number(env, "UPDATE_INTERVAL_SECS", DEFAULT_UPDATE_INTERVAL_SECS)

    return EngineConfig(
        name=_get(env, "PURPLEAIR_NAME", "PurpleAir"),
        sensor=_get(env, "PURPLEAIR_SENSOR", ""),
        read_key=_get(env, "PURPLEAIR_READ_KEY"),
        api_key=_get(env, "PURPLEAIR_API_KEY"),
        local_ip_address=_get(env, "PURPLEAIR_LOCAL_IP"),
        averages=averages,
        conversion=conversion,
        update_interval_ms=int(interval_secs * 1000),
        aqi_instead_of_density=parse_bool(_get(env, "AQI_INSTEAD_OF_DENSITY", "false")),
        verbose_logging=parse_bool(_get(env, "VERBOSE_LOGGING", "false")),
    )


def get_request_timeout(env: Optional[Mapping[str, str]] = None) -> float:
    return _get_number(os.environ if env is None else env, "REQUEST_TIMEOUT", 30.0)


def get_server_address(env: Optional[Mapping[str, str]] = None) -> tuple[str, int]:
    """Where the API listens: (HOST, PORT)."""
    env = os.environ if env is None else env
    port = _get_number(env, "PORT", 8000)
    if port != int(port) or not 0 < port < 65536:
        raise ValueError(f"PORT must be a TCP port number, got {port!r}")
    return _get(env, "HOST", "0.0.0.0"), int(port)


def get_log_level(env: Optional[Mapping[str, str]] = None) -> str:
    return _get(os.environ if env is None else env, "LOG_LEVEL", "INFO").upper()


def configure_logging(level: Optional[str] = None):
    """Send log messages to stderr with timestamps."""
    logging.basicConfig(
        level=level or get_log_level(),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
