"""
Reading Normalizer
==================

Turns raw PurpleAir JSON into a SensorReading.

The cloud API and the sensor's own /json endpoint describe the same
thing with different shapes:

CLOUD (https://api.purpleair.com/v1/sensors/<id>):
    {
        "sensor": {
            "pm2.5": 12.3,
            "pm2.5_cf_1": 14.0,
            "humidity": 45,
            "temperature": 71,
            "voc": 120,
            "stats": {"pm2.5_10minute": 11.9, "pm2.5_60minute": 10.4, ...}
        }
    }

LOCAL (http://<ip>/json):
    {
        "current_temp_f": 72,
        "current_humidity": 45,
        "pm2_5_atm": 12.5,       # channel A
        "pm2_5_atm_b": 12.1,     # channel B (not on every model)
        "pm2_5_cf_1": 12.9,
        "pm2_5_cf_1_b": 12.4,
        "gas_680": 98.3          # only on sensors with a VOC chip
    }

Everything here is pure - give it the same JSON and the same clock,
get the same reading.
"""

import time
from typing import Any, Optional

from airsensor.exceptions import ParseError
from airsensor.models import (
    Averages,
    CloudPayload,
    Conversion,
    LocalPayload,
    RawPayload,
    SensorReading,
)
from airsensor.utils.aqi import aqi_to_homekit_category, correct_density, density_to_aqi


def _to_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ParseError(field, f"Field '{field}' is not a number: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParseError(field, f"Field '{field}' is not a number: {value!r}") from None


def _required(data: dict, field: str) -> float:
    value = data.get(field)
    if value is None:
        raise ParseError(field)
    return _to_float(value, field)


def _optional(data: dict, field: str) -> Optional[float]:
    value = data.get(field)
    if value is None:
        return None
    return _to_float(value, field)


def _channel_mean(data: dict, field_a: str, field_b: str) -> Optional[float]:
    """Average of channel A and B; B is optional (single-laser models)."""
    a = _optional(data, field_a)
    if a is None:
        return None
    b = _optional(data, field_b)
    return a if b is None else (a + b) / 2


def _extract_cloud(data: dict, averages: Averages) -> dict:
    sensor = data.get("sensor")
    if not isinstance(sensor, dict):
        raise ParseError("sensor", "Cloud response has no sensor record")

    # realtime lives on the record itself, averages under "stats";
    # either one may show up in the other place
    key = averages.stats_key
    stats = sensor.get("stats")
    if not isinstance(stats, dict):
        stats = {}
    places = (sensor, stats) if averages == Averages.REALTIME else (stats, sensor)
    raw = next((place[key] for place in places if place.get(key) is not None), None)
    if raw is None:
        raise ParseError(key)

    return {
        "pm25": _to_float(raw, key),
        "pm25_cf1": _optional(sensor, "pm2.5_cf_1"),
        "humidity": _required(sensor, "humidity"),
        # surfaced as the API reports it
        "temperature": _optional(sensor, "temperature"),
        "voc": _optional(sensor, "voc"),
    }


def _extract_local(data: dict) -> dict:
    pm25 = _channel_mean(data, "pm2_5_atm", "pm2_5_atm_b")
    if pm25 is None:
        raise ParseError("pm2_5_atm")

    temp_f = _optional(data, "current_temp_f")
    return {
        "pm25": pm25,
        "pm25_cf1": _channel_mean(data, "pm2_5_cf_1", "pm2_5_cf_1_b"),
        "humidity": _required(data, "current_humidity"),
        "temperature": None if temp_f is None else (temp_f - 32) * 5 / 9,
        "voc": _optional(data, "gas_680"),
    }


def normalize(
    payload: RawPayload,
    averages: Averages = Averages.REALTIME,
    conversion: Conversion = Conversion.NONE,
    now_ms: Optional[int] = None,
) -> SensorReading:
    """
    Build a SensorReading out of a raw payload.

    Args:
        payload: CloudPayload or LocalPayload from the fetch step
        averages: Which cloud averaging window to read PM2.5 from
        conversion: Which correction formula to apply
        now_ms: Timestamp to stamp on the reading (defaults to wall clock)

    Returns:
        The corrected reading

    Raises:
        ParseError: humidity or PM2.5 missing, or a field isn't a number
    """
    if isinstance(payload, LocalPayload):
        fields = _extract_local(payload.data)
    elif isinstance(payload, CloudPayload):
        fields = _extract_cloud(payload.data, averages)
    else:
        raise TypeError(f"Unsupported payload type: {type(payload).__name__}")

    # EPA is defined on the CF=1 density
    source_pm = fields["pm25"]
    if conversion == Conversion.EPA and fields["pm25_cf1"] is not None:
        source_pm = fields["pm25_cf1"]

    pm25 = correct_density(source_pm, conversion, humidity=fields["humidity"])
    aqi = density_to_aqi(pm25)

    return SensorReading(
        update_time_ms=int(time.time() * 1000) if now_ms is None else now_ms,
        pm25=pm25,
        pm25_cf1=fields["pm25_cf1"],
        aqi=aqi,
        air_quality=aqi_to_homekit_category(aqi),
        temperature=fields["temperature"],
        humidity=fields["humidity"],
        voc=fields["voc"],
        conversion=conversion,
    )


def parse_purple_air_json(
    data: dict,
    averages: Averages = Averages.REALTIME,
    conversion: Conversion = Conversion.NONE,
    uses_local_sensor: bool = False,
    now_ms: Optional[int] = None,
) -> SensorReading:
    """Same as normalize(), for callers that only have the JSON and a flag."""
    if not isinstance(data, dict):
        raise ParseError("<body>", "Sensor response is not a JSON object")
    payload = LocalPayload(data=data) if uses_local_sensor else CloudPayload(data=data)
    return normalize(payload, averages, conversion, now_ms=now_ms)
