"""Tests for the reading model and its host presentation."""

import pytest
from pydantic import ValidationError

from airsensor.models import (
    AirQualityCategory,
    Averages,
    CharacteristicsResponse,
    Conversion,
    SensorReading,
)


def _reading(**overrides) -> SensorReading:
    fields = dict(
        update_time_ms=1_000,
        pm25=12.3,
        aqi=51,
        air_quality=AirQualityCategory.GOOD,
        humidity=45,
        temperature=21,
    )
    fields.update(overrides)
    return SensorReading(**fields)


def test_reading_is_immutable():
    reading = _reading()
    with pytest.raises(ValidationError):
        reading.pm25 = 1.0


def test_negative_density_rejected():
    with pytest.raises(ValidationError):
        _reading(pm25=-0.1)


def test_str_summarizes_reading():
    text = str(_reading(conversion=Conversion.LRAPA))
    assert "aqi=51" in text
    assert "LRAPA" in text
    assert "GOOD" in text


def test_stats_keys():
    assert Averages.REALTIME.stats_key == "pm2.5"
    assert Averages.TEN_MINUTES.stats_key == "pm2.5_10minute"
    assert Averages.ONE_WEEK.stats_key == "pm2.5_1week"


def test_characteristics_density_or_aqi():
    reading = _reading()

    density = CharacteristicsResponse.from_reading(reading, aqi_instead_of_density=False, active=True)
    aqi = CharacteristicsResponse.from_reading(reading, aqi_instead_of_density=True, active=False)

    assert density.pm2_5_density == pytest.approx(12.3)
    assert density.status_active is True
    assert aqi.pm2_5_density == 51
    assert aqi.status_active is False


def test_characteristics_without_reading():
    shown = CharacteristicsResponse.from_reading(None, aqi_instead_of_density=False, active=True)

    assert shown.status_active is False
    assert shown.air_quality == AirQualityCategory.UNKNOWN
    assert shown.humidity is None
