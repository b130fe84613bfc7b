"""
Sensor Models
=============
Pydantic models for PurpleAir configuration, payloads and readings.

This module defines all data structures used throughout the application:
- Selectors: which averaging window / correction formula to use
- Config: how to reach the sensor and how often to poll it
- Payloads: the raw JSON, tagged with where it came from
- Readings: the canonical, corrected reading
- Response models: what the API hands back to a host
"""

from enum import Enum, IntEnum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from airsensor.utils.validation import (
    validate_ip_address,
    validate_sensor_index,
    validate_update_interval,
)


# =============================================================================
# ENUMS
# =============================================================================

class Averages(str, Enum):
    """
    Averaging window for the PM2.5 value.

    The cloud API reports the current value plus several rolling averages
    under "stats". The local /json endpoint only has the current value,
    so this selector only matters for cloud sensors.
    """
    REALTIME = "realtime"
    TEN_MINUTES = "10m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "60m"
    SIX_HOURS = "6h"
    ONE_DAY = "24h"
    ONE_WEEK = "1w"

    @property
    def stats_key(self) -> str:
        """Field name inside the cloud sensor's "stats" block."""
        return _STATS_KEYS[self]


_STATS_KEYS = {
    Averages.REALTIME: "pm2.5",
    Averages.TEN_MINUTES: "pm2.5_10minute",
    Averages.THIRTY_MINUTES: "pm2.5_30minute",
    Averages.ONE_HOUR: "pm2.5_60minute",
    Averages.SIX_HOURS: "pm2.5_6hour",
    Averages.ONE_DAY: "pm2.5_24hour",
    Averages.ONE_WEEK: "pm2.5_1week",
}


class Conversion(str, Enum):
    """
    Correction formula applied to the raw PM2.5 density.

    - NONE: use the sensor value as-is
    - AQANDU: University of Utah AQ&U calibration
    - LRAPA: Lane Regional Air Protection Agency (wood smoke heavy areas)
    - EPA: US EPA 2021 correction (needs CF=1 density and humidity)
    - WOODSMOKE: EPA wood smoke calibration
    """
    NONE = "None"
    AQANDU = "AQandU"
    LRAPA = "LRAPA"
    EPA = "EPA"
    WOODSMOKE = "WOODSMOKE"


class AirQualityCategory(IntEnum):
    """
    Small ordinal air quality scale (same numbering as HomeKit's
    AirQuality characteristic). UNKNOWN is the fallback for bad input.
    """
    UNKNOWN = 0
    EXCELLENT = 1
    GOOD = 2
    FAIR = 3
    INFERIOR = 4
    POOR = 5


class SensorSource(str, Enum):
    """Where readings come from."""
    CLOUD = "cloud"
    LOCAL = "local"


# =============================================================================
# CONFIG
# =============================================================================

class EngineConfig(BaseModel):
    """
    Everything the engine needs to know about one sensor.

    If local_ip_address is set we ALWAYS talk to the sensor directly
    (http://<ip>/json) and ignore the cloud settings.

    Example:
        EngineConfig(
            name="Backyard",
            sensor="12345",
            api_key="ABCD-1234",
            update_interval_ms=300_000,
        )
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field("PurpleAir", description="Friendly name used in log messages")
    sensor: str = Field("", description="PurpleAir sensor index (cloud API)")
    read_key: Optional[str] = Field(None, description="Read key for private sensors (query parameter)")
    api_key: Optional[str] = Field(None, description="PurpleAir API key (X-API-Key header)")
    local_ip_address: Optional[str] = Field(None, description="Sensor IP on the local network")
    averages: Averages = Field(Averages.REALTIME, description="Averaging window for PM2.5")
    conversion: Conversion = Field(Conversion.NONE, description="PM2.5 correction formula")
    update_interval_ms: int = Field(300_000, description="Milliseconds between polls")
    aqi_instead_of_density: bool = Field(
        False, description="Surface AQI in the density field instead of µg/m³"
    )
    verbose_logging: bool = Field(False, description="Log poll progress at INFO instead of DEBUG")

    @field_validator("read_key", "api_key", "local_ip_address", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("local_ip_address")
    @classmethod
    def _check_ip(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not validate_ip_address(value):
            raise ValueError(f"Invalid local IP address: {value}")
        return value

    @field_validator("update_interval_ms")
    @classmethod
    def _check_interval(cls, value: int) -> int:
        if not validate_update_interval(value):
            raise ValueError(f"Update interval must be positive, got {value} ms")
        return value

    @model_validator(mode="after")
    def _check_source(self) -> "EngineConfig":
        if self.local_ip_address is None and not self.sensor.strip():
            raise ValueError("A sensor index is required when no local IP address is set")
        if self.sensor and not validate_sensor_index(self.sensor):
            raise ValueError(f"Invalid sensor index: {self.sensor}")
        return self

    @property
    def uses_local_sensor(self) -> bool:
        return self.local_ip_address is not None

    @property
    def source(self) -> SensorSource:
        return SensorSource.LOCAL if self.uses_local_sensor else SensorSource.CLOUD


# =============================================================================
# RAW PAYLOADS
# =============================================================================

class CloudPayload(BaseModel):
    """JSON from https://api.purpleair.com/v1/sensors/<id> (sensor record under "sensor")."""
    source: Literal["cloud"] = "cloud"
    data: dict


class LocalPayload(BaseModel):
    """JSON from http://<ip>/json (flat object, different field names)."""
    source: Literal["local"] = "local"
    data: dict


RawPayload = Union[CloudPayload, LocalPayload]


# =============================================================================
# READINGS
# =============================================================================

class SensorReading(BaseModel):
    """
    One successful poll, cleaned up and corrected.

    Readings are immutable: every poll makes a brand new one and the
    engine swaps it in as a whole.

    update_time_ms is OUR clock at the moment the fetch finished, not the
    timestamp the sensor reports.
    """
    model_config = ConfigDict(frozen=True)

    update_time_ms: int = Field(..., description="Epoch milliseconds when the reading was made")
    pm25: float = Field(..., ge=0, description="Corrected PM2.5 density µg/m³")
    pm25_cf1: Optional[float] = Field(None, description="Raw CF=1 PM2.5 density µg/m³")
    aqi: int = Field(..., ge=0, description="US EPA AQI from pm25")
    air_quality: AirQualityCategory = Field(..., description="Category derived from aqi")
    temperature: Optional[float] = Field(None, description="Temperature °C")
    humidity: float = Field(..., description="Relative humidity %")
    voc: Optional[float] = Field(None, description="VOC reading, if the sensor has one")
    conversion: Conversion = Field(Conversion.NONE, description="Formula used for pm25")

    def __str__(self) -> str:
        return (
            f"pm25={self.pm25:.1f} µg/m³ ({self.conversion.value}), aqi={self.aqi}, "
            f"air_quality={self.air_quality.name}, humidity={self.humidity}%, "
            f"temperature={self.temperature}, voc={self.voc}"
        )


# =============================================================================
# RESPONSE MODELS - What the API hands back
# =============================================================================

class SensorStatusResponse(BaseModel):
    """Status of the engine as seen by the host."""
    name: str
    sensor: str
    source: SensorSource
    active: bool = Field(..., description="Is the last reading fresh?")
    update_interval_ms: int
    last_reading: Optional[SensorReading] = None


class CharacteristicsResponse(BaseModel):
    """
    A reading mapped onto the host's presentation fields.

    pm2_5_density holds the AQI instead of µg/m³ when the sensor is
    configured with aqi_instead_of_density.
    """
    air_quality: AirQualityCategory = AirQualityCategory.UNKNOWN
    pm2_5_density: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    voc: Optional[float] = None
    status_active: bool = False

    @classmethod
    def from_reading(
        cls,
        reading: Optional[SensorReading],
        aqi_instead_of_density: bool,
        active: bool,
    ) -> "CharacteristicsResponse":
        if reading is None:
            return cls(status_active=False)
        density = float(reading.aqi) if aqi_instead_of_density else reading.pm25
        return cls(
            air_quality=reading.air_quality,
            pm2_5_density=density,
            temperature=reading.temperature,
            humidity=reading.humidity,
            voc=reading.voc,
            status_active=active,
        )
