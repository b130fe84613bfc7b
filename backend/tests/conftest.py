"""
Pytest configuration for the sensor engine tests.

Provides a controllable clock and a stub fetcher so nothing touches
the network.
"""

from typing import List, Optional

import pytest

from airsensor.exceptions import SensorDataError
from airsensor.models import CloudPayload, EngineConfig, LocalPayload, RawPayload

CLOUD_SAMPLE = {
    "api_version": "V1.0.11-0.0.41",
    "data_time_stamp": 1700000000,
    "sensor": {
        "sensor_index": 12345,
        "pm2.5": 12.3,
        "pm2.5_cf_1": 14.0,
        "humidity": 45,
        "temperature": 21,
        "stats": {
            "pm2.5": 12.3,
            "pm2.5_10minute": 10.0,
            "pm2.5_30minute": 20.0,
            "pm2.5_60minute": 40.0,
            "pm2.5_6hour": 8.0,
            "pm2.5_24hour": 6.0,
            "pm2.5_1week": 5.0,
        },
    },
}

LOCAL_SAMPLE = {
    "SensorId": "84:f3:eb:7b:c8:ee",
    "DateTime": "2020/01/01T00:00:00z",
    "current_temp_f": 68,
    "current_humidity": 40,
    "pm2_5_atm": 10.0,
    "pm2_5_atm_b": 14.0,
    "pm2_5_cf_1": 11.0,
    "pm2_5_cf_1_b": 15.0,
    "gas_680": 88.5,
}


class FakeClock:
    """Epoch-millisecond clock the test moves by hand."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int):
        self.now_ms += ms


class StubService:
    """Stands in for PurpleAirService; returns queued payloads or raises queued errors."""

    def __init__(self, results: Optional[List] = None):
        self.results = list(results or [])
        self.fetch_calls = 0
        self.closed = False

    def describe_url(self, config: EngineConfig) -> str:
        return f"https://api.purpleair.com/v1/sensors/{config.sensor}"

    async def fetch(self, config: EngineConfig) -> RawPayload:
        self.fetch_calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, SensorDataError):
            raise result
        return result

    async def close(self):
        self.closed = True


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cloud_config() -> EngineConfig:
    return EngineConfig(name="Backyard", sensor="12345", update_interval_ms=300_000)


@pytest.fixture
def local_config() -> EngineConfig:
    return EngineConfig(name="Kitchen", sensor="", local_ip_address="192.168.1.50")


@pytest.fixture
def cloud_payload() -> CloudPayload:
    return CloudPayload(data=CLOUD_SAMPLE)


@pytest.fixture
def local_payload() -> LocalPayload:
    return LocalPayload(data=LOCAL_SAMPLE)
