"""Tests for environment loading and config validation."""

import importlib
import logging

import pytest
from pydantic import ValidationError

import airsensor.__main__ as airsensor_main
from airsensor.config import (
    LOG_FORMAT,
    get_log_level,
    get_request_timeout,
    get_server_address,
    load_engine_config,
)
from airsensor.models import Averages, Conversion, EngineConfig, SensorSource
from airsensor.utils import parse_bool, validate_ip_address, validate_sensor_index


def test_defaults():
    config = load_engine_config({"PURPLEAIR_SENSOR": "12345"})

    assert config.sensor == "12345"
    assert config.name == "PurpleAir"
    assert config.averages == Averages.REALTIME
    assert config.conversion == Conversion.NONE
    assert config.update_interval_ms == 300_000
    assert config.aqi_instead_of_density is False
    assert config.verbose_logging is False
    assert config.source == SensorSource.CLOUD


def test_full_environment():
    config = load_engine_config(
        {
            "PURPLEAIR_NAME": "Backyard",
            "PURPLEAIR_SENSOR": "12345",
            "PURPLEAIR_READ_KEY": "rk",
            "PURPLEAIR_API_KEY": "ak",
            "PURPLEAIR_AVERAGES": "60m",
            "PURPLEAIR_CONVERSION": "EPA",
            "UPDATE_INTERVAL_SECS": "120",
            "AQI_INSTEAD_OF_DENSITY": "true",
            "VERBOSE_LOGGING": "yes",
        }
    )

    assert config.name == "Backyard"
    assert config.read_key == "rk"
    assert config.api_key == "ak"
    assert config.averages == Averages.ONE_HOUR
    assert config.conversion == Conversion.EPA
    assert config.update_interval_ms == 120_000
    assert config.aqi_instead_of_density is True
    assert config.verbose_logging is True


def test_local_ip_selects_local_source():
    config = load_engine_config({"PURPLEAIR_LOCAL_IP": "10.0.0.7"})

    assert config.uses_local_sensor is True
    assert config.source == SensorSource.LOCAL


def test_blank_values_count_as_unset():
    config = load_engine_config(
        {"PURPLEAIR_SENSOR": "12345", "PURPLEAIR_LOCAL_IP": "  ", "PURPLEAIR_API_KEY": ""}
    )

    assert config.local_ip_address is None
    assert config.api_key is None


def test_bad_averages_rejected():
    with pytest.raises(ValueError, match="PURPLEAIR_AVERAGES"):
        load_engine_config({"PURPLEAIR_SENSOR": "1", "PURPLEAIR_AVERAGES": "5m"})


def test_bad_conversion_rejected():
    with pytest.raises(ValueError, match="PURPLEAIR_CONVERSION"):
        load_engine_config({"PURPLEAIR_SENSOR": "1", "PURPLEAIR_CONVERSION": "magic"})


def test_bad_interval_rejected():
    with pytest.raises(ValueError, match="UPDATE_INTERVAL_SECS"):
        load_engine_config({"PURPLEAIR_SENSOR": "1", "UPDATE_INTERVAL_SECS": "soon"})


def test_sensor_required_without_local_ip():
    with pytest.raises(ValueError):
        load_engine_config({})


def test_invalid_ip_rejected():
    with pytest.raises(ValidationError):
        EngineConfig(local_ip_address="999.1.1.1")


def test_non_numeric_sensor_index_rejected():
    with pytest.raises(ValidationError):
        EngineConfig(sensor="my-sensor")


def test_non_positive_interval_rejected():
    with pytest.raises(ValidationError):
        EngineConfig(sensor="1", update_interval_ms=0)


def test_config_is_frozen():
    config = EngineConfig(sensor="1")
    with pytest.raises(ValidationError):
        config.sensor = "2"


def test_timeout_and_log_level():
    assert get_request_timeout({"REQUEST_TIMEOUT": "5"}) == 5.0
    assert get_request_timeout({}) == 30.0
    assert get_log_level({"LOG_LEVEL": "debug"}) == "DEBUG"
    assert get_log_level({}) == "INFO"


def test_validation_helpers():
    assert validate_ip_address("192.168.1.100")
    assert not validate_ip_address("not-an-ip")
    assert validate_sensor_index("12345")
    assert not validate_sensor_index("12a45")
    assert not validate_sensor_index("")
    assert parse_bool("TRUE") and parse_bool(" on ")
    assert not parse_bool("nope")


def test_server_address():
    assert get_server_address({}) == ("0.0.0.0", 8000)
    assert get_server_address({"HOST": "127.0.0.1", "PORT": "9000"}) == ("127.0.0.1", 9000)


def test_blank_host_and_port_use_defaults():
    assert get_server_address({"HOST": "", "PORT": " "}) == ("0.0.0.0", 8000)


def test_bad_port_rejected():
    with pytest.raises(ValueError, match="PORT"):
        get_server_address({"PORT": "http"})
    with pytest.raises(ValueError, match="PORT"):
        get_server_address({"PORT": "70000"})


def test_importing_app_leaves_logging_alone():
    import airsensor.main

    importlib.reload(airsensor.main)

    assert not any(
        h.formatter is not None and h.formatter._fmt == LOG_FORMAT
        for h in logging.getLogger().handlers
    )


def test_main_configures_logging_and_runs_server(monkeypatch):
    calls = {}
    monkeypatch.setattr(airsensor_main, "load_dotenv", lambda: None)
    monkeypatch.setattr(airsensor_main, "configure_logging", lambda: calls.setdefault("logging", True))
    monkeypatch.setattr(
        airsensor_main.uvicorn, "run", lambda app, host, port: calls.update(app=app, host=host, port=port)
    )
    monkeypatch.setenv("HOST", "")
    monkeypatch.setenv("PORT", "")

    airsensor_main.main()

    assert calls == {"logging": True, "app": "airsensor.main:app", "host": "0.0.0.0", "port": 8000}
