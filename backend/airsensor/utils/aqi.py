"""
PM2.5 Unit Conversion
=====================

Pure functions that turn a raw PurpleAir PM2.5 density into:
1. A corrected density (the sensors read high, so agencies publish fixes)
2. A US EPA AQI number
3. A small 0-5 air quality category

No network, no state - easy to test.
"""

import math
from typing import NamedTuple, Optional

from airsensor.models import AirQualityCategory, Conversion


class AqiBreakpoint(NamedTuple):
    """One row of the EPA table: density range -> AQI range."""
    conc_low: float
    conc_high: float
    aqi_low: int
    aqi_high: int


# US EPA PM2.5 breakpoints (µg/m³), lowest first.
PM25_BREAKPOINTS = (
    AqiBreakpoint(0.0, 12.0, 0, 50),
    AqiBreakpoint(12.1, 35.4, 51, 100),
    AqiBreakpoint(35.5, 55.4, 101, 150),
    AqiBreakpoint(55.5, 150.4, 151, 200),
    AqiBreakpoint(150.5, 250.4, 201, 300),
    AqiBreakpoint(250.5, 350.4, 301, 400),
    AqiBreakpoint(350.5, 500.4, 401, 500),
)

# Keeps the top-bracket extrapolation finite for absurd (or infinite) input.
MAX_DENSITY = 1_000_000.0

# Upper AQI bound for each category, best first. Anything higher is POOR.
_CATEGORY_LIMITS = (
    (50, AirQualityCategory.EXCELLENT),
    (100, AirQualityCategory.GOOD),
    (150, AirQualityCategory.FAIR),
    (200, AirQualityCategory.INFERIOR),
)


# =============================================================================
# CORRECTION FORMULAS
# =============================================================================

def _epa_correction(pm25_cf1: float, humidity: float) -> float:
    """
    US EPA 2021 PurpleAir correction (the one used on the AirNow fire map).

    Works on the CF=1 density. Piecewise, with linear blends between
    the ranges so the curve has no jumps.
    """
    pa = pm25_cf1
    rh = humidity
    if pa < 30:
        return 0.524 * pa - 0.0862 * rh + 5.75
    if pa < 50:
        w = pa / 20 - 3 / 2
        return (0.786 * w + 0.524 * (1 - w)) * pa - 0.0862 * rh + 5.75
    if pa < 210:
        return 0.786 * pa - 0.0862 * rh + 5.75
    if pa < 260:
        w = pa / 50 - 21 / 5
        return (
            (0.69 * w + 0.786 * (1 - w)) * pa
            - 0.0862 * rh * (1 - w)
            + 2.966 * w
            + 5.75 * (1 - w)
            + 8.84e-4 * pa ** 2 * w
        )
    return 2.966 + 0.69 * pa + 8.84e-4 * pa ** 2


def correct_density(
    raw_pm25: float,
    conversion: Conversion,
    humidity: Optional[float] = None,
) -> float:
    """
    Apply a correction formula to one raw PM2.5 density.

    The normalizer already picked WHICH raw value (averaging window,
    CF=1 vs ATM) before calling this - we only do the math.

    Args:
        raw_pm25: Density in µg/m³ (CF=1 for EPA, otherwise the ATM value)
        conversion: Which formula to apply
        humidity: Relative humidity %, only needed for EPA

    Returns:
        Corrected density, never below 0
    """
    if conversion == Conversion.AQANDU:
        corrected = 0.778 * raw_pm25 + 2.65
    elif conversion == Conversion.LRAPA:
        corrected = 0.5 * raw_pm25 - 0.66
    elif conversion == Conversion.WOODSMOKE:
        corrected = 0.55 * raw_pm25 + 0.53
    elif conversion == Conversion.EPA and humidity is not None:
        corrected = _epa_correction(raw_pm25, humidity)
    else:
        corrected = raw_pm25
    return max(0.0, corrected)


# =============================================================================
# AQI
# =============================================================================

def _find_breakpoint(pm25: float) -> AqiBreakpoint:
    """Last bracket whose low end is <= pm25 (gaps use the bracket below)."""
    selected = PM25_BREAKPOINTS[0]
    for breakpoint in PM25_BREAKPOINTS:
        if breakpoint.conc_low <= pm25:
            selected = breakpoint
        else:
            break
    return selected


def density_to_aqi(pm25: float) -> int:
    """
    Convert a PM2.5 density to the US EPA AQI.

    aqi = ((aqi_high - aqi_low) / (conc_high - conc_low)) * (pm25 - conc_low) + aqi_low

    Negative or NaN density counts as 0. Above the top of the table the
    last bracket's slope keeps going, so the AQI can pass 500.

    Example:
        density_to_aqi(12.3)  ->  51
    """
    if math.isnan(pm25) or pm25 < 0:
        pm25 = 0.0
    pm25 = min(pm25, MAX_DENSITY)

    bp = _find_breakpoint(pm25)
    slope = (bp.aqi_high - bp.aqi_low) / (bp.conc_high - bp.conc_low)
    aqi = slope * (pm25 - bp.conc_low) + bp.aqi_low
    # round half up; round() would do banker's rounding
    return int(math.floor(aqi + 0.5))


def aqi_to_homekit_category(aqi: Optional[float]) -> AirQualityCategory:
    """
    Map an AQI onto the 1 (excellent) .. 5 (poor) scale.

    None, NaN or negative input gives UNKNOWN.
    """
    if aqi is None or math.isnan(aqi) or aqi < 0:
        return AirQualityCategory.UNKNOWN
    for limit, category in _CATEGORY_LIMITS:
        if aqi <= limit:
            return category
    return AirQualityCategory.POOR
