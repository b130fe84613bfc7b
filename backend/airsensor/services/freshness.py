"""Is the last reading still young enough to trust?"""

from typing import Optional

from airsensor.models import SensorReading


def is_reading_active(
    reading: Optional[SensorReading],
    now_ms: float,
    update_interval_ms: int,
) -> bool:
    """True when there is a reading and it is younger than one poll interval."""
    if reading is None:
        return False
    return now_ms - reading.update_time_ms < update_interval_ms
