"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .sensor import router as sensor_router, set_sensor_engine, get_sensor_engine

__all__ = [
    "sensor_router",
    "set_sensor_engine",
    "get_sensor_engine",
]
