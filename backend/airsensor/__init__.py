"""
PurpleAir Sensor Engine
=======================

Polls a single PurpleAir sensor, turns its JSON into a clean reading
and keeps track of whether that reading is still fresh.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a reading look like?)
- services/  = Workers (fetch, normalize, schedule polls)
- routers/   = API endpoints (how the host shows the reading)
- utils/     = Pure helpers (AQI math, input validation)
- config.py  = Environment / .env loading and logging setup
- main.py    = Puts it all together and starts the server
"""

__version__ = "1.0.0"
