"""
Sensor Engine
=============

This is the BRAIN of the whole operation!

WHAT IT DOES:
------------
1. Polls ONE PurpleAir sensor on a fixed interval (APScheduler job)
2. Refuses to poll more often than every 30 seconds, no matter who asks
3. Only lets one fetch run at a time
4. Keeps the latest reading (or nothing, if the last poll failed)
5. Tells the host about every new reading / failure through a callback

THE POLL CYCLE:
--------------
    [timer tick / refresh request]
            |
            | too soon? already fetching? -> skip (log it, change nothing)
            v
    [PurpleAirService.fetch]  ->  [normalize]  ->  new SensorReading
            |                           |
            +--------- any error -------+-> reading cleared to None
            v
    [on_update(reading or None)]

Failures are never fatal. A wrong sensor ID just means a logged error
every interval until somebody fixes the config.

Only update() writes the reading slot, and it always swaps in a whole new
(immutable) SensorReading, so readers never see a half-written value.
"""

import inspect
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from airsensor.exceptions import FetchError, FetchErrorKind, ParseError
from airsensor.models import EngineConfig, SensorReading
from airsensor.services.freshness import is_reading_active
from airsensor.services.normalizer import normalize
from airsensor.services.purple_air_service import PurpleAirService

logger = logging.getLogger(__name__)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SensorEngine:
    """
    Polls one sensor and caches its latest reading.

    HOW TO USE:
    ----------
    engine = SensorEngine(config, on_update=print)
    engine.start()                 # must be inside a running event loop

    engine.last_reading            # SensorReading or None
    engine.is_active()             # is that reading still fresh?

    await engine.shutdown()
    """

    # Never update more often than this, whatever the interval is set to.
    MIN_UPDATE_INTERVAL_MS = 30 * 1000

    def __init__(
        self,
        config: EngineConfig,
        service: Optional[PurpleAirService] = None,
        on_update: Optional[Callable[[Optional[SensorReading]], object]] = None,
        log: Optional[logging.Logger] = None,
        clock: Callable[[], float] = _wall_clock_ms,
    ):
        """
        Set up the engine.

        Args:
            config: Which sensor, how to reach it, how often to poll
            service: Fetcher to use (a fresh PurpleAirService by default)
            on_update: Called after every completed poll with the new
                       reading, or None when the poll failed. May be async.
            log: Logger to write to (this module's logger by default)
            clock: Returns "now" in epoch milliseconds
        """
        self.config = config
        self.service = service or PurpleAirService()
        self.on_update = on_update
        self.logger = log or logger
        self._clock = clock

        self._last_reading: Optional[SensorReading] = None
        self._in_flight = False
        self._closed = False

        # This is the scheduler - it runs jobs on a timer
        self.scheduler = AsyncIOScheduler()

        self.logger.info(
            f"Initializing PurpleAir sensor {config.name} ({config.source.value} "
            f"{config.local_ip_address or config.sensor}) update every "
            f"{config.update_interval_ms} ms using {config.averages.value} averages "
            f"and {config.conversion.value} conversion"
        )

    @property
    def poll_job_id(self) -> str:
        return f"poll_{self.config.name}"

    @property
    def refresh_job_id(self) -> str:
        return f"refresh_{self.config.name}"

    def _log(self, msg: str):
        """Progress messages: INFO when verbose logging is on, DEBUG otherwise."""
        if self.config.verbose_logging:
            self.logger.info(msg)
        else:
            self.logger.debug(msg)

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def last_reading(self) -> Optional[SensorReading]:
        """The latest reading, or None (no poll yet / last poll failed)."""
        return self._last_reading

    def is_active(self) -> bool:
        """
        Is the cached reading still fresh?

        Never waits on the network. If we have a reading, this also asks
        for an opportunistic refresh in the background (the 30s guard
        still applies), so someone checking status gets newer data soon.
        """
        reading = self._last_reading
        if reading is not None:
            self.request_refresh()
        return is_reading_active(reading, self._clock(), self.config.update_interval_ms)

    # =========================================================================
    # SCHEDULING
    # =========================================================================

    def start(self):
        """
        Start polling: one poll right now, then every update_interval_ms.

        Has to be called from inside a running event loop.
        """
        interval_secs = self.config.update_interval_ms / 1000
        self._log(f"[{self.config.name}] Starting poll job (interval: {interval_secs}s)")

        self.scheduler.add_job(
            self.update,
            trigger=IntervalTrigger(seconds=interval_secs),
            id=self.poll_job_id,
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()

    def request_refresh(self):
        """Schedule a one-off poll as soon as possible. Does not wait for it."""
        if self._closed or not self.scheduler.running:
            return
        self.scheduler.add_job(
            self.update,
            trigger=DateTrigger(run_date=datetime.now(timezone.utc)),
            id=self.refresh_job_id,
            max_instances=1,
            replace_existing=True,
        )

    # =========================================================================
    # POLLING
    # =========================================================================

    async def update(self) -> Optional[SensorReading]:
        """
        Run one poll attempt.

        Returns:
            The reading after this attempt. A skipped attempt returns the
            reading we already had; a failed one returns None.
        """
        if self._closed:
            self._log(f"[{self.config.name}] Engine is shut down, skipping a fetch")
            return None

        reading = self._last_reading
        if reading is not None:
            elapsed = self._clock() - reading.update_time_ms
            if elapsed < self.MIN_UPDATE_INTERVAL_MS:
                self._log(
                    f"[{self.config.name}] Skipping a fetch because the last update "
                    f"was {elapsed:.0f} ms ago"
                )
                return reading

        if self._in_flight:
            self._log(f"[{self.config.name}] Skipping a fetch because another one is in progress")
            return reading

        self._in_flight = True
        try:
            new_reading = await self._fetch_reading()
        finally:
            self._in_flight = False

        if self._closed:
            self._log(f"[{self.config.name}] Engine shut down during fetch, discarding result")
            return None

        self._last_reading = new_reading
        await self._notify(new_reading)
        return new_reading

    async def _fetch_reading(self) -> Optional[SensorReading]:
        """Fetch + normalize. Any failure is logged and turned into None."""
        url = self.service.describe_url(self.config)
        try:
            payload = await self.service.fetch(self.config)
            reading = normalize(
                payload,
                self.config.averages,
                self.config.conversion,
                now_ms=int(self._clock()),
            )
        except FetchError as e:
            if e.kind == FetchErrorKind.HTTP_STATUS:
                self.logger.error(f"Error fetching {url}: HTTP {e.status_code} {e.body}")
            else:
                self.logger.error(f"Error fetching {url}: {e}")
            return None
        except ParseError as e:
            self.logger.error(f"Error fetching {url}: {e}")
            return None
        except Exception as e:
            self.logger.error(f"Unexpected error fetching {url}: {e}", exc_info=True)
            return None

        self._log(f"Received new sensor reading {reading} for sensor {self.config.name}")
        return reading

    async def _notify(self, reading: Optional[SensorReading]):
        """Hand the new state to the host. A broken callback never stops polling."""
        if self.on_update is None:
            return
        try:
            result = self.on_update(reading)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.logger.error(f"[{self.config.name}] Error in update callback: {e}", exc_info=True)

    # =========================================================================
    # CLEANUP
    # =========================================================================

    async def shutdown(self):
        """Stop polling and close the HTTP client. In-flight fetches get discarded."""
        self._closed = True

        if self.scheduler.running:
            try:
                self.scheduler.shutdown(wait=False)
            except Exception as e:
                self.logger.error(f"Error shutting down scheduler: {e}", exc_info=True)

        try:
            await self.service.close()
        except Exception as e:
            self.logger.error(f"Error closing sensor service: {e}", exc_info=True)
