"""
Errors raised while getting a reading out of a PurpleAir sensor.

Two families:
- FetchError: the network call itself didn't give us a usable sensor record
- ParseError: we got JSON back, but a field we need is missing or broken

Neither one is fatal. The engine catches both, clears the cached reading
and tries again on the next poll.
"""

from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    """Why a fetch failed."""
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    MISSING_SENSOR = "missing_sensor"


class SensorDataError(Exception):
    """Base class for everything that can go wrong during a poll."""


class FetchError(SensorDataError):
    """
    The sensor (or the cloud API) could not be read.

    Attributes:
        kind: network, http_status or missing_sensor
        detail: Human-readable explanation
        url: The URL we were fetching
        status_code: HTTP status (only for http_status)
        body: Response body, truncated (only for http_status)
    """

    def __init__(
        self,
        kind: FetchErrorKind,
        detail: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.url = url
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.kind == FetchErrorKind.HTTP_STATUS and self.body:
            return f"{self.detail}: {self.body}"
        return self.detail


class ParseError(SensorDataError):
    """A required field was missing (or not a number) in the sensor JSON."""

    def __init__(self, field: str, detail: Optional[str] = None):
        self.field = field
        self.detail = detail or f"Missing required field '{field}'"
        super().__init__(self.detail)
