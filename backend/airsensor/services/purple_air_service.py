"""
Purple Air Sensor Service
=========================

This is the part that actually talks to the network.

WHAT THIS DOES:
--------------
1. Works out WHERE to get data from (cloud API or the sensor itself)
2. Does one GET request
3. Hands back the raw JSON, tagged with where it came from

It does NOT retry. If something fails we raise a FetchError and the
engine simply tries again on its next scheduled poll.

TWO WAYS TO REACH A SENSOR:
--------------------------
    Local network (no auth, always wins if an IP is configured)
        GET http://192.168.1.100/json

    PurpleAir cloud
        GET https://api.purpleair.com/v1/sensors/12345?read_key=<read key>
        X-API-Key: <api key>
"""

import ipaddress
import logging
from typing import Optional

import httpx

from airsensor.exceptions import FetchError, FetchErrorKind, ParseError
from airsensor.models import CloudPayload, EngineConfig, LocalPayload, RawPayload

logger = logging.getLogger(__name__)


class PurpleAirService:
    """
    Fetches raw JSON from a PurpleAir sensor.

    HOW TO USE:
    ----------
    service = PurpleAirService()
    try:
        payload = await service.fetch(config)
    except FetchError as e:
        print("Something went wrong:", e.kind, e)
    finally:
        await service.close()
    """

    CLOUD_API_URL = "https://api.purpleair.com/v1/sensors"
    API_KEY_HEADER = "X-API-Key"

    # How much of an error body we keep for the logs
    MAX_ERROR_BODY = 500

    def __init__(
        self,
        request_timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Set up the service.

        Args:
            request_timeout: How long to wait for the sensor/cloud (seconds)
            http_client: Bring your own client (tests pass one with a mock transport)
        """
        # One client for every poll so connections get reused
        self.http_client = http_client or httpx.AsyncClient(timeout=request_timeout)

    def build_request(self, config: EngineConfig) -> tuple[str, dict, dict]:
        """
        Work out the URL, query parameters and headers for one fetch.

        Returns:
            (url, params, headers)
        """
        if config.uses_local_sensor:
            return f"http://{self._url_host(config.local_ip_address)}/json", {}, {}

        url = f"{self.CLOUD_API_URL}/{config.sensor}"
        params = {}
        headers = {}
        if config.read_key:
            params["read_key"] = config.read_key
        if config.api_key:
            headers[self.API_KEY_HEADER] = config.api_key
        return url, params, headers

    @staticmethod
    def _url_host(ip: str) -> str:
        """IPv6 literals need brackets inside a URL."""
        if ipaddress.ip_address(ip).version == 6:
            return f"[{ip}]"
        return ip

    def describe_url(self, config: EngineConfig) -> str:
        """URL for log messages (no keys in it)."""
        url, _, _ = self.build_request(config)
        return url

    async def fetch(self, config: EngineConfig) -> RawPayload:
        """
        Get the raw JSON for one sensor.

        Returns:
            LocalPayload for a local IP, CloudPayload otherwise

        Raises:
            FetchError: connection problem, bad HTTP status, or the
                        cloud doesn't know this sensor
            ParseError: the response wasn't JSON
        """
        url, params, headers = self.build_request(config)
        logger.debug(f"[{config.name}] Fetching url {url} with params {params}")

        try:
            response = await self.http_client.get(url, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:self.MAX_ERROR_BODY]
            raise FetchError(
                FetchErrorKind.HTTP_STATUS,
                f"HTTP error {e.response.status_code}",
                url=url,
                status_code=e.response.status_code,
                body=body,
            ) from e
        except httpx.TimeoutException as e:
            raise FetchError(
                FetchErrorKind.NETWORK,
                f"Request to {url} timed out",
                url=url,
            ) from e
        except httpx.RequestError as e:
            raise FetchError(
                FetchErrorKind.NETWORK,
                f"Cannot connect to {url}: {e}",
                url=url,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(
                FetchErrorKind.NETWORK,
                f"Request to {url} failed: {e}",
                url=url,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError("<body>", f"Response from {url} is not valid JSON") from e

        if config.uses_local_sensor:
            if not isinstance(data, dict):
                raise ParseError("<body>", f"Response from {url} is not a JSON object")
            return LocalPayload(data=data)

        # The API answered fine but has no record for this sensor
        if not isinstance(data, dict) or data.get("sensor") is None:
            raise FetchError(
                FetchErrorKind.MISSING_SENSOR,
                f"No sensor found with ID {config.sensor}",
                url=url,
            )
        return CloudPayload(data=data)

    async def close(self):
        """
        Clean up when we're done.

        Called when the engine shuts down.
        """
        await self.http_client.aclose()
