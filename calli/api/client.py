"""
Async HTTP client for the booking backend.

One coroutine per endpoint. Every call returns the decoded JSON object, or
raises ``TransportError`` when the request fails or the body is not a JSON
object. Application-level rejections (``{"ok": false}``) are returned as-is
for the flows to interpret; HTTP status codes alone are not treated as
failures because the backend reports its outcome in the body.
"""

import logging
from typing import Any, Optional

import httpx

from calli.config import settings
from calli.errors import TransportError
from calli.logging_context import get_action_logger

logger = get_action_logger(__name__)

JsonObject = dict[str, Any]


class BookingApiClient:
    """Thin async wrapper over ``httpx.AsyncClient`` for the six backend endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_sec: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url or settings.api.base_url
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout_sec or settings.api.timeout_sec,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "BookingApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, str]] = None,
        body: Optional[JsonObject] = None,
    ) -> JsonObject:
        headers = {"Content-Type": "application/json"} if body is not None else None
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._client.request(
                method, path, params=params, json=body, headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "%s %s returned a non-JSON body (status %s)",
                method, path, response.status_code,
            )
            raise TransportError(f"{method} {path} returned a non-JSON body") from e

        if not isinstance(data, dict):
            logger.error("%s %s returned %s instead of an object", method, path, type(data).__name__)
            raise TransportError(f"{method} {path} returned a non-object body")

        logger.debug("%s %s -> %s ok=%s", method, path, response.status_code, data.get("ok"))
        return data

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def list_services(self) -> JsonObject:
        """``GET /services`` -> ``{ok, items}``."""
        return await self._request("GET", "/services")

    async def list_today_bookings(self) -> JsonObject:
        """``GET /bookings/today`` -> ``{ok, items}``."""
        return await self._request("GET", "/bookings/today")

    async def get_slots(self, service_id: str, date_key: str) -> JsonObject:
        """``GET /slots?date=&serviceId=`` -> ``{ok, slots}``."""
        return await self._request(
            "GET", "/slots", params={"date": date_key, "serviceId": service_id},
        )

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    async def create_service(self, body: JsonObject) -> JsonObject:
        """``POST /services`` -> ``{ok, item|service}``."""
        return await self._request("POST", "/services", body=body)

    async def add_schedule(self, body: JsonObject) -> JsonObject:
        """``POST /schedules/add`` -> ``{ok, error?}``."""
        return await self._request("POST", "/schedules/add", body=body)

    async def create_booking(self, body: JsonObject) -> JsonObject:
        """``POST /bookings`` -> ``{ok, booking, error?}``."""
        return await self._request("POST", "/bookings", body=body)
