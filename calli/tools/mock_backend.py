"""
Mock booking backend served through ``httpx.MockTransport``.

In production the engine talks to the real booking API. This stand-in
keeps services, schedules and bookings in memory and answers the same six
endpoints, wrapping ids and numbers in extended-JSON the way the real
document store does. Slot listing is a simple walk over the working-hours
windows of a date; it exists for the console demo and tests only.

Usage:
    backend = MockBackend()
    client = BookingApiClient(base_url="http://mock", transport=backend.transport())
"""

import json
import logging
import uuid
from typing import Any, Callable, Optional

import httpx

from calli.calendar_utils import WEEKDAYS, key_to_date, today_key, weekday_of

logger = logging.getLogger(__name__)

Handler = Callable[[httpx.Request], httpx.Response]

SEED_SERVICES: list[dict[str, Any]] = [
    {"name": "Haircut", "duration": 30, "price": 25},
    {"name": "Colour", "duration": 90, "price": 80},
    {"name": "Beard Trim", "duration": 15, "price": 12},
]


def _to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def _from_minutes(total: int, padded: bool = False) -> str:
    # Slots carry an unpadded hour, as the real backend emits them ("9:00").
    hours = f"{total // 60:02d}" if padded else str(total // 60)
    return f"{hours}:{total % 60:02d}"


def _overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    return start < other_end and other_start < end


def _wrap_id(value: str) -> dict[str, str]:
    return {"$oid": value}


def _wrap_int(value: int) -> dict[str, str]:
    return {"$numberInt": str(value)}


class MockBackend:
    """In-memory booking API with the same request/response contracts as the real one."""

    def __init__(self, seed: bool = True, today: Optional[str] = None, prefix: str = "") -> None:
        self._prefix = prefix.rstrip("/")
        self._today = today
        self.services: dict[str, dict[str, Any]] = {}
        self.schedules: dict[str, list[dict[str, str]]] = {}
        self.bookings: list[dict[str, Any]] = []
        self.requests: list[tuple[str, str]] = []
        self.offline = False
        self.rejections: dict[str, str] = {}
        if seed:
            for item in SEED_SERVICES:
                self._add_service(item["name"], item["duration"], item["price"])

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if self._prefix and path.startswith(self._prefix):
            path = path[len(self._prefix):]
        self.requests.append((request.method, path))

        if self.offline:
            raise httpx.ConnectError("mock backend offline", request=request)
        if path in self.rejections:
            return httpx.Response(400, json={"ok": False, "error": self.rejections[path]})

        routes: dict[tuple[str, str], Handler] = {
            ("GET", "/services"): self._get_services,
            ("POST", "/services"): self._post_service,
            ("GET", "/bookings/today"): self._get_today_bookings,
            ("POST", "/bookings"): self._post_booking,
            ("POST", "/schedules/add"): self._post_schedule,
            ("GET", "/slots"): self._get_slots,
        }
        route = routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"ok": False, "error": f"No route {request.method} {path}"})
        return route(request)

    def today(self) -> str:
        return self._today or today_key()

    def reset(self) -> None:
        """Clear schedules, bookings and failure switches; keep services."""
        self.schedules.clear()
        self.bookings.clear()
        self.requests.clear()
        self.offline = False
        self.rejections.clear()

    # ------------------------------------------------------------------ #
    # Services
    # ------------------------------------------------------------------ #

    def _add_service(self, name: str, duration: int, price: int) -> dict[str, Any]:
        service_id = uuid.uuid4().hex[:24]
        document = {
            "_id": _wrap_id(service_id),
            "name": name,
            "duration": _wrap_int(duration),
            "price": _wrap_int(price),
        }
        self.services[service_id] = document
        return document

    def service_ids(self) -> list[str]:
        return list(self.services)

    def _get_services(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True, "items": list(self.services.values())})

    def _post_service(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        name = body.get("name")
        duration = body.get("duration")
        price = body.get("price")
        if not name or not isinstance(duration, int) or not isinstance(price, (int, float)):
            return httpx.Response(400, json={"ok": False, "error": "name, duration and price are required"})
        document = self._add_service(name, duration, int(price))
        logger.info("Mock service created: %s", name)
        return httpx.Response(201, json={"ok": True, "item": document})

    # ------------------------------------------------------------------ #
    # Schedules
    # ------------------------------------------------------------------ #

    def _post_schedule(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        date_key = body.get("date")
        windows = body.get("windows") or []
        try:
            expected_day = weekday_of(date_key)
        except (TypeError, ValueError):
            return httpx.Response(400, json={"ok": False, "error": "A valid date is required"})
        if body.get("day") not in WEEKDAYS or body.get("day") != expected_day:
            return httpx.Response(400, json={"ok": False, "error": f"day must be {expected_day}"})
        if not windows:
            return httpx.Response(400, json={"ok": False, "error": "At least one window is required"})
        stored: list[dict[str, str]] = []
        for w in windows:
            if not isinstance(w, dict):
                continue
            try:
                start, end = _to_minutes(w.get("start", "")), _to_minutes(w.get("end", ""))
            except (AttributeError, ValueError):
                return httpx.Response(400, json={"ok": False, "error": "Window times must be HH:MM"})
            if start >= end:
                return httpx.Response(400, json={"ok": False, "error": "Window must end after it starts"})
            stored.append({"start": w["start"], "end": w["end"], "note": w.get("note", "working hours")})
        self.schedules[date_key] = stored
        logger.info("Mock schedule stored for %s (%s)", date_key, expected_day)
        return httpx.Response(200, json={"ok": True})

    # ------------------------------------------------------------------ #
    # Slots
    # ------------------------------------------------------------------ #

    def compute_slots(self, service_id: str, date_key: str) -> list[dict[str, str]]:
        service = self.services[service_id]
        duration = int(service["duration"]["$numberInt"])
        windows = self.schedules.get(date_key, [])
        breaks = [
            (_to_minutes(w["start"]), _to_minutes(w["end"]))
            for w in windows if w["note"] == "break"
        ]
        taken = [
            (_to_minutes(b["start"]), _to_minutes(b["end"]))
            for b in self.bookings if b["date"] == date_key
        ]
        slots: list[dict[str, str]] = []
        for window in windows:
            if window["note"] != "working hours":
                continue
            cursor = _to_minutes(window["start"])
            close = _to_minutes(window["end"])
            while cursor + duration <= close:
                end = cursor + duration
                blocked = any(_overlaps(cursor, end, s, e) for s, e in breaks + taken)
                if not blocked:
                    slots.append({"start": _from_minutes(cursor), "end": _from_minutes(end)})
                cursor = end
        return slots

    def _get_slots(self, request: httpx.Request) -> httpx.Response:
        date_key = request.url.params.get("date", "")
        service_id = request.url.params.get("serviceId", "")
        if service_id not in self.services:
            return httpx.Response(404, json={"ok": False, "error": "Service not found"})
        try:
            key_to_date(date_key)
        except ValueError:
            return httpx.Response(400, json={"ok": False, "error": "Invalid date"})
        return httpx.Response(200, json={"ok": True, "slots": self.compute_slots(service_id, date_key)})

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def _get_today_bookings(self, request: httpx.Request) -> httpx.Response:
        today = self.today()
        items = [b for b in self.bookings if b["date"] == today]
        return httpx.Response(200, json={"ok": True, "items": items})

    def _post_booking(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        missing = [
            name for name in ("serviceId", "date", "start", "clientName", "clientPhone")
            if not body.get(name)
        ]
        if missing:
            return httpx.Response(
                400, json={"ok": False, "error": f"Missing fields: {', '.join(missing)}"},
            )
        service_id = body["serviceId"]
        if service_id not in self.services:
            return httpx.Response(404, json={"ok": False, "error": "Service not found"})

        try:
            start = _to_minutes(body["start"])
        except ValueError:
            return httpx.Response(400, json={"ok": False, "error": "start must be HH:MM"})
        match = next(
            (s for s in self.compute_slots(service_id, body["date"]) if _to_minutes(s["start"]) == start),
            None,
        )
        if match is None:
            return httpx.Response(409, json={"ok": False, "error": "Slot no longer available"})

        service = self.services[service_id]
        booking = {
            "_id": _wrap_id(uuid.uuid4().hex[:24]),
            "serviceId": service_id,
            "serviceName": service["name"],
            "date": body["date"],
            "start": body["start"],
            "end": _from_minutes(_to_minutes(match["end"]), padded=True),
            "clientName": body["clientName"],
            "clientPhone": body["clientPhone"],
        }
        self.bookings.append(booking)
        logger.info("Mock booking created for %s on %s at %s", body["clientName"], body["date"], body["start"])
        return httpx.Response(201, json={"ok": True, "booking": booking})
