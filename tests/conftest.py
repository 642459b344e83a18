"""Shared test fixtures and helpers."""

import asyncio
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from calli.api.client import BookingApiClient
from calli.engine import BookingEngine
from calli.notifications import RecordingNotifier
from calli.schemas.records import Slot
from calli.selection.state_machine import SelectionStateMachine
from calli.tools.mock_backend import MockBackend

MONDAY = "2024-03-11"
MOCK_BASE_URL = "http://mock.calli"


@pytest.fixture
def state_machine():
    return SelectionStateMachine()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def backend():
    return MockBackend(today=MONDAY)


@pytest.fixture
def api_client(backend):
    return BookingApiClient(base_url=MOCK_BASE_URL, transport=backend.transport())


@pytest.fixture
def engine(api_client, notifier):
    return BookingEngine(client=api_client, notifier=notifier, sequenced=False)


@pytest.fixture
def fake_client():
    return make_fake_client()


def make_fake_client(**responses: Any) -> AsyncMock:
    """An API client double whose endpoint coroutines return ``responses``.

    Endpoints not given default to ``{"ok": True}``.
    """
    client = AsyncMock()
    for name in (
        "list_services", "list_today_bookings", "get_slots",
        "create_service", "add_schedule", "create_booking",
    ):
        setattr(client, name, AsyncMock(return_value=responses.get(name, {"ok": True})))
    return client


def make_slot(start: str = "09:00", end: str = "09:30") -> Slot:
    return Slot(start=start, end=end)


def make_raw_service(
    oid: str = "svc-1",
    name: str = "Haircut",
    duration: Any = 30,
    price: Any = 25,
    wrapped: bool = False,
) -> dict[str, Any]:
    """Raw service document, optionally in extended-JSON wrapped form."""
    if wrapped:
        return {
            "_id": {"$oid": oid},
            "name": name,
            "duration": {"$numberInt": str(duration)},
            "price": {"$numberInt": str(price)},
        }
    return {"_id": oid, "name": name, "duration": duration, "price": price}


def make_raw_booking(
    oid: str = "bk-1",
    service_id: str = "svc-1",
    service_name: Optional[str] = "Haircut",
    start: str = "09:00",
    end: str = "09:30",
) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "_id": {"$oid": oid},
        "serviceId": service_id,
        "start": start,
        "end": end,
        "clientName": "Jane Doe",
        "clientPhone": "0412345678",
    }
    if service_name is not None:
        raw["serviceName"] = service_name
    return raw


def ready_machine(
    service_id: str = "S1",
    date_key: str = MONDAY,
    slot: Optional[Slot] = None,
) -> SelectionStateMachine:
    """A state machine with service, date and (optionally) slot selected."""
    sm = SelectionStateMachine()
    sm.select_service(service_id)
    sm.select_date(date_key)
    if slot is not None:
        sm.select_slot(slot)
    return sm


class GatedResponses:
    """Slot lookup double whose responses are released by the test, per date."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}
        self.responses: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []

    def prepare(self, date_key: str, response: dict[str, Any]) -> None:
        self.gates[date_key] = asyncio.Event()
        self.responses[date_key] = response

    def release(self, date_key: str) -> None:
        self.gates[date_key].set()

    async def get_slots(self, service_id: str, date_key: str) -> dict[str, Any]:
        self.calls.append((service_id, date_key))
        await self.gates[date_key].wait()
        return self.responses[date_key]
