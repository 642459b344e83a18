"""Tests for the in-memory mock backend."""

import json

import httpx
import pytest

from calli.tools.mock_backend import MockBackend
from tests.conftest import MONDAY


def call(backend: MockBackend, method: str, path: str, body=None, params=None) -> httpx.Response:
    request = httpx.Request(
        method, f"http://mock{path}", params=params,
        content=json.dumps(body).encode() if body is not None else None,
    )
    return backend.handle(request)


@pytest.fixture
def scheduled(backend):
    call(backend, "POST", "/schedules/add", {
        "date": MONDAY, "day": "monday",
        "windows": [{"start": "09:00", "end": "10:00", "note": "working hours"}],
    })
    return backend


class TestMockBackend:
    def test_services_wrapped_in_extended_json(self, backend):
        items = call(backend, "GET", "/services").json()["items"]
        assert len(items) == 3
        assert "$oid" in items[0]["_id"]
        assert items[0]["duration"] == {"$numberInt": "30"}

    def test_schedule_day_must_match_date(self, backend):
        response = call(backend, "POST", "/schedules/add", {
            "date": MONDAY, "day": "tuesday", "windows": [{"start": "9:00", "end": "10:00"}],
        })
        assert response.json() == {"ok": False, "error": "day must be monday"}

    @pytest.mark.parametrize("window", [
        {"start": "", "end": "10:00"},
        {"start": "9am", "end": "10:00"},
        {"start": 9, "end": "10:00"},
        {"start": "11:00", "end": "10:00"},
    ])
    def test_schedule_rejects_bad_window_times(self, backend, window):
        response = call(backend, "POST", "/schedules/add", {
            "date": MONDAY, "day": "monday", "windows": [window],
        })
        assert response.status_code == 400
        assert response.json()["ok"] is False
        assert MONDAY not in backend.schedules

    def test_slots_are_unpadded(self, scheduled):
        service_id = scheduled.service_ids()[0]
        assert scheduled.compute_slots(service_id, MONDAY) == [
            {"start": "9:00", "end": "9:30"},
            {"start": "9:30", "end": "10:00"},
        ]

    def test_unknown_service_slots(self, backend):
        response = call(backend, "GET", "/slots", params={"date": MONDAY, "serviceId": "nope"})
        assert response.status_code == 404
        assert response.json()["ok"] is False

    def test_booking_requires_fields(self, scheduled):
        response = call(scheduled, "POST", "/bookings", {"serviceId": scheduled.service_ids()[0]})
        assert response.status_code == 400
        assert "clientName" in response.json()["error"]

    def test_booking_outside_slots_conflicts(self, scheduled):
        response = call(scheduled, "POST", "/bookings", {
            "serviceId": scheduled.service_ids()[0], "date": MONDAY, "start": "14:00",
            "clientName": "Jane", "clientPhone": "0412",
        })
        assert response.status_code == 409

    def test_offline_raises_connect_error(self, backend):
        backend.offline = True
        with pytest.raises(httpx.ConnectError):
            call(backend, "GET", "/services")

    def test_reset_clears_state_but_keeps_services(self, scheduled):
        scheduled.offline = True
        scheduled.reset()
        assert scheduled.schedules == {}
        assert scheduled.offline is False
        assert len(scheduled.service_ids()) == 3
