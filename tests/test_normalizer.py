"""Tests for the record normalizer."""

import pytest

from calli.normalizer import (
    coerce_number,
    extract,
    ID_STRATEGIES,
    normalize_booking,
    normalize_bookings,
    normalize_service,
    normalize_services,
)
from calli.schemas.records import Booking, Service
from tests.conftest import make_raw_booking, make_raw_service


class TestServiceNormalization:
    def test_plain_record(self):
        service = normalize_service(make_raw_service())
        assert service == Service(id="svc-1", name="Haircut", duration=30, price=25)

    def test_wrapped_record(self):
        service = normalize_service(make_raw_service(wrapped=True))
        assert service == Service(id="svc-1", name="Haircut", duration=30, price=25)

    @pytest.mark.parametrize("wrapped", [True, False])
    def test_wrapper_format_independence(self, wrapped):
        plain = normalize_service(make_raw_service(duration=45, price=60))
        other = normalize_service(make_raw_service(duration=45, price=60, wrapped=wrapped))
        assert plain == other

    def test_mixed_wrapping(self):
        raw = {"_id": {"$oid": "a1"}, "name": "Colour", "duration": 90, "price": {"$numberInt": "80"}}
        assert normalize_service(raw) == Service(id="a1", name="Colour", duration=90, price=80)

    def test_id_falls_back_to_id_key(self):
        assert normalize_service({"id": "x9", "name": "Trim"}).id == "x9"

    def test_underscore_id_wins_over_id(self):
        assert normalize_service({"_id": "first", "id": "second"}).id == "first"

    def test_integer_id_becomes_string(self):
        assert normalize_service({"_id": 42}).id == "42"

    def test_number_long_wrapper(self):
        service = normalize_service({"_id": "a", "duration": {"$numberLong": "120"}})
        assert service.duration == 120

    def test_decimal_price_kept(self):
        service = normalize_service({"_id": "a", "price": {"$numberDecimal": "12.50"}})
        assert service.price == 12.5

    def test_numeric_strings_coerced(self):
        service = normalize_service({"_id": "a", "duration": "30", "price": "25"})
        assert service.duration == 30
        assert isinstance(service.duration, int)

    def test_missing_numbers_default_to_zero(self):
        service = normalize_service({"_id": "a", "name": "Trim"})
        assert service.duration == 0
        assert service.price == 0

    @pytest.mark.parametrize("bad", ["abc", None, True, -5, float("nan"), float("inf"), [], {"$numberInt": "x"}])
    def test_malformed_numbers_default_to_zero(self, bad):
        service = normalize_service({"_id": "a", "duration": bad, "price": bad})
        assert service.duration == 0
        assert service.price == 0

    def test_missing_fields_absent(self):
        service = normalize_service({})
        assert service.id is None
        assert service.name is None

    @pytest.mark.parametrize("raw", [None, "text", 42, ["a"]])
    def test_non_mapping_degrades_to_defaults(self, raw):
        assert normalize_service(raw) == Service()

    def test_unknown_wrapper_ignored(self):
        assert normalize_service({"_id": {"$weird": "a"}}).id is None


class TestBookingNormalization:
    def test_full_record(self):
        booking = normalize_booking(make_raw_booking())
        assert booking.id == "bk-1"
        assert booking.service_id == "svc-1"
        assert booking.service_name == "Haircut"
        assert booking.start == "09:00"
        assert booking.end == "09:30"
        assert booking.client_name == "Jane Doe"
        assert booking.client_phone == "0412345678"

    def test_service_name_from_nested_service(self):
        raw = make_raw_booking(service_name=None)
        raw["service"] = {"name": "Colour"}
        assert normalize_booking(raw).service_name == "Colour"

    def test_service_name_defaults_to_unknown(self):
        assert normalize_booking(make_raw_booking(service_name=None)).service_name == "Unknown"

    def test_empty_service_name_defaults_to_unknown(self):
        assert normalize_booking(make_raw_booking(service_name="")).service_name == "Unknown"

    def test_wrapped_service_id_unwrapped(self):
        raw = make_raw_booking()
        raw["serviceId"] = {"$oid": "svc-9"}
        assert normalize_booking(raw).service_id == "svc-9"

    def test_missing_times_absent(self):
        booking = normalize_booking({"_id": "b"})
        assert booking.start is None
        assert booking.end is None

    def test_non_mapping_degrades_to_defaults(self):
        booking = normalize_booking(None)
        assert booking.id is None
        assert booking.service_name == "Unknown"


class TestIdempotence:
    def test_service_instance_returned_unchanged(self):
        service = normalize_service(make_raw_service(wrapped=True))
        assert normalize_service(service) is service

    def test_service_dump_renormalizes_equal(self):
        once = normalize_service(make_raw_service(wrapped=True, price=12))
        assert normalize_service(once.model_dump()) == once

    def test_booking_instance_returned_unchanged(self):
        booking = normalize_booking(make_raw_booking())
        assert normalize_booking(booking) is booking

    def test_booking_dump_renormalizes_equal(self):
        once = normalize_booking(make_raw_booking(service_name=None))
        assert normalize_booking(once.model_dump(by_alias=True)) == once


class TestHelpers:
    def test_normalize_lists_preserve_order(self):
        services = normalize_services([make_raw_service("a"), make_raw_service("b", wrapped=True)])
        assert [s.id for s in services] == ["a", "b"]
        bookings = normalize_bookings([make_raw_booking("x"), make_raw_booking("y")])
        assert [b.id for b in bookings] == ["x", "y"]

    def test_extract_tries_sources_in_order(self):
        record = {"id": "second"}
        assert extract(record, ["_id", "id"], ID_STRATEGIES) == "second"

    def test_extract_default(self):
        assert extract({}, ["_id"], ID_STRATEGIES, default="none") == "none"

    @pytest.mark.parametrize("value,expected", [
        ("45", 45), (45.0, 45), ({"$numberDouble": "2.5"}, 2.5), ("", None), ("x", None),
    ])
    def test_coerce_number(self, value, expected):
        assert coerce_number(value) == expected

    def test_booking_type(self):
        assert isinstance(normalize_booking({}), Booking)
