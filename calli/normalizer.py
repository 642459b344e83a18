"""
Record normalizer for backend documents.

Backend records arrive in more than one shape: plain values, or the
extended-JSON convention where a value is wrapped in an object under a
conventional key (``{"$oid": "..."}``, ``{"$numberInt": "30"}``). Each
field is read by trying an ordered list of extraction strategies against
an ordered list of source keys; the first strategy that yields a value
wins, otherwise the field's default applies.

Normalization is pure and total: it never raises, and normalizing an
already-canonical record returns an equal record.

Usage:
    service = normalize_service({"_id": {"$oid": "abc"}, "name": "Cut",
                                 "duration": {"$numberInt": "30"}, "price": 25})
    assert service.id == "abc" and service.duration == 30
"""

import logging
import math
from collections.abc import Mapping
from typing import Any, Callable, Optional, Sequence, Union

from calli.schemas.records import UNKNOWN_SERVICE_NAME, Booking, Number, Service

logger = logging.getLogger(__name__)

Strategy = Callable[[Any], Optional[Any]]

ID_WRAPPER_KEYS = ("$oid",)
NUMBER_WRAPPER_KEYS = ("$numberInt", "$numberLong", "$numberDouble", "$numberDecimal")


# --------------------------------------------------------------------- #
# Extraction strategies
# --------------------------------------------------------------------- #

def _plain_string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _plain_integer_id(value: Any) -> Optional[str]:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def _unwrap(keys: Sequence[str], inner: Strategy) -> Strategy:
    """Build a strategy that looks under wrapper ``keys`` and applies ``inner``."""

    def strategy(value: Any) -> Optional[Any]:
        if not isinstance(value, Mapping):
            return None
        for key in keys:
            if key in value:
                found = inner(value[key])
                if found is not None:
                    return found
        return None

    return strategy


def _plain_number(value: Any) -> Optional[Number]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _canonical_number(value)
    if isinstance(value, str) and value.strip():
        try:
            return _canonical_number(float(value.strip()))
        except ValueError:
            return None
    return None


def _canonical_number(value: Union[int, float]) -> Optional[Number]:
    """Reject non-finite and negative values; collapse integral floats to int."""
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            value = int(value)
    if value < 0:
        return None
    return value


ID_STRATEGIES: list[Strategy] = [
    _plain_string,
    _plain_integer_id,
    _unwrap(ID_WRAPPER_KEYS, _plain_string),
    _unwrap(NUMBER_WRAPPER_KEYS, _plain_string),
    _unwrap(NUMBER_WRAPPER_KEYS, _plain_integer_id),
]

NUMBER_STRATEGIES: list[Strategy] = [
    _plain_number,
    _unwrap(NUMBER_WRAPPER_KEYS, _plain_number),
]

TEXT_STRATEGIES: list[Strategy] = [_plain_string]


def extract(
    record: Mapping,
    sources: Sequence[str],
    strategies: Sequence[Strategy],
    default: Any = None,
) -> Any:
    """Return the first value any strategy extracts from any source key.

    Sources are tried in order; for each source every strategy is tried
    in order before moving to the next source.
    """
    for source in sources:
        if source not in record:
            continue
        raw = record[source]
        for strategy in strategies:
            value = strategy(raw)
            if value is not None:
                return value
    return default


def _nested_service_name(record: Mapping) -> Optional[str]:
    nested = record.get("service")
    if isinstance(nested, Mapping):
        return extract(nested, ["name"], TEXT_STRATEGIES)
    return None


# --------------------------------------------------------------------- #
# Entity normalizers
# --------------------------------------------------------------------- #

def normalize_service(raw: Any) -> Service:
    """Normalize a raw service document into a canonical ``Service``."""
    if isinstance(raw, Service):
        return raw
    if not isinstance(raw, Mapping):
        logger.debug("Service record is not a mapping (%s); using defaults", type(raw).__name__)
        raw = {}
    return Service(
        id=extract(raw, ["_id", "id"], ID_STRATEGIES),
        name=extract(raw, ["name"], TEXT_STRATEGIES),
        duration=extract(raw, ["duration"], NUMBER_STRATEGIES, default=0),
        price=extract(raw, ["price"], NUMBER_STRATEGIES, default=0),
    )


def normalize_booking(raw: Any) -> Booking:
    """Normalize a raw booking document into a canonical ``Booking``."""
    if isinstance(raw, Booking):
        return raw
    if not isinstance(raw, Mapping):
        logger.debug("Booking record is not a mapping (%s); using defaults", type(raw).__name__)
        raw = {}
    service_name = (
        extract(raw, ["serviceName"], TEXT_STRATEGIES)
        or _nested_service_name(raw)
        or UNKNOWN_SERVICE_NAME
    )
    return Booking(
        id=extract(raw, ["_id", "id"], ID_STRATEGIES),
        service_id=extract(raw, ["serviceId"], ID_STRATEGIES),
        service_name=service_name,
        start=extract(raw, ["start"], TEXT_STRATEGIES),
        end=extract(raw, ["end"], TEXT_STRATEGIES),
        client_name=extract(raw, ["clientName"], TEXT_STRATEGIES),
        client_phone=extract(raw, ["clientPhone"], TEXT_STRATEGIES),
    )


def normalize_services(items: Sequence[Any]) -> list[Service]:
    return [normalize_service(item) for item in items]


def normalize_bookings(items: Sequence[Any]) -> list[Booking]:
    return [normalize_booking(item) for item in items]


def coerce_number(value: Any) -> Optional[Number]:
    """Coerce a plain or wrapped number; None when the value is not usable."""
    for strategy in NUMBER_STRATEGIES:
        found = strategy(value)
        if found is not None:
            return found
    return None
