"""
Calendar keys and weekday labels.

A calendar key is the ``YYYY-MM-DD`` string used everywhere a date is
selected, queried or submitted. Keys are built from local calendar fields
and parsed back as local midnight, so ``weekday_of(date_to_key(d))``
always names the weekday of ``d``.
"""

from datetime import date, datetime
from typing import Union

DATE_KEY_FORMAT = "%Y-%m-%d"

# Sunday-first, matching the labels the backend stores on schedules.
WEEKDAYS = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)


def date_to_key(value: Union[date, datetime]) -> str:
    """Serialize a date to ``YYYY-MM-DD`` using its local calendar fields.

    Aware datetimes are converted to local time first; naive datetimes and
    plain dates are taken as already local.
    """
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def key_to_date(key: str) -> date:
    """Parse a calendar key. Raises ``ValueError`` for malformed keys."""
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def weekday_of(key: str) -> str:
    """Return the lowercase weekday name of a calendar key.

    Callers must validate the key is present first; malformed keys raise
    ``ValueError``.
    """
    parsed = key_to_date(key)
    # date.weekday() is Monday=0; shift to the Sunday-first table.
    return WEEKDAYS[(parsed.weekday() + 1) % 7]


def today_key() -> str:
    """Key for the local current date."""
    return date_to_key(date.today())
