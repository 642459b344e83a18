"""Canonical in-memory records for services, bookings, slots and schedule windows."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_SERVICE_NAME = "Unknown"

Number = Union[int, float]


class WindowNote(str, Enum):
    """Classification of a schedule window."""
    WORKING_HOURS = "working hours"
    BREAK = "break"


class Service(BaseModel):
    """A bookable service as published by the operator."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: Optional[str] = None
    duration: Number = 0
    price: Number = 0


class Booking(BaseModel):
    """A confirmed booking.

    ``service_name`` is a snapshot taken when the record was read from the
    backend. It is not kept in sync with later changes to the service.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    service_id: Optional[str] = Field(default=None, alias="serviceId")
    service_name: str = Field(default=UNKNOWN_SERVICE_NAME, alias="serviceName")
    start: Optional[str] = None
    end: Optional[str] = None
    client_name: Optional[str] = Field(default=None, alias="clientName")
    client_phone: Optional[str] = Field(default=None, alias="clientPhone")


class Slot(BaseModel):
    """A candidate time interval returned by the availability lookup."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str


class ScheduleWindow(BaseModel):
    """One row of the schedule draft: an interval tagged as working time or a break."""

    model_config = ConfigDict(frozen=True)

    start: str = ""
    end: str = ""
    note: WindowNote = WindowNote.WORKING_HOURS

    def is_complete(self) -> bool:
        return bool(self.start) and bool(self.end)
