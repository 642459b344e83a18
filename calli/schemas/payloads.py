"""Request bodies sent to the booking backend."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from calli.schemas.records import Number, ScheduleWindow


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_body(self) -> dict[str, Any]:
        """Serialize with wire field names and plain JSON values."""
        return self.model_dump(mode="json", by_alias=True)


class ServicePayload(_Payload):
    """Body of ``POST /services``."""
    name: str
    duration: Number
    price: Number


class SchedulePayload(_Payload):
    """Body of ``POST /schedules/add``. ``day`` is always derived from ``date``."""
    date: str
    day: str
    windows: list[ScheduleWindow] = Field(min_length=1)


class BookingPayload(_Payload):
    """Body of ``POST /bookings``."""
    service_id: str = Field(alias="serviceId")
    date: str
    start: str
    client_name: str = Field(alias="clientName")
    client_phone: str = Field(alias="clientPhone")
