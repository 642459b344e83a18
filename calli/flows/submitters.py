"""
Write flows: create service, create schedule, create booking.

Each flow validates local state before anything is dispatched, and touches
a local collection only after the backend confirms success. Transport
failures, rejections and local validation failures all end in a user
notification; the pre-submission state is kept on every failure path.
"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from calli.errors import LocalValidationError, TransportError
from calli.logging_context import get_action_logger, new_action_id
from calli.normalizer import coerce_number, normalize_booking, normalize_service
from calli.notifications import Notifier
from calli.schemas.payloads import ServicePayload
from calli.schemas.records import Booking, Service
from calli.selection.state_machine import Modal, SelectionStateMachine
from calli.utils import is_blank

logger = get_action_logger(__name__)

MSG_SERVICE_FIELDS_REQUIRED = "Name, duration and price required"
MSG_SERVICE_ADDED = "Service added successfully"
MSG_SERVICE_FAILED = "Failed to add service"
MSG_SERVICE_ERROR = "Error adding service"

MSG_SCHEDULE_ADDED = "Schedule added!"
MSG_SCHEDULE_FAILED = "Failed to add schedule"
MSG_SCHEDULE_ERROR = "Error adding schedule"

MSG_BOOKED = "Booked successfully!"
MSG_BOOKING_FAILED = "Booking failed"
MSG_BOOKING_ERROR = "Error booking slot"


def _succeeded(data: Any) -> bool:
    return isinstance(data, dict) and data.get("ok") is True


def _server_reason(data: Any, fallback: str) -> str:
    """The backend's own error text when it sent one, else ``fallback``."""
    if isinstance(data, dict):
        reason = data.get("error")
        if isinstance(reason, str) and reason.strip():
            return reason
    return fallback


class MutationSubmitters:
    """The three independent write flows of the booking surface."""

    def __init__(self, machine: SelectionStateMachine, client: Any, notifier: Notifier) -> None:
        self._machine = machine
        self._client = client
        self._notifier = notifier

    def _close_if_open(self, modal: Modal) -> None:
        if self._machine.modal == modal:
            self._machine.close_modal()

    # ------------------------------------------------------------------ #
    # Create service
    # ------------------------------------------------------------------ #

    def build_service_payload(self, name: Optional[str], duration: Any, price: Any) -> ServicePayload:
        """
        Validate the service form.

        Raises:
            LocalValidationError: Blank name, or a duration/price that is not a number.
        """
        duration_value = coerce_number(duration)
        price_value = coerce_number(price)
        if is_blank(name) or duration_value is None or price_value is None:
            raise LocalValidationError(MSG_SERVICE_FIELDS_REQUIRED)
        try:
            return ServicePayload(name=name, duration=duration_value, price=price_value)
        except ValidationError as e:
            raise LocalValidationError(MSG_SERVICE_FIELDS_REQUIRED) from e

    async def submit_service(self, name: Optional[str], duration: Any, price: Any) -> Optional[Service]:
        """Create a service and append it to the collection on success."""
        new_action_id("service")
        try:
            payload = self.build_service_payload(name, duration, price)
        except LocalValidationError as e:
            logger.warning("Service not submitted: %s", e)
            self._notifier.error(str(e))
            return None

        try:
            data = await self._client.create_service(payload.to_body())
        except TransportError:
            self._notifier.error(MSG_SERVICE_ERROR)
            return None

        record = (data.get("item") or data.get("service")) if _succeeded(data) else None
        if not isinstance(record, Mapping):
            logger.warning("Service creation rejected: %s", data)
            self._notifier.error(MSG_SERVICE_FAILED)
            return None

        service = normalize_service(record)
        self._machine.append_service(service)
        self._close_if_open(Modal.ADD_SERVICE)
        logger.info("Service created: %s (%s)", service.name, service.id)
        self._notifier.success(MSG_SERVICE_ADDED)
        return service

    # ------------------------------------------------------------------ #
    # Create schedule
    # ------------------------------------------------------------------ #

    async def submit_schedule(self) -> bool:
        """Submit the schedule draft for the selected date."""
        new_action_id("schedule")
        try:
            payload = self._machine.build_schedule_payload()
        except LocalValidationError as e:
            logger.warning("Schedule not submitted: %s", e)
            self._notifier.error(str(e))
            return False

        try:
            data = await self._client.add_schedule(payload.to_body())
        except TransportError:
            self._notifier.error(MSG_SCHEDULE_ERROR)
            return False

        if not _succeeded(data):
            reason = _server_reason(data, MSG_SCHEDULE_FAILED)
            logger.warning("Schedule for %s rejected: %s", payload.date, reason)
            self._notifier.error(reason)
            return False

        self._close_if_open(Modal.ADD_SCHEDULE)
        self._machine.reset_windows()
        logger.info(
            "Schedule added for %s (%s) with %d window(s)",
            payload.date, payload.day, len(payload.windows),
        )
        self._notifier.success(MSG_SCHEDULE_ADDED)
        return True

    # ------------------------------------------------------------------ #
    # Create booking
    # ------------------------------------------------------------------ #

    async def submit_booking(self, client_name: Optional[str], client_phone: Optional[str]) -> Optional[Booking]:
        """Book the selected slot and append the booking on success."""
        new_action_id("booking")
        try:
            payload = self._machine.build_booking_payload(client_name, client_phone)
        except LocalValidationError as e:
            logger.warning("Booking not submitted: %s", e)
            self._notifier.error(str(e))
            return None

        try:
            data = await self._client.create_booking(payload.to_body())
        except TransportError:
            self._notifier.error(MSG_BOOKING_ERROR)
            return None

        record = data.get("booking") if _succeeded(data) else None
        if not isinstance(record, Mapping):
            reason = _server_reason(data, MSG_BOOKING_FAILED)
            logger.warning("Booking for %s at %s rejected: %s", payload.date, payload.start, reason)
            self._notifier.error(reason)
            return None

        booking = normalize_booking(record)
        self._machine.append_booking(booking)
        self._close_if_open(Modal.BOOK_SLOT)
        logger.info("Booking created: %s at %s %s", booking.id, payload.date, payload.start)
        self._notifier.success(MSG_BOOKED)
        return booking
