"""
Availability lookup for the selected (service, date) pair.

Each lookup replaces the whole slot list: with the returned slots, or with
an empty list when the response is malformed, rejected, or never arrives.
A lookup in flight leaves the previous list in place until it resolves.

By default the last lookup to *resolve* wins, whatever order the lookups
were issued in. With sequencing enabled each lookup takes a ticket and a
response older than the newest issued ticket is dropped.
"""

from typing import Any, Optional

from pydantic import ValidationError

from calli.config import settings
from calli.errors import TransportError
from calli.logging_context import get_action_logger, new_action_id
from calli.notifications import Notifier
from calli.schemas.records import Slot
from calli.selection.state_machine import MSG_PICK_SERVICE_AND_DATE, SelectionStateMachine
from calli.utils import is_blank

logger = get_action_logger(__name__)

MSG_FETCH_SLOTS_ERROR = "Error fetching slots"


def parse_slots(data: Any) -> list[Slot]:
    """Slots from a lookup response, or an empty list if it is not a success.

    Items that are not slots are skipped; the rest of the list is kept.
    """
    if not isinstance(data, dict) or data.get("ok") is not True:
        return []
    raw_slots = data.get("slots")
    if not isinstance(raw_slots, list):
        return []
    slots: list[Slot] = []
    for item in raw_slots:
        try:
            slots.append(Slot.model_validate(item))
        except ValidationError:
            continue
    skipped = len(raw_slots) - len(slots)
    if skipped:
        logger.warning("Skipped %d malformed slot item(s) of %d", skipped, len(raw_slots))
    return slots


class AvailabilityQuery:
    """Runs slot lookups against the backend and publishes them to the state machine."""

    def __init__(
        self,
        machine: SelectionStateMachine,
        client: Any,
        notifier: Notifier,
        sequenced: Optional[bool] = None,
    ) -> None:
        self._machine = machine
        self._client = client
        self._notifier = notifier
        self._sequenced = (
            settings.booking.slot_query_sequencing if sequenced is None else sequenced
        )
        self._issued = 0
        self._in_flight = 0

    @property
    def sequenced(self) -> bool:
        return self._sequenced

    @property
    def in_flight(self) -> int:
        """Number of lookups dispatched and not yet resolved."""
        return self._in_flight

    async def check_slots(self) -> list[Slot]:
        """
        Look up slots for the current selection.

        Returns the slot list now published on the state machine. Missing
        service or date is reported locally and nothing is dispatched.
        """
        new_action_id("slots")
        service_id = self._machine.selected_service
        date_key = self._machine.selected_date
        if is_blank(service_id) or is_blank(date_key):
            logger.warning("Slot lookup skipped: service=%r date=%r", service_id, date_key)
            self._notifier.error(MSG_PICK_SERVICE_AND_DATE)
            return self._machine.slots

        self._issued += 1
        ticket = self._issued
        self._in_flight += 1
        try:
            data = await self._client.get_slots(service_id, date_key)
        except TransportError:
            self._notifier.error(MSG_FETCH_SLOTS_ERROR)
            slots: list[Slot] = []
        else:
            slots = parse_slots(data)
        finally:
            self._in_flight -= 1

        if self._sequenced and ticket != self._issued:
            logger.info(
                "Dropping stale slot response #%d (latest is #%d)", ticket, self._issued,
            )
            return self._machine.slots

        self._machine.set_slots(slots, service_id, date_key)
        logger.info("Slots for %s on %s: %d", service_id, date_key, len(slots))
        return slots
