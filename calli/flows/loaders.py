"""Initial reads that populate the service and booking collections."""

from typing import Any

from calli.errors import TransportError
from calli.logging_context import get_action_logger, new_action_id
from calli.normalizer import normalize_bookings, normalize_services
from calli.notifications import Notifier
from calli.selection.state_machine import SelectionStateMachine

logger = get_action_logger(__name__)

MSG_FETCH_SERVICES_FAILED = "Failed to fetch services"
MSG_FETCH_BOOKINGS_FAILED = "Failed to fetch bookings"


def _items(data: Any) -> Any:
    """The ``items`` list of a successful listing, else None."""
    if isinstance(data, dict) and data.get("ok") is True and isinstance(data.get("items"), list):
        return data["items"]
    return None


class DataLoader:
    def __init__(self, machine: SelectionStateMachine, client: Any, notifier: Notifier) -> None:
        self._machine = machine
        self._client = client
        self._notifier = notifier

    async def load_services(self) -> bool:
        """Replace the service collection. A non-conforming response leaves it as is."""
        new_action_id("load-services")
        try:
            data = await self._client.list_services()
        except TransportError:
            self._notifier.error(MSG_FETCH_SERVICES_FAILED)
            return False

        items = _items(data)
        if items is None:
            logger.warning("Service listing was not a success; keeping current services")
            return False
        self._machine.replace_services(normalize_services(items))
        logger.info("Loaded %d services", len(items))
        return True

    async def load_today_bookings(self) -> bool:
        """Replace the booking collection. A non-conforming response empties it."""
        new_action_id("load-bookings")
        try:
            data = await self._client.list_today_bookings()
        except TransportError:
            self._notifier.error(MSG_FETCH_BOOKINGS_FAILED)
            return False

        items = _items(data)
        if items is None:
            logger.warning("Booking listing was not a success; clearing bookings")
            self._machine.replace_bookings([])
            return False
        self._machine.replace_bookings(normalize_bookings(items))
        logger.info("Loaded %d bookings for today", len(items))
        return True
