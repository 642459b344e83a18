"""
Booking engine facade.

Wires the selection state machine, the API client, the notifier, the
availability query, the initial loaders and the write flows, and exposes
one method per operator action.

Usage:
    async with BookingEngine() as engine:
        await engine.start()
        engine.select_service(engine.snapshot().services[0].id)
        engine.select_date(date(2024, 3, 11))
        await engine.check_slots()
"""

import asyncio
import logging
from datetime import date
from typing import Any, Optional, Union

from calli.api.client import BookingApiClient
from calli.flows.availability import AvailabilityQuery
from calli.flows.loaders import DataLoader
from calli.flows.submitters import MutationSubmitters
from calli.notifications import LogNotifier, Notifier
from calli.schemas.records import Booking, ScheduleWindow, Service, Slot, WindowNote
from calli.selection.state_machine import Modal, SelectionSnapshot, SelectionStateMachine

logger = logging.getLogger(__name__)


class BookingEngine:
    """Single entry point for the booking surface."""

    def __init__(
        self,
        client: Optional[Any] = None,
        notifier: Optional[Notifier] = None,
        machine: Optional[SelectionStateMachine] = None,
        sequenced: Optional[bool] = None,
    ) -> None:
        self.client = client if client is not None else BookingApiClient()
        self.notifier = notifier if notifier is not None else LogNotifier()
        self.machine = machine if machine is not None else SelectionStateMachine()
        self._loader = DataLoader(self.machine, self.client, self.notifier)
        self._availability = AvailabilityQuery(self.machine, self.client, self.notifier, sequenced)
        self._submitters = MutationSubmitters(self.machine, self.client, self.notifier)

    async def __aenter__(self) -> "BookingEngine":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        close = getattr(self.client, "aclose", None)
        if close is not None:
            await close()

    async def start(self) -> None:
        """Run both initial loads concurrently."""
        await asyncio.gather(
            self._loader.load_services(),
            self._loader.load_today_bookings(),
        )
        logger.info(
            "Engine started: %d services, %d bookings today",
            len(self.machine.services), len(self.machine.bookings),
        )

    def snapshot(self) -> SelectionSnapshot:
        return self.machine.snapshot()

    # --- Selection ---

    def select_service(self, service_id: str) -> None:
        self.machine.select_service(service_id)

    def select_date(self, value: Union[str, date]) -> None:
        self.machine.select_date(value)

    def choose_slot(self, slot: Slot) -> Modal:
        return self.machine.choose_slot(slot)

    def open_add_service(self) -> Modal:
        return self.machine.open_add_service()

    def open_add_schedule(self) -> Modal:
        return self.machine.open_add_schedule()

    def close_modal(self) -> Modal:
        return self.machine.close_modal()

    # --- Schedule draft ---

    def add_window(self) -> int:
        return self.machine.add_window()

    def remove_window(self, index: int) -> bool:
        return self.machine.remove_window(index)

    def update_window(
        self,
        index: int,
        start: Optional[str] = None,
        end: Optional[str] = None,
        note: Optional[Union[WindowNote, str]] = None,
    ) -> ScheduleWindow:
        return self.machine.update_window(index, start=start, end=end, note=note)

    # --- Network actions ---

    async def check_slots(self) -> list[Slot]:
        return await self._availability.check_slots()

    async def submit_service(self, name: Optional[str], duration: Any, price: Any) -> Optional[Service]:
        return await self._submitters.submit_service(name, duration, price)

    async def submit_schedule(self) -> bool:
        return await self._submitters.submit_schedule()

    async def submit_booking(self, client_name: Optional[str], client_phone: Optional[str]) -> Optional[Booking]:
        return await self._submitters.submit_booking(client_name, client_phone)
