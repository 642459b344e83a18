"""
Selection state machine for the booking surface.

Owns the operator's in-progress choices (service, date, candidate slot,
schedule draft), the slot list from the last availability lookup, the
service and booking collections, and which authoring modal is open. All
mutation goes through named operations; surfaces read frozen snapshots.

Modal changes are explicit transitions with triggers. At most one modal is
open at a time, and opening the booking modal requires a selected slot.

Usage:
    sm = SelectionStateMachine()
    sm.select_service("S1")
    sm.select_date("2024-03-11")
    sm.choose_slot(Slot(start="09:00", end="09:30"))
    assert sm.modal == Modal.BOOK_SLOT
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from calli.calendar_utils import date_to_key, weekday_of
from calli.errors import InvalidTransitionError, LocalValidationError
from calli.schemas.payloads import BookingPayload, SchedulePayload
from calli.schemas.records import (
    UNKNOWN_SERVICE_NAME,
    Booking,
    ScheduleWindow,
    Service,
    Slot,
    WindowNote,
)
from calli.selection.schedule_draft import ScheduleDraft
from calli.utils import is_blank, pad_time

logger = logging.getLogger(__name__)

MSG_PICK_SERVICE_AND_DATE = "Pick service + date"
MSG_SELECT_DATE_FIRST = "Select a date first"
MSG_ADD_WINDOW = "Add at least one time window"
MSG_SELECT_SLOT_FIRST = "Select a slot first"
MSG_NAME_AND_PHONE = "Name & phone required"


class Modal(str, Enum):
    """Authoring surfaces; NONE means no modal is open."""
    NONE = "none"
    ADD_SERVICE = "addService"
    ADD_SCHEDULE = "addSchedule"
    BOOK_SLOT = "bookSlot"


class ModalTrigger(str, Enum):
    """Events that open or close a modal."""
    OPEN_ADD_SERVICE = "open_add_service"
    OPEN_ADD_SCHEDULE = "open_add_schedule"
    OPEN_BOOK_SLOT = "open_book_slot"
    CLOSE = "close"


@dataclass
class Transition:
    """A single valid modal transition."""
    from_modal: Modal
    to_modal: Modal
    trigger: ModalTrigger
    guard: Optional[Callable[["SelectionStateMachine"], bool]] = None


@dataclass
class ModalEntry:
    """Recorded history entry for a modal visit."""
    modal: Modal
    entered_at: datetime
    trigger: Optional[ModalTrigger] = None


@dataclass(frozen=True)
class SelectionSnapshot:
    """Read-only view of the selection state for rendering."""
    selected_service: str
    selected_date: str
    slots: tuple[Slot, ...]
    selected_slot: Optional[Slot]
    schedule_windows: tuple[ScheduleWindow, ...]
    modal: Modal
    services: tuple[Service, ...]
    bookings: tuple[Booking, ...]


def _has_selected_slot(machine: "SelectionStateMachine") -> bool:
    return machine.selected_slot is not None


class SelectionStateMachine:
    """
    Explicit owner of the booking surface state.

    Selecting a service or date only updates that field. The slot list is
    replaced solely by ``set_slots`` after an availability lookup, so a
    previous list stays visible until the next lookup resolves;
    ``slots_match_selection`` tells whether it belongs to the current
    selection.
    """

    TRANSITIONS: list[Transition] = [
        # --- Opening (only from a closed state) ---
        Transition(Modal.NONE, Modal.ADD_SERVICE, ModalTrigger.OPEN_ADD_SERVICE),
        Transition(Modal.NONE, Modal.ADD_SCHEDULE, ModalTrigger.OPEN_ADD_SCHEDULE),
        Transition(Modal.NONE, Modal.BOOK_SLOT, ModalTrigger.OPEN_BOOK_SLOT,
                   guard=_has_selected_slot),

        # --- Closing ---
        Transition(Modal.ADD_SERVICE, Modal.NONE, ModalTrigger.CLOSE),
        Transition(Modal.ADD_SCHEDULE, Modal.NONE, ModalTrigger.CLOSE),
        Transition(Modal.BOOK_SLOT, Modal.NONE, ModalTrigger.CLOSE),
        Transition(Modal.NONE, Modal.NONE, ModalTrigger.CLOSE),
    ]

    def __init__(self, default_note: Optional[Union[WindowNote, str]] = None) -> None:
        self._modal = Modal.NONE
        self._history: list[ModalEntry] = [
            ModalEntry(modal=Modal.NONE, entered_at=datetime.now(timezone.utc))
        ]
        self.selected_service: str = ""
        self.selected_date: str = ""
        self.selected_slot: Optional[Slot] = None
        self._slots: list[Slot] = []
        self._slots_key: Optional[tuple[str, str]] = None
        self._draft = ScheduleDraft(default_note)
        self._services: list[Service] = []
        self._bookings: list[Booking] = []

    # ------------------------------------------------------------------ #
    # Modal transitions
    # ------------------------------------------------------------------ #

    @property
    def modal(self) -> Modal:
        return self._modal

    def transition(self, trigger: ModalTrigger) -> Modal:
        """
        Execute a modal transition.

        Raises:
            InvalidTransitionError: If no valid transition exists, or its
                guard rejects it.
        """
        for t in self.TRANSITIONS:
            if t.from_modal == self._modal and t.trigger == trigger:
                if t.guard is not None and not t.guard(self):
                    continue

                old_modal = self._modal
                self._modal = t.to_modal
                self._history.append(ModalEntry(
                    modal=self._modal,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Modal transition: %s -> %s (trigger: %s)",
                    old_modal.value, self._modal.value, trigger.value,
                )
                return self._modal

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._modal.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[ModalTrigger]:
        """Return all triggers whose transition is allowed right now."""
        return [
            t.trigger
            for t in self.TRANSITIONS
            if t.from_modal == self._modal and (t.guard is None or t.guard(self))
        ]

    def get_history(self) -> list[ModalEntry]:
        return list(self._history)

    def get_modal_trace(self) -> list[str]:
        """Return ordered list of modal names visited."""
        return [entry.modal.value for entry in self._history]

    def open_add_service(self) -> Modal:
        return self.transition(ModalTrigger.OPEN_ADD_SERVICE)

    def open_add_schedule(self) -> Modal:
        return self.transition(ModalTrigger.OPEN_ADD_SCHEDULE)

    def open_book_slot(self) -> Modal:
        return self.transition(ModalTrigger.OPEN_BOOK_SLOT)

    def close_modal(self) -> Modal:
        """Close whatever modal is open. Selections are kept."""
        return self.transition(ModalTrigger.CLOSE)

    # ------------------------------------------------------------------ #
    # Selections
    # ------------------------------------------------------------------ #

    def select_service(self, service_id: str) -> None:
        self.selected_service = service_id or ""
        logger.debug("Service selected: %r", self.selected_service)

    def select_date(self, value: Union[str, date]) -> None:
        """Select a calendar date, given either a key or a date object."""
        if isinstance(value, date):
            value = date_to_key(value)
        self.selected_date = value or ""
        logger.debug("Date selected: %r", self.selected_date)

    def select_slot(self, slot: Optional[Slot]) -> None:
        self.selected_slot = slot

    def choose_slot(self, slot: Slot) -> Modal:
        """Select a slot and open the booking modal for it."""
        self.select_slot(slot)
        return self.open_book_slot()

    # ------------------------------------------------------------------ #
    # Slots
    # ------------------------------------------------------------------ #

    @property
    def slots(self) -> list[Slot]:
        return list(self._slots)

    @property
    def slots_key(self) -> Optional[tuple[str, str]]:
        """The (service, date) pair the current slot list was fetched for."""
        return self._slots_key

    def set_slots(self, slots: Iterable[Slot], service_id: str, date_key: str) -> None:
        """Replace the whole slot list with the result of one lookup."""
        self._slots = list(slots)
        self._slots_key = (service_id, date_key)
        logger.debug(
            "Slots replaced: %d for service=%s date=%s",
            len(self._slots), service_id, date_key,
        )

    def slots_match_selection(self) -> bool:
        """Whether the slot list was fetched for the current service and date."""
        return self._slots_key == (self.selected_service, self.selected_date)

    # ------------------------------------------------------------------ #
    # Schedule draft
    # ------------------------------------------------------------------ #

    @property
    def schedule_windows(self) -> list[ScheduleWindow]:
        return self._draft.windows

    def add_window(self) -> int:
        return self._draft.add_window()

    def remove_window(self, index: int) -> bool:
        return self._draft.remove_window(index)

    def update_window(
        self,
        index: int,
        start: Optional[str] = None,
        end: Optional[str] = None,
        note: Optional[Union[WindowNote, str]] = None,
    ) -> ScheduleWindow:
        return self._draft.update_window(index, start=start, end=end, note=note)

    def reset_windows(self) -> None:
        self._draft.reset()

    def build_schedule_payload(self) -> SchedulePayload:
        """
        Build the schedule submission for the selected date.

        Incomplete windows are dropped. The weekday is always recomputed
        from the selected date.

        Raises:
            LocalValidationError: No valid date selected, or no complete window.
        """
        if is_blank(self.selected_date):
            raise LocalValidationError(MSG_SELECT_DATE_FIRST)
        try:
            day = weekday_of(self.selected_date)
        except ValueError as e:
            logger.warning("Selected date %r is not a calendar key", self.selected_date)
            raise LocalValidationError(MSG_SELECT_DATE_FIRST) from e
        windows = self._draft.complete_windows()
        if not windows:
            raise LocalValidationError(MSG_ADD_WINDOW)
        stats = self._draft.get_stats()
        if stats["dropped"]:
            logger.debug("Dropping %d incomplete schedule window(s)", stats["dropped"])
        return SchedulePayload(
            date=self.selected_date,
            day=day,
            windows=windows,
        )

    # ------------------------------------------------------------------ #
    # Booking submission
    # ------------------------------------------------------------------ #

    def build_booking_payload(self, client_name: Optional[str], client_phone: Optional[str]) -> BookingPayload:
        """
        Build the booking submission for the selected service, date and slot.

        Raises:
            LocalValidationError: Missing client details, selection, or slot.
        """
        if is_blank(client_name) or is_blank(client_phone):
            raise LocalValidationError(MSG_NAME_AND_PHONE)
        if is_blank(self.selected_service) or is_blank(self.selected_date):
            raise LocalValidationError(MSG_PICK_SERVICE_AND_DATE)
        if self.selected_slot is None:
            raise LocalValidationError(MSG_SELECT_SLOT_FIRST)
        return BookingPayload(
            service_id=self.selected_service,
            date=self.selected_date,
            start=pad_time(self.selected_slot.start),
            client_name=client_name,
            client_phone=client_phone,
        )

    # ------------------------------------------------------------------ #
    # Collections
    # ------------------------------------------------------------------ #

    @property
    def services(self) -> list[Service]:
        return list(self._services)

    @property
    def bookings(self) -> list[Booking]:
        return list(self._bookings)

    def replace_services(self, services: Iterable[Service]) -> None:
        self._services = list(services)

    def append_service(self, service: Service) -> None:
        self._services = [*self._services, service]

    def replace_bookings(self, bookings: Iterable[Booking]) -> None:
        self._bookings = list(bookings)

    def append_booking(self, booking: Booking) -> None:
        self._bookings = [*self._bookings, booking]

    def service_name(self, service_id: str) -> str:
        """Display name of a service in the collection, or ``Unknown``."""
        for service in self._services:
            if service.id == service_id:
                return service.name or UNKNOWN_SERVICE_NAME
        return UNKNOWN_SERVICE_NAME

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #

    def snapshot(self) -> SelectionSnapshot:
        return SelectionSnapshot(
            selected_service=self.selected_service,
            selected_date=self.selected_date,
            slots=tuple(self._slots),
            selected_slot=self.selected_slot,
            schedule_windows=tuple(self._draft.windows),
            modal=self._modal,
            services=tuple(self._services),
            bookings=tuple(self._bookings),
        )
