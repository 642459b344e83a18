"""
Console demo: drives the booking engine from the terminal.

By default it runs against the in-memory mock backend, so no server is
needed. Pass ``--live`` to talk to the backend at ``API_BASE`` instead.
Uses the real state machine, normalizer, flows and HTTP client.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario failure
    python console_demo.py --live
"""

import argparse
import asyncio
from typing import Optional

from calli.api.client import BookingApiClient
from calli.config import settings
from calli.engine import BookingEngine
from calli.errors import InvalidTransitionError
from calli.notifications import NotificationLevel, RecordingNotifier
from calli.selection.state_machine import Modal
from calli.tools.mock_backend import MockBackend

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

MOCK_BASE_URL = "http://mock.calli"

HELP = """Commands:
  services                       list services
  service <n>                    select service number n
  date <YYYY-MM-DD>              select a date
  slots                          check slots for the selection
  book <n> <name> <phone>        book slot number n
  bookings                       list today's bookings
  add service <name> <min> <price>
  open schedule | close          open the schedule modal / close any modal
  window <i> <start|-> <end|-> [break]
  add window | remove window <i>
  save schedule
  offline on|off                 (mock backend only)
  state | help | quit"""


class ConsoleSession:
    """Interactive or scripted operator session in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "services",
            "open schedule",
            "date 2024-03-11",
            "window 0 9:00 12:00",
            "add window",
            "window 1 10:30 11:00 break",
            "save schedule",
            "service 1",
            "slots",
            "book 1 Jane Doe 0412345678",
            "slots",
            "state",
        ],
        "schedule": [
            "open schedule",
            "save schedule",
            "date 2024-03-12",
            "remove window 0",
            "window 0 - 12:00",
            "save schedule",
            "add window",
            "window 1 13:00 17:00",
            "save schedule",
            "state",
        ],
        "failure": [
            "service 1",
            "slots",
            "date 2024-03-11",
            "open schedule",
            "window 0 9:00 12:00",
            "save schedule",
            "slots",
            "book 1 Jane",
            "offline on",
            "slots",
            "offline off",
            "add service Nails 45 abc",
            "state",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, live: bool = False) -> None:
        self.notifier = RecordingNotifier()
        self.backend: Optional[MockBackend] = None
        if live:
            client = BookingApiClient()
        else:
            self.backend = MockBackend()
            client = BookingApiClient(base_url=MOCK_BASE_URL, transport=self.backend.transport())
        self.engine = BookingEngine(client=client, notifier=self.notifier)
        self._seen = 0

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _flush_notifications(self) -> None:
        for note in self.notifier.notifications[self._seen:]:
            colour = GREEN if note.level == NotificationLevel.SUCCESS else RED
            print(f"{colour}{BOLD}[{note.level.value}]{RESET} {colour}{note.message}{RESET}")
        self._seen = len(self.notifier.notifications)

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  CALLI - {title}{RESET}")
        backend = MOCK_BASE_URL + " (mock)" if self.backend else settings.api.base_url
        print(f"{BOLD}  Backend: {backend}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self, title: str) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {title}{RESET}")
        print(f"{DIM}  Modal trace: {' -> '.join(self.engine.machine.get_modal_trace())}{RESET}")
        print(f"{DIM}  Notifications: {len(self.notifier.notifications)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        async with self.engine:
            await self.engine.start()
            self._flush_notifications()
            for step in steps:
                print(f"\n{BLUE}[Operator] {RESET}{step}")
                await self._process_command(step)
                self._flush_notifications()
        self._summary(f"Scenario '{scenario}' complete.")

    async def run(self) -> None:
        self._banner("Console")
        print(HELP)
        async with self.engine:
            await self.engine.start()
            self._flush_notifications()
            while True:
                user_input = input(f"\n{BLUE}[Operator] {RESET}").strip()
                if not user_input:
                    continue
                if user_input.lower() in ("quit", "exit", "q"):
                    print(f"\n{DIM}Session ended.{RESET}")
                    break
                if len(user_input) > self.MAX_INPUT_LENGTH:
                    self.say("That command is too long.")
                    continue
                await self._process_command(user_input)
                self._flush_notifications()
        self._summary("Session complete.")

    # ------------------------------------------------------------------ #
    # Command dispatch
    # ------------------------------------------------------------------ #

    async def _process_command(self, text: str) -> None:
        words = text.split()
        command = " ".join(words[:2]).lower()
        head = words[0].lower()
        try:
            if head == "services":
                self._show_services()
            elif head == "service" and len(words) == 2:
                self._select_service(words[1])
            elif head == "date" and len(words) == 2:
                self.engine.select_date(words[1])
                self.system_log(f"Date: {words[1]}")
            elif head == "slots":
                await self._check_slots()
            elif head == "book" and len(words) >= 3:
                await self._book(words[1], words[2:])
            elif head == "bookings":
                self._show_bookings()
            elif command == "add service" and len(words) >= 5:
                await self.engine.submit_service(" ".join(words[2:-2]), words[-2], words[-1])
            elif command == "open schedule":
                self.engine.open_add_schedule()
                self.system_log(f"Modal: {self.engine.machine.modal.value}")
            elif head == "close":
                self.engine.close_modal()
                self.system_log(f"Modal: {self.engine.machine.modal.value}")
            elif head == "window" and len(words) >= 4:
                self._edit_window(words[1:])
            elif command == "add window":
                index = self.engine.add_window()
                self.system_log(f"Window {index} added")
            elif command == "remove window" and len(words) == 3:
                removed = self.engine.remove_window(int(words[2]))
                self.system_log("Window removed" if removed else "At least one window must remain")
            elif command == "save schedule":
                await self.engine.submit_schedule()
            elif command.startswith("offline") and len(words) == 2:
                self._toggle_offline(words[1])
            elif head == "state":
                self._show_state()
            elif head == "help":
                print(HELP)
            else:
                self.say("Unknown command. Type 'help' for the list.")
        except InvalidTransitionError as e:
            self.say(f"Not now: {e}")
        except ValueError as e:
            self.say(f"Bad input: {e}")

    def _show_services(self) -> None:
        services = self.engine.snapshot().services
        if not services:
            self.say("No services")
        for i, s in enumerate(services, start=1):
            self.say(f"{i}. {s.name} ({s.duration} min, {s.price})")

    def _select_service(self, number: str) -> None:
        services = self.engine.snapshot().services
        service = services[int(number) - 1]
        self.engine.select_service(service.id or "")
        self.system_log(f"Service: {service.name} [{service.id}]")

    async def _check_slots(self) -> None:
        slots = await self.engine.check_slots()
        if not slots:
            self.say("No slots available")
        for i, slot in enumerate(slots, start=1):
            self.say(f"{i}. {slot.start} - {slot.end}")

    async def _book(self, number: str, details: list[str]) -> None:
        slots = self.engine.snapshot().slots
        index = int(number) - 1
        if not 0 <= index < len(slots):
            self.say("No such slot")
            return
        self.engine.choose_slot(slots[index])
        name = " ".join(details[:-1]) if len(details) > 1 else details[0]
        phone = details[-1] if len(details) > 1 else ""
        booking = await self.engine.submit_booking(name, phone)
        if booking is None and self.engine.machine.modal == Modal.BOOK_SLOT:
            self.engine.close_modal()

    def _show_bookings(self) -> None:
        bookings = self.engine.snapshot().bookings
        if not bookings:
            self.say("No bookings today")
        for b in bookings:
            self.say(f"{b.service_name}: {b.start or '?'} - {b.end or '?'} "
                     f"{b.client_name or 'Unknown'} ({b.client_phone or '?'})")

    def _edit_window(self, args: list[str]) -> None:
        index = int(args[0])
        start, end = ("" if value == "-" else value for value in args[1:3])
        note = "break" if args[-1].lower() == "break" else None
        window = self.engine.update_window(index, start=start, end=end, note=note)
        self.system_log(f"Window {index}: {window.start or '--'} to {window.end or '--'} ({window.note.value})")

    def _toggle_offline(self, flag: str) -> None:
        if self.backend is None:
            self.say("Offline switch only works with the mock backend")
            return
        self.backend.offline = flag.lower() == "on"
        self.system_log(f"Mock backend offline: {self.backend.offline}")

    def _show_state(self) -> None:
        snap = self.engine.snapshot()
        self.system_log(f"Service: {snap.selected_service or '-'}  Date: {snap.selected_date or '-'}")
        self.system_log(f"Modal: {snap.modal.value}  Slots: {len(snap.slots)} "
                        f"(current: {self.engine.machine.slots_match_selection()})")
        self.system_log(f"Windows: {[(w.start, w.end, w.note.value) for w in snap.schedule_windows]}")
        self.system_log(f"Services: {len(snap.services)}  Bookings today: {len(snap.bookings)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Calli booking console")
    parser.add_argument(
        "--scenario",
        choices=list(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--live",
        action="store_true",
        help="Use the backend at API_BASE instead of the in-memory mock",
    )
    args = parser.parse_args()

    session = ConsoleSession(live=args.live)
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
