"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

import logging


class TestSchemaImports:
    def test_import_records(self):
        from calli.schemas.records import Booking, ScheduleWindow, Service, Slot, WindowNote
        assert WindowNote.BREAK == "break"
        assert Booking().service_name == "Unknown"
        assert Service().duration == 0
        assert not ScheduleWindow().is_complete()
        assert Slot(start="9:00", end="9:30").start == "9:00"

    def test_import_payloads(self):
        from calli.schemas.payloads import BookingPayload, SchedulePayload, ServicePayload
        assert ServicePayload(name="Cut", duration=30, price=25).to_body()["name"] == "Cut"
        assert SchedulePayload is not None
        assert BookingPayload is not None


class TestPackageReexports:
    def test_selection_package(self):
        from calli.selection import Modal, SelectionStateMachine, ScheduleDraft
        assert SelectionStateMachine().modal == Modal.NONE
        assert len(ScheduleDraft()) == 1

    def test_flows_package(self):
        from calli.flows import AvailabilityQuery, DataLoader, MutationSubmitters, parse_slots
        assert parse_slots(None) == []
        assert AvailabilityQuery and DataLoader and MutationSubmitters

    def test_api_package(self):
        from calli.api import BookingApiClient
        assert BookingApiClient is not None

    def test_version(self):
        import calli
        assert calli.__version__ == "0.1.0"


class TestNotifiers:
    def test_recording_notifier_keeps_order(self):
        from calli.notifications import NotificationLevel, RecordingNotifier

        notifier = RecordingNotifier()
        notifier.error("first")
        notifier.success("second")
        assert notifier.messages == ["first", "second"]
        assert notifier.errors == ["first"]
        assert notifier.last().level == NotificationLevel.SUCCESS
        notifier.clear()
        assert notifier.notifications == []

    def test_log_notifier_writes_to_log(self, caplog):
        from calli.notifications import LogNotifier

        with caplog.at_level(logging.INFO, logger="calli.notifications"):
            LogNotifier().success("Booked successfully!")
            LogNotifier().error("Booking failed")
        assert "Booked successfully!" in caplog.text
        assert any(r.levelno == logging.WARNING for r in caplog.records)


class TestLoggingContext:
    def test_new_action_id_sets_context(self):
        from calli.logging_context import get_action_id, new_action_id

        action_id = new_action_id("slots")
        assert action_id.startswith("slots-")
        assert get_action_id() == action_id

    def test_action_logger_injects_id(self, caplog):
        from calli.logging_context import get_action_logger, set_action_id

        logger = get_action_logger("calli.test_action")
        set_action_id("book-1234")
        with caplog.at_level(logging.INFO, logger="calli.test_action"):
            logger.info("hello")
        assert caplog.records[-1].action_id == "book-1234"

    def test_filter_attached_once(self):
        from calli.logging_context import ActionIdFilter, get_action_logger

        get_action_logger("calli.test_once")
        logger = get_action_logger("calli.test_once")
        assert sum(isinstance(f, ActionIdFilter) for f in logger.filters) == 1
