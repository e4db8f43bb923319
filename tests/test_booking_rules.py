"""Unit tests: booking state machine, status parsing, cancellation notes."""

from types import SimpleNamespace

import pytest

from reelbook.core.errors import InvalidStatus, InvalidTransition
from reelbook.models.booking import BookingStatus, PaymentStatus
from reelbook.services.booking_rules import (
    append_cancellation_reason,
    can_transition,
    check_cancellable,
    check_transition,
    parse_booking_status,
    parse_payment_status,
)


class TestTransitions:
    def test_forward_path(self):
        assert can_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED)
        assert can_transition(BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS)
        assert can_transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED)

    def test_cancel_from_any_open_status(self):
        for status in (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS):
            assert can_transition(status, BookingStatus.CANCELLED)

    def test_terminal_statuses_are_final(self):
        for new in BookingStatus:
            if new != BookingStatus.COMPLETED:
                assert not can_transition(BookingStatus.COMPLETED, new)
            if new != BookingStatus.CANCELLED:
                assert not can_transition(BookingStatus.CANCELLED, new)

    def test_no_skipping(self):
        assert not can_transition(BookingStatus.PENDING, BookingStatus.COMPLETED)
        assert not can_transition(BookingStatus.PENDING, BookingStatus.IN_PROGRESS)

    def test_same_status_allowed(self):
        assert can_transition(BookingStatus.CONFIRMED, BookingStatus.CONFIRMED)

    def test_check_transition_raises(self):
        with pytest.raises(InvalidTransition, match="from pending to completed"):
            check_transition(BookingStatus.PENDING, BookingStatus.COMPLETED)


class TestStatusParsing:
    def test_valid_values(self):
        assert parse_booking_status("in_progress") is BookingStatus.IN_PROGRESS
        assert parse_payment_status("partial") is PaymentStatus.PARTIAL

    def test_unknown_booking_status(self):
        with pytest.raises(InvalidStatus, match="Invalid booking status"):
            parse_booking_status("shipped")

    def test_unknown_payment_status(self):
        with pytest.raises(InvalidStatus, match="Invalid payment status"):
            parse_payment_status("PAID")


class TestCancellation:
    def test_open_booking_is_cancellable(self):
        check_cancellable(SimpleNamespace(booking_status=BookingStatus.CONFIRMED))

    def test_completed_booking(self):
        with pytest.raises(InvalidTransition, match="Cannot cancel completed booking"):
            check_cancellable(SimpleNamespace(booking_status=BookingStatus.COMPLETED))

    def test_already_cancelled(self):
        with pytest.raises(InvalidTransition, match="already cancelled"):
            check_cancellable(SimpleNamespace(booking_status=BookingStatus.CANCELLED))

    def test_reason_on_empty_notes(self):
        assert append_cancellation_reason(None, "Venue changed") == "Cancellation reason: Venue changed"

    def test_reason_appended_to_existing_notes(self):
        result = append_cancellation_reason("Drone shots please", "Venue changed")
        assert result == "Drone shots please | Cancellation reason: Venue changed"

    def test_default_reason(self):
        assert append_cancellation_reason(None, None) == "Cancellation reason: No reason provided"
        assert append_cancellation_reason(None, "") == "Cancellation reason: No reason provided"
