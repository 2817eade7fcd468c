from datetime import datetime, time, timedelta

import pytest

from dispatchx.models.booking import Booking
from dispatchx.models.entities import CompletionState
from dispatchx.models.exceptions import (
    BookingAlreadyCompletedError,
    DispatchError,
    InvalidScheduleDateError,
    InvalidWorkOrderError,
)


class TestBookingConstruction:
    """Work order and date validation."""

    def test_work_order_normalized(self, target_day):
        """Work orders are trimmed and upper-cased."""
        booking = Booking("  wo-123 ", target_day)
        assert booking.work_order_number == "WO-123"
        assert booking.state is CompletionState.PENDING
        assert not booking.is_completed

    @pytest.mark.parametrize("value", ["", "   ", "AB", "A" * 21, "WO 123", "WO_123"])
    def test_invalid_work_orders(self, target_day, value):
        """Too short, too long, blank or non-alphanumeric work orders fail."""
        with pytest.raises(InvalidWorkOrderError):
            Booking(value, target_day)

    def test_date_becomes_midnight(self, target_day):
        """A plain date is stored as midnight on that day."""
        booking = Booking("WO-1", target_day)
        assert booking.scheduled_date == datetime.combine(target_day, time(0, 0))
        assert booking.scheduled_day == target_day

    def test_past_date_allowed_for_history(self, today):
        """Historical bookings can be rebuilt."""
        booking = Booking("WO-OLD", today - timedelta(days=30))
        assert booking.days_until_scheduled(today) == -30

    def test_more_than_a_year_ahead_rejected(self, today):
        with pytest.raises(InvalidScheduleDateError):
            Booking("WO-1", today + timedelta(days=400))

    def test_missing_date_rejected(self):
        with pytest.raises(InvalidScheduleDateError):
            Booking("WO-1", None)

    def test_blank_notes_become_none(self, target_day):
        assert Booking("WO-1", target_day, "   ").notes is None
        assert Booking("WO-1", target_day, "  bring ladder ").notes == "bring ladder"

    def test_notes_too_long(self, target_day):
        with pytest.raises(DispatchError):
            Booking("WO-1", target_day, "x" * 501)


class TestBookingCompletion:
    """One-shot completion."""

    def test_complete_returns_new_instance(self, target_day):
        """The original booking is left untouched."""
        booking = Booking("WO-1", target_day)
        done = booking.complete(True, "Replaced washer")
        assert done.completed_successfully is True
        assert done.completion_notes == "Replaced washer"
        assert done.completed_at is not None
        assert not booking.is_completed
        assert booking.completed_successfully is None

    def test_unsuccessful_completion(self, target_day):
        done = Booking("WO-1", target_day).complete(False)
        assert done.state is CompletionState.UNSUCCESSFUL
        assert done.completed_successfully is False

    def test_complete_twice_fails(self, target_day):
        """Second completion raises."""
        done = Booking("WO-1", target_day).complete(True)
        with pytest.raises(BookingAlreadyCompletedError):
            done.complete(True)


class TestBookingHelpers:
    """Date helpers and display."""

    def test_overlap_is_day_granular(self, target_day):
        booking = Booking("WO-1", target_day)
        noon = datetime.combine(target_day, time(12, 0))
        assert booking.overlaps_with(noon, timedelta(hours=1))
        next_day = datetime.combine(target_day + timedelta(days=1), time(8, 0))
        assert not booking.overlaps_with(next_day, timedelta(hours=2))

    def test_overlap_from_previous_evening(self, target_day):
        """A job running past midnight overlaps the next day's booking."""
        booking = Booking("WO-1", target_day)
        evening_before = datetime.combine(target_day - timedelta(days=1), time(22, 0))
        assert booking.overlaps_with(evening_before, timedelta(hours=3))

    def test_scheduled_for_today(self, today):
        booking = Booking("WO-1", today)
        assert booking.is_scheduled_for_today(today)
        assert booking.days_until_scheduled(today) == 0

    def test_overdue(self, today):
        """Pending bookings in the past are overdue; completed ones are not."""
        past = Booking("WO-1", today - timedelta(days=2))
        assert past.is_overdue()
        assert not past.complete(True).is_overdue()
        assert not Booking("WO-2", today + timedelta(days=2)).is_overdue()

    def test_with_helpers(self, target_day):
        booking = Booking("WO-1", target_day, "first")
        moved = booking.with_scheduled_date(target_day + timedelta(days=1))
        assert moved.scheduled_day == target_day + timedelta(days=1)
        assert moved.notes == "first"
        assert booking.with_notes("second").notes == "second"

    def test_age_until_completion(self, target_day):
        assigned = datetime(2030, 1, 1, 8, 0)
        booking = Booking("WO-1", target_day, assigned_at=assigned)
        done = booking.complete(True, now=assigned + timedelta(hours=5))
        assert done.age() == timedelta(hours=5)

    def test_str(self, target_day):
        booking = Booking("WO-1", target_day)
        assert str(booking) == f"Work Order WO-1 scheduled for {target_day:%Y-%m-%d} - Pending"
        assert str(booking.complete(False)).endswith("Completed with Issues")
