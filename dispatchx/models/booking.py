import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional

from dispatchx.config.settings import get_settings
from dispatchx.models.entities import CompletionState
from dispatchx.models.exceptions import (
    BookingAlreadyCompletedError,
    DispatchError,
    InvalidScheduleDateError,
    InvalidWorkOrderError,
)


WORK_ORDER_PATTERN = re.compile(r"^[A-Z0-9\-]{3,20}$")


def as_day(value) -> date:
    """Collapse a datetime to its calendar day; dates pass through."""
    return value.date() if isinstance(value, datetime) else value


@dataclass(frozen=True)
class Booking:
    """
    One worker commitment to a work order on a given day.

    Immutable: completing a booking returns a new instance. Past scheduled
    dates are accepted so stored history can be rebuilt; callers creating
    new bookings are expected to pass a current or future date.
    """

    work_order_number: str
    scheduled_date: datetime
    notes: Optional[str] = None
    assigned_at: datetime = field(default_factory=datetime.now)
    state: CompletionState = CompletionState.PENDING
    completed_at: Optional[datetime] = None
    completion_notes: Optional[str] = None

    def __post_init__(self):
        settings = get_settings()
        object.__setattr__(self, "work_order_number", _normalize_work_order(self.work_order_number))
        object.__setattr__(self, "scheduled_date", _check_scheduled_date(self.scheduled_date, settings.booking_max_days_ahead))
        object.__setattr__(self, "notes", _clean_text(self.notes, settings.booking_notes_max_length, "Notes"))
        object.__setattr__(
            self,
            "completion_notes",
            _clean_text(self.completion_notes, settings.completion_notes_max_length, "Completion notes"),
        )

    @property
    def is_completed(self) -> bool:
        return self.state is not CompletionState.PENDING

    @property
    def completed_successfully(self) -> Optional[bool]:
        if not self.is_completed:
            return None
        return self.state is CompletionState.SUCCESSFUL

    @property
    def scheduled_day(self) -> date:
        return self.scheduled_date.date()

    def complete(self, successful: bool, notes: Optional[str] = None, now: Optional[datetime] = None) -> "Booking":
        if self.is_completed:
            raise BookingAlreadyCompletedError(f"Work order {self.work_order_number} is already completed")
        return replace(
            self,
            state=CompletionState.SUCCESSFUL if successful else CompletionState.UNSUCCESSFUL,
            completed_at=now or datetime.now(),
            completion_notes=notes,
        )

    def with_scheduled_date(self, scheduled_date: datetime) -> "Booking":
        return Booking(self.work_order_number, scheduled_date, self.notes)

    def with_notes(self, notes: Optional[str]) -> "Booking":
        return Booking(self.work_order_number, self.scheduled_date, notes)

    def overlaps_with(self, start: datetime, duration: timedelta) -> bool:
        """Day-granular overlap: the booking occupies its whole scheduled day."""
        day_start = datetime.combine(self.scheduled_day, datetime.min.time())
        day_end = day_start + timedelta(days=1)
        return start < day_end and start + duration > day_start

    def days_until_scheduled(self, today: Optional[date] = None) -> int:
        return (self.scheduled_day - (today or date.today())).days

    def is_scheduled_for_today(self, today: Optional[date] = None) -> bool:
        return self.scheduled_day == (today or date.today())

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return not self.is_completed and self.scheduled_date < (now or datetime.now())

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (self.completed_at or now or datetime.now()) - self.assigned_at

    def __str__(self) -> str:
        if self.state is CompletionState.SUCCESSFUL:
            status = "Completed Successfully"
        elif self.state is CompletionState.UNSUCCESSFUL:
            status = "Completed with Issues"
        elif self.is_overdue():
            status = "Overdue"
        else:
            status = "Pending"
        return f"Work Order {self.work_order_number} scheduled for {self.scheduled_date:%Y-%m-%d} - {status}"


def _normalize_work_order(value: str) -> str:
    if not value or not str(value).strip():
        raise InvalidWorkOrderError("Work order number cannot be empty")
    normalized = str(value).strip().upper()
    if len(normalized) < 3:
        raise InvalidWorkOrderError("Work order number must be at least 3 characters long")
    if len(normalized) > 20:
        raise InvalidWorkOrderError("Work order number cannot exceed 20 characters")
    if not WORK_ORDER_PATTERN.match(normalized):
        raise InvalidWorkOrderError("Work order number format is invalid (alphanumeric with hyphens only)")
    return normalized


def _check_scheduled_date(value, max_days_ahead: int) -> datetime:
    if value is None:
        raise InvalidScheduleDateError("Scheduled date is required")
    if not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time())
    if value > datetime.now() + timedelta(days=max_days_ahead):
        raise InvalidScheduleDateError(f"Scheduled date cannot be more than {max_days_ahead} days in the future")
    return value


def _clean_text(value: Optional[str], max_length: int, label: str) -> Optional[str]:
    if value is None or not value.strip():
        return None
    trimmed = value.strip()
    if len(trimmed) > max_length:
        raise DispatchError(f"{label} cannot exceed {max_length} characters")
    return trimmed
