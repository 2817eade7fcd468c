from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from dispatchx.models.entities import SlotType
from dispatchx.models.exceptions import InvalidTimeSlotError


BUSINESS_START = time(7, 0)
BUSINESS_END = time(21, 0)
MIN_DURATION = timedelta(minutes=30)
MAX_DURATION = timedelta(hours=8)

MORNING = (time(8, 0), time(12, 0))
AFTERNOON = (time(12, 0), time(17, 0))
EVENING = (time(17, 0), time(20, 0))
DEFAULT_WINDOW = (time(8, 0), time(17, 0))

# Leading word of the tenant's preference -> window
_PREFERENCE_WINDOWS = (
    ("morning", MORNING),
    ("afternoon", AFTERNOON),
    ("evening", EVENING),
    ("anytime", DEFAULT_WINDOW),
    ("any time", DEFAULT_WINDOW),
)


def _fmt(t: time) -> str:
    return f"{t.hour % 12 or 12}:{t.minute:02d} {'AM' if t.hour < 12 else 'PM'}"


@dataclass(frozen=True)
class TimeSlot:
    day: date
    start: time
    end: time
    slot_type: SlotType = SlotType.STANDARD

    def __post_init__(self):
        if isinstance(self.day, datetime):
            object.__setattr__(self, "day", self.day.date())
        if self.day < date.today():
            raise InvalidTimeSlotError("Cannot schedule slots in the past")
        if self.start >= self.end:
            raise InvalidTimeSlotError("Start time must be before end time")
        if self.duration < MIN_DURATION:
            raise InvalidTimeSlotError("Slot must be at least 30 minutes long")
        # Tenant windows mirror what the tenant offered; 08-17 is nine hours
        if self.duration > MAX_DURATION and self.slot_type is not SlotType.TENANT_PREFERRED:
            raise InvalidTimeSlotError("Slot cannot be longer than 8 hours")

    @classmethod
    def from_preference(cls, day: date, preference: Optional[str]) -> "TimeSlot":
        """Turn a tenant's contact preference ("Morning (8 AM - 12 PM)") into a slot."""
        start, end = _window_for(preference)
        return cls(day, start, end, SlotType.TENANT_PREFERRED)

    @classmethod
    def standard_slots_for(cls, day: date) -> List["TimeSlot"]:
        return [
            cls(day, *MORNING, SlotType.MORNING),
            cls(day, *AFTERNOON, SlotType.AFTERNOON),
            cls(day, *EVENING, SlotType.EVENING),
        ]

    @property
    def duration(self) -> timedelta:
        return datetime.combine(self.day, self.end) - datetime.combine(self.day, self.start)

    def overlaps_with(self, other: Optional["TimeSlot"]) -> bool:
        """Half-open [start, end) intersection on the same day."""
        if other is None or self.day != other.day:
            return False
        return self.start < other.end and other.start < self.end

    def is_within_business_hours(self) -> bool:
        return self.start >= BUSINESS_START and self.end <= BUSINESS_END

    def is_suitable_for_emergency(self) -> bool:
        return self.slot_type is SlotType.EMERGENCY or self.is_within_business_hours()

    def midpoint(self) -> datetime:
        """Canonical timestamp for a booking made against this slot."""
        return datetime.combine(self.day, self.start) + self.duration / 2

    @property
    def display_name(self) -> str:
        window = f"{_fmt(self.start)} - {_fmt(self.end)}"
        if self.slot_type is SlotType.MORNING:
            return "Morning (8:00 AM - 12:00 PM)"
        if self.slot_type is SlotType.AFTERNOON:
            return "Afternoon (12:00 PM - 5:00 PM)"
        if self.slot_type is SlotType.EVENING:
            return "Evening (5:00 PM - 8:00 PM)"
        if self.slot_type is SlotType.TENANT_PREFERRED:
            return f"Tenant Preferred ({window})"
        if self.slot_type is SlotType.EMERGENCY:
            return f"Emergency Slot ({window})"
        return window

    def __str__(self) -> str:
        return f"{self.day:%Y-%m-%d} {self.display_name} ({self.slot_type.value})"


def _window_for(preference: Optional[str]) -> Tuple[time, time]:
    text = " ".join((preference or "").strip().lower().split())
    for prefix, window in _PREFERENCE_WINDOWS:
        if text.startswith(prefix):
            return window
    return DEFAULT_WINDOW
