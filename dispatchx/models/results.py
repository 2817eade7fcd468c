from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from dispatchx.engine.classifier import parse_specialization
from dispatchx.models.booking import as_day
from dispatchx.models.entities import ConflictType, RequestStatus, Specialization

if TYPE_CHECKING:
    from dispatchx.models.worker import Worker


class ExistingBookingSnapshot(BaseModel):
    """Point-in-time projection of another request's booking, supplied by the caller."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    property_code: str
    unit: str
    worker_email: str
    worker_specialization: Specialization = Specialization.GENERAL_MAINTENANCE
    work_order_number: str = ""
    scheduled_date: date
    status: RequestStatus = RequestStatus.SCHEDULED
    is_emergency: bool = False

    @field_validator("request_id", "property_code", "unit", "worker_email")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("worker_specialization", mode="before")
    @classmethod
    def parse_trade(cls, v):
        if isinstance(v, str) and not isinstance(v, Specialization):
            return parse_specialization(v)
        return v

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def to_day(cls, v):
        return as_day(v)

    @property
    def is_active(self) -> bool:
        return self.status is RequestStatus.SCHEDULED

    @property
    def unit_key(self) -> Tuple[str, str, date]:
        return (self.property_code, self.unit, self.scheduled_date)


@dataclass
class ValidationOutcome:
    is_valid: bool = True
    error_message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    conflict_type: ConflictType = ConflictType.NONE
    conflicting_bookings: List[ExistingBookingSnapshot] = field(default_factory=list)
    assignments_to_cancel_for_emergency: List[ExistingBookingSnapshot] = field(default_factory=list)
    emergency_conflicts: List[ExistingBookingSnapshot] = field(default_factory=list)

    @property
    def has_emergency_conflicts(self) -> bool:
        return bool(self.emergency_conflicts)

    @classmethod
    def success(cls, warnings: Optional[List[str]] = None) -> "ValidationOutcome":
        return cls(is_valid=True, warnings=list(warnings or []))

    @classmethod
    def failure(
        cls,
        message: str,
        conflict_type: ConflictType,
        conflicting: Optional[List[ExistingBookingSnapshot]] = None,
    ) -> "ValidationOutcome":
        return cls(
            is_valid=False,
            error_message=message,
            conflict_type=conflict_type,
            conflicting_bookings=list(conflicting or []),
        )


@dataclass
class Recommendation:
    worker: "Worker"
    score: int
    confidence: float
    reasoning: str
    estimated_completion_time: timedelta


@dataclass(frozen=True)
class WorkloadDistribution:
    total_workers: int = 0
    average_workload: float = 0.0
    max_workload: int = 0
    min_workload: int = 0
    overloaded_workers: int = 0


@dataclass(frozen=True)
class CancelledBookingInfo:
    request_id: str
    worker_email: str
    work_order_number: str
    original_scheduled_date: date
    reason: str = "Cancelled due to emergency request override"


@dataclass
class EmergencyOverrideResult:
    cancelled_request_ids: List[str] = field(default_factory=list)
    cancelled_bookings: List[CancelledBookingInfo] = field(default_factory=list)


@dataclass(frozen=True)
class AvailabilitySummary:
    """Availability of one worker over a date range, ready for display."""

    worker_id: str
    worker_email: str
    worker_name: str
    specialization: Specialization
    next_fully_available_date: Optional[date]
    current_workload: int
    booked_dates: Tuple[date, ...]
    partially_booked_dates: Tuple[date, ...]
    availability_score: int
    active_assignments_count: int
    is_active: bool
    slot_capacity: int = 2

    def is_available_on(self, day, allow_partial: bool = True) -> bool:
        day = as_day(day)
        if day in self.booked_dates:
            return False
        if day in self.partially_booked_dates:
            return allow_partial
        return True

    def status_for(self, day) -> str:
        day = as_day(day)
        cap = self.slot_capacity
        if day in self.booked_dates:
            return f"Fully Booked ({cap}/{cap} slots)"
        if day in self.partially_booked_dates:
            return f"Limited Availability (1/{cap} slots)"
        return f"Fully Available (0/{cap} slots)"

    def indicator_for(self, day) -> str:
        day = as_day(day)
        if day in self.booked_dates:
            return "✗"
        if day in self.partially_booked_dates:
            return "⚠"
        return "✓"

    def __str__(self) -> str:
        if self.next_fully_available_date:
            availability = f"Next available: {self.next_fully_available_date:%Y-%m-%d}"
        else:
            availability = "No full-day availability in look-ahead window"
        return (
            f"{self.worker_name} ({self.specialization.display_name}) - "
            f"{availability} - Workload: {self.current_workload}"
        )
