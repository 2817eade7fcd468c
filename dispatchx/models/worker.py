"""
Worker aggregate and fitness engine.

A worker owns its bookings and answers every "how well does this worker
fit this request" question: score, eligibility, confidence, reasoning,
completion estimate and per-date availability. Every query on an
inactive worker returns its ineligible value (0, False, 0.0, zero
duration, empty list, None).

Capacity is counted per calendar day over bookings that are not yet
completed: two bookings fill a normal day, emergencies may stretch it to
the emergency capacity.
"""

import logging
import sys
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

from dispatchx.config.settings import get_settings
from dispatchx.models.booking import Booking, as_day
from dispatchx.models.entities import (
    EMERGENCY_CAPABLE,
    ConflictType,
    MaintenanceRequest,
    Specialization,
)
from dispatchx.models.exceptions import (
    BookingNotFoundError,
    InvalidWorkOrderError,
    WorkerUnavailableError,
)
from dispatchx.models.results import ValidationOutcome
from dispatchx.utils.scoring import (
    COMPLETION_EXACT_MATCH,
    COMPLETION_NONE,
    COMPLETION_OTHER,
    CONFIDENCE_EXACT_MATCH,
    CONFIDENCE_EXACT_MATCH_EMERGENCY,
    CONFIDENCE_GENERAL_FALLBACK,
    CONFIDENCE_GENERAL_FALLBACK_EMERGENCY,
    CONFIDENCE_NONE,
    ScoringWeights,
    default_weights,
    workload_adjustment,
)


logger = logging.getLogger(__name__)

# Days charged when no free day exists inside the look-ahead window
NO_AVAILABILITY_PENALTY_DAYS = 999


@dataclass
class Worker:
    id: str
    email: str
    name: str
    specialization: Specialization = Specialization.GENERAL_MAINTENANCE
    is_active: bool = True
    bookings: List[Booking] = field(default_factory=list)
    notes: Optional[str] = None

    # ---- lifecycle ----

    def activate(self, today: Optional[date] = None) -> None:
        if self.is_active:
            return
        self.is_active = True
        self._add_note(f"Activated on {(today or date.today()):%Y-%m-%d}")
        logger.info(f"Worker {self.email} activated")

    def deactivate(self, reason: str, today: Optional[date] = None) -> None:
        if not self.is_active:
            return
        self.is_active = False
        self._add_note(f"Deactivated on {(today or date.today()):%Y-%m-%d}: {reason}")
        logger.info(f"Worker {self.email} deactivated: {reason}")

    def _add_note(self, line: str) -> None:
        self.notes = f"{self.notes}\n{line}" if self.notes else line

    @property
    def is_emergency_capable(self) -> bool:
        return self.specialization in EMERGENCY_CAPABLE

    @property
    def active_booking_count(self) -> int:
        return sum(1 for b in self.bookings if not b.is_completed)

    # ---- fitness ----

    def score(
        self,
        request: MaintenanceRequest,
        weights: Optional[ScoringWeights] = None,
        today: Optional[date] = None,
    ) -> int:
        """
        Integer fitness of this worker for a request; 0 means ineligible.

        base + specialization bonus (exact or general fallback)
        + availability bonus on the target day + workload adjustment
        + emergency bonus.
        """
        required = request.required_specialization
        if not self.is_active or not self.specialization.covers(required):
            return 0

        weights = weights or default_weights()
        today = today or date.today()

        total = weights.base
        if self.specialization.is_exact_match(required):
            total += weights.exact_match
        else:
            total += weights.general_fallback

        if self.is_available_for_work(self._target_day(request, today), today=today):
            total += weights.availability

        total += workload_adjustment(self.upcoming_workload_count(today), weights)

        if request.is_emergency:
            total += weights.emergency
        return total

    def is_eligible(self, request: MaintenanceRequest) -> bool:
        return (
            self.is_active
            and self.specialization.covers(request.required_specialization)
            and request.status.is_assignable
        )

    def recommendation_confidence(self, request: MaintenanceRequest) -> float:
        required = request.required_specialization
        if not self.is_active or not self.specialization.covers(required):
            return CONFIDENCE_NONE
        if self.specialization.is_exact_match(required):
            return CONFIDENCE_EXACT_MATCH_EMERGENCY if request.is_emergency else CONFIDENCE_EXACT_MATCH
        return CONFIDENCE_GENERAL_FALLBACK_EMERGENCY if request.is_emergency else CONFIDENCE_GENERAL_FALLBACK

    def recommendation_reasoning(self, request: MaintenanceRequest, today: Optional[date] = None) -> str:
        if not self.is_active:
            return "Worker is inactive"

        today = today or date.today()
        required = request.required_specialization
        if not self.specialization.covers(required):
            return (
                f"{self.specialization.display_name} specialization does not cover "
                f"{required.display_name} work"
            )

        reasons = []
        if self.specialization.is_exact_match(required):
            reasons.append(f"Has exact {required.value} specialization")
        else:
            reasons.append(f"General maintenance worker can handle {required.display_name} work")

        if self.is_available_for_work(self._target_day(request, today), today=today):
            reasons.append("Available for immediate assignment")
        else:
            reasons.append("Limited availability on the requested date")

        workload = self.upcoming_workload_count(today)
        if workload == 0:
            reasons.append("No upcoming workload")
        elif workload <= get_settings().light_workload_threshold:
            reasons.append(f"Light workload ({workload} upcoming jobs)")
        else:
            reasons.append(f"Current workload: {workload} upcoming jobs")

        if request.is_emergency:
            if self.is_emergency_capable:
                reasons.append("Qualified to respond to emergency requests")
            else:
                reasons.append("Not usually dispatched to emergency requests")
        return "; ".join(reasons)

    def estimated_completion_time(self, request: MaintenanceRequest) -> timedelta:
        if not self.is_active:
            return COMPLETION_NONE
        if self.specialization.is_exact_match(request.required_specialization):
            return COMPLETION_EXACT_MATCH
        return COMPLETION_OTHER

    def validate_assignment(
        self,
        request: MaintenanceRequest,
        scheduled_date,
        today: Optional[date] = None,
    ) -> ValidationOutcome:
        """Business checks for booking this worker; failures are returned, never raised."""
        today = today or date.today()
        day = as_day(scheduled_date)

        if not self.is_active:
            return ValidationOutcome.failure(
                f"Worker {self.name} is not active", ConflictType.WORKER_INACTIVE
            )
        if day < today:
            return ValidationOutcome.failure(
                "Scheduled date must be today or in the future", ConflictType.PAST_DATE
            )

        required = request.required_specialization
        if not self.specialization.covers(required):
            return ValidationOutcome.failure(
                f"Worker specialization {self.specialization.display_name} cannot handle "
                f"{required.display_name} work",
                ConflictType.SPECIALIZATION_MISMATCH,
            )
        if not request.status.is_assignable:
            return ValidationOutcome.failure(
                f"Request {request.id} in status {request.status.value} cannot be assigned",
                ConflictType.REQUEST_NOT_ASSIGNABLE,
            )

        settings = get_settings()
        count = self._pending_on(day)
        warnings = []
        if count >= settings.slot_capacity_per_day:
            if not request.is_emergency:
                return ValidationOutcome.failure(
                    f"Worker {self.name} is fully booked on {day:%Y-%m-%d}",
                    ConflictType.WORKER_FULLY_BOOKED,
                )
            warnings.append(
                f"Worker {self.name} is fully booked on {day:%Y-%m-%d}; "
                f"emergency assignment exceeds the normal daily capacity"
            )
        elif count > 0:
            warnings.append(
                f"Worker {self.name} already has {count} booking(s) on {day:%Y-%m-%d}"
            )
        return ValidationOutcome.success(warnings)

    # ---- availability ----

    def _target_day(self, request: MaintenanceRequest, today: date) -> date:
        return as_day(request.scheduled_date) if request.scheduled_date else today

    def _pending_on(self, day: date) -> int:
        return sum(1 for b in self.bookings if not b.is_completed and b.scheduled_day == day)

    def _pending_per_day(self, start: date, end: date) -> Dict[date, int]:
        return Counter(
            b.scheduled_day
            for b in self.bookings
            if not b.is_completed and start <= b.scheduled_day <= end
        )

    def _range(self, start, end) -> tuple:
        start = as_day(start) if start else date.today()
        end = as_day(end) if end else start + timedelta(days=get_settings().availability_lookahead_days)
        return start, end

    def upcoming_workload_count(self, reference_date=None, horizon_days: Optional[int] = None) -> int:
        """Bookings not yet completed that fall inside [reference, reference + horizon]."""
        start = as_day(reference_date) if reference_date else date.today()
        horizon = horizon_days if horizon_days is not None else get_settings().workload_horizon_days
        return sum(self._pending_per_day(start, start + timedelta(days=horizon)).values())

    def booked_dates(self, start=None, end=None, include_emergency_override: bool = False) -> List[date]:
        if not self.is_active:
            return []
        settings = get_settings()
        limit = (
            settings.emergency_slot_capacity_per_day
            if include_emergency_override
            else settings.slot_capacity_per_day
        )
        counts = self._pending_per_day(*self._range(start, end))
        return sorted(day for day, n in counts.items() if n >= limit)

    def partially_booked_dates(self, start=None, end=None) -> List[date]:
        if not self.is_active:
            return []
        counts = self._pending_per_day(*self._range(start, end))
        return sorted(day for day, n in counts.items() if 0 < n < get_settings().slot_capacity_per_day)

    def availability_for_date(self, day, is_emergency: bool = False, today: Optional[date] = None) -> int:
        """2 = fully available, 1 = partially available, 0 = no room."""
        day = as_day(day)
        if not self.is_active or day < (today or date.today()):
            return 0

        settings = get_settings()
        count = self._pending_on(day)
        if is_emergency:
            if count >= settings.emergency_slot_capacity_per_day:
                return 0
            return 2 if count == 0 else 1
        if count == 0:
            return 2
        return 1 if count < settings.slot_capacity_per_day else 0

    def is_available_for_work(self, day, today: Optional[date] = None) -> bool:
        return self.availability_for_date(day, today=today) > 0

    def next_fully_available_date(
        self,
        reference_date=None,
        lookahead_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Optional[date]:
        if not self.is_active:
            return None
        today = today or date.today()
        start = max(as_day(reference_date) if reference_date else today, today)
        lookahead = lookahead_days if lookahead_days is not None else get_settings().availability_lookahead_days

        for offset in range(lookahead + 1):
            day = start + timedelta(days=offset)
            if self._pending_on(day) == 0:
                return day
        return None

    def availability_score(self, reference_date=None, today: Optional[date] = None) -> int:
        """(days until next free day * 100) + workload; lower is better."""
        if not self.is_active:
            return sys.maxsize
        today = today or date.today()
        reference = as_day(reference_date) if reference_date else today
        next_free = self.next_fully_available_date(reference, today=today)
        days = (next_free - reference).days if next_free else NO_AVAILABILITY_PENALTY_DAYS
        return days * 100 + self.upcoming_workload_count(today)

    # ---- mutation ----

    def assign_to_work(
        self,
        work_order_number: str,
        scheduled_date,
        notes: Optional[str] = None,
        is_emergency: bool = False,
        today: Optional[date] = None,
    ) -> Booking:
        """Append a booking. Call only after validation has succeeded."""
        booking = Booking(work_order_number, scheduled_date, notes)
        day = booking.scheduled_day

        if not self.is_active:
            raise WorkerUnavailableError(f"Worker {self.email} is inactive")
        if day < (today or date.today()):
            raise WorkerUnavailableError("Cannot assign work in the past")
        if any(b.work_order_number == booking.work_order_number for b in self.bookings):
            raise InvalidWorkOrderError(
                f"Work order {booking.work_order_number} is already assigned to {self.email}"
            )
        if self.availability_for_date(day, is_emergency=is_emergency, today=today) == 0:
            raise WorkerUnavailableError(f"Worker {self.email} is not available on {day:%Y-%m-%d}")

        self.bookings.append(booking)
        logger.info(f"Worker {self.email} booked for {booking.work_order_number} on {day:%Y-%m-%d}")
        return booking

    def complete_work(self, work_order_number: str, successful: bool, notes: Optional[str] = None) -> Booking:
        key = (work_order_number or "").strip().upper()
        for i, booking in enumerate(self.bookings):
            if booking.work_order_number == key:
                completed = booking.complete(successful, notes)
                self.bookings[i] = completed
                logger.info(
                    f"Worker {self.email} completed {key} "
                    f"({'successful' if successful else 'unsuccessful'})"
                )
                return completed
        raise BookingNotFoundError(f"Work order '{work_order_number}' not found for worker {self.email}")

    def __str__(self) -> str:
        status = "active" if self.is_active else "inactive"
        return f"{self.name} <{self.email}> ({self.specialization.display_name}, {status})"
