import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

from dispatchx.models.exceptions import InvalidStatusTransitionError


logger = logging.getLogger(__name__)


class Specialization(str, Enum):
    PLUMBING = "Plumbing"
    ELECTRICAL = "Electrical"
    HVAC = "HVAC"
    PAINTING = "Painting"
    CARPENTRY = "Carpentry"
    LOCKSMITH = "Locksmith"
    APPLIANCE_REPAIR = "ApplianceRepair"
    GENERAL_MAINTENANCE = "GeneralMaintenance"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def covers(self, required: "Specialization") -> bool:
        """General maintenance can take any job; everyone else needs an exact match."""
        return self is required or self is Specialization.GENERAL_MAINTENANCE

    def is_exact_match(self, required: "Specialization") -> bool:
        return self is required


_DISPLAY_NAMES = {
    Specialization.PLUMBING: "Plumbing",
    Specialization.ELECTRICAL: "Electrical",
    Specialization.HVAC: "HVAC",
    Specialization.PAINTING: "Painting",
    Specialization.CARPENTRY: "Carpentry",
    Specialization.LOCKSMITH: "Locksmith",
    Specialization.APPLIANCE_REPAIR: "Appliance Repair",
    Specialization.GENERAL_MAINTENANCE: "General Maintenance",
}

_DESCRIPTIONS = {
    Specialization.PLUMBING: "Leaks, pipes, drains, toilets",
    Specialization.ELECTRICAL: "Outlets, wiring, lights, circuits",
    Specialization.HVAC: "Heating, cooling, ventilation",
    Specialization.PAINTING: "Walls, ceilings, trim",
    Specialization.CARPENTRY: "Wood, cabinets, doors, frames",
    Specialization.LOCKSMITH: "Locks, keys, security",
    Specialization.APPLIANCE_REPAIR: "Refrigerators, washers, dryers, ovens",
    Specialization.GENERAL_MAINTENANCE: "Can handle any type of maintenance work",
}

# Trades that get called out after hours
EMERGENCY_CAPABLE: FrozenSet[Specialization] = frozenset({
    Specialization.PLUMBING,
    Specialization.ELECTRICAL,
    Specialization.HVAC,
    Specialization.LOCKSMITH,
    Specialization.GENERAL_MAINTENANCE,
})


class Urgency(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    CRITICAL = "Critical"
    EMERGENCY = "Emergency"

    @classmethod
    def parse(cls, value: str) -> "Urgency":
        for urgency in cls:
            if urgency.value.lower() == (value or "").strip().lower():
                return urgency
        raise ValueError(f"Invalid urgency level: {value!r}")


class RequestStatus(str, Enum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    DECLINED = "Declined"
    SCHEDULED = "Scheduled"
    DONE = "Done"
    FAILED = "Failed"
    CLOSED = "Closed"

    @property
    def is_assignable(self) -> bool:
        return self not in _UNASSIGNABLE

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.CLOSED, RequestStatus.DECLINED)


_UNASSIGNABLE = frozenset({
    RequestStatus.CLOSED,
    RequestStatus.DONE,
    RequestStatus.FAILED,
    RequestStatus.DECLINED,
})

ALLOWED_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    RequestStatus.DRAFT: frozenset({RequestStatus.SUBMITTED}),
    RequestStatus.SUBMITTED: frozenset({RequestStatus.SCHEDULED, RequestStatus.DECLINED}),
    RequestStatus.SCHEDULED: frozenset({RequestStatus.DONE, RequestStatus.FAILED}),
    RequestStatus.FAILED: frozenset({RequestStatus.SUBMITTED}),
    RequestStatus.DONE: frozenset({RequestStatus.CLOSED}),
    RequestStatus.DECLINED: frozenset({RequestStatus.CLOSED}),
    RequestStatus.CLOSED: frozenset(),
}


class SlotType(str, Enum):
    STANDARD = "Standard"
    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"
    TENANT_PREFERRED = "TenantPreferred"
    EMERGENCY = "Emergency"
    FLEXIBLE = "Flexible"


class CompletionState(str, Enum):
    PENDING = "pending"
    SUCCESSFUL = "successful"
    UNSUCCESSFUL = "unsuccessful"


class ConflictType(str, Enum):
    NONE = "none"
    SPECIALIZATION_MISMATCH = "specialization_mismatch"
    UNIT_CONFLICT = "unit_conflict"
    WORKER_INACTIVE = "worker_inactive"
    PAST_DATE = "past_date"
    REQUEST_NOT_ASSIGNABLE = "request_not_assignable"
    WORKER_FULLY_BOOKED = "worker_fully_booked"


@dataclass
class MaintenanceRequest:
    """A tenant repair request as seen by the scheduling engine.

    The request owns its lifecycle; the engine only reads it, and callers
    apply the transitions below once a decision has been made.
    """

    id: str
    property_code: str
    unit: str
    title: str
    description: str = ""
    urgency: Urgency = Urgency.NORMAL
    status: RequestStatus = RequestStatus.DRAFT
    preferred_contact_time: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    assigned_worker_email: Optional[str] = None
    work_order_number: Optional[str] = None
    completion_notes: Optional[str] = None
    closure_notes: Optional[str] = None

    @property
    def is_emergency(self) -> bool:
        return self.urgency is Urgency.EMERGENCY

    @property
    def is_active(self) -> bool:
        return self.status in (RequestStatus.SUBMITTED, RequestStatus.SCHEDULED)

    @property
    def required_specialization(self) -> Specialization:
        from dispatchx.engine.classifier import classify

        return classify(self.title, self.description)

    def can_transition_to(self, new_status: RequestStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]

    def submit(self) -> None:
        if not self.title.strip():
            raise InvalidStatusTransitionError("Request title is required for submission")
        self._move_to(RequestStatus.SUBMITTED)

    def preferred_slot(self, day: date):
        """Window the tenant asked for on the given day."""
        from dispatchx.models.time_slot import TimeSlot

        return TimeSlot.from_preference(day, self.preferred_contact_time)

    def schedule(
        self,
        scheduled_date: Union[date, datetime],
        worker_email: str,
        work_order_number: str,
        now: Optional[datetime] = None,
    ) -> None:
        if self.status is not RequestStatus.SUBMITTED:
            raise InvalidStatusTransitionError(
                f"Request can only be scheduled from Submitted status. Current status: {self.status.value}"
            )
        if not isinstance(scheduled_date, datetime):
            scheduled_date = datetime.combine(scheduled_date, datetime.min.time())
        # Day granularity, same rule as worker validation
        if scheduled_date.date() < (now or datetime.now()).date():
            raise InvalidStatusTransitionError("Scheduled date must be today or in the future")
        if not worker_email or not worker_email.strip():
            raise InvalidStatusTransitionError("Worker email is required for scheduling")
        if not work_order_number or not work_order_number.strip():
            raise InvalidStatusTransitionError("Work order number is required for scheduling")

        self.scheduled_date = scheduled_date
        self.assigned_worker_email = worker_email
        self.work_order_number = work_order_number
        self._move_to(RequestStatus.SCHEDULED)

    def decline(self, reason: str) -> None:
        self._move_to(RequestStatus.DECLINED)
        self.closure_notes = reason

    def report_completed(self, successful: bool, notes: Optional[str] = None) -> None:
        self._move_to(RequestStatus.DONE if successful else RequestStatus.FAILED)
        self.completion_notes = notes

    def fail_due_to_emergency_override(self, reason: str) -> None:
        """Release the unit/date held by this request so an emergency can take it."""
        if self.status is not RequestStatus.SCHEDULED:
            raise InvalidStatusTransitionError(
                f"Only scheduled requests can be displaced by an emergency. Current status: {self.status.value}"
            )
        previous = (self.assigned_worker_email, self.work_order_number, self.scheduled_date)
        self._move_to(RequestStatus.FAILED)
        self.completion_notes = f"Work cancelled due to emergency override: {reason}"
        self.assigned_worker_email = None
        self.work_order_number = None
        self.scheduled_date = None
        worker, work_order, when = previous
        day = when.strftime("%Y-%m-%d") if when else "unknown date"
        self.closure_notes = f"Emergency override cancelled assignment: {worker} ({work_order}) on {day}"

    def resubmit(self) -> None:
        self._move_to(RequestStatus.SUBMITTED)

    def close(self, notes: str) -> None:
        self._move_to(RequestStatus.CLOSED)
        self.closure_notes = notes

    def _move_to(self, new_status: RequestStatus) -> None:
        if not self.can_transition_to(new_status):
            raise InvalidStatusTransitionError(
                f"Cannot move request {self.id} from {self.status.value} to {new_status.value}"
            )
        logger.info(f"Request {self.id}: {self.status.value} -> {new_status.value}")
        self.status = new_status
