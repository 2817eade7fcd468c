"""
Assignment Validator

Decides whether a proposed booking may go ahead given a snapshot of the
other bookings the caller has loaded. Stateless: every function is a pure
projection of its inputs, so a validation can be retried freely.

Rules, in order:
    1. The worker's trade must cover the required trade.
    2. Other active requests on the same property, unit and day conflict.
    3. A normal request with any conflict is rejected.
    4. An emergency request displaces conflicting normal bookings (they are
       listed for cancellation) and reports conflicting emergencies as a
       warning. Two emergencies never cancel each other.

The snapshot is read once; serializing concurrent attempts on the same
unit and day is the persistence layer's job.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Union

from dispatchx.config.settings import get_settings
from dispatchx.engine.classifier import as_specialization
from dispatchx.graph.conflict_index import build_unit_index, build_worker_day_index, conflicts_for
from dispatchx.models.booking import as_day
from dispatchx.models.entities import ConflictType, MaintenanceRequest, Specialization
from dispatchx.models.results import (
    CancelledBookingInfo,
    EmergencyOverrideResult,
    ExistingBookingSnapshot,
    ValidationOutcome,
)
from dispatchx.models.worker import Worker


logger = logging.getLogger(__name__)

EMERGENCY_CANCELLATION_REASON = "Cancelled due to emergency request override"


def validate_assignment(
    request_id: str,
    property_code: str,
    unit: str,
    scheduled_date: Union[date, datetime],
    worker_email: str,
    worker_specialization: Union[Specialization, str],
    required_specialization: Union[Specialization, str],
    is_emergency: bool,
    snapshots: Iterable[ExistingBookingSnapshot],
) -> ValidationOutcome:
    """
    Validate one proposed booking against existing bookings.

    Args:
        request_id: Request being scheduled; its own snapshot entries are ignored
        property_code: Property of the unit
        unit: Unit identifier within the property
        scheduled_date: Proposed day (a datetime is truncated to its day)
        worker_email: Worker being booked
        worker_specialization: Worker's trade (category or free text)
        required_specialization: Trade the request needs (category or free text)
        is_emergency: Whether the request may displace normal bookings
        snapshots: Other bookings the caller loaded for the day or range

    Returns:
        ValidationOutcome; business failures are reported, never raised.
    """
    worker_trade = as_specialization(worker_specialization)
    required = as_specialization(required_specialization)
    day = as_day(scheduled_date)
    property_code = property_code.strip()
    unit = unit.strip()

    if not worker_trade.covers(required):
        logger.info(f"Rejecting {worker_email} for {request_id}: {worker_trade.value} cannot do {required.value}")
        return ValidationOutcome.failure(
            f"Worker specialization {worker_trade.display_name} does not match required "
            f"{required.display_name}. Only exact matches or General Maintenance workers can be assigned.",
            ConflictType.SPECIALIZATION_MISMATCH,
        )

    snapshots = list(snapshots)
    conflicts = conflicts_for(build_unit_index(snapshots), request_id, property_code, unit, day)

    if conflicts and not is_emergency:
        logger.info(f"Unit conflict for {request_id} at {property_code}/{unit} on {day}: {len(conflicts)} booking(s)")
        ids = ", ".join(c.request_id for c in conflicts)
        return ValidationOutcome.failure(
            f"Unit {unit} at property {property_code} already has work scheduled on "
            f"{day:%Y-%m-%d} (request {ids})",
            ConflictType.UNIT_CONFLICT,
            conflicts,
        )

    outcome = ValidationOutcome.success()
    for conflict in conflicts:
        if conflict.is_emergency:
            outcome.emergency_conflicts.append(conflict)
            outcome.warnings.append(
                f"Another emergency (request {conflict.request_id}, {conflict.worker_email}) is already "
                f"scheduled for unit {unit} on {day:%Y-%m-%d}; neither will be cancelled"
            )
        else:
            outcome.assignments_to_cancel_for_emergency.append(conflict)
            outcome.warnings.append(
                f"Emergency override will cancel request {conflict.request_id} "
                f"({conflict.work_order_number or 'no work order'}, {conflict.worker_email})"
            )

    if outcome.assignments_to_cancel_for_emergency:
        logger.warning(
            f"Emergency {request_id} overrides {len(outcome.assignments_to_cancel_for_emergency)} "
            f"booking(s) at {property_code}/{unit} on {day}"
        )
    if outcome.has_emergency_conflicts:
        logger.warning(f"Emergency {request_id} shares {property_code}/{unit} on {day} with another emergency")

    # Bookings about to be cancelled no longer count against the worker
    displaced = {c.request_id for c in outcome.assignments_to_cancel_for_emergency}
    remaining = [s for s in snapshots if s.request_id != request_id and s.request_id not in displaced]
    booked = build_worker_day_index(remaining).get((worker_email.strip().lower(), day), 0)
    capacity = get_settings().slot_capacity_per_day
    if booked >= capacity:
        outcome.warnings.append(
            f"Worker {worker_email} already has {booked} booking(s) on {day:%Y-%m-%d} "
            f"(daily capacity {capacity})"
        )
    return outcome


def validate_worker_for_request(
    worker: Worker,
    request: MaintenanceRequest,
    scheduled_date: Union[date, datetime],
    snapshots: Iterable[ExistingBookingSnapshot],
    today: Optional[date] = None,
) -> ValidationOutcome:
    """Worker fitness checks followed by the unit conflict scan."""
    fitness = worker.validate_assignment(request, scheduled_date, today=today)
    if not fitness.is_valid:
        return fitness

    outcome = validate_assignment(
        request.id,
        request.property_code,
        request.unit,
        scheduled_date,
        worker.email,
        worker.specialization,
        request.required_specialization,
        request.is_emergency,
        snapshots,
    )
    outcome.warnings = fitness.warnings + outcome.warnings
    return outcome


def process_emergency_override(
    cancellations: Iterable[ExistingBookingSnapshot],
    reason: str = EMERGENCY_CANCELLATION_REASON,
) -> EmergencyOverrideResult:
    """
    List the requests the caller must move to Failed so an emergency can take the slot.

    Performs no mutation; ids are returned once each, in input order.
    """
    result = EmergencyOverrideResult()
    seen = set()
    for snapshot in cancellations:
        if snapshot.request_id in seen:
            continue
        seen.add(snapshot.request_id)
        result.cancelled_request_ids.append(snapshot.request_id)
        result.cancelled_bookings.append(
            CancelledBookingInfo(
                request_id=snapshot.request_id,
                worker_email=snapshot.worker_email,
                work_order_number=snapshot.work_order_number,
                original_scheduled_date=snapshot.scheduled_date,
                reason=reason,
            )
        )
    if result.cancelled_request_ids:
        logger.info(f"Emergency override cancels requests: {', '.join(result.cancelled_request_ids)}")
    return result
