import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from dispatchx.config.settings import get_settings
from dispatchx.models.booking import as_day
from dispatchx.models.results import AvailabilitySummary
from dispatchx.models.worker import Worker


logger = logging.getLogger(__name__)


def summarize_availability(
    worker: Worker,
    start=None,
    end=None,
    reference=None,
    include_emergency_override: bool = False,
    today: Optional[date] = None,
) -> AvailabilitySummary:
    """Snapshot of a worker's calendar between start and end, for booking screens."""
    settings = get_settings()
    today = today or date.today()
    start = as_day(start) if start else today
    end = as_day(end) if end else start + timedelta(days=settings.availability_lookahead_days)
    reference = as_day(reference) if reference else start

    return AvailabilitySummary(
        worker_id=worker.id,
        worker_email=worker.email,
        worker_name=worker.name,
        specialization=worker.specialization,
        next_fully_available_date=worker.next_fully_available_date(reference, today=today),
        current_workload=worker.upcoming_workload_count(today),
        booked_dates=tuple(worker.booked_dates(start, end, include_emergency_override)),
        partially_booked_dates=tuple(worker.partially_booked_dates(start, end)),
        availability_score=worker.availability_score(reference, today=today),
        active_assignments_count=worker.active_booking_count,
        is_active=worker.is_active,
        slot_capacity=settings.slot_capacity_per_day,
    )


def rank_by_availability(workers: Iterable[Worker], reference=None, today: Optional[date] = None) -> List[Worker]:
    """Active workers, soonest free and least loaded first."""
    active = [w for w in workers if w.is_active]
    ranked = sorted(active, key=lambda w: (w.availability_score(reference, today=today), w.name))
    logger.debug(f"Ranked {len(ranked)} workers by availability")
    return ranked
