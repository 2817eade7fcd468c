from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Tuple

from dispatchx.models.results import ExistingBookingSnapshot


UnitKey = Tuple[str, str, date]


def build_unit_index(snapshots: Iterable[ExistingBookingSnapshot]) -> Dict[UnitKey, List[ExistingBookingSnapshot]]:
    """Group active snapshots by (property, unit, day) for constant-time conflict lookup."""
    index: Dict[UnitKey, List[ExistingBookingSnapshot]] = defaultdict(list)
    for snapshot in snapshots:
        if snapshot.is_active:
            index[snapshot.unit_key].append(snapshot)
    return index


def build_worker_day_index(snapshots: Iterable[ExistingBookingSnapshot]) -> Dict[Tuple[str, date], int]:
    counts: Dict[Tuple[str, date], int] = defaultdict(int)
    for snapshot in snapshots:
        if snapshot.is_active:
            counts[(snapshot.worker_email.lower(), snapshot.scheduled_date)] += 1
    return counts


def conflicts_for(
    index: Dict[UnitKey, List[ExistingBookingSnapshot]],
    request_id: str,
    property_code: str,
    unit: str,
    day: date,
) -> List[ExistingBookingSnapshot]:
    return [s for s in index.get((property_code, unit, day), []) if s.request_id != request_id]
