"""
Roster queries over a collection of workers.

Inactive workers are excluded from every selection, grouping and
aggregate here.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Union

from dispatchx.config.settings import get_settings
from dispatchx.engine.classifier import as_specialization
from dispatchx.models.booking import as_day
from dispatchx.models.entities import MaintenanceRequest, Specialization
from dispatchx.models.results import Recommendation, WorkloadDistribution
from dispatchx.models.worker import Worker
from dispatchx.utils.scoring import ScoringWeights


logger = logging.getLogger(__name__)


def _active(workers: Iterable[Worker]) -> List[Worker]:
    return [w for w in workers if w.is_active]


def available_for_emergency(workers: Iterable[Worker]) -> List[Worker]:
    return [w for w in _active(workers) if w.is_emergency_capable]


def best_match(
    workers: Iterable[Worker],
    request: MaintenanceRequest,
    weights: Optional[ScoringWeights] = None,
    today: Optional[date] = None,
) -> Optional[Worker]:
    eligible = [w for w in workers if w.is_eligible(request)]
    if not eligible:
        logger.debug(f"No eligible worker for request {request.id}")
        return None
    best = max(eligible, key=lambda w: w.score(request, weights, today))
    logger.debug(f"Best match for request {request.id}: {best.email}")
    return best


def with_specialization(workers: Iterable[Worker], category: Union[Specialization, str]) -> List[Worker]:
    """Active workers who can take a job in the category; free-text trade names are accepted."""
    category = as_specialization(category)
    return [w for w in _active(workers) if w.specialization.covers(category)]


def available_on_date(workers: Iterable[Worker], day) -> List[Worker]:
    day = as_day(day)
    return [w for w in _active(workers) if day not in w.booked_dates(day, day)]


def with_light_workload(workers: Iterable[Worker], max_count: Optional[int] = None, reference=None) -> List[Worker]:
    if max_count is None:
        max_count = get_settings().light_workload_threshold
    return [w for w in _active(workers) if w.upcoming_workload_count(reference) <= max_count]


def recommendations(
    workers: Iterable[Worker],
    request: MaintenanceRequest,
    top_n: Optional[int] = None,
    weights: Optional[ScoringWeights] = None,
    today: Optional[date] = None,
) -> List[Recommendation]:
    if top_n is None:
        top_n = get_settings().max_recommendations

    results = [
        Recommendation(
            worker=w,
            score=w.score(request, weights, today),
            confidence=w.recommendation_confidence(request),
            reasoning=w.recommendation_reasoning(request, today),
            estimated_completion_time=w.estimated_completion_time(request),
        )
        for w in workers
        if w.is_eligible(request)
    ]
    results.sort(key=lambda r: r.score, reverse=True)
    logger.debug(f"Built {len(results)} recommendations for request {request.id}, returning {top_n}")
    return results[:top_n]


def group_by_specialization(workers: Iterable[Worker]) -> Dict[Specialization, List[Worker]]:
    groups: Dict[Specialization, List[Worker]] = defaultdict(list)
    for worker in _active(workers):
        groups[worker.specialization].append(worker)
    return dict(groups)


def workload_distribution(workers: Iterable[Worker], reference=None) -> WorkloadDistribution:
    active = _active(workers)
    if not active:
        return WorkloadDistribution()

    loads = [w.upcoming_workload_count(reference) for w in active]
    threshold = get_settings().overloaded_workload_threshold
    return WorkloadDistribution(
        total_workers=len(active),
        average_workload=sum(loads) / len(loads),
        max_workload=max(loads),
        min_workload=min(loads),
        overloaded_workers=sum(1 for n in loads if n > threshold),
    )
