from dataclasses import dataclass
from datetime import timedelta

from dispatchx.config.settings import Settings, get_settings


# Recommendation confidence anchors
CONFIDENCE_EXACT_MATCH = 0.90
CONFIDENCE_EXACT_MATCH_EMERGENCY = 0.95
CONFIDENCE_GENERAL_FALLBACK = 0.70
CONFIDENCE_GENERAL_FALLBACK_EMERGENCY = 0.75
CONFIDENCE_NONE = 0.0

# Completion estimates; emergencies do not go below the specialist floor
COMPLETION_EXACT_MATCH = timedelta(hours=2)
COMPLETION_OTHER = timedelta(hours=3)
COMPLETION_NONE = timedelta(0)


@dataclass(frozen=True)
class ScoringWeights:
    base: int = 100
    exact_match: int = 200
    general_fallback: int = 100
    availability: int = 50
    workload_max: int = 30
    workload_step: int = 5
    emergency: int = 50

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoringWeights":
        return cls(
            base=settings.score_base,
            exact_match=settings.score_exact_match,
            general_fallback=settings.score_general_fallback,
            availability=settings.score_availability,
            workload_max=settings.score_workload_max,
            workload_step=settings.score_workload_step,
            emergency=settings.score_emergency,
        )


def default_weights() -> ScoringWeights:
    return ScoringWeights.from_settings(get_settings())


def workload_adjustment(workload: int, weights: ScoringWeights) -> int:
    """Bonus that shrinks as the worker's upcoming booking count grows; never negative."""
    return max(0, weights.workload_max - workload * weights.workload_step)
