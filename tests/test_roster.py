from datetime import timedelta

from dispatchx.engine import roster
from dispatchx.models.entities import RequestStatus, Specialization


class TestSelection:
    """Filtering and best match."""

    def test_best_match_prefers_specialist(self, handyman, plumber, electrician, plumbing_request):
        assert roster.best_match([handyman, plumber, electrician], plumbing_request) is plumber

    def test_best_match_falls_back_to_general(self, handyman, electrician, plumbing_request):
        assert roster.best_match([electrician, handyman], plumbing_request) is handyman

    def test_best_match_none(self, electrician, make_worker, plumbing_request):
        idle = make_worker(Specialization.PLUMBING, "Idle Ida", active=False)
        assert roster.best_match([electrician, idle], plumbing_request) is None

    def test_best_match_closed_request(self, plumber, plumbing_request):
        plumbing_request.status = RequestStatus.CLOSED
        assert roster.best_match([plumber], plumbing_request) is None

    def test_best_match_prefers_lighter_load(self, make_worker, plumbing_request, today):
        busy = make_worker(Specialization.PLUMBING, "Busy Bea")
        free = make_worker(Specialization.PLUMBING, "Free Fay")
        busy.assign_to_work("WO-1", today + timedelta(days=2))
        assert roster.best_match([busy, free], plumbing_request) is free

    def test_available_for_emergency(self, make_worker, plumber, electrician):
        painter = make_worker(Specialization.PAINTING, "Paige Painter")
        idle = make_worker(Specialization.HVAC, "Idle Hal", active=False)
        assert roster.available_for_emergency([plumber, painter, electrician, idle]) == [plumber, electrician]

    def test_with_specialization(self, plumber, handyman, electrician):
        assert roster.with_specialization([plumber, handyman, electrician], Specialization.PLUMBING) == [
            plumber,
            handyman,
        ]

    def test_with_specialization_free_text(self, plumber, handyman, electrician):
        """Trade names given as text select the same workers as the category."""
        workers = [plumber, handyman, electrician]
        assert roster.with_specialization(workers, "Plumbing") == [plumber, handyman]
        assert roster.with_specialization(workers, "plumber") == [plumber, handyman]

    def test_available_on_date(self, plumber, electrician, target_day):
        plumber.assign_to_work("WO-1", target_day)
        plumber.assign_to_work("WO-2", target_day)
        electrician.assign_to_work("WO-3", target_day)
        assert roster.available_on_date([plumber, electrician], target_day) == [electrician]

    def test_with_light_workload(self, plumber, electrician, today):
        for i in range(3):
            plumber.assign_to_work(f"WO-{i}", today + timedelta(days=i + 1))
        electrician.assign_to_work("WO-9", today + timedelta(days=1))
        assert roster.with_light_workload([plumber, electrician], 2) == [electrician]
        assert roster.with_light_workload([plumber, electrician], 3) == [plumber, electrician]


class TestRecommendations:
    def test_sorted_and_limited(self, plumber, handyman, electrician, plumbing_request):
        recs = roster.recommendations([handyman, electrician, plumber], plumbing_request, top_n=5)
        assert [r.worker for r in recs] == [plumber, handyman]
        top = recs[0]
        assert top.score == 380
        assert top.confidence == 0.90
        assert top.estimated_completion_time == timedelta(hours=2)
        assert "exact Plumbing specialization" in top.reasoning

    def test_top_n(self, make_worker, plumbing_request):
        workers = [make_worker(Specialization.PLUMBING, f"Plumber {i}") for i in range(5)]
        assert len(roster.recommendations(workers, plumbing_request, top_n=2)) == 2

    def test_default_limit(self, make_worker, plumbing_request):
        workers = [make_worker(Specialization.PLUMBING, f"Plumber {i}") for i in range(5)]
        assert len(roster.recommendations(workers, plumbing_request)) == 3

    def test_no_eligible(self, electrician, plumbing_request):
        assert roster.recommendations([electrician], plumbing_request) == []


class TestAggregates:
    """Grouping and workload distribution over active workers."""

    def test_group_by_specialization(self, plumber, handyman, make_worker):
        second = make_worker(Specialization.PLUMBING, "Second Plumber")
        idle = make_worker(Specialization.HVAC, "Idle Hal", active=False)
        groups = roster.group_by_specialization([plumber, handyman, second, idle])
        assert groups == {
            Specialization.PLUMBING: [plumber, second],
            Specialization.GENERAL_MAINTENANCE: [handyman],
        }

    def test_distribution_without_bookings(self, plumber, handyman, electrician, make_worker):
        idle = make_worker(active=False, name="Idle Ida")
        dist = roster.workload_distribution([plumber, handyman, electrician, idle])
        assert dist.total_workers == 3
        assert dist.average_workload == 0
        assert dist.max_workload == 0
        assert dist.min_workload == 0
        assert dist.overloaded_workers == 0

    def test_distribution_no_active_workers(self, make_worker):
        dist = roster.workload_distribution([make_worker(active=False)])
        assert dist.total_workers == 0
        assert dist.average_workload == 0
        assert dist.overloaded_workers == 0

    def test_distribution_with_load(self, plumber, electrician, today):
        for i in range(6):
            plumber.assign_to_work(f"WO-{i}", today + timedelta(days=i + 1))
        electrician.assign_to_work("WO-E", today + timedelta(days=1))
        dist = roster.workload_distribution([plumber, electrician])
        assert dist.max_workload == 6
        assert dist.min_workload == 1
        assert dist.average_workload == 3.5
        assert dist.overloaded_workers == 1
