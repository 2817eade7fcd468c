import sys
from datetime import timedelta

from dispatchx.engine.availability import rank_by_availability, summarize_availability
from dispatchx.models.entities import Specialization


class TestSummarizeAvailability:
    """Per-worker calendar summaries."""

    def test_free_worker(self, plumber, today):
        summary = summarize_availability(plumber, today, today + timedelta(days=14), today=today)
        assert summary.next_fully_available_date == today
        assert summary.booked_dates == ()
        assert summary.partially_booked_dates == ()
        assert summary.current_workload == 0
        assert summary.availability_score == 0
        assert summary.is_active

    def test_busy_worker(self, plumber, today):
        full, partial = today, today + timedelta(days=1)
        plumber.assign_to_work("WO-1", full)
        plumber.assign_to_work("WO-2", full)
        plumber.assign_to_work("WO-3", partial)

        summary = summarize_availability(plumber, today, today + timedelta(days=14), today=today)
        assert summary.booked_dates == (full,)
        assert summary.partially_booked_dates == (partial,)
        assert summary.next_fully_available_date == today + timedelta(days=2)
        assert summary.current_workload == 3
        assert summary.active_assignments_count == 3
        assert summary.availability_score == 2 * 100 + 3

    def test_status_helpers(self, plumber, today):
        full, partial, free = today, today + timedelta(days=1), today + timedelta(days=2)
        plumber.assign_to_work("WO-1", full)
        plumber.assign_to_work("WO-2", full)
        plumber.assign_to_work("WO-3", partial)
        summary = summarize_availability(plumber, today, today + timedelta(days=7), today=today)

        assert summary.status_for(full) == "Fully Booked (2/2 slots)"
        assert summary.status_for(partial) == "Limited Availability (1/2 slots)"
        assert summary.status_for(free) == "Fully Available (0/2 slots)"
        assert not summary.is_available_on(full)
        assert summary.is_available_on(partial)
        assert not summary.is_available_on(partial, allow_partial=False)
        assert summary.is_available_on(free)
        assert summary.indicator_for(free) == "✓"

    def test_emergency_override_view(self, plumber, today):
        plumber.assign_to_work("WO-1", today)
        plumber.assign_to_work("WO-2", today)
        summary = summarize_availability(plumber, today, today + timedelta(days=7), include_emergency_override=True)
        assert summary.booked_dates == ()

    def test_inactive_worker(self, make_worker, today):
        summary = summarize_availability(make_worker(active=False), today=today)
        assert not summary.is_active
        assert summary.next_fully_available_date is None
        assert summary.availability_score == sys.maxsize

    def test_str(self, plumber, today):
        text = str(summarize_availability(plumber, today=today))
        assert "Pat Plumber (Plumbing)" in text
        assert "Next available" in text


class TestRankByAvailability:
    def test_soonest_free_first(self, make_worker, today):
        busy = make_worker(Specialization.PLUMBING, "Busy Bea")
        free = make_worker(Specialization.ELECTRICAL, "Free Fay")
        idle = make_worker(Specialization.HVAC, "Idle Hal", active=False)
        busy.assign_to_work("WO-1", today)
        assert rank_by_availability([busy, idle, free], today, today=today) == [free, busy]

    def test_tie_broken_by_workload(self, make_worker, today):
        light = make_worker(Specialization.PLUMBING, "Light Load")
        heavy = make_worker(Specialization.PLUMBING, "Heavy Load")
        heavy.assign_to_work("WO-1", today + timedelta(days=3))
        heavy.assign_to_work("WO-2", today + timedelta(days=4))
        light.assign_to_work("WO-3", today + timedelta(days=3))
        assert rank_by_availability([heavy, light], today, today=today) == [light, heavy]
