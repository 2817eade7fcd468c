from datetime import date, timedelta

import pytest

from dispatchx.models.entities import MaintenanceRequest, RequestStatus, Specialization, Urgency
from dispatchx.models.results import ExistingBookingSnapshot
from dispatchx.models.worker import Worker


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def target_day(today):
    """A working day comfortably in the future."""
    return today + timedelta(days=5)


@pytest.fixture
def make_worker():
    """Factory for workers with sensible defaults."""
    def _make(specialization=Specialization.PLUMBING, name="Pat Plumber", email=None, active=True):
        slug = name.lower().replace(" ", ".")
        return Worker(
            id=f"w-{slug}",
            email=email or f"{slug}@example.com",
            name=name,
            specialization=specialization,
            is_active=active,
        )
    return _make


@pytest.fixture
def plumber(make_worker):
    return make_worker(Specialization.PLUMBING, "Pat Plumber")


@pytest.fixture
def electrician(make_worker):
    return make_worker(Specialization.ELECTRICAL, "Eli Sparks")


@pytest.fixture
def handyman(make_worker):
    return make_worker(Specialization.GENERAL_MAINTENANCE, "Gale Fixit")


@pytest.fixture
def plumbing_request():
    """Submitted, normal-urgency plumbing job in unit 101."""
    return MaintenanceRequest(
        id="req-1",
        property_code="PROP-A",
        unit="101",
        title="Leaking faucet",
        description="Water dripping under the kitchen sink",
        urgency=Urgency.NORMAL,
        status=RequestStatus.SUBMITTED,
    )


@pytest.fixture
def emergency_plumbing_request():
    """Burst pipe flagged as an emergency in the same unit."""
    return MaintenanceRequest(
        id="req-2",
        property_code="PROP-A",
        unit="101",
        title="Burst pipe",
        description="Water flooding the bathroom",
        urgency=Urgency.EMERGENCY,
        status=RequestStatus.SUBMITTED,
    )


@pytest.fixture
def electrical_request():
    return MaintenanceRequest(
        id="req-3",
        property_code="PROP-A",
        unit="202",
        title="Outlet not working",
        description="No power in the bedroom outlet",
        status=RequestStatus.SUBMITTED,
    )


@pytest.fixture
def make_snapshot(target_day):
    """Factory for snapshots of other requests' bookings on the target day."""
    def _make(request_id="req-old", unit="101", is_emergency=False, **overrides):
        fields = dict(
            request_id=request_id,
            property_code="PROP-A",
            unit=unit,
            worker_email="pat.plumber@example.com",
            worker_specialization=Specialization.PLUMBING,
            work_order_number="WO-OLD-1",
            scheduled_date=target_day,
            status=RequestStatus.SCHEDULED,
            is_emergency=is_emergency,
        )
        fields.update(overrides)
        return ExistingBookingSnapshot(**fields)
    return _make
