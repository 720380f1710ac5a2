"""
Test configuration: an in-memory backend and a frozen clock.

Environment defaults are set before ``tutorbook`` is imported so the
module-level settings never point at the on-disk SQLite file.
"""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

from tests.factories import TODAY, make_expense, make_registration
from tutorbook.engine.records import Snapshot
from tutorbook.services.billing_service import BillingService
from tutorbook.services.repository import InMemoryRepository


class FrozenClock:
    """Callable clock; assign ``now`` to move time"""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(TODAY)


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def service(repository, clock):
    return BillingService(repository, clock=clock)


@pytest.fixture
def seeded_repository():
    snapshot = Snapshot(
        registrations=(make_registration("s1"), make_registration("s2", fee="300", due_day=20)),
        expenses=(make_expense(),),
    )
    return InMemoryRepository(snapshot)


@pytest.fixture
def seeded_service(seeded_repository, clock):
    return BillingService(seeded_repository, clock=clock)


@pytest.fixture
def client(service):
    from fastapi.testclient import TestClient

    from tutorbook.api.deps.service import get_billing_service
    from tutorbook.main import app

    app.dependency_overrides[get_billing_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
