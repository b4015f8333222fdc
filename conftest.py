from datetime import datetime, timedelta

import pytest

from analytics.activity_store import ActivityStore
from analytics.storage import ActivityPersistence, MemoryStorage


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 6, 11, 10, 30))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, clock):
    activity_store = ActivityStore(ActivityPersistence(storage), clock=clock)
    activity_store.open()
    return activity_store
