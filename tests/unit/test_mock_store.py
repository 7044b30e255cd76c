"""Tests for the mock backend's in-memory store."""
import threading
from datetime import datetime, timedelta

import pytest

from mock_api import MockStore


@pytest.fixture
def store():
    return MockStore(bcrypt_rounds=4)


@pytest.fixture
def free_slot(store):
    return store.open_slots()[0]


class TestSlotClaims:
    def test_claim_free_slot(self, store, free_slot):
        """Should take a free slot once."""
        assert store.claim_slot(free_slot["_id"]) is True
        assert free_slot["is_available"] is False
        assert store.claim_slot(free_slot["_id"]) is False

    def test_unknown_slot(self, store):
        """Should refuse a slot that does not exist."""
        assert store.claim_slot("slot-404") is False

    def test_past_slot(self, store):
        """Should refuse a slot that already started."""
        yesterday = datetime.now() - timedelta(days=1)
        store.time_slots["old"] = {
            "_id": "old",
            "date": yesterday.strftime("%Y-%m-%dT00:00:00.000Z"),
            "start_time": "08:00",
            "end_time": "10:00",
            "is_available": True,
        }
        assert store.claim_slot("old") is False

    def test_release_makes_slot_claimable_again(self, store, free_slot):
        """Should hand a released slot to the next claim."""
        store.claim_slot(free_slot["_id"])
        store.release_slot(free_slot["_id"])
        assert store.claim_slot(free_slot["_id"]) is True

    def test_concurrent_claims(self, store, free_slot):
        """Should let exactly one of many threads claim the same slot."""
        start = threading.Barrier(16)
        results = []

        def claim():
            start.wait()
            results.append(store.claim_slot(free_slot["_id"]))

        threads = [threading.Thread(target=claim) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert results.count(True) == 1
        assert results.count(False) == 15


def test_slots_only_on_opening_days():
    """Should generate slots on Tuesday to Saturday only."""
    monday = datetime(2025, 3, 10)
    store = MockStore(bcrypt_rounds=4, today=monday)

    weekdays = {
        datetime.strptime(s["date"][:10], "%Y-%m-%d").weekday()
        for s in store.time_slots.values()
    }
    assert weekdays == {1, 2, 3, 4, 5}
