"""
Unit tests for the auto-increment ID allocator.
"""

import asyncio
import pytest
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from petcare.core.counters import next_id, current_count
from petcare.core.exceptions import AllocatorError
from petcare.models.counter import Counter


class FlakyCounterCollection:
    """Replaces the counters collection; each find-and-modify raises the next queued error."""

    def __init__(self, errors):
        self.errors = list(errors)
        self.calls = 0

    def get(self):
        return self

    async def find_one_and_update(self, *args, **kwargs):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return {"_id": "sales", "seq": 42}


class TestNextId:
    """Tests for sequential allocation."""

    async def test_first_id_is_one(self, db):
        """A collection with no counter starts at 1."""
        assert await next_id("sales") == 1

    async def test_ids_are_sequential(self, db):
        ids = [await next_id("sales") for _ in range(3)]
        assert ids == [1, 2, 3]
        assert await current_count("sales") == 3

    async def test_counters_are_independent(self, db):
        """Allocating for one collection never moves another's counter."""
        await next_id("sales")
        await next_id("sales")
        assert await next_id("products") == 1
        assert await next_id("sales") == 3

    async def test_concurrent_callers_get_distinct_ids(self, db):
        for _ in range(5):
            await next_id("sales")

        first, second = await asyncio.gather(next_id("sales"), next_id("sales"))

        assert {first, second} == {6, 7}
        assert await current_count("sales") == 7

    async def test_current_count_for_unknown_collection(self, db):
        assert await current_count("never_used") == 0

    async def test_counter_collection_can_be_counted(self, db):
        """The counter field does not shadow Document.count."""
        await next_id("sales")
        await next_id("products")
        assert await Counter.count() == 2


class TestAllocatorFailures:
    """Tests for store errors during allocation."""

    async def test_duplicate_key_race_is_retried(self, db, monkeypatch):
        fake = FlakyCounterCollection([DuplicateKeyError("dup")])
        monkeypatch.setattr(Counter, "get_motor_collection", fake.get)

        assert await next_id("sales") == 42
        assert fake.calls == 2

    async def test_gives_up_after_max_retries(self, db, monkeypatch):
        fake = FlakyCounterCollection([DuplicateKeyError("dup")] * 10)
        monkeypatch.setattr(Counter, "get_motor_collection", fake.get)

        with pytest.raises(AllocatorError) as exc_info:
            await next_id("sales")

        assert exc_info.value.status_code == 503
        assert fake.calls == 3

    async def test_store_error_raises_allocator_error(self, db, monkeypatch):
        fake = FlakyCounterCollection([ServerSelectionTimeoutError("down")])
        monkeypatch.setattr(Counter, "get_motor_collection", fake.get)

        with pytest.raises(AllocatorError) as exc_info:
            await next_id("sales")

        assert exc_info.value.collection_name == "sales"
        assert fake.calls == 1
