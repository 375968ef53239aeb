"""Tests for the TTL-aware cache store."""

import json
from typing import Any

import pytest

from gqlcache import CacheEntry, CacheHydrationError, CacheStore, LRUMap


class TestGetAndSet:
    """Tests for basic store access."""

    def test_get_missing_returns_none(self, store: CacheStore) -> None:
        """Test that an unknown key is absent."""
        assert store.get(42) is None

    def test_set_and_get(self, store: CacheStore) -> None:
        """Test storing and reading back a value."""
        store.set(1, {"hero": {"name": "Luke"}})
        assert store.get(1) == {"hero": {"name": "Luke"}}

    def test_set_overwrites(self, store: CacheStore) -> None:
        """Test that a second write replaces the first."""
        store.set(1, "old")
        store.set(1, "new")
        assert store.get(1) == "new"
        assert len(store) == 1

    def test_set_records_expiry(self, store: CacheStore, clock: Any) -> None:
        """Test that expires_at is now plus the duration."""
        clock.now = 5_000
        store.set(1, "v", 1000)
        store.set(2, "v", "2s")
        store.set(3, "v")
        assert store.backing[1] == CacheEntry(key=1, value="v", expires_at=6_000)
        assert store.backing[2].expires_at == 7_000
        assert store.backing[3].expires_at is None

    def test_delete(self, store: CacheStore) -> None:
        """Test removing one entry."""
        store.set(1, "a")
        store.set(2, "b")
        store.delete(1)
        store.delete(99)
        assert store.get(1) is None
        assert store.get(2) == "b"

    def test_clear(self, store: CacheStore) -> None:
        """Test that clear removes every entry."""
        store.set(1, "a")
        store.set(2, "b", 10)
        store.clear()
        assert len(store) == 0
        assert store.get(1) is None

    def test_values_are_copied_on_write_and_read(self, store: CacheStore) -> None:
        """Test that neither the writer nor a reader can change a stored value."""
        value = {"hero": {"name": "Luke"}}
        store.set(1, value)
        value["hero"]["name"] = "Leia"

        first = store.get(1)
        assert first == {"hero": {"name": "Luke"}}
        first["hero"]["name"] = "Vader"

        assert store.get(1) == {"hero": {"name": "Luke"}}


class TestExpiry:
    """Tests for lazy TTL expiry."""

    def test_fresh_entry_returned(self, store: CacheStore, clock: Any) -> None:
        """Test that an entry is visible before its expiry."""
        store.set(1, "v", 1000)
        clock.advance(999)
        assert store.get(1) == "v"

    def test_expired_entry_absent(self, store: CacheStore, clock: Any) -> None:
        """Test that an entry is gone once its expiry is reached."""
        store.set(1, "v", 1000)
        clock.advance(1000)
        assert store.get(1) is None

    def test_expired_entry_removed_lazily(
        self, store: CacheStore, clock: Any
    ) -> None:
        """Test that expired entries linger until looked up."""
        store.set(1, "v", 10)
        clock.advance(50)
        assert len(store) == 1
        assert 1 not in store
        assert len(store) == 1

        assert store.get(1) is None
        assert len(store) == 0

    def test_unbounded_never_expires(self, store: CacheStore, clock: Any) -> None:
        """Test that entries without a duration survive any amount of time."""
        store.set(1, "v")
        clock.advance(10**12)
        assert store.get(1) == "v"
        assert 1 in store

    def test_zero_duration_is_immediately_stale(self, store: CacheStore) -> None:
        """Test that a zero TTL stores an already expired entry."""
        store.set(1, "v", 0)
        assert store.get(1) is None


class TestSerialization:
    """Tests for JSON export and hydration."""

    def test_to_serializable_is_flat_json(
        self, store: CacheStore, clock: Any
    ) -> None:
        """Test the record shape of a snapshot."""
        clock.now = 100
        store.set(7, {"a": [1, 2]}, 50)
        store.set(8, "forever")

        records = store.to_serializable()

        assert sorted(records, key=lambda r: r["key"]) == [
            {"key": 7, "value": {"a": [1, 2]}, "expires_at": 150},
            {"key": 8, "value": "forever", "expires_at": None},
        ]
        json.dumps(records)

    def test_snapshot_is_detached(self, store: CacheStore) -> None:
        """Test that editing exported records leaves the store unchanged."""
        store.set(7, {"a": [1, 2]})

        records = store.to_serializable()
        records[0]["value"]["a"].append(3)

        assert store.get(7) == {"a": [1, 2]}

    def test_snapshot_keeps_lru_order(self, clock: Any) -> None:
        """Test that exporting an LRU-backed store does not reorder it."""
        store = CacheStore(LRUMap(max_items=2), clock=clock)
        store.set(1, "a")
        store.set(2, "b")

        assert [r["key"] for r in store.to_serializable()] == [1, 2]
        store.set(3, "c")

        assert 1 not in store
        assert 2 in store

    def test_snapshot_includes_expired_not_yet_evicted(
        self, store: CacheStore, clock: Any
    ) -> None:
        """Test that lazily retained entries are exported."""
        store.set(1, "v", 10)
        clock.advance(20)
        assert [r["key"] for r in store.to_serializable()] == [1]

    def test_round_trip_through_json(
        self, store: CacheStore, clock: Any
    ) -> None:
        """Test that a store rebuilt from JSON has the same contents."""
        store.set(1, {"hero": "Luke"}, 1000)
        store.set(2, ["x"])
        text = json.dumps(store.to_serializable())

        restored = CacheStore.from_serializable(json.loads(text), clock=clock)

        assert restored.get(1) == {"hero": "Luke"}
        assert restored.get(2) == ["x"]
        clock.advance(1000)
        assert restored.get(1) is None
        assert restored.get(2) == ["x"]

    def test_expired_records_loaded_then_dropped(self, clock: Any) -> None:
        """Test that hydration keeps expired records until their next lookup."""
        clock.now = 10_000
        records = [{"key": 1, "value": "stale", "expires_at": 5_000}]

        restored = CacheStore.from_serializable(records, clock=clock)

        assert len(restored) == 1
        assert restored.get(1) is None
        assert len(restored) == 0

    def test_hydrate_into_custom_backing(self, clock: Any) -> None:
        """Test that hydration can target an injected mapping."""
        backing: LRUMap[int, CacheEntry] = LRUMap(max_items=10)
        records = [{"key": 3, "value": "v", "expires_at": None}]

        restored = CacheStore.from_serializable(records, backing, clock=clock)

        assert restored.backing is backing
        assert 3 in backing

    @pytest.mark.parametrize(
        "record, message",
        [
            ("nope", "must be an object"),
            ({"value": 1, "expires_at": None}, "missing 'key'"),
            ({"key": 1, "expires_at": None}, "missing 'value'"),
            ({"key": "1", "value": 1}, "must be an integer"),
            ({"key": 1, "value": 1, "expires_at": "soon"}, "timestamp or null"),
        ],
    )
    def test_malformed_record_rejected(self, record: object, message: str) -> None:
        """Test that bad snapshots raise CacheHydrationError."""
        with pytest.raises(CacheHydrationError, match=message):
            CacheStore.from_serializable([record])  # type: ignore[list-item]

    def test_missing_expiry_means_unbounded(self, clock: Any) -> None:
        """Test that records without expires_at never expire."""
        restored = CacheStore.from_serializable([{"key": 1, "value": 1}], clock=clock)
        assert restored.backing[1].expires_at is None


class TestSharedBacking:
    """Tests for stores sharing one mapping."""

    def test_stores_share_entries(self, clock: Any) -> None:
        """Test that two stores over one mapping see each other's writes."""
        shared: dict[int, CacheEntry] = {}
        first = CacheStore(shared, clock=clock)
        second = CacheStore(shared, clock=clock)

        first.set(1, "v")
        assert second.get(1) == "v"

        second.clear()
        assert first.get(1) is None

    def test_membership_check_is_not_a_use(self, clock: Any) -> None:
        """Test that `in` leaves LRU order alone while get refreshes it."""
        store = CacheStore(LRUMap(max_items=2), clock=clock)
        store.set(1, "a")
        store.set(2, "b")
        assert 1 in store
        store.set(3, "c")  # Evicts 1 despite the membership check

        assert 1 not in store
        assert store.get(2) == "b"
        store.set(4, "d")  # Evicts 3, since 2 was just read

        assert list(store.backing) == [2, 4]
