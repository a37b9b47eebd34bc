"""Tests for LRU eviction policy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from nextcache_core.eviction.lru import LRUPolicy


class TestLRUPolicy:
    """Tests for LRU eviction policy."""

    def test_basic_eviction(self):
        """Test basic LRU eviction."""
        policy = LRUPolicy(max_size=3)

        policy.on_insert("key1")
        policy.on_insert("key2")
        policy.on_insert("key3")

        # key1 is LRU
        assert policy.is_full
        assert policy.choose_eviction() == "key1"

    def test_access_updates_order(self):
        """Test that access updates recency."""
        policy = LRUPolicy(max_size=3)

        policy.on_insert("key1")
        policy.on_insert("key2")
        policy.on_insert("key3")

        policy.on_access("key1")

        assert policy.choose_eviction() == "key2"
        assert policy.keys() == ["key2", "key3", "key1"]

    def test_choose_does_not_untrack(self):
        """Test chosen key stays tracked until deleted."""
        policy = LRUPolicy(max_size=2)

        policy.on_insert("key1")
        victim = policy.choose_eviction()

        assert policy.contains(victim)
        policy.on_delete(victim)
        assert not policy.contains(victim)
        assert policy.get_stats().evictions == 1

    def test_delete_removes_key(self):
        """Test key deletion."""
        policy = LRUPolicy(max_size=3)

        policy.on_insert("key1")
        policy.on_insert("key2")

        policy.on_delete("key1")
        policy.on_delete("missing")

        assert "key1" not in policy
        assert "key2" in policy
        assert len(policy) == 1

    def test_empty(self):
        """Test empty policy has nothing to evict."""
        assert LRUPolicy(max_size=1).choose_eviction() is None

    def test_clear(self):
        """Test clearing policy."""
        policy = LRUPolicy()

        policy.on_insert("key1")
        policy.on_insert("key2")

        policy.clear()
        assert policy.size() == 0

    def test_invalid_capacity(self):
        """Test capacity must be positive."""
        with pytest.raises(ValueError):
            LRUPolicy(max_size=0)
