"""Unit tests for app.gate.cache.PrincipalCache (TTL + LRU)."""

import unittest

from app.gate.cache import PrincipalCache
from app.services.authorization import Principal


def _principal(user_id: int = 1, permissions: frozenset[str] = frozenset({"READ_USER"})) -> Principal:
    return Principal(
        user_id=user_id,
        email=f"user{user_id}@x.com",
        primary_role="USER",
        roles=("USER",),
        permissions=permissions,
    )


class FakeMonotonic:
    def __init__(self) -> None:
        self.value = 100.0

    def __call__(self) -> float:
        return self.value


class TestPrincipalCache(unittest.TestCase):
    def test_disabled_by_default(self) -> None:
        cache = PrincipalCache()
        cache.put(_principal())
        self.assertFalse(cache.enabled)
        self.assertIsNone(cache.get(1))

    def test_hit_within_ttl_and_miss_after(self) -> None:
        clock = FakeMonotonic()
        cache = PrincipalCache(ttl_seconds=5, clock=clock)
        cache.put(_principal())
        clock.value += 4.9
        self.assertEqual(cache.get(1).user_id, 1)
        clock.value += 0.1
        self.assertIsNone(cache.get(1))

    def test_lru_eviction(self) -> None:
        cache = PrincipalCache(ttl_seconds=60, maxsize=2, clock=FakeMonotonic())
        cache.put(_principal(1))
        cache.put(_principal(2))
        cache.get(1)
        cache.put(_principal(3))
        self.assertIsNotNone(cache.get(1))
        self.assertIsNone(cache.get(2))
        self.assertIsNotNone(cache.get(3))

    def test_clear(self) -> None:
        cache = PrincipalCache(ttl_seconds=60, clock=FakeMonotonic())
        cache.put(_principal())
        cache.clear()
        self.assertIsNone(cache.get(1))


class TestPrincipalHasAny(unittest.TestCase):
    def test_any_of_semantics(self) -> None:
        principal = _principal(permissions=frozenset({"READ_USER", "CREATE_FILES"}))
        self.assertTrue(principal.has_any({"CREATE_FILES", "DELETE_FILES"}))
        self.assertFalse(principal.has_any({"READ_ROLE"}))
        self.assertFalse(principal.has_any(set()))


if __name__ == "__main__":
    unittest.main()
