"""Tests for the Redis checkout lock, against a minimal in-process client."""

import pytest

from storefront.services.lock_service import LockService


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.ttl = {}

    def set(self, name, value, nx=False, ex=None):
        if nx and name in self.data:
            return None
        self.data[name] = value
        self.ttl[name] = ex
        return True

    def eval(self, script, numkeys, key, token):
        # same semantics as the release script
        if self.data.get(key) == token:
            del self.data[key]
            return 1
        return 0


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def locks(redis_client):
    return LockService(client=redis_client)


def test_acquire_sets_key_with_ttl(locks, redis_client):
    token = locks.acquire_checkout_lock(7, ttl=30)

    assert token
    assert redis_client.data["checkout:7:lock"] == token
    assert redis_client.ttl["checkout:7:lock"] == 30


def test_second_acquire_is_refused(locks):
    assert locks.acquire_checkout_lock(7, ttl=30)
    assert locks.acquire_checkout_lock(7, ttl=30) is None


def test_locks_are_per_user(locks):
    assert locks.acquire_checkout_lock(7, ttl=30)
    assert locks.acquire_checkout_lock(8, ttl=30)


def test_release_with_own_token(locks, redis_client):
    token = locks.acquire_checkout_lock(7, ttl=30)

    assert locks.release_checkout_lock(7, token)
    assert "checkout:7:lock" not in redis_client.data


def test_stale_token_does_not_release(locks, redis_client):
    locks.acquire_checkout_lock(7, ttl=30)

    assert not locks.release_checkout_lock(7, "someone-elses-token")
    assert "checkout:7:lock" in redis_client.data
