"""
RedisRateLimitStore against an in-process stand-in for the redis-py
client surface it uses (get / set / delete / transaction).
"""

import pytest
import redis

from libs.ratelimit import RateLimiter, RedisRateLimitStore


class FakePipeline:
    def __init__(self, data):
        self._data = data
        self._queued = []
        self._buffering = False

    def get(self, key):
        return self._data.get(key)

    def multi(self):
        self._buffering = True

    def set(self, key, value, ex=None):
        self._queued.append(("set", key, value, ex))

    def delete(self, key):
        self._queued.append(("delete", key, None, None))

    def execute(self):
        for op, key, value, ex in self._queued:
            if op == "set":
                self._data[key] = value
                self._data.ttls[key] = ex
            else:
                self._data.pop(key, None)
        self._queued = []


class FakeData(dict):
    def __init__(self):
        super().__init__()
        self.ttls = {}


class FakeRedis:
    def __init__(self):
        self.data = FakeData()

    def get(self, key):
        return self.data.get(key)

    def delete(self, key):
        self.data.pop(key, None)

    def transaction(self, func, *watches, value_from_callable=False):
        pipe = FakePipeline(self.data)
        result = func(pipe)
        pipe.execute()
        return result if value_from_callable else []


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("down")

    def delete(self, key):
        raise redis.ConnectionError("down")

    def transaction(self, func, *watches, value_from_callable=False):
        raise redis.ConnectionError("down")


class Clock:
    now = 5_000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


class TestRedisStore:
    def test_lockout_is_persisted_with_ttl(self, clock):
        client = FakeRedis()
        store = RedisRateLimitStore(client, prefix="rl:")
        limiter = RateLimiter(
            max_attempts=2,
            window_seconds=60,
            lockout_seconds=100,
            escalation_reset_seconds=1000,
            store=store,
            clock=clock,
        )

        limiter.record_attempt("Bob", success=False)
        limiter.record_attempt("bob", success=False)

        assert "rl:bob" in client.data
        assert client.data.ttls["rl:bob"] == 1100
        assert limiter.can_attempt("bob").allowed is False

    def test_success_deletes_key(self, clock):
        client = FakeRedis()
        limiter = RateLimiter(max_attempts=2, store=RedisRateLimitStore(client), clock=clock)

        limiter.record_attempt("bob", success=False)
        limiter.record_attempt("bob", success=True)

        assert client.data == {}
        assert limiter.can_attempt("bob").allowed is True

    def test_second_limiter_sees_shared_state(self, clock):
        client = FakeRedis()
        a = RateLimiter(max_attempts=2, store=RedisRateLimitStore(client), clock=clock)
        b = RateLimiter(max_attempts=2, store=RedisRateLimitStore(client), clock=clock)

        a.record_attempt("bob", success=False)
        b.record_attempt("bob", success=False)

        assert a.can_attempt("bob").allowed is False
        assert b.can_attempt("bob").allowed is False

    def test_redis_errors_fail_open(self, clock, caplog):
        limiter = RateLimiter(max_attempts=1, store=RedisRateLimitStore(BrokenRedis()), clock=clock)

        assert limiter.record_attempt("bob", success=False) is None
        assert limiter.can_attempt("bob").allowed is True
        limiter.reset("bob")
        assert "Redis rate limit" in caplog.text
