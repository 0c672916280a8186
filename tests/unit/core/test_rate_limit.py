"""Unit tests for the auth rate limiter."""

import pytest
from starlette.requests import Request

from collabnotes.core.exceptions import RateLimitError
from collabnotes.core.rate_limit import RateLimiter, client_address
from collabnotes.core.redis_client import RedisClient


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the counter."""

    def __init__(self):
        self.counts = {}
        self.expiries = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.expiries[key] = seconds
        return True


class BrokenRedis:
    async def incr(self, key):
        raise ConnectionError("redis went away")


def client_with(backend):
    client = RedisClient()
    client.redis = backend
    return client


async def test_allows_up_to_limit_then_rejects():
    backend = FakeRedis()
    limiter = RateLimiter("auth:login", limit=3, window=60, client=client_with(backend))

    for _ in range(3):
        await limiter.hit("10.0.0.1")
    with pytest.raises(RateLimitError):
        await limiter.hit("10.0.0.1")

    # window is fixed: expiry only set on the first hit
    assert backend.expiries == {"ratelimit:auth:login:10.0.0.1": 60}


async def test_counters_are_per_client_and_scope():
    backend = FakeRedis()
    client = client_with(backend)
    login = RateLimiter("auth:login", limit=1, window=60, client=client)
    register = RateLimiter("auth:register", limit=1, window=60, client=client)

    await login.hit("10.0.0.1")
    await login.hit("10.0.0.2")
    await register.hit("10.0.0.1")


async def test_fails_open_without_redis():
    limiter = RateLimiter("auth:login", limit=1, window=60, client=RedisClient())
    for _ in range(5):
        await limiter.hit("10.0.0.1")


async def test_fails_open_on_redis_errors():
    limiter = RateLimiter("auth:login", limit=1, window=60, client=client_with(BrokenRedis()))
    for _ in range(5):
        await limiter.hit("10.0.0.1")


def test_defaults_from_settings():
    limiter = RateLimiter("auth:login")
    assert limiter.limit == 12
    assert limiter.window == 60


def make_request(host, forwarded=None):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "method": "POST", "path": "/api/auth/login", "headers": headers, "client": (host, 5000)})


async def test_rotating_forwarded_header_does_not_reset_count():
    limiter = RateLimiter("auth:login", limit=3, window=60, client=client_with(FakeRedis()))

    blocked = 0
    for i in range(20):
        try:
            await limiter(make_request("10.0.0.1", forwarded=f"1.2.3.{i}"))
        except RateLimitError:
            blocked += 1
    assert blocked == 17


def test_forwarded_header_only_used_when_trusted():
    request = make_request("10.0.0.1", forwarded="1.2.3.4, 10.0.0.1")

    assert client_address(request) == "10.0.0.1"
    assert client_address(request, trust_proxy_headers=False) == "10.0.0.1"
    assert client_address(request, trust_proxy_headers=True) == "1.2.3.4"
