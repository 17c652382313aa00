import math

import pytest
from starlette.requests import Request

from api.errors import RateLimitedError
from api.middleware.rate_limiter import InMemoryRateLimitStore, RateLimiter
from conftest import make_settings


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def make_request(headers=None, client=("203.0.113.5", 4321)) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers, "client": client})


@pytest.fixture
def clock():
    return FakeClock()


def test_admits_up_to_max_then_rejects(clock):
    limiter = RateLimiter(max_requests=3, window_ms=60000, clock=clock)

    decisions = [limiter.hit("caller") for _ in range(3)]
    assert all(d.allowed for d in decisions)
    assert [d.count for d in decisions] == [1, 2, 3]

    clock.advance(1500)
    rejected = limiter.hit("caller")
    assert not rejected.allowed
    assert rejected.retry_after == math.ceil((60000 - 1500) / 1000)
    assert 0 < rejected.retry_after <= 60


def test_rejected_requests_do_not_extend_window(clock):
    limiter = RateLimiter(max_requests=1, window_ms=10000, clock=clock)
    limiter.hit("caller")
    limiter.hit("caller")
    limiter.hit("caller")

    assert limiter.store.get("caller").count == 1

    clock.advance(10001)
    assert limiter.hit("caller").allowed


def test_reset_time_itself_is_still_inside_the_window(clock):
    limiter = RateLimiter(max_requests=1, window_ms=5000, clock=clock)
    limiter.hit("caller")

    clock.advance(5000)
    assert not limiter.hit("caller").allowed

    clock.advance(1)
    decision = limiter.hit("caller")
    assert decision.allowed
    assert decision.count == 1


def test_callers_are_counted_separately(clock):
    limiter = RateLimiter(max_requests=1, window_ms=60000, clock=clock)

    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed
    assert not limiter.hit("a").allowed
    assert len(limiter.store) == 2


def test_disabled_limiter_admits_everything(clock):
    limiter = RateLimiter(max_requests=1, clock=clock, enabled=False)

    assert all(limiter.hit("caller").allowed for _ in range(5))
    assert len(limiter.store) == 0


def test_shared_store_is_used():
    store = InMemoryRateLimitStore()
    clock = FakeClock()
    RateLimiter(max_requests=1, store=store, clock=clock).hit("caller")

    assert not RateLimiter(max_requests=1, store=store, clock=clock).hit("caller").allowed


def test_from_settings():
    limiter = RateLimiter.from_settings(make_settings(rate_limit_max=7, rate_limit_window=1234))

    assert limiter.max_requests == 7
    assert limiter.window_ms == 1234


def test_client_id_ignores_forwarded_header_by_default():
    request = make_request({"X-Forwarded-For": "198.51.100.7, 10.0.0.1"})

    assert RateLimiter().get_client_id(request) == "203.0.113.5"


def test_client_id_uses_proxy_appended_hop_when_trusted():
    limiter = RateLimiter(trust_proxy=True)

    assert limiter.get_client_id(make_request({"X-Forwarded-For": "198.51.100.7, 10.0.0.1"})) == "10.0.0.1"
    assert limiter.get_client_id(make_request()) == "203.0.113.5"


def test_client_id_without_peer_address():
    assert RateLimiter().get_client_id(make_request(client=None)) == "unknown"


def test_trust_proxy_from_settings():
    assert RateLimiter.from_settings(make_settings(trust_proxy=True)).trust_proxy is True
    assert RateLimiter.from_settings(make_settings()).trust_proxy is False


@pytest.mark.asyncio
async def test_check_rate_limit_raises_when_exhausted(clock):
    limiter = RateLimiter(max_requests=1, window_ms=30000, clock=clock)
    request = make_request()

    await limiter.check_rate_limit(request)
    with pytest.raises(RateLimitedError) as exc_info:
        await limiter.check_rate_limit(request)

    assert exc_info.value.retry_after == 30


def test_middleware_returns_429_with_retry_after(make_client, clock):
    limiter = RateLimiter(max_requests=2, window_ms=60000, clock=clock)
    client = make_client(rate_limiter=limiter)

    assert client.get("/health").status_code == 200
    assert client.get("/health").status_code == 200

    response = client.get("/health")
    assert response.status_code == 429
    assert response.json() == {"error": "Too many requests", "retryAfter": 60}
    assert response.headers["retry-after"] == "60"


def test_rotating_forwarded_for_still_gets_429(make_client, clock):
    limiter = RateLimiter(max_requests=2, window_ms=60000, clock=clock)
    client = make_client(rate_limiter=limiter)

    statuses = [
        client.get("/health", headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
        for i in range(10)
    ]

    assert statuses[:2] == [200, 200]
    assert statuses[2:] == [429] * 8
