from fastapi import status
from fastapi.testclient import TestClient

from content_api.main import create_app
from content_api.rate_limit import FixedWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_limiter_window_resets():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.hit("1.2.3.4") is True
    assert limiter.hit("1.2.3.4") is True
    assert limiter.hit("1.2.3.4") is False
    assert limiter.hit("5.6.7.8") is True

    clock.now += 60
    assert limiter.hit("1.2.3.4") is True


def test_limiter_forgets_expired_windows():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

    for i in range(10_000):
        limiter.hit(f"10.0.{i // 256}.{i % 256}")
    assert len(limiter._windows) == 10_000

    clock.now += 61
    assert limiter.hit("1.2.3.4") is True
    assert list(limiter._windows) == ["1.2.3.4"]


def test_limiter_keeps_live_windows_when_sweeping():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)

    limiter.hit("old")
    clock.now += 30
    limiter.hit("recent")
    clock.now += 30
    limiter.hit("new")

    assert set(limiter._windows) == {"recent", "new"}
    assert limiter.hit("recent") is False


def test_rate_limit_middleware_returns_429(make_settings):
    app = create_app(make_settings(rate_limit_enabled=True, rate_limit_max=3))
    with TestClient(app) as client:
        responses = [client.get("/api/health") for _ in range(4)]

    assert [r.status_code for r in responses[:3]] == [status.HTTP_200_OK] * 3
    assert responses[3].status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert responses[3].json() == {"error": "Too many requests, please try again later"}


def test_rate_limit_disabled_by_default(client: TestClient):
    for _ in range(5):
        assert client.get("/api/health").status_code == status.HTTP_200_OK


def test_rate_limited_response_carries_cors_headers(make_settings):
    app = create_app(make_settings(rate_limit_enabled=True, rate_limit_max=1))
    with TestClient(app) as client:
        client.get("/api/health")
        response = client.get("/api/health", headers={"Origin": "http://localhost:3000"})

    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
