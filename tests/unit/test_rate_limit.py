from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from src.api.main import create_app
from src.api.rate_limit import InMemoryRateLimiter
from src.core.config import get_settings


def test_limiter_allows_up_to_limit_within_window() -> None:
    limiter = InMemoryRateLimiter(limit=2, window_seconds=60)

    assert limiter.hit("1.2.3.4", now=0.0) == 0
    assert limiter.hit("1.2.3.4", now=1.0) == 0
    assert limiter.hit("1.2.3.4", now=2.0) == 58


def test_limiter_tracks_clients_separately() -> None:
    limiter = InMemoryRateLimiter(limit=1, window_seconds=60)

    assert limiter.hit("a", now=0.0) == 0
    assert limiter.hit("b", now=0.0) == 0
    assert limiter.hit("a", now=1.0) > 0


def test_limiter_window_slides() -> None:
    limiter = InMemoryRateLimiter(limit=1, window_seconds=10)

    assert limiter.hit("a", now=0.0) == 0
    assert limiter.hit("a", now=5.0) == 5
    assert limiter.hit("a", now=10.0) == 0


def limited_app(max_requests: int, **overrides: object) -> FastAPI:
    settings = get_settings().model_copy(
        update={
            "rate_limit_enabled": True,
            "rate_limit_max_requests": max_requests,
            "rate_limit_window_seconds": 600,
            **overrides,
        }
    )
    return create_app(settings)


async def test_middleware_rejects_with_retry_after() -> None:
    app = limited_app(1)
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.get("/docs")
        response = await client.get("/docs")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "600"
    assert response.json() == {
        "success": False,
        "error": "Too many requests, please try again after 600 seconds.",
    }


def test_idle_clients_are_evicted() -> None:
    limiter = InMemoryRateLimiter(limit=5, window_seconds=10)
    for n in range(10):
        limiter.hit(f"client-{n}", now=0.0)
    assert limiter.tracked_keys == 10

    limiter.hit("late", now=20.0)

    assert limiter.tracked_keys == 1


def test_active_clients_survive_eviction() -> None:
    limiter = InMemoryRateLimiter(limit=2, window_seconds=10)
    limiter.hit("idle", now=0.0)
    limiter.hit("busy", now=8.0)

    limiter.hit("late", now=12.0)

    assert limiter.tracked_keys == 2
    assert limiter.hit("busy", now=12.5) == 0
    assert limiter.hit("busy", now=13.0) > 0


async def test_forwarded_header_is_ignored_by_default() -> None:
    app = limited_app(3)
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        codes = [
            (await client.get("/docs", headers={"X-Forwarded-For": f"10.0.0.{n}"})).status_code
            for n in range(10)
        ]

    assert codes == [200, 200, 200] + [429] * 7
    assert app.state.rate_limiter.tracked_keys == 1


async def test_forwarded_header_is_honoured_behind_trusted_proxy() -> None:
    app = limited_app(1, rate_limit_trust_forwarded=True)
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        first = await client.get("/docs", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
        second = await client.get("/docs", headers={"X-Forwarded-For": "10.0.0.2"})
        repeat = await client.get("/docs", headers={"X-Forwarded-For": "10.0.0.1"})

    assert (first.status_code, second.status_code, repeat.status_code) == (200, 200, 429)
