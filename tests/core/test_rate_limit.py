"""
Tests for the in-memory rate limiter.
"""
import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from beauty_clinic.config import Settings
from beauty_clinic.core.middleware import RateLimitMiddleware
from beauty_clinic.main import create_app


def test_requests_over_the_limit_get_429(settings, engine):
    limited = Settings(**{**settings.model_dump(), "rate_limit_enabled": True, "rate_limit_requests": 2})
    with TestClient(create_app(limited, engine)) as client:
        assert client.get("/").status_code == 200
        assert client.get("/").status_code == 200
        response = client.get("/")
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert response.json() == {"success": False, "error": {"message": "Rate limit exceeded"}}


def test_prune_forgets_idle_clients():
    limiter = RateLimitMiddleware(FastAPI(), rate_limit=5, window_seconds=60)
    limiter.requests = {
        "10.0.0.1": [1000.0],
        "10.0.0.2": [1000.0, 1050.0],
        "10.0.0.3": [],
    }

    limiter.prune(1070.0)

    assert list(limiter.requests) == ["10.0.0.2"]
    assert limiter.last_sweep == 1070.0


def test_dispatch_sweeps_once_per_window():
    limiter = RateLimitMiddleware(FastAPI(), rate_limit=5, window_seconds=60)
    limiter.requests = {"10.0.0.1": [1.0]}
    limiter.last_sweep = 0.0
    request = Request({"type": "http", "method": "GET", "path": "/", "headers": [], "client": ("10.0.0.9", 5000)})

    async def call_next(_request):
        return "handled"

    assert asyncio.run(limiter.dispatch(request, call_next)) == "handled"
    assert list(limiter.requests) == ["10.0.0.9"]
