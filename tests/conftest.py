"""Shared fixtures for all tests."""

import os

# Set before the app module is imported anywhere
os.environ["APP_ENV"] = "test"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from revodev.core.llm_adapter import LLMAdapter  # noqa: E402
from revodev.core.rate_limiter import RateLimiter  # noqa: E402
from revodev.main import create_app  # noqa: E402


class FakeClock:
    """Monotonic clock the tests can move forward by hand."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    """3 requests per hour, driven by the fake clock."""
    return RateLimiter(max_requests=3, window_seconds=3600, clock=clock)


@pytest.fixture
def live_llm():
    """Configured adapter whose model replies with a valid advice JSON."""
    llm = MagicMock(spec=LLMAdapter)
    llm.is_healthy.return_value = True
    llm.generate = AsyncMock(return_value='{"answer": "Use a 2.5mm² copper cable for sockets."}')
    return llm


@pytest.fixture
def offline_llm():
    """Adapter without credentials: degraded mode."""
    llm = MagicMock(spec=LLMAdapter)
    llm.is_healthy.return_value = False
    llm.generate = AsyncMock(side_effect=AssertionError("model must not be called"))
    return llm


@pytest.fixture
def make_client(rate_limiter):
    """Build a TestClient around a given adapter, sharing the test rate limiter."""
    def _make(llm, trust_proxy_headers: bool = False) -> TestClient:
        app = create_app(llm_adapter=llm, rate_limiter=rate_limiter, start_sweeper=False,
                         trust_proxy_headers=trust_proxy_headers)
        return TestClient(app)
    return _make


@pytest.fixture
def sample_image_uri() -> str:
    # 1x1 transparent PNG
    return (
        "data:image/png;base64,"
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
    )
