"""Shared test fixtures and hypothesis strategies for the client test suite."""

from __future__ import annotations

import os
from collections.abc import Callable

import httpx
import pytest
from hypothesis import strategies as st

from kapacitor_client.config.settings import KapacitorSettings
from kapacitor_client.pool.backoff import ExponentialBackoff
from kapacitor_client.pool.pool import ConnectionPool
from kapacitor_client.pool.registry import HostRegistry


# ---------------------------------------------------------------------------
# Keep the host environment out of KapacitorSettings
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_kapacitor_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("KAPACITOR_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Fake clock
# ---------------------------------------------------------------------------

class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# HTTP fakes
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler) -> None:
        self.requests: list[httpx.Request] = []

        async def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            result = handler(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result

        super().__init__(_handler)


def respond(status: int = 200, json: object | None = None, **kwargs) -> Handler:
    """Handler answering every request with the same response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if json is not None:
            return httpx.Response(status, json=json, **kwargs)
        return httpx.Response(status, **kwargs)

    return handler


def fail_with(exc_type: type[httpx.RequestError] = httpx.ConnectError) -> Handler:
    """Handler raising a request error for every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("connection refused", request=request)

    return handler


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> KapacitorSettings:
    """Test settings with safe defaults."""
    return KapacitorSettings(
        url="http://localhost:9092",
        request_timeout=2.0,
        backoff_initial=0.5,
        backoff_max=8.0,
    )


@pytest.fixture
def registry(clock: FakeClock) -> HostRegistry:
    return HostRegistry(backoff=ExponentialBackoff(initial=0.5, maximum=8.0), clock=clock)


@pytest.fixture
def make_pool(clock: FakeClock) -> Callable[..., ConnectionPool]:
    """Build a pool whose hosts are served by the given transports, in order."""

    def _make(*transports: httpx.MockTransport, **options) -> ConnectionPool:
        options.setdefault("backoff_initial", 0.5)
        options.setdefault("backoff_max", 8.0)
        pool = ConnectionPool(clock=clock, **options)
        for index, transport in enumerate(transports, start=1):
            pool.add_host(f"http://h{index}:9092", {"transport": transport})
        return pool

    return _make


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

# 1-8 unique host URLs
host_url_lists = st.integers(min_value=1, max_value=8).flatmap(
    lambda n: st.lists(
        st.integers(min_value=1, max_value=999).map(lambda i: f"http://kapa{i}:9092"),
        min_size=n,
        max_size=n,
        unique=True,
    )
)

# Backoff configuration: (initial, maximum) with maximum >= initial
backoff_configs = st.floats(min_value=0.01, max_value=10.0, allow_nan=False).flatmap(
    lambda initial: st.tuples(
        st.just(initial),
        st.floats(min_value=initial, max_value=600.0, allow_nan=False),
    )
)

failure_counts = st.integers(min_value=1, max_value=200)
