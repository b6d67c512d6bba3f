"""Property tests for request dispatch and failover.

Validates that a request succeeds whenever a working host is reachable
within the retry budget, that every failing host is marked down exactly
once per call, that 4xx answers never fail over, and that the number of
transport calls never exceeds the retry budget.
"""

from __future__ import annotations

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from kapacitor_client.errors import AllHostsFailedError, RequestRejectedError
from kapacitor_client.pool.pool import ConnectionPool
from kapacitor_client.pool.types import LogicalRequest
from tests.conftest import FakeClock, RecordingTransport, fail_with, respond

REQUEST = LogicalRequest(method="GET", path="/kapacitor/v1/tasks")

# Per-host behaviour: "ok", "refuse" (transport error) or "5xx"
behaviours = st.lists(st.sampled_from(["ok", "refuse", "5xx"]), min_size=1, max_size=6)
retry_budgets = st.one_of(st.none(), st.integers(min_value=0, max_value=8))


def _run_async(coro):
    """Run an async coroutine synchronously."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _transport(behaviour: str, index: int) -> RecordingTransport:
    if behaviour == "ok":
        return RecordingTransport(respond(200, {"host": index}))
    if behaviour == "5xx":
        return RecordingTransport(respond(503, text="unavailable"))
    return RecordingTransport(fail_with())


def _make_pool(plan: list[str], max_retries: int | None) -> tuple[ConnectionPool, list]:
    pool = ConnectionPool(clock=FakeClock(), max_retries=max_retries)
    transports = [_transport(b, i) for i, b in enumerate(plan)]
    for i, transport in enumerate(transports):
        pool.add_host(f"http://h{i}:9092", {"transport": transport})
    return pool, transports


@settings(max_examples=100, deadline=None)
@given(plan=behaviours, max_retries=retry_budgets)
def test_outcome_matches_first_working_host_within_budget(
    plan: list[str], max_retries: int | None
) -> None:
    pool, transports = _make_pool(plan, max_retries)
    budget = len(plan) - 1 if max_retries is None else max_retries
    attempts = min(budget + 1, len(plan))

    # Round-robin from a fresh pool walks hosts in registration order.
    tried = plan[:attempts]
    working = tried.index("ok") if "ok" in tried else None

    if working is not None:
        assert _run_async(pool.dispatch_json(REQUEST)) == {"host": working}
        calls = working + 1
    else:
        with pytest.raises(AllHostsFailedError) as exc_info:
            _run_async(pool.dispatch_json(REQUEST))
        assert exc_info.value.attempts == attempts
        calls = attempts

    assert sum(len(t.requests) for t in transports) == calls
    for index, entry in enumerate(pool.hosts):
        expected_failures = 1 if index < calls and plan[index] != "ok" else 0
        assert entry.failure_count == expected_failures
        assert entry.healthy is (expected_failures == 0)


@settings(max_examples=50, deadline=None)
@given(
    size=st.integers(min_value=1, max_value=6),
    status=st.integers(min_value=300, max_value=499),
)
def test_rejections_never_fail_over(size: int, status: int) -> None:
    pool = ConnectionPool(clock=FakeClock())
    transports = [RecordingTransport(respond(status, {"error": "rejected"})) for _ in range(size)]
    for i, transport in enumerate(transports):
        pool.add_host(f"http://h{i}:9092", {"transport": transport})

    with pytest.raises(RequestRejectedError) as exc_info:
        _run_async(pool.dispatch_json(REQUEST))

    assert exc_info.value.status_code == status
    assert sum(len(t.requests) for t in transports) == 1


@settings(max_examples=50, deadline=None)
@given(size=st.integers(min_value=1, max_value=6), calls=st.integers(min_value=1, max_value=20))
def test_round_robin_spreads_load_evenly(size: int, calls: int) -> None:
    pool, transports = _make_pool(["ok"] * size, None)

    for _ in range(calls):
        _run_async(pool.dispatch_json(REQUEST))

    counts = [len(t.requests) for t in transports]
    assert sum(counts) == calls
    assert max(counts) - min(counts) <= 1
