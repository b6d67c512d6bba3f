"""Property tests for the exponential backoff policy.

Validates that delays start at the initial value, never exceed the cap,
never shrink as failures accumulate, and are deterministic.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings

from kapacitor_client.pool.backoff import ExponentialBackoff
from tests.conftest import backoff_configs, failure_counts


@settings(max_examples=100)
@given(config=backoff_configs)
def test_first_failure_waits_initial(config: tuple[float, float]) -> None:
    initial, maximum = config
    assert ExponentialBackoff(initial, maximum).delay(1) == pytest.approx(initial)


@settings(max_examples=100)
@given(config=backoff_configs, count=failure_counts)
def test_delay_bounded_by_initial_and_maximum(config: tuple[float, float], count: int) -> None:
    initial, maximum = config
    delay = ExponentialBackoff(initial, maximum).delay(count)
    assert initial <= delay <= maximum


@settings(max_examples=100)
@given(config=backoff_configs, count=failure_counts)
def test_delay_is_monotonic(config: tuple[float, float], count: int) -> None:
    initial, maximum = config
    backoff = ExponentialBackoff(initial, maximum)
    assert backoff.delay(count) <= backoff.delay(count + 1)


@settings(max_examples=100)
@given(config=backoff_configs, count=failure_counts)
def test_delay_doubles_until_cap(config: tuple[float, float], count: int) -> None:
    initial, maximum = config
    backoff = ExponentialBackoff(initial, maximum)
    expected = min(initial * 2 ** (count - 1), maximum)
    assert backoff.delay(count) == pytest.approx(expected)


@settings(max_examples=50)
@given(config=backoff_configs, count=failure_counts)
def test_delay_is_deterministic(config: tuple[float, float], count: int) -> None:
    initial, maximum = config
    assert ExponentialBackoff(initial, maximum).delay(count) == ExponentialBackoff(
        initial, maximum
    ).delay(count)
