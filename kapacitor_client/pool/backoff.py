"""Exponential backoff for hosts that failed a request.

A host that fails ``n`` consecutive times stays excluded from selection for
``min(initial * 2 ** (n - 1), maximum)`` seconds.
"""

from __future__ import annotations


class ExponentialBackoff:
    """Deterministic capped exponential backoff.

    Args:
        initial: Delay after the first failure, in seconds.
        maximum: Upper bound on the delay, in seconds.
    """

    def __init__(self, initial: float = 0.3, maximum: float = 10.0) -> None:
        self._initial = initial
        self._maximum = maximum

    @property
    def initial(self) -> float:
        return self._initial

    @property
    def maximum(self) -> float:
        return self._maximum

    def delay(self, failure_count: int) -> float:
        """Return the cool-down for *failure_count* consecutive failures."""
        exponent = min(max(failure_count, 1) - 1, 64)  # already past any sane cap
        return min(self._initial * 2**exponent, self._maximum)

    __call__ = delay
