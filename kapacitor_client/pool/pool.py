"""Multi-host connection pool.

The pool is a passive shared resource: it runs no background tasks, and
dispatching and probing happen only when a caller asks for them. It owns
the host registry and hands it to the dispatcher and the prober.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import Any

from kapacitor_client.pool.backoff import ExponentialBackoff
from kapacitor_client.pool.dispatcher import RequestDispatcher
from kapacitor_client.pool.prober import HealthProber
from kapacitor_client.pool.registry import HostRegistry
from kapacitor_client.pool.types import HostEntry, LogicalRequest, PingResult, PoolOptions

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Balances requests across Kapacitor hosts with failover.

    Args:
        options: Pool options. Keyword overrides are validated on top of
            them; any invalid value raises ``ConfigurationError``.
        clock: Monotonic time source for health bookkeeping.
        rng: Random source for randomized host selection.
    """

    def __init__(
        self,
        options: PoolOptions | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
        **overrides: Any,
    ) -> None:
        values = options.model_dump() if options is not None else {}
        values.update(overrides)
        self._options = PoolOptions.build(**values)

        self._backoff = ExponentialBackoff(
            initial=self._options.backoff_initial,
            maximum=self._options.backoff_max,
        )
        self._registry = HostRegistry(backoff=self._backoff, clock=clock)
        self._dispatcher = RequestDispatcher(self._registry, self._options, rng=rng)
        self._prober = HealthProber(self._registry)

    @property
    def options(self) -> PoolOptions:
        return self._options

    @property
    def registry(self) -> HostRegistry:
        return self._registry

    @property
    def hosts(self) -> list[HostEntry]:
        return self._registry.hosts

    def add_host(self, base_url: str, request_options: dict[str, Any] | None = None) -> HostEntry:
        """Register a host. Raises ``ConfigurationError`` on duplicates."""
        return self._registry.add(base_url, request_options)

    async def dispatch_json(self, request: LogicalRequest) -> Any:
        """Run *request* on a healthy host and return the parsed JSON body."""
        return await self._dispatcher.dispatch_json(request)

    async def ping(self, timeout: float) -> list[PingResult]:
        """Probe every host; one result per host in registration order."""
        return await self._prober.ping(timeout)

    def get_stats(self) -> dict:
        return self._registry.get_stats()
