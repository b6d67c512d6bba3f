"""Host registry: the single owner of per-host health state.

Hosts are kept in registration order. A host that fails is excluded from
selection until its backoff cool-down elapses, after which ``candidates()``
promotes it back to healthy on the optimistic assumption that it recovered.

All mutations are synchronous and never await, so on a single event loop
concurrent requests see each update as one atomic step. Last writer wins
for the timestamps; health is advisory state.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import Any

import httpx

from kapacitor_client.errors import ConfigurationError
from kapacitor_client.pool.backoff import ExponentialBackoff
from kapacitor_client.pool.types import HostEntry

logger = logging.getLogger(__name__)

# Keyword arguments accepted by httpx.AsyncClient that a host may override.
CLIENT_OPTIONS = frozenset(
    {
        "auth",
        "cert",
        "cookies",
        "event_hooks",
        "follow_redirects",
        "headers",
        "http2",
        "limits",
        "max_redirects",
        "params",
        "proxy",
        "transport",
        "trust_env",
        "verify",
    }
)


def normalize_url(base_url: str) -> str:
    """Return *base_url* with lower-cased scheme/host and no trailing slash."""
    try:
        url = httpx.URL(base_url.strip())
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Invalid host URL: {base_url!r}") from exc

    if url.scheme not in ("http", "https"):
        raise ConfigurationError(f"Unsupported scheme for host {base_url!r}")
    if not url.host:
        raise ConfigurationError(f"Missing host in URL {base_url!r}")

    return str(url).rstrip("/")


class HostRegistry:
    """Ordered set of backend hosts and their health.

    Args:
        backoff: Policy computing the cool-down after consecutive failures.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        backoff: ExponentialBackoff | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backoff = backoff or ExponentialBackoff()
        self._clock = clock
        self._hosts: list[HostEntry] = []
        self._by_url: dict[str, HostEntry] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, base_url: str, request_options: dict[str, Any] | None = None) -> HostEntry:
        """Append a new eligible host.

        Raises ``ConfigurationError`` for a malformed or duplicate URL, or
        for request options httpx does not understand.
        """
        url = normalize_url(base_url)
        if self.get(url) is not None:
            raise ConfigurationError(f"Host already registered: {url}")

        options = dict(request_options or {})
        unknown = set(options) - CLIENT_OPTIONS
        if unknown:
            raise ConfigurationError(
                f"Unsupported request options for {url}: {', '.join(sorted(unknown))}"
            )

        entry = HostEntry(base_url=url, request_options=options)
        self._hosts.append(entry)
        self._by_url[url] = entry
        logger.info("Host registered: %s", url, extra={"host": url})
        return entry

    def get(self, base_url: str) -> HostEntry | None:
        return self._by_url.get(normalize_url(base_url))

    @property
    def hosts(self) -> list[HostEntry]:
        """All registered hosts in registration order."""
        return list(self._hosts)

    def index_of(self, entry: HostEntry) -> int:
        return self._hosts.index(entry)

    def __len__(self) -> int:
        return len(self._hosts)

    def __iter__(self) -> Iterator[HostEntry]:
        return iter(list(self._hosts))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def candidates(self) -> list[HostEntry]:
        """Return the currently eligible hosts in registration order.

        Unhealthy hosts whose cool-down has elapsed are provisionally marked
        healthy again. Their failure counter is kept, so a host that fails
        again right away backs off for longer.
        """
        now = self._clock()
        eligible: list[HostEntry] = []

        for entry in self._hosts:
            if not entry.is_eligible(now):
                continue
            if not entry.healthy:
                entry.healthy = True
                entry.unhealthy_since = None
                entry.next_eligible = None
                logger.info(
                    "Host cool-down elapsed, retrying: %s",
                    entry.base_url,
                    extra={"host": entry.base_url},
                )
            eligible.append(entry)

        return eligible

    # ------------------------------------------------------------------
    # Health tracking
    # ------------------------------------------------------------------

    def mark_down(self, entry: HostEntry) -> None:
        """Exclude *entry* from selection for the backoff of its failure count."""
        now = self._clock()
        entry.failure_count += 1
        delay = self._backoff.delay(entry.failure_count)
        entry.healthy = False
        entry.unhealthy_since = now
        entry.next_eligible = now + delay
        logger.warning(
            "Host marked unhealthy: %s (failures: %d, retry in %.3fs)",
            entry.base_url,
            entry.failure_count,
            delay,
            extra={"host": entry.base_url},
        )

    def mark_up(self, entry: HostEntry) -> None:
        """Record a success through *entry* and clear its failure state."""
        entry.success_count += 1
        if entry.healthy and entry.failure_count == 0:
            return

        entry.healthy = True
        entry.unhealthy_since = None
        entry.next_eligible = None
        entry.failure_count = 0
        logger.info("Host restored to healthy: %s", entry.base_url, extra={"host": entry.base_url})

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Return host pool statistics."""
        now = self._clock()
        total = len(self._hosts)
        healthy = sum(1 for h in self._hosts if h.healthy)

        per_host = [
            {
                "url": h.base_url,
                "healthy": h.healthy,
                "eligible": h.is_eligible(now),
                "success_count": h.success_count,
                "failure_count": h.failure_count,
                "retry_in": max(h.next_eligible - now, 0.0) if h.next_eligible is not None else None,
            }
            for h in self._hosts
        ]

        return {
            "total": total,
            "healthy": healthy,
            "unhealthy": total - healthy,
            "hosts": per_host,
        }
