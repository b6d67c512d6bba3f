"""On-demand health and version probing of every registered host.

Probes bypass eligibility filtering so that hosts currently in their
cool-down can be rediscovered. All probes run concurrently, and each one is
bounded by the same deadline, so ``ping(timeout)`` returns in about
``timeout`` seconds however many hosts hang.
"""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from kapacitor_client.errors import ConfigurationError
from kapacitor_client.pool.registry import HostRegistry
from kapacitor_client.pool.types import HostEntry, PingResult

logger = logging.getLogger(__name__)

PING_PATH = "/kapacitor/v1/ping"
VERSION_HEADER = "X-Kapacitor-Version"


class HealthProber:
    """Probes hosts with a lightweight status request and updates the registry."""

    def __init__(self, registry: HostRegistry, ping_path: str = PING_PATH) -> None:
        self._registry = registry
        self._ping_path = ping_path

    async def ping(self, timeout: float) -> list[PingResult]:
        """Probe all hosts concurrently; results follow registration order."""
        if timeout <= 0:
            raise ConfigurationError(f"Ping timeout must be positive, got {timeout}")

        hosts = self._registry.hosts
        results = await asyncio.gather(*(self._probe(entry, timeout) for entry in hosts))

        online = sum(1 for r in results if r.online)
        logger.info("Ping completed: %d/%d hosts online", online, len(results))
        return list(results)

    async def _probe(self, entry: HostEntry, timeout: float) -> PingResult:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(self._request(entry, timeout), timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(
                "Ping timed out after %.3fs: %s",
                timeout,
                entry.base_url,
                extra={"host": entry.base_url, "error_reason": "timeout"},
            )
            self._registry.mark_down(entry)
            return PingResult(host=entry.base_url, online=False, rtt=timeout)
        except httpx.RequestError as exc:
            rtt = time.monotonic() - start
            logger.warning(
                "Ping failed for %s: %s",
                entry.base_url,
                exc,
                extra={"host": entry.base_url, "error_reason": type(exc).__name__},
            )
            self._registry.mark_down(entry)
            return PingResult(host=entry.base_url, online=False, rtt=rtt)

        rtt = time.monotonic() - start
        if not response.is_success:
            logger.warning(
                "Ping for %s answered %d",
                entry.base_url,
                response.status_code,
                extra={"host": entry.base_url, "status_code": response.status_code},
            )
            self._registry.mark_down(entry)
            return PingResult(host=entry.base_url, online=False, rtt=rtt)

        self._registry.mark_up(entry)
        version = response.headers.get(VERSION_HEADER) or None
        logger.debug(
            "Ping ok for %s in %.1fms (version %s)",
            entry.base_url,
            rtt * 1000,
            version,
            extra={"host": entry.base_url, "rtt_ms": round(rtt * 1000, 3)},
        )
        return PingResult(host=entry.base_url, online=True, rtt=rtt, version=version)

    async def _request(self, entry: HostEntry, timeout: float) -> httpx.Response:
        async with httpx.AsyncClient(**entry.request_options) as client:
            return await client.get(entry.base_url + self._ping_path, timeout=timeout)
