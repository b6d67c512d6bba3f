"""Request dispatcher: runs one logical request against a healthy host.

Each call walks the state machine

    SELECTING -> DISPATCHING -> SUCCEEDED
                             -> HOST_FAILED -> SELECTING (budget left)
                                            -> EXHAUSTED
                             -> REJECTED

and ends in one of SUCCEEDED, REJECTED, EXHAUSTED or NO_HOSTS.

Outcome classification:
- request error (transport or body decoding) or status >= 500: the host is
  marked down and the request moves on to another untried host, up to
  ``max_retries`` extra attempts
- status 300-499: the request itself is at fault, raised without retry
- status 2xx: the body is parsed; a non-empty ``error`` field is raised as
  a SemanticError, otherwise the document is returned

``asyncio.CancelledError`` is never caught: a cancelled caller stops the
loop and no further retry budget is consumed.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Any

import httpx

from kapacitor_client.errors import (
    AllHostsFailedError,
    NoAvailableHostsError,
    RequestRejectedError,
    SemanticError,
    ServiceUnavailableError,
    assert_no_errors,
)
from kapacitor_client.pool.registry import HostRegistry
from kapacitor_client.pool.types import HostEntry, LogicalRequest, PoolOptions

logger = logging.getLogger(__name__)


class DispatchState(str, Enum):
    """Terminal states of a dispatch, reported in logs."""

    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    EXHAUSTED = "exhausted"
    NO_HOSTS = "no_hosts"


def _error_message(response: httpx.Response) -> str:
    """Extract the error message embedded in a response body, if any."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()

    if isinstance(data, dict):
        for key in ("error", "message"):
            if data.get(key):
                return str(data[key])
    return response.text.strip()


def _parse_document(response: httpx.Response) -> Any:
    """Parse a 2xx body as JSON. An empty body (e.g. 204) yields ``{}``."""
    if not response.content.strip():
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise SemanticError(
            f"Invalid JSON in response from {response.request.url}",
            status_code=response.status_code,
        ) from exc


class RequestDispatcher:
    """Selects hosts, sends requests and fails over on host-level errors.

    Args:
        registry: Host registry shared with the prober.
        options: Pool options (timeouts, retry budget, selection policy).
        rng: Random source for randomized selection, injectable for tests.
    """

    def __init__(
        self,
        registry: HostRegistry,
        options: PoolOptions,
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry
        self._options = options
        self._rng = rng or random.Random()
        self._cursor: int = 0  # registration index the next round-robin scan starts at

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def dispatch_json(self, request: LogicalRequest) -> Any:
        """Execute *request* and return the parsed JSON document.

        Raises
        ------
        NoAvailableHostsError
            No host was eligible when the call began.
        AllHostsFailedError
            Every attempt failed on transport; chained from the last error.
        ServiceUnavailableError
            Every attempt failed and the last one answered with a 5xx.
        RequestRejectedError
            A host answered 3xx/4xx.
        SemanticError
            A host answered 2xx with a non-empty ``error`` field.
        """
        candidates = self._registry.candidates()
        if not candidates:
            self._log_outcome(request, DispatchState.NO_HOSTS, attempts=0)
            raise NoAvailableHostsError(
                f"No available hosts for {request.method} {request.path}"
            )

        budget = self._options.retries_for(len(self._registry))
        tried: set[str] = set()
        last_error: Exception | None = None
        attempt = 0

        while True:
            entry = self._select(candidates, tried)
            if entry is None:
                break

            attempt += 1
            tried.add(entry.base_url)

            try:
                response = await self._send(entry, request, attempt)
            except httpx.RequestError as exc:
                last_error = exc
                logger.warning(
                    "Transport error from %s on %s %s (attempt %d/%d): %s",
                    entry.base_url,
                    request.method,
                    request.path,
                    attempt,
                    budget + 1,
                    exc,
                    extra={
                        "host": entry.base_url,
                        "attempt": attempt,
                        "error_reason": type(exc).__name__,
                    },
                )
                self._registry.mark_down(entry)
            else:
                if response.status_code >= 500:
                    last_error = ServiceUnavailableError(
                        f"{entry.base_url} answered {response.status_code}",
                        status_code=response.status_code,
                        body=response.text,
                        attempts=attempt,
                    )
                    logger.warning(
                        "Host %s answered %d on %s %s (attempt %d/%d)",
                        entry.base_url,
                        response.status_code,
                        request.method,
                        request.path,
                        attempt,
                        budget + 1,
                        extra={
                            "host": entry.base_url,
                            "attempt": attempt,
                            "status_code": response.status_code,
                        },
                    )
                    self._registry.mark_down(entry)
                else:
                    return self._complete(entry, request, response, attempt)

            if attempt > budget:
                break
            candidates = self._registry.candidates()

        self._log_outcome(request, DispatchState.EXHAUSTED, attempts=attempt)

        if isinstance(last_error, ServiceUnavailableError):
            raise ServiceUnavailableError(
                f"Service unavailable after {attempt} attempt(s) for "
                f"{request.method} {request.path}",
                status_code=last_error.status_code,
                body=last_error.body,
                last_error=last_error,
                attempts=attempt,
            ) from last_error

        raise AllHostsFailedError(
            f"All hosts failed after {attempt} attempt(s) for {request.method} {request.path}",
            last_error=last_error,
            attempts=attempt,
        ) from last_error

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _select(self, candidates: list[HostEntry], tried: set[str]) -> HostEntry | None:
        """Pick the next untried candidate, or None if every one was tried."""
        remaining = [c for c in candidates if c.base_url not in tried]
        if not remaining:
            return None

        if self._options.randomize_selection:
            return self._rng.choice(remaining)

        total = len(self._registry)
        positions = {self._registry.index_of(c): c for c in remaining}
        for offset in range(total):
            index = (self._cursor + offset) % total
            if index in positions:
                self._cursor = (index + 1) % total
                return positions[index]
        return None

    async def _send(
        self, entry: HostEntry, request: LogicalRequest, attempt: int
    ) -> httpx.Response:
        """Send *request* to *entry*, applying the host's request options."""
        headers = {"Accept": "application/json"}
        if request.body is not None:
            headers["Content-Type"] = "application/json"

        logger.debug(
            "Dispatching %s %s to %s (attempt %d)",
            request.method,
            request.path,
            entry.base_url,
            attempt,
            extra={
                "host": entry.base_url,
                "method": request.method,
                "path": request.path,
                "attempt": attempt,
            },
        )

        async with httpx.AsyncClient(**entry.request_options) as client:
            return await client.request(
                request.method,
                entry.base_url + request.path,
                content=request.body,
                params=dict(request.query) if request.query else None,
                headers=headers,
                timeout=self._options.request_timeout,
            )

    def _complete(
        self,
        entry: HostEntry,
        request: LogicalRequest,
        response: httpx.Response,
        attempt: int,
    ) -> Any:
        """Classify a response below 500 from *entry*."""
        # The host answered, whatever it thought of the request.
        self._registry.mark_up(entry)

        if response.status_code >= 300:
            self._log_outcome(
                request, DispatchState.REJECTED, attempts=attempt, status_code=response.status_code
            )
            raise RequestRejectedError(
                _error_message(response) or f"Request rejected with status {response.status_code}",
                status_code=response.status_code,
                host=entry.base_url,
            )

        document = _parse_document(response)
        assert_no_errors(document)

        self._log_outcome(
            request, DispatchState.SUCCEEDED, attempts=attempt, status_code=response.status_code
        )
        return document

    @staticmethod
    def _log_outcome(
        request: LogicalRequest,
        state: DispatchState,
        *,
        attempts: int,
        status_code: int | None = None,
    ) -> None:
        level = logging.DEBUG if state is DispatchState.SUCCEEDED else logging.ERROR
        if state is DispatchState.REJECTED:
            level = logging.INFO
        logger.log(
            level,
            "%s %s %s after %d attempt(s)",
            request.method,
            request.path,
            state.value,
            attempts,
            extra={
                "method": request.method,
                "path": request.path,
                "outcome": state.value,
                "attempt": attempts,
                "status_code": status_code,
            },
        )
