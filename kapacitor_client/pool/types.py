"""Data models for the connection pool."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from kapacitor_client.errors import ConfigurationError

HTTP_METHODS = frozenset({"GET", "POST", "PATCH", "DELETE"})


@dataclass
class HostEntry:
    """A single backend host with health and usage tracking."""

    base_url: str
    request_options: dict[str, Any] = field(default_factory=dict)
    healthy: bool = True
    unhealthy_since: float | None = None  # time.monotonic()
    next_eligible: float | None = None  # time.monotonic()
    failure_count: int = 0  # consecutive failures, drives the backoff
    success_count: int = 0

    def is_eligible(self, now: float) -> bool:
        if self.healthy:
            return True
        return self.next_eligible is None or self.next_eligible <= now


class PoolOptions(BaseModel):
    """Retry and probe behaviour of a pool. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: int | None = Field(default=None, ge=0)  # None: host count - 1
    request_timeout: float = Field(default=30.0, gt=0)
    backoff_initial: float = Field(default=0.3, gt=0)
    backoff_max: float = Field(default=10.0, gt=0)
    randomize_selection: bool = False

    @model_validator(mode="after")
    def _check_backoff_bounds(self) -> PoolOptions:
        if self.backoff_max < self.backoff_initial:
            raise ValueError("backoff_max must be >= backoff_initial")
        return self

    @classmethod
    def build(cls, **values: Any) -> PoolOptions:
        """Validate *values*, raising ConfigurationError instead of ValidationError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid pool options: {exc.error_count()} error(s)",
                errors=[
                    {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
                    for err in exc.errors()
                ],
            ) from exc

    def retries_for(self, host_count: int) -> int:
        """Resolve the retry budget for a pool of *host_count* hosts."""
        if self.max_retries is not None:
            return self.max_retries
        return max(host_count - 1, 0)


@dataclass(frozen=True)
class LogicalRequest:
    """A method/path/body/query tuple independent of the host that serves it."""

    method: str
    path: str
    body: str | None = None
    query: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        method = self.method.upper()
        if method not in HTTP_METHODS:
            raise ConfigurationError(f"Unsupported HTTP method: {self.method}")
        if not self.path.startswith("/"):
            raise ConfigurationError(f"Request path must start with '/': {self.path!r}")
        object.__setattr__(self, "method", method)


@dataclass(frozen=True)
class PingResult:
    """Outcome of probing one host."""

    host: str
    online: bool
    rtt: float  # seconds
    version: str | None = None
