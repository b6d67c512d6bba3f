"""Pydantic Settings for the Kapacitor client.

All environment variables use the KAPACITOR_ prefix.
Example: KAPACITOR_URL=http://kapa:9092, KAPACITOR_REQUEST_TIMEOUT=5
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from kapacitor_client.config.hosts import HostConfig, load_hosts_file, parse_url
from kapacitor_client.pool.types import PoolOptions


class KapacitorSettings(BaseSettings):
    """Client configuration validated from environment variables."""

    # Cluster
    url: str | None = None  # Single host, e.g. "http://127.0.0.1:9092"
    hosts: list[HostConfig] = []  # Structured host list (JSON in env)
    hosts_file: str | None = None  # YAML file with a "hosts" list
    log_level: str = "INFO"

    # Pool
    max_retries: int | None = Field(default=None, ge=0)  # Default: hosts - 1
    request_timeout: float = Field(default=30.0, gt=0)
    backoff_initial: float = Field(default=0.3, gt=0)
    backoff_max: float = Field(default=10.0, gt=0)
    randomize_selection: bool = False

    # Ping
    ping_timeout: float = Field(default=5.0, gt=0)

    model_config = {"env_prefix": "KAPACITOR_"}

    def pool_options(self) -> PoolOptions:
        return PoolOptions.build(
            max_retries=self.max_retries,
            request_timeout=self.request_timeout,
            backoff_initial=self.backoff_initial,
            backoff_max=self.backoff_max,
            randomize_selection=self.randomize_selection,
        )

    def resolve_hosts(self) -> list[HostConfig]:
        """Hosts in order of precedence: inline list, hosts file, URL, default."""
        if self.hosts:
            return list(self.hosts)
        if self.hosts_file:
            return load_hosts_file(self.hosts_file)
        if self.url:
            return [parse_url(self.url)]
        return [HostConfig()]
