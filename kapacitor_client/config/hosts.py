"""Host configuration models and loaders.

A cluster can be described as a single URL string
(``http://kapacitor.local:9092``) or as a structured list of hosts, either
inline or from a YAML file of the form:

    hosts:
      - host: kapa1.example.com
        port: 9092
      - host: kapa2.example.com
        protocol: https
        options:
          verify: false
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError

from kapacitor_client.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9092


class HostConfig(BaseModel):
    """Connection details for one Kapacitor host."""

    host: str = Field(default=DEFAULT_HOST, min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    protocol: Literal["http", "https"] = "http"
    options: dict[str, Any] = Field(default_factory=dict)  # httpx client options

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"


def parse_url(addr: str) -> HostConfig:
    """Parse a URL string into a HostConfig, defaulting the port to 9092."""
    parsed = urlparse(addr)
    if not parsed.scheme or not parsed.hostname:
        raise ConfigurationError(f"Invalid Kapacitor URL: {addr!r}")

    try:
        return HostConfig(
            host=parsed.hostname,
            port=parsed.port or DEFAULT_PORT,
            protocol=parsed.scheme.lower(),
        )
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"Invalid Kapacitor URL: {addr!r}") from exc


def load_hosts_file(yaml_path: str) -> list[HostConfig]:
    """Parse a hosts YAML file into HostConfig objects.

    Unlike optional tuning files, a hosts file names the cluster to talk to,
    so a missing or malformed file raises ``ConfigurationError``.
    """
    path = Path(yaml_path)

    if not path.exists():
        raise ConfigurationError(f"Hosts file not found at {yaml_path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse hosts YAML at %s: %s", yaml_path, exc)
        raise ConfigurationError(f"Failed to parse hosts file {yaml_path}") from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("hosts"), list):
        raise ConfigurationError(f"Hosts file {yaml_path} is missing a 'hosts' list")

    hosts: list[HostConfig] = []
    for index, config in enumerate(raw["hosts"]):
        try:
            hosts.append(HostConfig.model_validate(config))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid host #{index} in {yaml_path}: {exc}") from exc

    logger.info("Loaded %d hosts from %s", len(hosts), yaml_path)
    return hosts
