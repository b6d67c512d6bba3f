"""Configuration module — settings and host lists."""

from kapacitor_client.config.hosts import HostConfig, load_hosts_file, parse_url
from kapacitor_client.config.settings import KapacitorSettings

__all__ = [
    "HostConfig",
    "KapacitorSettings",
    "load_hosts_file",
    "parse_url",
]
