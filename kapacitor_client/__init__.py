"""Asyncio client for the Kapacitor REST API with a multi-host failover pool."""

from kapacitor_client.client import KapacitorClient
from kapacitor_client.config import HostConfig, KapacitorSettings
from kapacitor_client.errors import (
    AllHostsFailedError,
    ConfigurationError,
    ErrorKind,
    KapacitorError,
    NoAvailableHostsError,
    RequestRejectedError,
    SemanticError,
    ServiceUnavailableError,
)
from kapacitor_client.grammar import quoted
from kapacitor_client.pool import ConnectionPool, LogicalRequest, PingResult, PoolOptions

__all__ = [
    "AllHostsFailedError",
    "ConfigurationError",
    "ConnectionPool",
    "ErrorKind",
    "HostConfig",
    "KapacitorClient",
    "KapacitorError",
    "KapacitorSettings",
    "LogicalRequest",
    "NoAvailableHostsError",
    "PingResult",
    "PoolOptions",
    "RequestRejectedError",
    "SemanticError",
    "ServiceUnavailableError",
    "quoted",
]
