"""Connection pool package — host registry, backoff, probing and failover."""

from kapacitor_client.pool.backoff import ExponentialBackoff
from kapacitor_client.pool.dispatcher import DispatchState, RequestDispatcher
from kapacitor_client.pool.pool import ConnectionPool
from kapacitor_client.pool.prober import HealthProber
from kapacitor_client.pool.registry import HostRegistry
from kapacitor_client.pool.types import HostEntry, LogicalRequest, PingResult, PoolOptions

__all__ = [
    "ConnectionPool",
    "DispatchState",
    "ExponentialBackoff",
    "HealthProber",
    "HostEntry",
    "HostRegistry",
    "LogicalRequest",
    "PingResult",
    "PoolOptions",
    "RequestDispatcher",
]
