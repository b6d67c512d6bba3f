"""Kapacitor REST client.

Thin task and template CRUD over the connection pool. Every method builds a
LogicalRequest under ``/kapacitor/v1/``, hands it to the pool and validates
the JSON answer back into a model.

Example:

    client = KapacitorClient("http://kapacitor.local:9092")
    task = await client.create_task(
        Task(
            id="cpu_alert",
            type="stream",
            dbrps=[DBRP(db="telegraf", rp="autogen")],
            script=quoted('stream|from().measurement("cpu")'),
        )
    )
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

from kapacitor_client.config.hosts import HostConfig, parse_url
from kapacitor_client.config.settings import KapacitorSettings
from kapacitor_client.errors import ConfigurationError
from kapacitor_client.logging_config import configure_logging
from kapacitor_client.models.task import (
    ListTasksOptions,
    ListTemplatesOptions,
    Task,
    TaskOptions,
    Template,
    TemplateOptions,
)
from kapacitor_client.pool.pool import ConnectionPool
from kapacitor_client.pool.types import LogicalRequest, PingResult, PoolOptions

logger = logging.getLogger(__name__)

API_PREFIX = "/kapacitor/v1/"
DEFAULT_PING_TIMEOUT = 5.0


def _path(*segments: str) -> str:
    return API_PREFIX + "/".join(quote(s, safe="") for s in segments)


class KapacitorClient:
    """Kapacitor client over one host or a cluster.

    Parameters
    ----------
    config:
        ``None`` for the local default host, a URL string, a list of
        ``HostConfig`` or a ``KapacitorSettings`` instance.
    pool_options:
        Pool options; when omitted they come from *config* if it is a
        ``KapacitorSettings``, else from the pool defaults.
    ping_timeout:
        Default timeout for ``ping()``; taken from *config* when it is a
        ``KapacitorSettings``.
    """

    def __init__(
        self,
        config: str | list[HostConfig] | KapacitorSettings | None = None,
        *,
        pool_options: PoolOptions | None = None,
        ping_timeout: float | None = None,
        **pool_overrides: Any,
    ) -> None:
        if isinstance(config, KapacitorSettings):
            hosts = config.resolve_hosts()
            pool_options = pool_options or config.pool_options()
            if ping_timeout is None:
                ping_timeout = config.ping_timeout
        elif isinstance(config, str):
            hosts = [parse_url(config)]
        elif config is None:
            hosts = [HostConfig()]
        else:
            hosts = list(config)

        if not hosts:
            raise ConfigurationError("At least one Kapacitor host is required")
        if ping_timeout is None:
            ping_timeout = DEFAULT_PING_TIMEOUT
        if ping_timeout <= 0:
            raise ConfigurationError(f"Ping timeout must be positive, got {ping_timeout}")
        self._ping_timeout = ping_timeout

        self._pool = ConnectionPool(pool_options, **pool_overrides)
        for host in hosts:
            self._pool.add_host(host.base_url, host.options)

        logger.info("Kapacitor client ready with %d host(s)", len(hosts))

    @classmethod
    def from_env(cls, **pool_overrides: Any) -> KapacitorClient:
        """Build a client from ``KAPACITOR_*`` environment variables.

        Also installs JSON logging at ``KAPACITOR_LOG_LEVEL``.
        """
        settings = KapacitorSettings()
        configure_logging(settings.log_level)
        return cls(settings, **pool_overrides)

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @property
    def ping_timeout(self) -> float:
        return self._ping_timeout

    async def ping(self, timeout: float | None = None) -> list[PingResult]:
        """Probe every host for liveness and version.

        *timeout* defaults to the client's configured ping timeout.
        """
        return await self._pool.ping(self._ping_timeout if timeout is None else timeout)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def create_task(self, task: Task) -> Task:
        document = await self._request("POST", _path("tasks"), body=task.to_body())
        return Task.model_validate(document)

    async def get_task(self, task_id: str, options: TaskOptions | None = None) -> Task:
        document = await self._request(
            "GET", _path("tasks", task_id), query=options.to_query() if options else None
        )
        return Task.model_validate(document)

    async def update_task(self, task: Task) -> Task:
        """Patch an existing task; ``task.id`` selects it."""
        if not task.id:
            raise ConfigurationError("update_task requires a task id")
        document = await self._request("PATCH", _path("tasks", task.id), body=task.to_body())
        return Task.model_validate(document)

    async def remove_task(self, task_id: str) -> None:
        await self._request("DELETE", _path("tasks", task_id))

    async def list_tasks(self, options: ListTasksOptions | None = None) -> list[Task]:
        document = await self._request(
            "GET", _path("tasks"), query=options.to_query() if options else None
        )
        return [Task.model_validate(t) for t in document.get("tasks") or []]

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    async def create_template(self, template: Template) -> Template:
        document = await self._request("POST", _path("templates"), body=template.to_body())
        return Template.model_validate(document)

    async def get_template(
        self, template_id: str, options: TemplateOptions | None = None
    ) -> Template:
        document = await self._request(
            "GET",
            _path("templates", template_id),
            query=options.to_query() if options else None,
        )
        return Template.model_validate(document)

    async def update_template(self, template: Template) -> Template:
        """Patch an existing template; ``template.id`` selects it."""
        if not template.id:
            raise ConfigurationError("update_template requires a template id")
        document = await self._request(
            "PATCH", _path("templates", template.id), body=template.to_body()
        )
        return Template.model_validate(document)

    async def remove_template(self, template_id: str) -> None:
        await self._request("DELETE", _path("templates", template_id))

    async def list_templates(
        self, options: ListTemplatesOptions | None = None
    ) -> list[Template]:
        document = await self._request(
            "GET", _path("templates"), query=options.to_query() if options else None
        )
        return [Template.model_validate(t) for t in document.get("templates") or []]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
    ) -> Any:
        request = LogicalRequest(
            method=method,
            path=path,
            body=json.dumps(body) if body is not None else None,
            query=query or None,
        )
        return await self._pool.dispatch_json(request)
