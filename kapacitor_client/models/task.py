"""Pydantic models for Kapacitor tasks, templates and list options.

Kapacitor uses dash-case keys (``template-id``, ``last-enabled``); the
models use snake_case attributes with dash-case aliases, so
``model_dump(by_alias=True)`` produces the wire format and
``model_validate`` accepts it.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kapacitor_client.grammar.escape import dash_to_snake, snake_to_dash, to_dash
from kapacitor_client.models.fields import TaskFields, TaskStatus, TaskType, TemplateFields, VarType


class _WireModel(BaseModel):
    """Base for models exchanged with Kapacitor."""

    model_config = ConfigDict(
        alias_generator=to_dash,
        populate_by_name=True,
        extra="allow",
        use_enum_values=True,
    )

    # Fields computed by the server and never sent back.
    READ_ONLY: ClassVar[frozenset[str]] = frozenset()

    def to_body(self) -> dict[str, Any]:
        """Serialize for a create/update request body.

        Unknown fields pass through with their keys in dash-case.
        """
        extra = {k: v for k, v in (self.model_extra or {}).items() if v is not None}
        body = self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude=set(self.READ_ONLY) | set(extra),
        )
        body.update(snake_to_dash(extra))
        return body


class Var(_WireModel):
    """A TICKscript var override."""

    type: VarType
    value: Any = None
    description: str | None = None


class DBRP(_WireModel):
    """A database/retention policy pair a task may access."""

    db: str
    rp: str


class Link(_WireModel):
    rel: str | None = None
    href: str


class Template(_WireModel):
    """A Kapacitor template."""

    id: str | None = None
    type: TaskType | None = None
    script: str | None = None
    vars: dict[str, Var] | None = None
    # Read-only
    link: Link | None = None
    dot: str | None = None
    error: str | None = None
    created: str | None = None
    modified: str | None = None

    READ_ONLY: ClassVar[frozenset[str]] = frozenset({"link", "dot", "error", "created", "modified"})


class Task(_WireModel):
    """A Kapacitor task."""

    id: str | None = None
    template_id: str | None = None
    type: TaskType | None = None
    dbrps: list[DBRP] | None = None
    script: str | None = None
    status: TaskStatus | None = None
    vars: dict[str, Var] | None = None
    # Read-only
    link: Link | None = None
    dot: str | None = None
    executing: bool | None = None
    error: str | None = None
    stats: dict[str, Any] | None = None
    created: str | None = None
    modified: str | None = None
    last_enabled: str | None = None

    READ_ONLY: ClassVar[frozenset[str]] = frozenset(
        {"link", "dot", "executing", "error", "stats", "created", "modified", "last_enabled"}
    )

    @field_validator("stats")
    @classmethod
    def _snake_case_stats(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        # "task-stats", "node-stats" -> task_stats, node_stats
        return dash_to_snake(value) if value is not None else None


# ---------------------------------------------------------------------------
# Query options
# ---------------------------------------------------------------------------


class TemplateOptions(_WireModel):
    """Options for fetching a single template."""

    script_format: str | None = Field(default=None, pattern="^(formatted|raw)$")

    def to_query(self) -> dict[str, Any]:
        """Render as query parameters; a ``fields`` list repeats the key."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ListTemplatesOptions(TemplateOptions):
    """Options for listing templates."""

    pattern: str | None = None
    fields: list[TemplateFields] | None = None
    offset: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=1)


class TaskOptions(TemplateOptions):
    """Options for fetching a single task."""

    dot_view: str | None = Field(default=None, pattern="^(labels|attributes)$")
    replay_id: str | None = None


class ListTasksOptions(TaskOptions):
    """Options for listing tasks."""

    pattern: str | None = None
    fields: list[TaskFields] | None = None
    offset: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=1)
