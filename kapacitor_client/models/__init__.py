"""Kapacitor wire models and field enumerations."""

from kapacitor_client.models.fields import TaskFields, TaskStatus, TaskType, TemplateFields, VarType
from kapacitor_client.models.task import (
    DBRP,
    Link,
    ListTasksOptions,
    ListTemplatesOptions,
    Task,
    TaskOptions,
    Template,
    TemplateOptions,
    Var,
)

__all__ = [
    "DBRP",
    "Link",
    "ListTasksOptions",
    "ListTemplatesOptions",
    "Task",
    "TaskFields",
    "TaskOptions",
    "TaskStatus",
    "TaskType",
    "Template",
    "TemplateFields",
    "TemplateOptions",
    "Var",
    "VarType",
]
