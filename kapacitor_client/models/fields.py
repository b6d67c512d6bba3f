"""Field-name and value enumerations used on the Kapacitor wire."""

from __future__ import annotations

from enum import Enum


class VarType(str, Enum):
    """TICKscript var types."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    REGEX = "regex"
    DURATION = "duration"
    LAMBDA = "lambda"
    LIST = "list"
    STAR = "star"


class TemplateFields(str, Enum):
    """Template fields, usable in ``ListTemplatesOptions.fields``."""

    LINK = "link"
    ID = "id"
    TYPE = "type"
    SCRIPT = "script"
    DOT = "dot"
    ERROR = "error"
    CREATED = "created"
    MODIFIED = "modified"
    VARS = "vars"


class TaskFields(str, Enum):
    """Task fields, usable in ``ListTasksOptions.fields``."""

    LINK = "link"
    ID = "id"
    TEMPLATE_ID = "template-id"
    TYPE = "type"
    DBRPS = "dbrps"
    SCRIPT = "script"
    DOT = "dot"
    STATUS = "status"
    EXECUTING = "executing"
    ERROR = "error"
    STATS = "stats"
    CREATED = "created"
    MODIFIED = "modified"
    LAST_ENABLED = "last-enabled"
    VARS = "vars"


class TaskType(str, Enum):
    STREAM = "stream"
    BATCH = "batch"


class TaskStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
