"""Escaping and key case-conversion helpers for request bodies."""

from __future__ import annotations

import re
from typing import Any

_DASH_CHAR = re.compile(r"-(.)")
_UPPER_CHAR = re.compile(r"(?<!^)([A-Z])")


def quoted(val: str) -> str:
    """Replace double quotes with single quotes in a TICKscript string.

    >>> quoted('stream|from().measurement("tick")')
    "stream|from().measurement('tick')"
    """
    return val.replace('"', "'")


def to_dash(name: str) -> str:
    """snake_case or camelCase key to dash-case: ``template_id`` -> ``template-id``."""
    name = _UPPER_CHAR.sub(r"-\1", name)
    return name.replace("_", "-").lower()


def to_snake(name: str) -> str:
    """dash-case key to snake_case: ``last-enabled`` -> ``last_enabled``."""
    return _DASH_CHAR.sub(lambda m: "_" + m.group(1), name).lower()


def _convert_keys(obj: Any, convert) -> Any:
    if isinstance(obj, dict):
        return {
            (convert(k) if isinstance(k, str) else k): _convert_keys(v, convert)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_convert_keys(item, convert) for item in obj]
    return obj


def dash_to_snake(obj: Any) -> Any:
    """Recursively convert dict keys from dash-case to snake_case. Values are kept."""
    return _convert_keys(obj, to_snake)


def snake_to_dash(obj: Any) -> Any:
    """Recursively convert dict keys to dash-case. Values are kept."""
    return _convert_keys(obj, to_dash)
