"""Colourised, indented JSON rendering for terminal output."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

_RESET = "\x1b[0m"
_KEY = "\x1b[34;1m"
_STRING = "\x1b[32;1m"
_BOOL = "\x1b[33;1m"
_NUMBER = "\x1b[36;1m"
_NULL = "\x1b[30;1m"
_INDENT = "  "

ERROR_TEXT = "Error formatting JSON"


def _paint(color: str, text: str) -> str:
    return f"{color}{text}{_RESET}"


def _number_text(value: Any) -> str:
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError("non-finite number")
        return str(value)
    if math.isnan(value) or math.isinf(value):
        raise ValueError("non-finite number")
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _render(value: Any, depth: int) -> str:
    if value is None:
        return _paint(_NULL, "null")
    if isinstance(value, bool):
        return _paint(_BOOL, "true" if value else "false")
    if isinstance(value, (int, float, Decimal)):
        return _paint(_NUMBER, _number_text(value))
    if isinstance(value, str):
        return _paint(_STRING, json.dumps(value, ensure_ascii=False))

    inner = _INDENT * (depth + 1)
    outer = _INDENT * depth
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        if not all(isinstance(key, str) for key in value):
            raise TypeError("object keys must be strings")
        items = (
            f"{inner}{_paint(_KEY, json.dumps(key, ensure_ascii=False))}: "
            f"{_render(value[key], depth + 1)}"
            for key in sorted(value)
        )
        return "{\n" + ",\n".join(items) + "\n" + outer + "}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = (f"{inner}{_render(item, depth + 1)}" for item in value)
        return "[\n" + ",\n".join(items) + "\n" + outer + "]"
    raise TypeError(f"cannot render {type(value).__name__} as JSON")


def color_json(value: Any) -> str:
    """Render ``value`` as indented JSON with ANSI colours and sorted keys."""
    try:
        return _render(value, 0)
    except (TypeError, ValueError):
        return ERROR_TEXT