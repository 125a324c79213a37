"""Parsing of command lines and argument objects."""

from __future__ import annotations

import json
import re
from typing import Any

from .database import NoqliError

_COMMAND_RE = re.compile(r"^(CREATE|GET|UPDATE|DELETE|USE)\s*(.*)\Z", re.IGNORECASE)
_USE_RE = re.compile(r"^USE\s+(.+)\Z", re.IGNORECASE)
_DIGITS_RE = re.compile(r"\d+", re.ASCII)
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FIELD_ASSIGN_RE = re.compile(r"\[([^\]]+)\]\s*=\s*([^,}]+)")
_RANGE_RE = re.compile(r"id\s*:\s*\(([^,]+),([^)]+)\)")
_ARRAY_RE = re.compile(r"(\w+)\s*:\s*\[(.*?)\]", re.ASCII)
_DOUBLE_COMMA_RE = re.compile(r",\s*,")
_EDGE_COMMA_RE = re.compile(r"^,|,$")


def command_regex() -> re.Pattern[str]:
    """Pattern matching a CRUD or USE command and its argument text."""
    return _COMMAND_RE


def use_command_regex() -> re.Pattern[str]:
    """Pattern matching a USE command and its target name."""
    return _USE_RE


def is_get_dbs_command(command: str, args: str) -> bool:
    return command.upper() == "GET" and args.strip().lower() == "dbs"


def is_get_tables_command(command: str, args: str) -> bool:
    return command.upper() == "GET" and args.strip().lower() == "tables"


def display_prompt(current_db: str, current_table: str) -> str:
    """Prompt text reflecting the selected database and table."""
    prompt = "noqli"
    if current_db:
        prompt += ":" + current_db
        if current_table:
            prompt += ":" + current_table
    return prompt + "> "


def split_respecting_quotes(text: str, delimiter: str) -> list[str]:
    """Split ``text`` on ``delimiter`` except inside single or double quotes."""
    parts: list[str] = []
    current: list[str] = []
    quote = ""
    for char in text:
        if char in ("'", '"'):
            if quote and char == quote:
                quote = ""
            elif not quote:
                quote = char
            current.append(char)
        elif char == delimiter and not quote:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if current:
        parts.append("".join(current))
    return parts


def parse_arg(text: str) -> dict[str, Any] | None:
    """Parse an argument string: a bare numeric id or ``{...}`` notation."""
    if text == "":
        return None
    trimmed = text.strip()
    if _DIGITS_RE.fullmatch(trimmed):
        return {"id": int(trimmed)}
    if trimmed.startswith("{") and trimmed.endswith("}"):
        return _parse_object(trimmed)
    raise NoqliError("invalid argument format")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"{text!r} is not an integer")
    return int(text)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _parse_array_element(element: str) -> Any:
    element = element.strip()
    quoted = (element.startswith('"') and element.endswith('"')) or (
        element.startswith("'") and element.endswith("'")
    )
    if quoted:
        return element.strip("'\"")
    try:
        return _atoi(element)
    except ValueError:
        return element


def _parse_simple_value(text: str) -> Any:
    text = text.strip("'\"")
    try:
        return _atoi(text)
    except ValueError:
        pass
    if text.lower() == "true":
        return True
    if text.lower() == "false":
        return False
    return text


def _parse_object(text: str) -> dict[str, Any]:
    body = text[1:-1].strip()
    result: dict[str, Any] = {}

    # [field1, field2] = value
    for match in list(_FIELD_ASSIGN_RE.finditer(body)):
        body = body.replace(match.group(0), "", 1)
        raw = match.group(2).strip()
        try:
            value = _loads(raw)
        except ValueError:
            value = raw.strip("'\\\"")
        for name in match.group(1).split(","):
            result[name.strip()] = value

    # Leading bare names select columns.
    parts = split_respecting_quotes(body, ",")
    columns: list[str] = []
    for index, part in enumerate(parts):
        piece = part.strip()
        if not piece or piece.startswith("["):
            continue
        if ":" in piece or "=" in piece:
            break
        columns.append(piece)
        parts[index] = ""
    if columns:
        result["_columns"] = columns
    body = ",".join(part for part in parts if part.strip())

    # id: (start, stop)
    range_match = _RANGE_RE.search(body)
    if range_match:
        try:
            start = _atoi(range_match.group(1).strip())
        except ValueError as exc:
            raise NoqliError(f"invalid range start: {exc}") from exc
        try:
            end = _atoi(range_match.group(2).strip())
        except ValueError as exc:
            raise NoqliError(f"invalid range end: {exc}") from exc
        result["id"] = {"range": [start, end]}
        body = body.replace(range_match.group(0), "", 1)

    body = body.strip()
    body = _DOUBLE_COMMA_RE.sub(",", body)
    body = _EDGE_COMMA_RE.sub("", body)

    # key: [a, b, c]
    for match in list(_ARRAY_RE.finditer(body)):
        body = body.replace(match.group(0), "", 1)
        result[match.group(1)] = [
            _parse_array_element(element)
            for element in split_respecting_quotes(match.group(2), ",")
        ]

    if body:
        try:
            parsed = _loads("{" + body.replace("'", '"') + "}")
            if not isinstance(parsed, dict):
                raise ValueError("not an object")
        except ValueError:
            for pair in body.split(","):
                key, sep, raw = pair.partition(":")
                if not sep:
                    continue
                raw = raw.strip()
                if raw.startswith("[") and raw.endswith("]"):
                    continue
                result[key.strip()] = _parse_simple_value(raw)
        else:
            for key, value in parsed.items():
                result.setdefault(key, value)

    return result