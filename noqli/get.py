"""The GET command: select records with filters, ordering, paging and search."""

from __future__ import annotations

import logging
from typing import Any

from .aggregate import find_aggregate, run_aggregate
from .colorize import color_json
from .database import (
    NoqliError,
    Session,
    get_columns,
    is_array_or_range,
    print_tabular_results,
    to_int,
)

logger = logging.getLogger(__name__)


def _pop_first(args: dict[str, Any], *keys: str) -> Any:
    """Remove and return the value of the first key present, or None."""
    for key in keys:
        if key in args:
            return args.pop(key)
    return None


def _text(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _range_bounds(field: str, spec: dict[str, Any]) -> list[int]:
    bounds = spec.get("range")
    if (
        isinstance(bounds, list)
        and len(bounds) == 2
        and all(isinstance(b, int) and not isinstance(b, bool) for b in bounds)
    ):
        return list(bounds)
    raise NoqliError(f"invalid range format for field {field}")


def _filter_conditions(args: dict[str, Any]) -> tuple[list[str], list[Any]]:
    """WHERE conditions and their values for lists (IN), ranges and scalars."""
    conditions: list[str] = []
    values: list[Any] = []
    for field, value in args.items():
        if isinstance(value, list):
            if not value:
                conditions.append("0=1")
                continue
            placeholders = ",".join("?" for _ in value)
            conditions.append(f"`{field}` IN ({placeholders})")
            values.extend(item if _is_number(item) else _text(item) for item in value)
        elif isinstance(value, dict):
            start, end = _range_bounds(field, value)
            conditions.append(f"`{field}` >= ? AND `{field}` <= ?")
            values.extend((start, end))
        else:
            conditions.append(f"`{field}` = ?")
            values.append(value)
    return conditions, values


def _check_bound(value: Any, name: str) -> None:
    if value is None:
        return
    number = to_int(value)
    if number is None:
        raise NoqliError(f"{name} must be an integer")
    if number < 0:
        raise NoqliError(f"{name} must be non-negative")


def _take_columns(args: dict[str, Any]) -> list[str]:
    raw = args.get("_columns")
    if not isinstance(raw, list):
        return []
    selected = [column for column in raw if isinstance(column, str)]
    if selected:
        del args["_columns"]
    return selected


def _order_clause(args: dict[str, Any]) -> str:
    clause = ""
    ascending = _pop_first(args, "up", "UP")
    if isinstance(ascending, str):
        clause = f" ORDER BY `{ascending}` ASC"
    descending = _pop_first(args, "down", "DOWN")
    if isinstance(descending, str):
        clause = f" ORDER BY `{descending}` DESC"
    return clause


def handle_get(
    session: Session, args: dict[str, Any] | None, use_json_output: bool
) -> Any:
    """Run a GET and print the result.

    Returns the selected rows, or the aggregate value when ``args`` asks for
    COUNT, MAX, MIN, AVG or SUM. The caller's ``args`` is left untouched.
    """
    table = session.require_table()
    args = dict(args) if args else {}

    request = find_aggregate(args)
    if request is not None:
        return run_aggregate(session, request, args, use_json_output)

    selected = _take_columns(args)
    select_expr = ", ".join(f"`{column}`" for column in selected) if selected else "*"
    if not selected:
        selected = get_columns(session)

    order_clause = _order_clause(args)

    limit = _pop_first(args, "LIM", "lim")
    offset = _pop_first(args, "OFF", "off")
    _check_bound(limit, "LIMIT")
    _check_bound(offset, "OFFSET")

    like_value = _pop_first(args, "LIKE", "like")

    conditions, values = _filter_conditions(args)

    if like_value is not None:
        if not selected:
            raise NoqliError("no columns found for LIKE clause")
        pattern = _text(like_value)
        if "%" not in pattern:
            pattern = f"%{pattern}%"
        like_clause = " OR ".join(f"`{column}` LIKE ?" for column in selected)
        conditions.append(f"({like_clause})")
        values.extend(pattern for _ in selected)

    sql = f"SELECT {select_expr} FROM {table}"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += order_clause
    if limit is not None:
        sql += " LIMIT ?"
        values.append(limit)
        if offset is not None:
            sql += " OFFSET ?"
            values.append(offset)

    logger.debug("Executing query: %s", sql)
    logger.debug("With values: %r", values)

    columns, results = session.query(sql, values)
    if not results:
        print("No records found")
        return []

    if use_json_output:
        single_id = (
            "id" in args
            and len(args) == 1
            and not is_array_or_range(args["id"])
            and len(results) == 1
        )
        if single_id:
            print(f"Record: {color_json(results[0])}")
        else:
            print(f"Records: {color_json(results)}")
    else:
        print_tabular_results(columns, results)
    return results