"""COUNT, MAX, MIN, AVG and SUM queries over the current table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .colorize import color_json
from .database import NoqliError, Session, get_text_columns

logger = logging.getLogger(__name__)

_FUNCTIONS = ("COUNT", "MAX", "MIN", "AVG", "SUM")


@dataclass(frozen=True)
class AggregateRequest:
    """An aggregate function to apply to a column, optionally over distinct values."""

    function: str
    target: Any
    distinct: bool = False

    @property
    def result_name(self) -> str:
        return self.function.lower()


def _pop_first(args: dict[str, Any], *keys: str) -> tuple[bool, Any]:
    for key in keys:
        if key in args:
            return True, args.pop(key)
    return False, None


def find_aggregate(args: dict[str, Any] | None) -> AggregateRequest | None:
    """Take the aggregate keys (and DISTINCT) out of ``args``, if any are present.

    COUNT wins over the others, then MAX, MIN, AVG and SUM in that order; the
    upper-case key is preferred over the lower-case one.
    """
    if not args:
        return None
    for function in _FUNCTIONS:
        key = next((k for k in (function, function.lower()) if k in args), None)
        if key is None:
            continue
        present, flag = _pop_first(args, "DISTINCT", "distinct")
        distinct = present and flag is True
        target = args.pop(key)
        return AggregateRequest(function, target, distinct)
    return None


def _expression(request: AggregateRequest) -> str:
    target = request.target
    if request.function == "COUNT":
        if not isinstance(target, str) or target == "*":
            return "COUNT(*)"
        if request.distinct:
            return f"COUNT(DISTINCT `{target}`)"
        return f"COUNT(`{target}`)"
    if not isinstance(target, str):
        raise NoqliError("aggregate function requires a column name")
    if request.distinct:
        return f"{request.function}(DISTINCT `{target}`)"
    return f"{request.function}(`{target}`)"


def _range_bounds(field: str, spec: dict[str, Any]) -> list[int]:
    if "range" not in spec:
        raise NoqliError(f"invalid range format for field {field}")
    bounds = spec["range"]
    if not isinstance(bounds, (list, tuple)):
        raise NoqliError(f"invalid range type for field {field}")
    if len(bounds) != 2:
        raise NoqliError(f"invalid range format for field {field}")
    result = []
    for bound in bounds:
        if isinstance(bound, bool) or not isinstance(bound, (int, float)):
            raise NoqliError(f"invalid range value type for field {field}")
        result.append(int(bound))
    return result


def _where_conditions(args: dict[str, Any]) -> tuple[list[str], list[Any]]:
    conditions: list[str] = []
    values: list[Any] = []
    for field, value in args.items():
        if isinstance(value, list):
            if not value:
                conditions.append("0=1")
            else:
                placeholders = ",".join("?" for _ in value)
                conditions.append(f"`{field}` IN ({placeholders})")
                values.extend(value)
        elif isinstance(value, dict):
            start, end = _range_bounds(field, value)
            conditions.append(f"`{field}` >= ? AND `{field}` <= ?")
            values.extend((start, end))
        else:
            conditions.append(f"`{field}` = ?")
            values.append(value)
    return conditions, values


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _like_condition(session: Session, like_value: Any) -> tuple[str, list[str]]:
    pattern = _text(like_value)
    if "%" not in pattern:
        pattern = f"%{pattern}%"
    text_columns = get_text_columns(session)
    if not text_columns:
        raise NoqliError("no text columns available for LIKE query")
    clause = " OR ".join(f"`{col}` LIKE ?" for col in text_columns)
    return f"({clause})", [pattern] * len(text_columns)


def _display(value: Any) -> str:
    if value is None:
        return "NULL"
    return _text(value)


def run_aggregate(
    session: Session,
    request: AggregateRequest,
    args: dict[str, Any] | None,
    use_json_output: bool,
) -> Any:
    """Run the aggregate with the remaining ``args`` as filters; print and return it."""
    table = session.require_table()
    filters = args if args is not None else {}
    _, like_value = _pop_first(filters, "LIKE", "like")

    expression = _expression(request)
    conditions, values = _where_conditions(filters)
    if like_value is not None:
        clause, like_values = _like_condition(session, like_value)
        conditions.append(clause)
        values.extend(like_values)

    name = request.result_name
    sql = f"SELECT {expression} AS {name} FROM {table}"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)

    if request.function != "COUNT":
        logger.debug("%s query: %s", request.function, sql)
        logger.debug("%s values: %r", request.function, values)

    columns, rows = session.query(sql, values)
    result = rows[0][columns[0]] if rows else None

    if request.function == "COUNT":
        count = int(result or 0)
        if use_json_output:
            print(f"Count: {color_json({'count': count})}")
        else:
            print()
            print(f"| {'count':<5} |+-------+")
            print(f"| {count:<5} |+-------+")
            print("\n1 row in set")
        return count

    if use_json_output:
        print(f"{request.function}: {color_json({name: result})}")
    else:
        print()
        print(f"| {name:<10} |+-----------+")
        print(f"| {_display(result):<10} |+-----------+")
        print("\n1 row in set")
    return result