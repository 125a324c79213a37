"""The UPDATE command: change fields on records chosen by filters."""

from __future__ import annotations

from typing import Any

from .database import (
    NoqliError,
    Session,
    ensure_columns,
    get_columns,
    is_array_or_range,
    query_and_display,
)
from .get import _filter_conditions


def _split_fields(
    args: dict[str, Any], existing: set[str]
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Separate filter fields (id, or existing columns given a list or range)."""
    filters: dict[str, Any] = {}
    updates: dict[str, Any] = {}
    for key, value in args.items():
        if key == "id" or (key in existing and is_array_or_range(value)):
            filters[key] = value
        else:
            updates[key] = value
    return filters, updates


def handle_update(
    session: Session, args: dict[str, Any] | None, use_json_output: bool
) -> int:
    """Apply the update fields of ``args`` to matching rows; return rows affected."""
    table = session.require_table()
    if not args:
        raise NoqliError("UPDATE requires fields to update and filter conditions")

    existing = set(get_columns(session))

    if len(args) == 1:
        ((key, value),) = args.items()
        if is_array_or_range(value) and key in existing:
            raise NoqliError("UPDATE requires fields to update (filter only provided)")

    filters, updates = _split_fields(args, existing)
    if not updates:
        raise NoqliError("UPDATE requires fields to update")

    if not filters:
        print(
            "Warning: No filter conditions specified. "
            "This will update ALL records in the table."
        )
        print("Do you want to continue? (y/N)")
        if session.confirm().lower() != "y":
            raise NoqliError("operation cancelled")

    ensure_columns(session, updates)

    set_clause = ", ".join(f"`{key}` = ?" for key in updates)
    conditions, where_values = _filter_conditions(filters)
    where_clause = " AND ".join(conditions)

    sql = f"UPDATE {table} SET {set_clause}"
    if where_clause:
        sql += f" WHERE {where_clause}"
    result = session.execute(sql, [*updates.values(), *where_values])

    affected = result.affected
    if affected == 0:
        raise NoqliError("no records matched the filter criteria")

    if not use_json_output:
        print(f"Query OK, {affected} rows affected")
        return affected

    if where_clause:
        columns, rows = session.query(
            f"SELECT id FROM {table} WHERE {where_clause}", where_values
        )
        ids = [row[columns[0]] for row in rows]
        if not ids:
            raise NoqliError("no records matched the filter criteria")
        placeholders = ",".join("?" for _ in ids)
        query_and_display(
            session,
            f"SELECT * FROM {table} WHERE id IN ({placeholders})",
            ids,
            True,
            True,
        )
    else:
        print(f"Updated {affected} record(s). Showing first 10:")
        query_and_display(session, f"SELECT * FROM {table} LIMIT 10", None, True, True)
    return affected