"""The CREATE command: insert one record, adding columns as needed."""

from __future__ import annotations

from typing import Any

from .colorize import color_json
from .database import NoqliError, Session, ensure_columns


def handle_create(
    session: Session, args: dict[str, Any] | None, use_json_output: bool
) -> int:
    """Insert ``args`` as a new row and return its id; ``args`` gains the id."""
    table = session.require_table()
    if not args:
        raise NoqliError("CREATE requires fields to insert")

    ensure_columns(session, args)

    fields = ", ".join(f"`{key}`" for key in args)
    placeholders = ", ".join("?" for _ in args)
    sql = f"INSERT INTO {table} ({fields}) VALUES ({placeholders})"
    result = session.execute(sql, list(args.values()))

    new_id = result.last_insert_id
    args["id"] = new_id
    if use_json_output:
        print(f"Created: {color_json(args)}")
    else:
        print("Query OK, 1 row affected")
        print(f"Last insert ID: {new_id}")
    return new_id