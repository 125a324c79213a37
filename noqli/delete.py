"""The DELETE command: remove records by id, id list or id range."""

from __future__ import annotations

from typing import Any

from .database import NoqliError, Session


def _where(record_id: Any) -> tuple[str, list[Any]]:
    if isinstance(record_id, list):
        placeholders = ",".join("?" for _ in record_id)
        return f"id IN ({placeholders})", list(record_id)
    if isinstance(record_id, dict):
        bounds = record_id.get("range")
        if (
            isinstance(bounds, list)
            and len(bounds) == 2
            and all(isinstance(b, int) and not isinstance(b, bool) for b in bounds)
        ):
            return "id >= ? AND id <= ?", list(bounds)
        raise NoqliError("invalid range format")
    return "id = ?", [record_id]


def handle_delete(
    session: Session, args: dict[str, Any] | None, use_json_output: bool
) -> int:
    """Delete the records selected by ``args['id']`` and return how many went."""
    table = session.require_table()
    if not args or args.get("id") is None:
        raise NoqliError("DELETE requires an id field")

    clause, values = _where(args["id"])
    result = session.execute(f"DELETE FROM {table} WHERE {clause}", values)
    affected = result.affected
    if affected == 0:
        raise NoqliError("record(s) not found")

    if use_json_output:
        print(f"Deleted {affected} record(s)")
    else:
        print(f"Query OK, {affected} rows affected")
    return affected