"""Database session, schema helpers and result display."""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple

from .colorize import color_json


class NoqliError(Exception):
    """A command could not be carried out."""


def _read_confirmation() -> str:
    try:
        line = input()
    except EOFError:
        return ""
    words = line.split()
    return words[0] if words else ""


class _ExecResult(NamedTuple):
    affected: int
    last_insert_id: int


def _normalize(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(
        value, (datetime.datetime, datetime.date, datetime.time, datetime.timedelta)
    ):
        return str(value)
    return value


def _driver_sql(sql: str, values: Iterable[Any] | None) -> tuple[str, tuple | None]:
    params = tuple(values) if values else ()
    if not params:
        return sql, None
    return sql.replace("%", "%%").replace("?", "%s"), params


@dataclass
class Session:
    """An open connection plus the currently selected database and table."""

    connection: Any
    current_db: str = ""
    current_table: str = ""
    confirm: Callable[[], str] = _read_confirmation

    def require_table(self) -> str:
        if not self.current_table:
            raise NoqliError("no table selected")
        return self.current_table

    def query(
        self, sql: str, values: Iterable[Any] | None = None
    ) -> tuple[list[str], list[dict[str, Any]]]:
        """Run a query written with ``?`` placeholders; return columns and rows."""
        statement, params = _driver_sql(sql, values)
        with self.connection.cursor() as cursor:
            cursor.execute(statement, params)
            columns = [desc[0] for desc in cursor.description or ()]
            rows = [
                {col: _normalize(val) for col, val in zip(columns, row)}
                for row in cursor.fetchall()
            ]
        return columns, rows

    def execute(self, sql: str, values: Iterable[Any] | None = None) -> _ExecResult:
        """Run a statement; return affected rows and the last insert id."""
        statement, params = _driver_sql(sql, values)
        with self.connection.cursor() as cursor:
            cursor.execute(statement, params)
            result = _ExecResult(cursor.rowcount, cursor.lastrowid or 0)
        self.connection.commit()
        return result


def _show_columns(session: Session) -> list[tuple[str, str]]:
    table = session.require_table()
    columns, rows = session.query(f"SHOW COLUMNS FROM {table}")
    name_col, type_col = columns[0], columns[1]
    return [(str(row[name_col]), str(row[type_col] or "")) for row in rows]


def get_columns(session: Session) -> list[str]:
    """Names of all columns of the current table."""
    return [name for name, _ in _show_columns(session)]


def get_text_columns(session: Session) -> list[str]:
    """Names of the current table's character, text, enum and set columns."""
    kinds = ("CHAR", "TEXT", "ENUM", "SET")
    return [
        name
        for name, col_type in _show_columns(session)
        if any(kind in col_type.upper() for kind in kinds)
    ]


def ensure_columns(session: Session, fields: Mapping[str, Any]) -> None:
    """Add a VARCHAR(255) column for every field the table lacks (except id)."""
    table = session.require_table()
    existing = set(get_columns(session))
    for key in fields:
        if key == "id" or key in existing:
            continue
        session.execute(f"ALTER TABLE {table} ADD COLUMN `{key}` VARCHAR(255)")


def is_array_or_range(value: Any) -> bool:
    return isinstance(value, (list, dict))


def to_int(value: Any) -> int | None:
    """The value as an int if it is numeric, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def print_tabular_results(
    columns: list[str], results: list[Mapping[str, Any]]
) -> None:
    """Print rows as a MySQL-style table followed by a row count."""
    if not results:
        return
    widths = {col: len(col) for col in columns}
    for row in results:
        for col, val in row.items():
            widths[col] = max(widths.get(col, 0), len(_format_value(val)))

    print()
    print("".join(f"| {col:<{widths[col]}} " for col in columns) + "|")
    print("".join("+" + "-" * (widths[col] + 2) for col in columns) + "+")
    for row in results:
        cells = (
            f"| {_format_value(row.get(col)):<{widths[col]}} " for col in columns
        )
        print("".join(cells) + "|")
    print(f"\n{len(results)} rows in set")


def query_and_display(
    session: Session,
    sql: str,
    values: Iterable[Any] | None,
    is_multiple: bool,
    use_json_output: bool,
) -> None:
    """Run a query and print its rows as JSON or as a table."""
    columns, results = session.query(sql, values)
    if not results:
        raise NoqliError("no records found")
    if use_json_output:
        if not is_multiple and len(results) == 1:
            print(color_json(results[0]))
        else:
            print(color_json(results))
    else:
        print_tabular_results(columns, results)