"""Interactive command line: reads commands and dispatches them."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any

import pymysql
from dotenv import load_dotenv

from .colorize import color_json
from .create import handle_create
from .database import NoqliError, Session, print_tabular_results
from .delete import handle_delete
from .get import handle_get
from .history import CommandHistory, completions
from .parser import (
    command_regex,
    display_prompt,
    is_get_dbs_command,
    is_get_tables_command,
    parse_arg,
    use_command_regex,
)
from .update import handle_update

try:
    import readline
except ImportError:  # not available on every platform
    readline = None

_CRUD = {
    "CREATE": handle_create,
    "GET": handle_get,
    "UPDATE": handle_update,
    "DELETE": handle_delete,
}


def _wants_json(line: str) -> bool:
    """JSON output when the first g/G of the line is lower case."""
    for char in line:
        if char in ("g", "G"):
            return char == "g"
    return False


def handle_command(session: Session, line: str, history: CommandHistory | None) -> Any:
    """Carry out one command line and return what its handler returned."""
    trimmed = line.strip()

    use_match = use_command_regex().match(trimmed)
    if use_match:
        handle_use(session, use_match.group(1))
        if history is not None:
            history.update_namespace(session.current_db, session.current_table)
        return None

    match = command_regex().match(trimmed)
    if match is None:
        raise NoqliError("invalid command. Use CREATE, GET, UPDATE, DELETE, USE, or EXIT")

    original, arg_text = match.group(1), match.group(2)
    command = original.upper()
    use_json_output = original != command

    if is_get_dbs_command(command, arg_text):
        return handle_get_databases(session, line)
    if is_get_tables_command(command, arg_text):
        return handle_get_tables(session, line)

    args = None
    if arg_text:
        try:
            args = parse_arg(arg_text)
        except NoqliError as exc:
            raise NoqliError(f"could not parse argument object: {exc}") from exc

    if not session.current_table and command in _CRUD:
        raise NoqliError("no table selected. Use 'USE table_name' to select a table")

    handler = _CRUD.get(command)
    if handler is None:
        raise NoqliError(f"unknown command: {command}")
    return handler(session, args, use_json_output)


def handle_use(session: Session, name: str) -> None:
    """Select ``name`` as the database if one exists, else as a table."""
    _, rows = session.query(
        "SELECT 1 FROM INFORMATION_SCHEMA.SCHEMATA WHERE SCHEMA_NAME = ?", [name]
    )
    if rows:
        try:
            session.execute("USE " + name)
        except pymysql.MySQLError as exc:
            raise NoqliError(f"failed to switch to database {name}: {exc}") from exc
        session.current_db = name
        session.current_table = ""
        print(f"Switched to database '{name}'")
        return

    if not session.current_db:
        raise NoqliError("no database selected. Use 'USE database_name' first")

    _, rows = session.query(
        "SELECT 1 FROM INFORMATION_SCHEMA.TABLES WHERE TABLE_SCHEMA = ? AND TABLE_NAME = ?",
        [session.current_db, name],
    )
    if not rows:
        raise NoqliError(
            f"table '{name}' does not exist in database '{session.current_db}'"
        )
    session.current_table = name
    print(f"Using table '{name}'")


def _first_column(session: Session, sql: str) -> list[str]:
    columns, rows = session.query(sql)
    return [str(row[columns[0]]) for row in rows]


def handle_get_databases(session: Session, line: str) -> list[str]:
    """Print and return the names of all databases."""
    databases = _first_column(session, "SHOW DATABASES")
    if _wants_json(line):
        print(f"Databases: {color_json(databases)}")
    else:
        print_tabular_results(["Database"], [{"Database": name} for name in databases])
    return databases


def handle_get_tables(session: Session, line: str) -> list[str]:
    """Print and return the names of the tables in the current database."""
    if not session.current_db:
        raise NoqliError("no database selected. Use 'USE database_name' first")
    tables = _first_column(session, "SHOW TABLES")
    if _wants_json(line):
        print(f"Tables in {session.current_db}: {color_json(tables)}")
    else:
        title = f"Tables_in_{session.current_db}"
        print_tabular_results([title], [{title: name} for name in tables])
    return tables


def connect_from_env() -> Session:
    """Load ``.env`` from the working directory and connect to MySQL."""
    env_file = Path(".env")
    if not env_file.is_file():
        raise NoqliError("Error loading .env file: .env not found")
    load_dotenv(env_file)

    host_text = os.getenv("DB_HOST", "")
    host, sep, port_text = host_text.partition(":")
    try:
        port = int(port_text) if sep and port_text else 3306
    except ValueError as exc:
        raise NoqliError(f"Error connecting to database: invalid port {port_text!r}") from exc
    database = os.getenv("DB_NAME", "")
    password = os.getenv("DB_PASSWORD", "")

    try:
        connection = pymysql.connect(
            host=host or "localhost",
            port=port,
            user=os.getenv("DB_USER", ""),
            password=password,
            database=database or None,
        )
    except pymysql.MySQLError as exc:
        raise NoqliError(f"Error connecting to database: {exc}") from exc
    try:
        connection.ping(reconnect=False)
    except pymysql.MySQLError as exc:
        connection.close()
        raise NoqliError(f"Error pinging database: {exc}") from exc
    return Session(connection, current_db=database)


def _complete(text: str, state: int) -> str | None:
    matches = completions(text)
    return matches[state] if state < len(matches) else None


def _prepare_readline(history: CommandHistory) -> None:
    if readline is None:
        return
    readline.clear_history()
    for entry in history.entries():
        readline.add_history(entry)
    readline.set_completer(_complete)
    readline.parse_and_bind("tab: complete")


def _repl(session: Session, history: CommandHistory) -> int:
    print("NoQLi CLI. Type EXIT to quit.")
    while True:
        _prepare_readline(history)
        try:
            line = input(display_prompt(session.current_db, session.current_table))
        except EOFError:
            print("EOF")
            return 0
        except KeyboardInterrupt:
            print("Aborted")
            continue

        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed.upper() == "EXIT":
            return 0

        history.add(trimmed)
        try:
            handle_command(session, trimmed, history)
        except (NoqliError, pymysql.MySQLError) as exc:
            print("Error:", exc)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="noqli", description="NoQLi MySQL shell")
    parser.add_argument("-debug", "--debug", action="store_true", help="enable debug mode")
    options = parser.parse_args(argv)
    if options.debug:
        logging.basicConfig(
            level=logging.DEBUG, stream=sys.stdout, format="%(asctime)s %(message)s"
        )

    try:
        session = connect_from_env()
    except NoqliError as exc:
        print(exc)
        return 1
    print("Connected to MySQL")

    history = CommandHistory(100)
    history.load()
    history.update_namespace(session.current_db, session.current_table)
    try:
        return _repl(session, history)
    finally:
        history.save()
        session.connection.close()


if __name__ == "__main__":
    sys.exit(main())