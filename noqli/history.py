"""Command history kept separately for each database and table."""

from __future__ import annotations

from pathlib import Path

COMMANDS = ("USE", "CREATE", "GET", "UPDATE", "DELETE", "EXIT")
_SEPARATOR = "::"


def completions(prefix: str) -> list[str]:
    """Commands that start with ``prefix``, compared case-insensitively."""
    wanted = prefix.upper()
    return [command for command in COMMANDS if command.startswith(wanted)]


def _default_history_file() -> Path:
    try:
        home = Path.home()
    except RuntimeError as exc:
        print("Warning: Could not determine home directory for history file:", exc)
        home = Path(".")
    directory = home / ".noqli"
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        print("Warning: Could not create history directory:", exc)
    return directory / "history.txt"


class CommandHistory:
    """Per-namespace command history, saved as ``namespace::command`` lines.

    The namespace is ``global`` when no database is selected, the database
    name when only a database is selected, and ``db:table`` otherwise.
    """

    def __init__(self, max_entries: int = 100, history_file: str | Path | None = None):
        self.max_entries = max_entries
        self.namespace = ""
        self.history_file = (
            Path(history_file) if history_file is not None else _default_history_file()
        )
        self._histories: dict[str, list[str]] = {}

    def update_namespace(self, db: str, table: str) -> None:
        if not db:
            self.namespace = "global"
        elif not table:
            self.namespace = db
        else:
            self.namespace = f"{db}:{table}"

    def add(self, command: str) -> None:
        """Record a command, skipping blanks and repeats of the last entry."""
        if not command:
            return
        history = self._histories.setdefault(self.namespace, [])
        if history and history[-1] == command:
            return
        history.append(command)
        excess = len(history) - self.max_entries
        if excess > 0:
            del history[:excess]

    def entries(self) -> list[str]:
        """The commands recorded in the current namespace, oldest first."""
        return list(self._histories.get(self.namespace, ()))

    def load(self) -> None:
        """Read saved history; a missing file is not an error."""
        try:
            text = self.history_file.read_text(encoding="utf-8")
        except OSError:
            return
        for line in text.splitlines():
            if not line:
                continue
            namespace, sep, command = line.partition(_SEPARATOR)
            if not sep:
                continue
            self._histories.setdefault(namespace, []).append(command)

    def save(self) -> None:
        """Write every namespace's history to the history file."""
        lines = [
            f"{namespace}{_SEPARATOR}{command}\n"
            for namespace, commands in self._histories.items()
            for command in commands
        ]
        try:
            self.history_file.write_text("".join(lines), encoding="utf-8")
        except OSError as exc:
            print("Error saving history:", exc)