# noqli

An interactive command line for MySQL. You work with tables through a short,
brace-based syntax instead of SQL. When you write to a field that the table
does not have, `noqli` first adds it as a `VARCHAR(255)` column.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Configuration

`noqli` needs a `.env` file in the current directory. If the file is missing,
the program stops. It reads these settings:

```
DB_HOST=localhost:3306
DB_USER=user
DB_PASSWORD=password
DB_NAME=mydb
```

`DB_HOST` may leave out the port. The port then defaults to 3306, and the host
defaults to `localhost` when it is empty. `DB_NAME` is the database you start
in.

## Running

```
noqli
```

`noqli --debug` logs the SQL that `GET` queries generate, with their values,
to standard output.

The prompt shows the selected database and table, for example
`noqli:mydb:users> `. Type `EXIT` to quit, or end the input (Ctrl-D). Ctrl-C
cancels the line you are typing.

Commands go into a history file, `~/.noqli/history.txt`, with a separate
history for each database and each database-and-table pair. Where Python's
`readline` module is available, the arrow keys recall earlier commands and Tab
completes the command words.

## Commands

The case of the command word picks the output format. A lowercase command
(`get`) prints colourised JSON. An uppercase command (`GET`) prints a
MySQL-style table.

| Command | Meaning |
|---|---|
| `USE name` | select a database, or a table in the current database |
| `GET dbs` | list the databases |
| `GET tables` | list the tables in the current database |
| `CREATE {name: 'Ann', email: 'ann@example.com'}` | insert a row, adding any missing columns |
| `GET` | all rows |
| `GET 5` | the row with id 5 |
| `GET {id: [1, 2, 3]}` | the rows with those ids |
| `GET {id: (1, 10)}` | the rows with ids 1 to 10, both ends included |
| `GET {status: 'active'}` | filter on any column |
| `GET {name, email, status: 'active'}` | select only some columns |
| `GET {up: 'name'}` / `GET {down: 'name'}` | sort ascending or descending |
| `GET {lim: 10, off: 20}` | limit and offset (non-negative integers) |
| `GET {like: 'smith'}` | match the text against every selected column |
| `GET {count: '*'}`, `GET {count: 'email', distinct: true}` | count rows |
| `GET {max: 'score'}`, `min`, `avg`, `sum` | aggregates, which also take `distinct`, filters and `like` |
| `UPDATE {id: 1, name: 'New'}` | update the rows matched by id |
| `UPDATE {status: ['a', 'b'], flag: 'x'}` | an array or a range on an existing column filters the rows; the other fields are set |
| `UPDATE {[name, title] = 'Same'}` | set several fields to one value |
| `DELETE {id: 3}`, `DELETE {id: [1, 2]}`, `DELETE {id: (1, 5)}` | delete rows |

The keywords `up`, `down`, `lim`, `off`, `like`, `count`, `distinct`, `max`,
`min`, `avg` and `sum` can also be written in upper case.

If no `%` appears in the `like` text, `%` is added at both ends. With `like`,
`count` and the other aggregates search the table's text columns (`CHAR`,
`TEXT`, `ENUM` and `SET` types).

An `UPDATE` without a filter asks for confirmation (`y`) before it changes
every row in the table. A lowercase `update` then prints the updated rows. When
there is no filter, it prints the first 10.

## Use as a library

The command handlers take a `Session` (in `noqli.database`), the parsed
arguments, and a flag that picks JSON output. They print their results and
also return them:

- `noqli.create.handle_create` returns the new id.
- `noqli.get.handle_get` returns the rows, or the aggregate value.
- `noqli.update.handle_update` returns the number of rows changed.
- `noqli.delete.handle_delete` returns the number of rows deleted.

Failures raise `noqli.database.NoqliError`.

```python
from noqli.cli import connect_from_env
from noqli.get import handle_get
from noqli.parser import parse_arg

session = connect_from_env()
session.current_table = "users"
rows = handle_get(session, parse_arg("{status: 'active', up: 'name'}"), True)
```

`noqli.cli.handle_command(session, line, history)` runs one full command line
the way the prompt does. `history` may be `None`.

## What it does not do

- It talks only to MySQL, through PyMySQL.
- It reads commands only at its interactive prompt. It has no option to run a
  script or a single command from the shell.
- Columns it adds are always `VARCHAR(255)`. It cannot create or drop tables,
  or change column types.