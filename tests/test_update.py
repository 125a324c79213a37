import re
import sqlite3

import pytest

from noqli.database import NoqliError, Session
from noqli.update import handle_update

SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(255),
    email VARCHAR(255),
    status VARCHAR(255),
    category VARCHAR(255),
    priority VARCHAR(255),
    tags VARCHAR(255),
    numeric_value INT,
    boolean_value TINYINT(1),
    processed TINYINT(1),
    level VARCHAR(255),
    updated_at VARCHAR(255),
    score FLOAT,
    global_field VARCHAR(255),
    bulk_update VARCHAR(255),
    new_status VARCHAR(255),
    range_updated VARCHAR(255),
    notes VARCHAR(255),
    modified TINYINT(1)
);
"""

_PLACEHOLDER_RE = re.compile(r"%%|%s")


class FakeCursor:
    def __init__(self, db):
        self._db = db
        self._cursor = db.cursor()
        self.description = None
        self.rowcount = -1
        self.lastrowid = None
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self._cursor.close()
        return False

    def execute(self, sql, params=None):
        show = re.fullmatch(r"SHOW COLUMNS FROM (\w+)", sql)
        if show:
            info = self._db.execute(f"PRAGMA table_info({show[1]})").fetchall()
            self.description = [
                (name,) for name in ("Field", "Type", "Null", "Key", "Default", "Extra")
            ]
            self._rows = [(row[1], row[2], "YES", "", row[4], "") for row in info]
            return
        if params is None:
            self._cursor.execute(sql)
        else:
            sql = _PLACEHOLDER_RE.sub(lambda m: "%" if m[0] == "%%" else "?", sql)
            self._cursor.execute(sql, params)
        self.description = self._cursor.description
        self._rows = self._cursor.fetchall() if self.description else []
        self.rowcount = self._cursor.rowcount
        self.lastrowid = self._cursor.lastrowid

    def fetchall(self):
        return self._rows


class FakeConnection:
    def __init__(self):
        self.db = sqlite3.connect(":memory:")
        self.db.executescript(SCHEMA)

    def cursor(self):
        return FakeCursor(self.db)

    def commit(self):
        self.db.commit()


def _seed(session, sql, params=()):
    session.connection.db.execute(sql, params)
    session.connection.db.commit()


def _scalar(session, sql, params=()):
    return session.connection.db.execute(sql, params).fetchone()[0]


@pytest.fixture
def session():
    return Session(
        connection=FakeConnection(),
        current_db="noqli_test_db",
        current_table="users",
        confirm=lambda: "y",
    )


@pytest.fixture
def basic(session):
    _seed(
        session,
        "INSERT INTO users (name, email) VALUES "
        "('User 1', 'user1@example.com'), "
        "('User 2', 'user2@example.com'), "
        "('User 3', 'user3@example.com')",
    )
    return session


@pytest.fixture
def diverse(session):
    _seed(
        session,
        "INSERT INTO users (name, email, status, category, priority, tags) VALUES "
        "('User 1', 'user1@example.com', 'active', 'customer', 'high', 'premium,support'), "
        "('User 2', 'user2@example.com', 'inactive', 'vendor', 'medium', 'basic'), "
        "('User 3', 'user3@example.com', 'pending', 'customer', 'low', 'trial'), "
        "('User 4', 'user4@example.com', 'active', 'admin', 'high', 'internal,premium'), "
        "('User 5', 'user5@example.com', 'pending', 'vendor', 'medium', 'basic,support')",
    )
    return session


def test_update_single_by_id(basic):
    args = {"id": 1, "name": "Updated Name", "email": "updated@example.com"}
    assert handle_update(basic, args, True) == 1
    assert _scalar(basic, "SELECT name FROM users WHERE id = 1") == "Updated Name"
    assert _scalar(basic, "SELECT COUNT(*) FROM users WHERE name = 'Updated Name'") == 1


def test_update_by_id_array(basic):
    assert handle_update(basic, {"id": [2, 3], "status": "inactive"}, True) == 2
    assert _scalar(basic, "SELECT COUNT(*) FROM users WHERE status = 'inactive'") == 2
    assert _scalar(basic, "SELECT status FROM users WHERE id = 1") is None


def test_update_by_id_range_creates_column(basic):
    assert handle_update(basic, {"id": {"range": [1, 3]}, "updated": True}, True) == 3
    assert _scalar(basic, "SELECT COUNT(*) FROM users WHERE updated = ?", (True,)) == 3


def test_update_nonexistent_id(basic):
    with pytest.raises(NoqliError, match="no records matched"):
        handle_update(basic, {"id": 999, "name": "Won't Update"}, True)


def test_scalar_existing_column_updates_all(basic):
    assert handle_update(basic, {"email": "updated@example.com"}, True) == 3
    assert (
        _scalar(basic, "SELECT COUNT(*) FROM users WHERE email = 'updated@example.com'")
        == 3
    )


def test_update_filtered_by_email_array(basic):
    args = {
        "email": ["user1@example.com", "user2@example.com"],
        "status": "batch-updated",
    }
    assert handle_update(basic, args, True) == 2
    assert _scalar(basic, "SELECT status FROM users WHERE id = 3") is None


def test_update_with_only_filter(basic):
    with pytest.raises(NoqliError, match="requires fields to update"):
        handle_update(basic, {"email": ["user1@example.com", "user2@example.com"]}, True)


def test_update_all_with_new_field(basic):
    assert handle_update(basic, {"role": "user"}, True) == 3
    assert _scalar(basic, "SELECT COUNT(*) FROM users WHERE role = 'user'") == 3


def test_update_all_cancelled(basic):
    basic.confirm = lambda: "n"
    with pytest.raises(NoqliError, match="operation cancelled"):
        handle_update(basic, {"status": "gone"}, True)
    assert _scalar(basic, "SELECT COUNT(*) FROM users WHERE status = 'gone'") == 0


def test_update_all_prints_first_rows(basic, capsys):
    handle_update(basic, {"status": "x"}, True)
    out = capsys.readouterr().out
    assert "This will update ALL records" in out
    assert "Updated 3 record(s). Showing first 10:" in out


def test_json_output_shows_updated_rows(basic, capsys):
    handle_update(basic, {"id": 1, "name": "Updated Name"}, True)
    assert "Updated Name" in capsys.readouterr().out


def test_tabular_output(basic, capsys):
    handle_update(basic, {"id": [1, 2], "status": "ok"}, False)
    assert capsys.readouterr().out == "Query OK, 2 rows affected\n"


def test_empty_args(basic):
    with pytest.raises(NoqliError, match="filter conditions"):
        handle_update(basic, {}, True)


def test_requires_table(basic):
    basic.current_table = ""
    with pytest.raises(NoqliError, match="no table selected"):
        handle_update(basic, {"id": 1, "name": "x"}, True)


def test_update_single_record_with_new_notes(diverse):
    args = {"id": 1, "status": "updated-status", "notes": "New field"}
    assert handle_update(diverse, args, True) == 1
    assert _scalar(diverse, "SELECT status FROM users WHERE id = 1") == "updated-status"
    assert _scalar(diverse, "SELECT notes FROM users WHERE id = 1") == "New field"


def test_update_multiple_by_id_array(diverse):
    args = {"id": [2, 3, 4], "category": "batch-updated", "modified": True}
    assert handle_update(diverse, args, True) == 3
    assert (
        _scalar(diverse, "SELECT COUNT(*) FROM users WHERE category = 'batch-updated'")
        == 3
    )


def test_update_range_3_to_5(diverse):
    args = {"id": {"range": [3, 5]}, "range_updated": "yes"}
    assert handle_update(diverse, args, True) == 3
    assert _scalar(diverse, "SELECT COUNT(*) FROM users WHERE range_updated = 'yes'") == 3


def test_update_by_id_with_scalar_email(diverse):
    args = {"id": 5, "status": "approved", "email": "filtered.user@example.com"}
    assert handle_update(diverse, args, True) == 1
    assert _scalar(diverse, "SELECT email FROM users WHERE id = 5") == (
        "filtered.user@example.com"
    )
    assert _scalar(diverse, "SELECT status FROM users WHERE id = 5") == "approved"


def test_update_filtered_by_status_array(diverse):
    args = {"status": ["pending", "active"], "bulk_update": "processed"}
    assert handle_update(diverse, args, True) == 4
    ids = [
        row[0]
        for row in diverse.connection.db.execute(
            "SELECT id FROM users WHERE bulk_update = 'processed' ORDER BY id"
        )
    ]
    assert ids == [1, 3, 4, 5]


def test_invalid_range_matches_nothing(diverse):
    with pytest.raises(NoqliError, match="no records matched"):
        handle_update(diverse, {"id": {"range": [10, 5]}, "field": "value"}, True)


def test_malformed_range(diverse):
    with pytest.raises(NoqliError, match="invalid range format for field id"):
        handle_update(diverse, {"id": {"range": [1]}, "status": "x"}, True)


def test_multiple_field_types(diverse):
    args = {
        "id": 1,
        "status": "complex-update",
        "numeric_value": 42,
        "boolean_value": True,
        "nullish": None,
    }
    assert handle_update(diverse, args, True) == 1
    row = diverse.connection.db.execute(
        "SELECT status, numeric_value, boolean_value, nullish FROM users WHERE id = 1"
    ).fetchone()
    assert row == ("complex-update", 42, 1, None)


def test_mixed_filter_and_update(diverse):
    _seed(diverse, "UPDATE users SET category='type-A' WHERE id IN (1, 2)")
    _seed(diverse, "UPDATE users SET category='type-B' WHERE id IN (3, 4, 5)")
    args = {"category": ["type-A"], "new_status": "special"}
    assert handle_update(diverse, args, True) == 2
    assert (
        _scalar(
            diverse,
            "SELECT COUNT(*) FROM users WHERE category = 'type-B' AND new_status = 'special'",
        )
        == 0
    )


def test_complex_filters_and_updates(diverse):
    args = {
        "status": ["active", "pending"],
        "priority": ["high"],
        "processed": True,
        "level": "advanced",
        "updated_at": "2023-08-15",
        "score": 95.5,
    }
    assert handle_update(diverse, args, True) == 2
    updated = _scalar(
        diverse,
        "SELECT COUNT(*) FROM users WHERE status IN ('active', 'pending') "
        "AND priority = 'high' AND processed = 1 AND level = 'advanced' "
        "AND updated_at = '2023-08-15' AND score = 95.5",
    )
    assert updated == 2
    assert _scalar(diverse, "SELECT COUNT(*) FROM users WHERE processed IS NULL") == 3