"""Tests for the database handle lifecycle."""

import gc
from pathlib import Path

import pytest

import sqlbridge
from sqlbridge.values import MAX_SAFE_INTEGER


class TestOpenClose:
    """Tests for open and close."""

    def test_open_memory(self):
        handle = sqlbridge.open(":memory:", sqlbridge.BridgeConfig())
        assert isinstance(handle, sqlbridge.Database)
        assert not handle.closed
        sqlbridge.close(handle)
        assert handle.closed

    def test_second_close_fails(self, db):
        sqlbridge.close(db)
        with pytest.raises(sqlbridge.DatabaseClosedError) as exc_info:
            sqlbridge.close(db)
        assert exc_info.value.kind is sqlbridge.ErrorKind.CLOSED

    def test_call_after_close(self, db):
        db.close()
        with pytest.raises(sqlbridge.DatabaseClosedError) as exc_info:
            db("SELECT 1")
        assert exc_info.value.message == "Database has been closed"

    def test_close_requires_database(self):
        with pytest.raises(sqlbridge.TypeMismatchError) as exc_info:
            sqlbridge.close("not a database")
        assert exc_info.value.blamed == "not a database"

    def test_open_requires_string(self):
        with pytest.raises(sqlbridge.TypeMismatchError) as exc_info:
            sqlbridge.open(42)
        assert exc_info.value.blamed == 42

    def test_open_failure_blames_path(self, tmp_path):
        path = str(tmp_path / "missing-dir" / "db.sqlite")
        with pytest.raises(sqlbridge.OpenError) as exc_info:
            sqlbridge.open(path, sqlbridge.BridgeConfig())
        error = exc_info.value
        assert error.message == "Unable to open database"
        assert error.blamed == path
        assert error.detail

    def test_open_accepts_pathlike(self, tmp_path):
        path = tmp_path / "data.db"
        with sqlbridge.open(path, sqlbridge.BridgeConfig()) as handle:
            handle("CREATE TABLE t(a)")
            assert handle.path == str(path)
        assert path.exists()

    def test_data_persists_across_handles(self, tmp_path):
        path = str(tmp_path / "persist.db")
        with sqlbridge.open(path, sqlbridge.BridgeConfig()) as first:
            first("CREATE TABLE t(a)")
            first("INSERT INTO t VALUES (?)", "kept")
        with sqlbridge.open(path, sqlbridge.BridgeConfig()) as second:
            assert second("SELECT a FROM t") == [{"a": "kept"}]

    def test_context_manager_closes(self):
        with sqlbridge.open(":memory:", sqlbridge.BridgeConfig()) as handle:
            handle("SELECT 1")
        assert handle.closed

    def test_context_manager_after_explicit_close(self):
        with sqlbridge.open(":memory:", sqlbridge.BridgeConfig()) as handle:
            handle.close()
        assert handle.closed

    def test_repr(self, db):
        assert "sqldb" in repr(db)
        assert "open" in repr(db)
        db.close()
        assert "closed" in repr(db)

    def test_unclosed_handle_released_on_collection(self, tmp_path):
        path = str(tmp_path / "gc.db")
        handle = sqlbridge.open(path, sqlbridge.BridgeConfig())
        handle("CREATE TABLE t(a)")
        with pytest.warns(ResourceWarning):
            del handle
            gc.collect()
        # connection was released, so another handle can take an exclusive lock
        with sqlbridge.open(path, sqlbridge.BridgeConfig(busy_timeout_ms=0)) as other:
            other("BEGIN EXCLUSIVE; COMMIT")

    def test_partially_initialized_handle_finalizes_quietly(self):
        handle = sqlbridge.Database.__new__(sqlbridge.Database)
        handle._handle = 1
        # no library attached yet: nothing to release, nothing raised
        handle.__del__()
        assert handle._handle == 1
        handle._handle = None


class TestInvocation:
    """Tests for calling the handle."""

    def test_sql_must_be_string(self, db):
        with pytest.raises(sqlbridge.TypeMismatchError) as exc_info:
            db(123)
        assert exc_info.value.blamed == 123
        assert "first argument" in exc_info.value.message

    def test_execute_alias(self, db):
        assert db.execute("SELECT ? AS v", 1) == [{"v": 1}]

    def test_returns_list_of_dicts(self, db):
        rows = db("SELECT 1 AS a UNION ALL SELECT 2")
        assert isinstance(rows, list)
        assert all(isinstance(row, dict) for row in rows)

    def test_busy_timeout_from_config(self, tmp_path):
        config = sqlbridge.BridgeConfig(busy_timeout_ms=250)
        with sqlbridge.open(str(tmp_path / "t.db"), config) as handle:
            assert handle.config.busy_timeout_ms == 250
            assert handle("PRAGMA busy_timeout") == [{"timeout": 250}]

    def test_default_busy_timeout(self, db):
        assert db("PRAGMA busy_timeout") == [{"timeout": 1000}]


class TestLastInsertRowid:
    """Tests for get_last_insert_rowid."""

    def test_autoincrement(self, db):
        db("CREATE TABLE t(id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")
        db("INSERT INTO t(name) VALUES (?)", "first")
        db("INSERT INTO t(name) VALUES (?)", "second")
        rowid = sqlbridge.get_last_insert_rowid(db)
        assert rowid == 2
        assert db("SELECT id FROM t WHERE name = 'second'") == [{"id": rowid}]

    def test_no_insert_yet(self, db):
        assert sqlbridge.get_last_insert_rowid(db) == 0

    def test_requires_database(self):
        with pytest.raises(sqlbridge.TypeMismatchError) as exc_info:
            sqlbridge.get_last_insert_rowid(None)
        assert "get-last-insert-rowid" in exc_info.value.message

    def test_closed_handle(self, db):
        db.close()
        with pytest.raises(sqlbridge.DatabaseClosedError):
            sqlbridge.get_last_insert_rowid(db)

    def test_out_of_range(self, db):
        db("CREATE TABLE t(id INTEGER PRIMARY KEY)")
        db("INSERT INTO t(id) VALUES (?)", MAX_SAFE_INTEGER + 1)
        with pytest.raises(sqlbridge.LimitExceededError) as exc_info:
            db.last_insert_rowid()
        assert exc_info.value.message == "Id out of range"

    def test_at_exact_limit(self, db):
        db("CREATE TABLE t(id INTEGER PRIMARY KEY)")
        db("INSERT INTO t(id) VALUES (?)", MAX_SAFE_INTEGER)
        assert db.last_insert_rowid() == MAX_SAFE_INTEGER

    def test_negative_out_of_range(self, db):
        db("CREATE TABLE t(id INTEGER PRIMARY KEY)")
        db("INSERT INTO t(id) VALUES (?)", -(2**60))
        with pytest.raises(sqlbridge.LimitExceededError):
            db.last_insert_rowid()

    def test_negative_at_exact_limit(self, db):
        db("CREATE TABLE t(id INTEGER PRIMARY KEY)")
        db("INSERT INTO t(id) VALUES (?)", -MAX_SAFE_INTEGER)
        assert db.last_insert_rowid() == -MAX_SAFE_INTEGER
