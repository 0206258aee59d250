# Copyright 2025 Sushanth (https://github.com/sushanthpy)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
SQLite database handle

A callable object wrapping one native connection. Calling it runs a script.
"""

import os
import ctypes
import logging
import warnings
from threading import Lock
from typing import Any, Dict, List, Optional, Union

from . import _native as n
from ._native import _FFI
from .config import BridgeConfig
from .diagnostics import Diagnostics
from .errors import (
    CloseError,
    DatabaseClosedError,
    LimitExceededError,
    OpenError,
    OutOfMemoryError,
    TypeMismatchError,
)
from .executor import run_script
from .values import MAX_SAFE_INTEGER

logger = logging.getLogger(__name__)

PathLike = Union[str, bytes, "os.PathLike[str]"]


class Database:
    """
    SQLite database handle.

    Use :func:`open` to create instances. The handle is callable: the first
    argument is SQL text holding one or more statements, the rest are
    positional parameters bound to every statement.

    Example:
        db = open(":memory:")
        db("CREATE TABLE t(a, b)")
        db("INSERT INTO t VALUES (?, ?)", 1, "x")
        rows = db("SELECT * FROM t")   # [{'a': 1, 'b': 'x'}]
        db.close()

    Or with context manager:
        with open("app.db") as db:
            db("SELECT 1 AS one")
    """

    type_name = "sqldb"

    def __init__(self, path: str, _handle, config: BridgeConfig):
        """
        Initialize a database handle.

        Use open() to create instances.
        """
        self._path = path
        self._lib = _FFI.get_lib()
        self._handle = _handle
        self._config = config
        self._lock = Lock()

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return not self._handle

    @property
    def config(self) -> BridgeConfig:
        return self._config

    def _check_open(self) -> None:
        """Check that database is open."""
        if not self._handle:
            raise Diagnostics().fail(DatabaseClosedError, "Database has been closed")

    def __call__(self, sql: Union[str, bytes], *params: Any) -> List[Dict[str, Any]]:
        """Run ``sql`` and return one dict per result row, across all statements."""
        with self._lock:
            self._check_open()
            if not isinstance(sql, (str, bytes)):
                diag = Diagnostics()
                diag.blame_arg(sql)
                raise diag.fail(
                    TypeMismatchError, "Expected SQL query (a string) as first argument"
                )
            return run_script(self._lib, self._handle, sql, params, self._config)

    execute = __call__

    def close(self) -> None:
        """Close the native connection.

        Raises DatabaseClosedError if the handle was already closed. If the
        engine refuses to close, the handle stays open.
        """
        with self._lock:
            self._check_open()
            rc = self._lib.sqlite3_close(self._handle)
            if rc != n.SQLITE_OK:
                diag = Diagnostics()
                diag.blame_sql_error(rc, self._handle)
                raise diag.fail(CloseError, "Unable to close database", code=rc)
            self._handle = None
        logger.debug("Closed database %s", self._path)

    def last_insert_rowid(self) -> int:
        """Rowid of the most recent successful INSERT on this connection."""
        with self._lock:
            self._check_open()
            rowid = self._lib.sqlite3_last_insert_rowid(self._handle)
        if abs(rowid) > MAX_SAFE_INTEGER:
            diag = Diagnostics()
            diag.blame_message(f"rowid {rowid} is outside ±{MAX_SAFE_INTEGER}")
            raise diag.fail(LimitExceededError, "Id out of range")
        return rowid

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._handle:
            self.close()

    def __del__(self):
        handle = getattr(self, "_handle", None)
        lib = getattr(self, "_lib", None)
        if handle and lib is not None:
            warnings.warn(f"unclosed database {self._path!r}", ResourceWarning, stacklevel=2)
            # Result ignored; nothing can report it from here
            lib.sqlite3_close_v2(handle)
            self._handle = None

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{self.type_name} {self._path!r} ({state})>"


def open(path: PathLike, config: Optional[BridgeConfig] = None) -> Database:
    """
    Open a database at the given path.

    Creates the database file if it doesn't exist. ``":memory:"`` opens a
    private in-memory database.

    Args:
        path: Filesystem path, ``":memory:"`` or a ``file:`` URI.
        config: Connection options; defaults to ``BridgeConfig.from_env()``.

    Returns:
        Database instance.
    """
    if not isinstance(path, (str, bytes, os.PathLike)):
        diag = Diagnostics()
        diag.blame_arg(path)
        raise diag.fail(TypeMismatchError, "Expected string path as first argument for 'sql.open'")

    if config is None:
        config = BridgeConfig.from_env()
    lib = _FFI.get_lib(config.library_path)

    try:
        path_bytes = os.fsencode(path)
    except MemoryError as exc:
        raise Diagnostics().fail(OutOfMemoryError, "Out of memory") from exc

    handle = ctypes.c_void_p()
    rc = lib.sqlite3_open(path_bytes, ctypes.byref(handle))
    if rc != n.SQLITE_OK:
        diag = Diagnostics()
        diag.blame_arg(path)
        diag.blame_sql_error(rc, handle.value)
        # A handle is allocated even on failure, unless memory ran out
        if handle.value:
            lib.sqlite3_close(handle)
        raise diag.fail(OpenError, "Unable to open database", code=rc)

    lib.sqlite3_busy_timeout(handle, config.busy_timeout_ms)
    logger.debug("Opened database %s (busy timeout %d ms)", path, config.busy_timeout_ms)
    return Database(os.fsdecode(path_bytes), handle.value, config)


def close(db: Any) -> None:
    """Close ``db``; see :meth:`Database.close`."""
    if not isinstance(db, Database):
        diag = Diagnostics()
        diag.blame_arg(db)
        raise diag.fail(TypeMismatchError, "Expected database object as argument for 'close'")
    db.close()


def get_last_insert_rowid(db: Any) -> int:
    """Rowid of the last insert on ``db``; see :meth:`Database.last_insert_rowid`."""
    if not isinstance(db, Database):
        diag = Diagnostics()
        diag.blame_arg(db)
        raise diag.fail(
            TypeMismatchError,
            "Expected database object as argument for 'get-last-insert-rowid'",
        )
    return db.last_insert_rowid()
