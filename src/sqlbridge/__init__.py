"""
sqlbridge v0.1.0

Python values in, SQLite rows out.

A thin bridge over SQLite's native statement API (loaded with ctypes):
bind Python values as parameters, run one or more statements, and get rows
back as dicts.

Example:
    import sqlbridge

    with sqlbridge.open(":memory:") as db:
        db("CREATE TABLE t(a, b)")
        db("INSERT INTO t VALUES (?, ?)", 1, "x")
        rows = db("SELECT * FROM t")
        # rows == [{'a': 1, 'b': 'x'}]

Host-style entry points:
    lib = sqlbridge.load(("0", "0"))
    db = lib["open"]("app.db")
    lib["get-last-insert-rowid"](db)
    lib["close"](db)
"""

__version__ = "0.1.0"

from .database import Database, open, close, get_last_insert_rowid
from .config import BridgeConfig
from .diagnostics import Blame, Diagnostics
from .module import MODULE_TABLE, ExternalFunction, load
from .values import host_number

from .errors import (
    SQLBridgeError,
    ErrorKind,
    TypeMismatchError,
    DatabaseClosedError,
    LimitExceededError,
    CompileError,
    ParameterError,
    DatabaseBusyError,
    ExecutionError,
    OutOfMemoryError,
    OpenError,
    CloseError,
    VersionMismatchError,
    LibraryNotFoundError,
)

__all__ = [
    # Version
    "__version__",

    # Database handle
    "Database",
    "open",
    "close",
    "get_last_insert_rowid",
    "BridgeConfig",
    "host_number",

    # Module table
    "MODULE_TABLE",
    "ExternalFunction",
    "load",

    # Diagnostics
    "Blame",
    "Diagnostics",

    # Errors
    "SQLBridgeError",
    "ErrorKind",
    "TypeMismatchError",
    "DatabaseClosedError",
    "LimitExceededError",
    "CompileError",
    "ParameterError",
    "DatabaseBusyError",
    "ExecutionError",
    "OutOfMemoryError",
    "OpenError",
    "CloseError",
    "VersionMismatchError",
    "LibraryNotFoundError",
]
