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
SQLite native bindings

ctypes declarations for the subset of the SQLite C API the bridge uses:
open/close, prepare/bind/step/finalize, column access and error lookup.
"""

import os
import sys
import ctypes
import ctypes.util
import logging
from typing import List, Optional

from .errors import LibraryNotFoundError

logger = logging.getLogger(__name__)


# Result codes
SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_BUSY = 5
SQLITE_NOMEM = 7
SQLITE_TOOBIG = 18
SQLITE_RANGE = 25
SQLITE_ROW = 100
SQLITE_DONE = 101

# Fundamental datatypes
SQLITE_INTEGER = 1
SQLITE_FLOAT = 2
SQLITE_TEXT = 3
SQLITE_BLOB = 4
SQLITE_NULL = 5

# Run-time limit categories
SQLITE_LIMIT_VARIABLE_NUMBER = 9

# Destructor sentinel for bind_text / bind_blob: caller keeps the buffer alive
SQLITE_STATIC = ctypes.c_void_p(0)

INT_MAX = 2**31 - 1


def _candidate_paths(override: Optional[str] = None) -> List[str]:
    """Library locations in priority order.

    Search order:
    1. Explicit override (config) or SQLBRIDGE_LIB_PATH, a file or directory
    2. ctypes.util.find_library("sqlite3")
    3. Well-known sonames for the current platform
    4. The interpreter's own _sqlite3 extension (statically linked builds)
    """
    if sys.platform == "darwin":
        names = ["libsqlite3.dylib", "libsqlite3.0.dylib"]
    elif sys.platform == "win32":
        names = ["sqlite3.dll"]
    else:
        names = ["libsqlite3.so.0", "libsqlite3.so"]

    candidates = []

    env_path = override or os.environ.get("SQLBRIDGE_LIB_PATH")
    if env_path:
        if os.path.isdir(env_path):
            candidates.extend(os.path.join(env_path, name) for name in names)
        else:
            candidates.append(env_path)

    found = ctypes.util.find_library("sqlite3")
    if found:
        candidates.append(found)

    candidates.extend(names)

    try:
        import _sqlite3
        ext_path = getattr(_sqlite3, "__file__", None)
        if ext_path:
            candidates.append(ext_path)
            # Windows wheels ship sqlite3.dll next to the extension
            candidates.append(os.path.join(os.path.dirname(ext_path), names[0]))
    except ImportError:
        pass

    return candidates


def _find_library(override: Optional[str] = None) -> ctypes.CDLL:
    """Load the first candidate that exports the statement API."""
    candidates = _candidate_paths(override)
    for path in candidates:
        try:
            lib = ctypes.CDLL(path)
        except OSError:
            continue
        if hasattr(lib, "sqlite3_prepare_v2"):
            logger.debug("Loaded SQLite from %s", path)
            return lib

    raise LibraryNotFoundError(
        "Could not find the SQLite library. "
        f"Searched: {', '.join(candidates[:5])}... "
        "Set SQLBRIDGE_LIB_PATH to the shared library or its directory."
    )


class _FFI:
    """FFI bindings to the native library."""

    _lib = None

    @classmethod
    def get_lib(cls, override: Optional[str] = None):
        if cls._lib is None:
            cls._lib = _find_library(override)
            cls._setup_bindings()
        return cls._lib

    @classmethod
    def _setup_bindings(cls):
        """Set up function signatures for the native library."""
        lib = cls._lib
        db_p = ctypes.c_void_p
        stmt_p = ctypes.c_void_p

        # Connection lifecycle
        # sqlite3_open(filename: *const c_char, ppDb: **sqlite3) -> c_int
        lib.sqlite3_open.argtypes = [ctypes.c_char_p, ctypes.POINTER(db_p)]
        lib.sqlite3_open.restype = ctypes.c_int

        lib.sqlite3_close.argtypes = [db_p]
        lib.sqlite3_close.restype = ctypes.c_int

        # Zombifies the connection instead of failing while statements live
        lib.sqlite3_close_v2.argtypes = [db_p]
        lib.sqlite3_close_v2.restype = ctypes.c_int

        lib.sqlite3_busy_timeout.argtypes = [db_p, ctypes.c_int]
        lib.sqlite3_busy_timeout.restype = ctypes.c_int

        # sqlite3_limit(db, id, newVal) -> previous value; newVal < 0 only reads
        lib.sqlite3_limit.argtypes = [db_p, ctypes.c_int, ctypes.c_int]
        lib.sqlite3_limit.restype = ctypes.c_int

        lib.sqlite3_last_insert_rowid.argtypes = [db_p]
        lib.sqlite3_last_insert_rowid.restype = ctypes.c_int64

        # Error lookup
        lib.sqlite3_errstr.argtypes = [ctypes.c_int]
        lib.sqlite3_errstr.restype = ctypes.c_char_p

        lib.sqlite3_errmsg.argtypes = [db_p]
        lib.sqlite3_errmsg.restype = ctypes.c_char_p

        # Statement API
        # sqlite3_prepare_v2(db, zSql, nByte, ppStmt, pzTail) -> c_int
        # zSql/pzTail are raw addresses so the tail can be turned into an offset
        lib.sqlite3_prepare_v2.argtypes = [
            db_p, ctypes.c_void_p, ctypes.c_int,
            ctypes.POINTER(stmt_p), ctypes.POINTER(ctypes.c_void_p)
        ]
        lib.sqlite3_prepare_v2.restype = ctypes.c_int

        lib.sqlite3_step.argtypes = [stmt_p]
        lib.sqlite3_step.restype = ctypes.c_int

        lib.sqlite3_finalize.argtypes = [stmt_p]
        lib.sqlite3_finalize.restype = ctypes.c_int

        # Parameter binding
        lib.sqlite3_bind_null.argtypes = [stmt_p, ctypes.c_int]
        lib.sqlite3_bind_null.restype = ctypes.c_int

        lib.sqlite3_bind_int64.argtypes = [stmt_p, ctypes.c_int, ctypes.c_int64]
        lib.sqlite3_bind_int64.restype = ctypes.c_int

        lib.sqlite3_bind_double.argtypes = [stmt_p, ctypes.c_int, ctypes.c_double]
        lib.sqlite3_bind_double.restype = ctypes.c_int

        lib.sqlite3_bind_text.argtypes = [
            stmt_p, ctypes.c_int, ctypes.c_char_p, ctypes.c_int, ctypes.c_void_p
        ]
        lib.sqlite3_bind_text.restype = ctypes.c_int

        lib.sqlite3_bind_blob.argtypes = [
            stmt_p, ctypes.c_int, ctypes.c_char_p, ctypes.c_int, ctypes.c_void_p
        ]
        lib.sqlite3_bind_blob.restype = ctypes.c_int

        # Column access
        lib.sqlite3_column_count.argtypes = [stmt_p]
        lib.sqlite3_column_count.restype = ctypes.c_int

        lib.sqlite3_column_name.argtypes = [stmt_p, ctypes.c_int]
        lib.sqlite3_column_name.restype = ctypes.c_char_p

        lib.sqlite3_column_type.argtypes = [stmt_p, ctypes.c_int]
        lib.sqlite3_column_type.restype = ctypes.c_int

        lib.sqlite3_column_double.argtypes = [stmt_p, ctypes.c_int]
        lib.sqlite3_column_double.restype = ctypes.c_double

        lib.sqlite3_column_blob.argtypes = [stmt_p, ctypes.c_int]
        lib.sqlite3_column_blob.restype = ctypes.c_void_p

        lib.sqlite3_column_bytes.argtypes = [stmt_p, ctypes.c_int]
        lib.sqlite3_column_bytes.restype = ctypes.c_int


def errstr(code: int) -> str:
    """English-language description of a result code."""
    msg = _FFI.get_lib().sqlite3_errstr(code)
    return msg.decode("utf-8", "replace") if msg else f"error code {code}"
