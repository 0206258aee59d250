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
Value bridge.

Pure conversions between Python values and SQLite parameters / columns.

Numbers share one representation on the way out: INTEGER and FLOAT columns
are both read as doubles and normalized with :func:`host_number`, so an
INTEGER column holding 3 and a FLOAT column holding 3.0 decode identically
and integers beyond 2**53 lose precision.
"""

import ctypes
from typing import Any, Dict, List, Union

import numpy as np

from . import _native as n
from .config import BridgeConfig

# Largest integer a double represents exactly
MAX_SAFE_INTEGER = 2**53

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

UNKNOWN_PLACEHOLDER = b"Unknown"

Number = Union[int, float]


class UnsupportedParameter(Exception):
    """Raised by :func:`bind_param` for values it cannot encode."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Cannot bind value of type {type(value).__name__}")


def host_number(value: float) -> Number:
    """Collapse a numeric value into the host Number representation."""
    value = float(value)
    if value.is_integer() and -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
        return int(value)
    return value


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating, np.bool_))


def is_integer(value: Any) -> bool:
    """The host's "is integer" predicate for Numbers."""
    if isinstance(value, (int, np.integer, np.bool_)):
        return True
    return float(value).is_integer()


def bind_param(lib, stmt, index: int, value: Any, pins: List[bytes],
               config: BridgeConfig) -> int:
    """Bind ``value`` at 1-based ``index``; returns the engine result code.

    Text and blob buffers are bound by reference. The encoded buffer is
    appended to ``pins`` and must outlive the statement.
    """
    if value is None:
        return lib.sqlite3_bind_null(stmt, index)

    if isinstance(value, str):
        data = value.encode("utf-8", config.text_errors)
        if len(data) > n.INT_MAX:
            return n.SQLITE_TOOBIG
        pins.append(data)
        return lib.sqlite3_bind_text(stmt, index, data, len(data), n.SQLITE_STATIC)

    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        if len(data) > n.INT_MAX:
            return n.SQLITE_TOOBIG
        pins.append(data)
        return lib.sqlite3_bind_blob(stmt, index, data, len(data), n.SQLITE_STATIC)

    if is_number(value):
        if is_integer(value):
            as_int = int(value)
            if INT64_MIN <= as_int <= INT64_MAX:
                return lib.sqlite3_bind_int64(stmt, index, as_int)
        return lib.sqlite3_bind_double(stmt, index, float(value))

    if config.strict_params:
        raise UnsupportedParameter(value)
    return lib.sqlite3_bind_text(
        stmt, index, UNKNOWN_PLACEHOLDER, len(UNKNOWN_PLACEHOLDER), n.SQLITE_STATIC
    )


def column_names(lib, stmt) -> List[str]:
    """Column descriptors for a prepared statement.

    Returns None in place of a name the engine could not allocate.
    """
    names = []
    for i in range(lib.sqlite3_column_count(stmt)):
        raw = lib.sqlite3_column_name(stmt, i)
        names.append(raw.decode("utf-8", "replace") if raw is not None else None)
    return names


def decode_column(lib, stmt, i: int, config: BridgeConfig) -> Any:
    col_type = lib.sqlite3_column_type(stmt, i)

    if col_type == n.SQLITE_NULL:
        return None

    if col_type in (n.SQLITE_INTEGER, n.SQLITE_FLOAT):
        return host_number(lib.sqlite3_column_double(stmt, i))

    # TEXT and BLOB: pointer first, then length
    ptr = lib.sqlite3_column_blob(stmt, i)
    size = lib.sqlite3_column_bytes(stmt, i)
    data = ctypes.string_at(ptr, size) if ptr and size else b""
    if col_type == n.SQLITE_TEXT:
        return data.decode("utf-8", config.text_errors)
    return data


def decode_row(lib, stmt, columns: List[str], config: BridgeConfig) -> Dict[str, Any]:
    """Materialize the current row as a dict keyed by ``columns``."""
    row = {}
    for i, name in enumerate(columns):
        row[name] = decode_column(lib, stmt, i, config)
    return row
