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

"""Statement executor and script runner.

A script is compiled one statement at a time: ``sqlite3_prepare_v2`` reports
where the statement ended, and the next prepare starts there. Every statement
receives the full parameter list and appends its rows to one shared result.

    rows = run_script(lib, db, "INSERT INTO t VALUES (?); SELECT ? AS echo", (1,), config)
"""

from __future__ import annotations

import ctypes
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from . import _native as n
from .config import BridgeConfig
from .diagnostics import Diagnostics
from .errors import (
    CompileError,
    DatabaseBusyError,
    ExecutionError,
    LimitExceededError,
    OutOfMemoryError,
    ParameterError,
    TypeMismatchError,
)
from .values import UnsupportedParameter, bind_param, column_names, decode_row

logger = logging.getLogger(__name__)


class Statement:
    """A prepared statement that is finalized when the ``with`` block exits.

    Owns the native handle, the pinned parameter buffers and the column
    descriptors; all three are released together.
    """

    def __init__(self, lib, db, handle):
        self._lib = lib
        self._db = db
        self.handle = handle
        self.pins: List[bytes] = []
        self.columns: Optional[List[str]] = None

    def finalize(self) -> None:
        if self.handle:
            self._lib.sqlite3_finalize(self.handle)
            self.handle = None
        self.pins.clear()
        self.columns = None

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.finalize()


def prepare(lib, db, base: int, offset: int, end: int) -> Tuple[Optional[Statement], int]:
    """Compile the statement starting at ``base + offset``.

    Returns the statement (None when only whitespace or comments remained)
    and the offset just past the consumed text.
    """
    remaining = end - offset
    if remaining > n.INT_MAX:
        raise Diagnostics().fail(LimitExceededError, "SQL text too large", code=n.SQLITE_TOOBIG)

    handle = ctypes.c_void_p()
    tail = ctypes.c_void_p()
    rc = lib.sqlite3_prepare_v2(
        db, base + offset, remaining, ctypes.byref(handle), ctypes.byref(tail)
    )
    if rc != n.SQLITE_OK:
        if handle.value:
            lib.sqlite3_finalize(handle)
        diag = Diagnostics()
        diag.blame_sql_error(rc, db)
        raise diag.fail(CompileError, "SQL compiler error", code=rc)

    next_offset = tail.value - base if tail.value else end
    if next_offset <= offset:
        next_offset = end

    if not handle.value:
        return None, next_offset
    return Statement(lib, db, handle.value), next_offset


def _bind_all(lib, db, statement: Statement, params: Sequence[Any], config: BridgeConfig) -> None:
    for index, value in enumerate(params, start=1):
        diag = Diagnostics()
        try:
            rc = bind_param(lib, statement.handle, index, value, statement.pins, config)
        except UnsupportedParameter:
            diag.blame_arg(value)
            raise diag.fail(
                TypeMismatchError,
                f"Unsupported SQL parameter type: {type(value).__name__}",
            ) from None
        except UnicodeError as exc:
            diag.blame_arg(value)
            diag.blame_message(str(exc))
            raise diag.fail(ParameterError, "SQL parameter error") from exc

        if rc == n.SQLITE_OK:
            continue
        diag.blame_arg(value)
        if rc == n.SQLITE_TOOBIG:
            diag.blame_sql_error(rc)
            raise diag.fail(LimitExceededError, "SQL parameter error", code=rc)
        diag.blame_sql_error(rc, db)
        raise diag.fail(ParameterError, "SQL parameter error", code=rc)


def execute_statement(lib, db, statement: Statement, params: Sequence[Any],
                      rows: List[Dict[str, Any]], config: BridgeConfig) -> None:
    """Bind, then step ``statement`` to completion, appending each row."""
    _bind_all(lib, db, statement, params, config)

    try:
        statement.columns = column_names(lib, statement.handle)
    except MemoryError as exc:
        raise Diagnostics().fail(OutOfMemoryError, "Out of memory") from exc
    if None in statement.columns:
        raise Diagnostics().fail(OutOfMemoryError, "Out of memory", code=n.SQLITE_NOMEM)

    while True:
        rc = lib.sqlite3_step(statement.handle)
        if rc == n.SQLITE_DONE:
            return
        if rc == n.SQLITE_BUSY:
            raise Diagnostics().fail(DatabaseBusyError, "Database is busy (timeout)", code=rc)
        if rc != n.SQLITE_ROW:
            diag = Diagnostics()
            diag.blame_sql_error(rc, db)
            raise diag.fail(ExecutionError, "SQL error", code=rc)

        try:
            rows.append(decode_row(lib, statement.handle, statement.columns, config))
        except MemoryError as exc:
            raise Diagnostics().fail(OutOfMemoryError, "Out of memory") from exc
        except UnicodeError as exc:
            diag = Diagnostics()
            diag.blame_message(str(exc))
            raise diag.fail(ExecutionError, "Unable to decode text column") from exc


def run_script(lib, db, sql: Union[str, bytes], params: Sequence[Any],
               config: BridgeConfig) -> List[Dict[str, Any]]:
    """Run every statement in ``sql``, returning all rows in order.

    The parameter list is checked against the engine's bindable-parameter
    limit before anything is compiled. On failure no rows are returned.
    """
    limit = lib.sqlite3_limit(db, n.SQLITE_LIMIT_VARIABLE_NUMBER, -1)
    if len(params) > limit:
        diag = Diagnostics()
        diag.blame_message(f"{len(params)} parameters supplied, limit is {limit}")
        raise diag.fail(LimitExceededError, "Too many parameters")

    if isinstance(sql, str):
        try:
            script = sql.encode("utf-8", config.text_errors)
        except UnicodeError as exc:
            diag = Diagnostics()
            diag.blame_arg(sql)
            diag.blame_message(str(exc))
            raise diag.fail(CompileError, "SQL text is not encodable as UTF-8") from exc
    else:
        script = bytes(sql)

    rows: List[Dict[str, Any]] = []
    if not script:
        return rows

    # NUL-terminated copy; prepare's tail pointer is an address inside it
    buf = ctypes.create_string_buffer(script)
    base = ctypes.addressof(buf)
    end = len(script)

    offset = 0
    n_statements = 0
    while offset < end:
        statement, offset = prepare(lib, db, base, offset, end)
        if statement is None:
            continue
        with statement:
            execute_statement(lib, db, statement, params, rows, config)
        n_statements += 1

    logger.debug("Ran %d statement(s), %d row(s)", n_statements, len(rows))
    return rows
