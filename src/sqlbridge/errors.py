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
Error types for sqlbridge.

Every failure reaching Python code is exactly one exception. The class gives
the classification (``kind``); the blame entries attached by
:class:`sqlbridge.diagnostics.Diagnostics` give the precise cause.
"""

from enum import Enum
from typing import Any, Optional, Sequence


class ErrorKind(Enum):
    """Classification of a bridge failure."""

    TYPE_MISMATCH = "type_mismatch"
    CLOSED = "closed"
    LIMIT_EXCEEDED = "limit_exceeded"
    COMPILE = "compile"
    BIND = "bind"
    BUSY = "busy"
    RUNTIME = "runtime"
    OUT_OF_MEMORY = "out_of_memory"
    OPEN = "open"
    CLOSE = "close"
    VERSION = "version"
    LIBRARY = "library"

    def __str__(self) -> str:
        return self.value


class SQLBridgeError(Exception):
    """Base exception for all bridge errors."""

    kind = ErrorKind.RUNTIME

    def __init__(self, message: str, code: Optional[int] = None, blame: Sequence = ()):
        self.message = message
        self.code = code
        self.blame = tuple(blame)
        super().__init__(message)

    @property
    def blamed(self) -> Any:
        """The first host value blamed for this failure, or None."""
        for entry in self.blame:
            if entry.has_value:
                return entry.value
        return None

    @property
    def detail(self) -> Optional[str]:
        """Engine-provided description, if any was recorded."""
        messages = [entry.message for entry in self.blame if entry.message]
        return "; ".join(messages) if messages else None

    def __str__(self) -> str:
        detail = self.detail
        if detail:
            return f"{self.message}: {detail}"
        return self.message


class TypeMismatchError(SQLBridgeError):
    """A value of the wrong variant was supplied."""
    kind = ErrorKind.TYPE_MISMATCH


class DatabaseClosedError(SQLBridgeError):
    """Operation attempted on a closed database handle."""
    kind = ErrorKind.CLOSED


class LimitExceededError(SQLBridgeError):
    """Parameter count, value size or numeric range out of bounds."""
    kind = ErrorKind.LIMIT_EXCEEDED


class CompileError(SQLBridgeError):
    """The engine could not compile a statement."""
    kind = ErrorKind.COMPILE


class ParameterError(SQLBridgeError):
    """The engine rejected a bound parameter."""
    kind = ErrorKind.BIND


class DatabaseBusyError(SQLBridgeError):
    """The database stayed locked past the busy timeout."""
    kind = ErrorKind.BUSY


class ExecutionError(SQLBridgeError):
    """A statement failed while stepping."""
    kind = ErrorKind.RUNTIME


class OutOfMemoryError(SQLBridgeError):
    """An allocation failed while building a result."""
    kind = ErrorKind.OUT_OF_MEMORY


class OpenError(SQLBridgeError):
    """The engine could not open the database."""
    kind = ErrorKind.OPEN


class CloseError(SQLBridgeError):
    """The engine refused to close the connection."""
    kind = ErrorKind.CLOSE


class VersionMismatchError(SQLBridgeError):
    """The host version is not supported by this library."""
    kind = ErrorKind.VERSION


class LibraryNotFoundError(SQLBridgeError):
    """The SQLite shared library could not be loaded."""
    kind = ErrorKind.LIBRARY
