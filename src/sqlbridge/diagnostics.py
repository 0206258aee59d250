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
Blame channel.

A failing operation records what went wrong next to the error it raises:
the exact host value at fault and the engine's own description of the
result code. The exception class stays a coarse classification.

Example:
    diag = Diagnostics()
    diag.blame_arg(path)
    diag.blame_sql_error(rc, db)
    raise diag.fail(OpenError, "Unable to open database", code=rc)
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Type

from ._native import _FFI, errstr
from .errors import SQLBridgeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Blame:
    """One diagnostic entry: an offending value, a message, or both."""

    value: Any = None
    message: Optional[str] = None
    has_value: bool = False


class Diagnostics:
    """Collects blame entries for a single failing operation."""

    def __init__(self):
        self._entries: List[Blame] = []

    @property
    def entries(self) -> List[Blame]:
        return list(self._entries)

    def blame_arg(self, value: Any) -> None:
        """Record the host value responsible for the failure."""
        self._entries.append(Blame(value=value, has_value=True))

    def blame_message(self, message: str) -> None:
        self._entries.append(Blame(message=message))

    def blame_sql_error(self, code: int, db=None) -> None:
        """Record the engine's description of ``code``.

        With a live connection the connection's last error message is used,
        which names the offending token or constraint; otherwise the generic
        text for the result code.
        """
        message = None
        if db:
            raw = _FFI.get_lib().sqlite3_errmsg(db)
            if raw:
                message = raw.decode("utf-8", "replace")
        if not message:
            message = errstr(code)
        self._entries.append(Blame(message=message))

    def fail(self, error_cls: Type[SQLBridgeError], message: str,
             code: Optional[int] = None) -> SQLBridgeError:
        """Build ``error_cls`` carrying everything blamed so far."""
        error = error_cls(message, code=code, blame=self._entries)
        logger.debug("%s (%s)", error, error.kind)
        return error
