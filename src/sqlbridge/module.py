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
Module table

The fixed set of named entry points handed to a host at load time. The
table is built once at import and is read-only.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from . import database
from .diagnostics import Diagnostics
from .errors import TypeMismatchError, VersionMismatchError

LIBRARY_NAME = "sqlbridge"

# Major and minor host versions this library was built against
HOST_VERSION = ("0", "0")


@dataclass(frozen=True)
class ExternalFunction:
    """A named host-callable with a fixed arity."""

    name: str
    arity: int
    fn: Callable[..., Any]

    def __call__(self, *args: Any) -> Any:
        if len(args) != self.arity:
            diag = Diagnostics()
            diag.blame_message(f"got {len(args)}")
            raise diag.fail(
                TypeMismatchError,
                f"'{self.name}' expects {self.arity} argument(s)",
            )
        return self.fn(*args)


def _build_table() -> Mapping[str, ExternalFunction]:
    fns = [
        ExternalFunction("open", 1, database.open),
        ExternalFunction("close", 1, database.close),
        ExternalFunction("get-last-insert-rowid", 1, database.get_last_insert_rowid),
    ]
    return MappingProxyType({fn.name: fn for fn in fns})


MODULE_TABLE = _build_table()


def check_version(host_version: Sequence[Any]) -> bool:
    """True if the first two components of ``host_version`` match."""
    parts = tuple(str(part) for part in host_version)
    return parts[:2] == HOST_VERSION


def load(host_version: Sequence[Any] = HOST_VERSION) -> Mapping[str, ExternalFunction]:
    """Hand the module table to a host after checking its version tag.

    Example:
        lib = load(("0", "0", "7"))
        db = lib["open"](":memory:")
    """
    if not check_version(host_version):
        diag = Diagnostics()
        diag.blame_arg(tuple(host_version))
        raise diag.fail(
            VersionMismatchError,
            f"Library `{LIBRARY_NAME}` only works for version {':'.join(HOST_VERSION)}:x",
        )
    return MODULE_TABLE
