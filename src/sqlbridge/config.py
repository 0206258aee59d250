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
Bridge configuration.

Options control connection setup and how host values cross the bridge.
Environment variables (``SQLBRIDGE_*``) supply defaults for
:meth:`BridgeConfig.from_env`.
"""

import os
import codecs
from dataclasses import dataclass, replace
from typing import Optional


DEFAULT_BUSY_TIMEOUT_MS = 1000


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class BridgeConfig:
    """Configuration for a database handle.

    Attributes:
        busy_timeout_ms: How long the engine waits on a locked database
            before a statement fails with "busy". Set once at open time.
        strict_params: Reject parameters the bridge cannot encode. When
            False they are bound as the text placeholder ``"Unknown"``.
        text_errors: Codec error handler for str <-> UTF-8 conversion.
            ``surrogateescape`` lets arbitrary TEXT bytes round-trip.
        library_path: SQLite shared library (file or directory) to load
            instead of searching the default locations.
    """

    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    strict_params: bool = True
    text_errors: str = "surrogateescape"
    library_path: Optional[str] = None

    def __post_init__(self):
        if self.busy_timeout_ms < 0:
            raise ValueError("busy_timeout_ms must be >= 0")
        # Raises LookupError for unknown handlers
        codecs.lookup_error(self.text_errors)

    @classmethod
    def from_env(cls, **overrides) -> "BridgeConfig":
        """Build a config from SQLBRIDGE_* variables, then apply overrides."""
        config = cls()

        timeout = os.environ.get("SQLBRIDGE_BUSY_TIMEOUT_MS")
        if timeout:
            config = replace(config, busy_timeout_ms=int(timeout))

        strict = os.environ.get("SQLBRIDGE_STRICT_PARAMS")
        if strict:
            config = replace(config, strict_params=_env_bool(strict))

        errors = os.environ.get("SQLBRIDGE_TEXT_ERRORS")
        if errors:
            config = replace(config, text_errors=errors)

        lib_path = os.environ.get("SQLBRIDGE_LIB_PATH")
        if lib_path:
            config = replace(config, library_path=lib_path)

        if overrides:
            config = replace(config, **overrides)
        return config
