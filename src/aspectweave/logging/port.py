# Copyright 2026 Firefly Software Solutions Inc.
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
"""LoggingPort — the logging contract the engine's host provides."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from aspectweave.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Configures logging and hands out structured loggers.

    :func:`~aspectweave.aop.configuration.configure_aop` calls
    :meth:`configure` with the application config before building the
    registry, so engine events (``aspectweave.aop.*`` loggers) follow the
    levels and renderer it sets up.
    """

    def configure(self, config: Config) -> None:
        """Apply ``aspectweave.logging`` settings from *config*."""
        ...

    def get_logger(self, name: str) -> Any:
        """Return a structured logger bound to *name*."""
        ...

    def set_level(self, name: str, level: str) -> None:
        """Set the level of logger *name* (``"DEBUG"``, ``"INFO"``, ...)."""
        ...
