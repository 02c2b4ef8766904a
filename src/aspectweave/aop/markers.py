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
"""Declarative markers — read-only metadata consumed by annotation pointcuts.

Markers carry data only.  What "cache this" or "audit this" actually does is
supplied by ordinary advices that select the marker with an
:class:`~aspectweave.aop.pointcut.Annotation` pointcut.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")

MARKERS_ATTR = "__aspectweave_markers__"


def mark(*markers: Any) -> Callable[[T], T]:
    """Attach *markers* to a function or a class.

    A marker may be an instance or a marker class; bare classes are
    instantiated with their defaults.  Markers accumulate, so stacking
    ``@mark`` decorators is allowed.

    Usage::

        @mark(Transactional(read_only=True))
        class OrderRepository:
            @mark(Cacheable, LogExecution(level="INFO"))
            def find(self, order_id: str) -> Order: ...
    """
    instances = tuple(m() if isinstance(m, type) else m for m in markers)

    def decorator(obj: T) -> T:
        # Read from the object's own namespace so subclasses do not inherit
        # and then extend their parent's tuple.
        own = vars(obj).get(MARKERS_ATTR, ()) if hasattr(obj, "__dict__") else ()
        setattr(obj, MARKERS_ATTR, tuple(own) + instances)
        return obj

    return decorator


def markers_of(obj: Any) -> tuple[Any, ...]:
    """Return markers declared on *obj* (function, or class including bases)."""
    if isinstance(obj, type):
        collected: list[Any] = []
        for klass in reversed(obj.__mro__):
            collected.extend(vars(klass).get(MARKERS_ATTR, ()))
        return tuple(collected)
    return tuple(getattr(obj, MARKERS_ATTR, ()))


def marker_matches(marker: Any, marker_type: type | str) -> bool:
    """Check whether *marker* is of *marker_type*.

    *marker_type* is either a class (``isinstance`` check) or a string
    identifier naming the class, as ``"Cacheable"`` or
    ``"myapp.markers.Cacheable"``.
    """
    if isinstance(marker_type, type):
        return isinstance(marker, marker_type)
    for klass in type(marker).__mro__:
        if marker_type in (klass.__name__, f"{klass.__module__}.{klass.__qualname__}"):
            return True
    return False


# ---------------------------------------------------------------------------
# Bundled marker types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogExecution:
    """Request execution logging for a method or every method of a class."""

    level: str = "DEBUG"
    log_params: bool = True
    log_result: bool = True
    log_execution_time: bool = True
    log_exceptions: bool = True


@dataclass(frozen=True)
class Cacheable:
    """Request result caching.  An empty *key* means "derive from arguments"."""

    key: str = ""
    ttl: int = 3600
    region: str | None = None
    unless: tuple[str, ...] = ()


@dataclass(frozen=True)
class Transactional:
    """Request transactional demarcation."""

    read_only: bool = False
    timeout: int = 30
    rollback_for: tuple[type[BaseException], ...] = field(default=(Exception,))
    no_rollback_for: tuple[type[BaseException], ...] = ()
