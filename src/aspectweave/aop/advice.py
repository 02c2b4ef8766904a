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
"""Advice and Aspect value types."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from aspectweave.aop.pointcut import Pointcut, parse


class AdviceType(str, enum.Enum):
    """When an advice runs relative to the intercepted call."""

    BEFORE = "before"
    AFTER = "after"
    AFTER_RETURNING = "after_returning"
    AFTER_THROWING = "after_throwing"
    AROUND = "around"


@dataclass(frozen=True)
class Advice:
    """A typed callback.

    Callback signatures by type:

    * ``BEFORE`` / ``AFTER`` — ``(join_point) -> None``
    * ``AFTER_RETURNING`` — ``(join_point, result) -> result``; the return
      value replaces the result.
    * ``AFTER_THROWING`` — ``(join_point, error) -> error | None``; a returned
      exception replaces the error, ``None`` keeps it.
    * ``AROUND`` — ``(join_point) -> result``; calls ``join_point.proceed()``.

    Attributes:
        type: The advice type.
        callback: The callable implementing the advice.
        priority: Overrides the owning aspect's priority when set.
    """

    type: AdviceType
    callback: Callable[..., Any]
    priority: int | None = None

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))

    @classmethod
    def before(cls, callback: Callable[..., Any], priority: int | None = None) -> Advice:
        return cls(AdviceType.BEFORE, callback, priority)

    @classmethod
    def after(cls, callback: Callable[..., Any], priority: int | None = None) -> Advice:
        return cls(AdviceType.AFTER, callback, priority)

    @classmethod
    def after_returning(cls, callback: Callable[..., Any], priority: int | None = None) -> Advice:
        return cls(AdviceType.AFTER_RETURNING, callback, priority)

    @classmethod
    def after_throwing(cls, callback: Callable[..., Any], priority: int | None = None) -> Advice:
        return cls(AdviceType.AFTER_THROWING, callback, priority)

    @classmethod
    def around(cls, callback: Callable[..., Any], priority: int | None = None) -> Advice:
        return cls(AdviceType.AROUND, callback, priority)


@dataclass(frozen=True)
class Aspect:
    """A named, prioritized bundle of (pointcut, advice) entries.

    Lower priority runs earlier and wraps further out.

    Usage::

        audit = Aspect(
            "Audit",
            priority=10,
            entries=[(MethodPattern("save*", "*Repository"), Advice.around(record))],
        )
    """

    id: str
    priority: int = 0
    entries: tuple[tuple[Pointcut, Advice], ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Aspect id must be a non-empty string")
        object.__setattr__(self, "entries", tuple((parse(pc), adv) for pc, adv in self.entries))

    def with_entry(self, pointcut: Pointcut | str, advice: Advice) -> Aspect:
        """Return a copy with one more entry appended."""
        return Aspect(self.id, self.priority, (*self.entries, (parse(pointcut), advice)))

    @classmethod
    def of(
        cls,
        aspect_id: str,
        entries: Iterable[tuple[Pointcut | str, Advice]],
        priority: int = 0,
    ) -> Aspect:
        return cls(aspect_id, priority, tuple(entries))


@dataclass(frozen=True)
class AdviceMatch:
    """One ``(aspect, pointcut, advice)`` triple selected for a call.

    ``sequence`` is the aspect's registration sequence number and ``index``
    the entry's position inside the aspect; together they break priority ties.
    """

    aspect: Aspect
    pointcut: Pointcut
    advice: Advice
    sequence: int = 0
    index: int = 0

    @property
    def priority(self) -> int:
        if self.advice.priority is not None:
            return self.advice.priority
        return self.aspect.priority

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.priority, self.sequence, self.index)
