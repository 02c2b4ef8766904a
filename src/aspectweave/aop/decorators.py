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
"""AOP decorators — @aspect and advice annotations."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar, overload

from aspectweave.aop.advice import Advice, AdviceType, Aspect
from aspectweave.aop.pointcut import Pointcut, parse

T = TypeVar("T", bound=type)
F = TypeVar("F", bound=Callable[..., Any])

ASPECT_ATTR = "__aspectweave_aspect__"
ADVICE_ATTR = "__aspectweave_advice__"


# ---------------------------------------------------------------------------
# @aspect — marks a class as an AOP aspect
# ---------------------------------------------------------------------------


@overload
def aspect(cls: T) -> T: ...


@overload
def aspect(*, id: str | None = None, priority: int = 0) -> Callable[[T], T]: ...


def aspect(cls: Any = None, *, id: str | None = None, priority: int = 0) -> Any:
    """Mark a class as an aspect.

    Works bare (``@aspect``) or with options
    (``@aspect(id="Audit", priority=10)``).  The id defaults to the class's
    ``module.QualName``.  Sets ``__aspectweave_aspect__`` on the class to a
    dict holding ``id`` and ``priority``.
    """

    def decorator(klass: T) -> T:
        aspect_id = id or f"{klass.__module__}.{klass.__qualname__}"
        setattr(klass, ASPECT_ATTR, {"id": aspect_id, "priority": priority})
        return klass

    if cls is not None:
        return decorator(cls)
    return decorator


def is_aspect(obj: Any) -> bool:
    """Return True if *obj* is an ``@aspect`` class or an instance of one."""
    klass = obj if isinstance(obj, type) else type(obj)
    return ASPECT_ATTR in vars(klass)


# ---------------------------------------------------------------------------
# Advice decorators — @before, @after_returning, @after_throwing, @after, @around
# ---------------------------------------------------------------------------


def _make_advice(advice_type: AdviceType) -> Callable[..., Callable[[F], F]]:
    """Create an advice decorator factory for *advice_type*.

    The factory takes a pointcut (expression string or :class:`Pointcut`)
    and an optional priority, parses the pointcut eagerly so malformed
    expressions fail at class definition, and appends
    ``(advice_type, pointcut, priority)`` to the method's
    ``__aspectweave_advice__`` list.
    """

    def factory(pointcut: str | Pointcut, priority: int | None = None) -> Callable[[F], F]:
        parsed = parse(pointcut)

        def decorator(fn: F) -> F:
            specs = list(getattr(fn, ADVICE_ATTR, ()))
            specs.append((advice_type, parsed, priority))
            setattr(fn, ADVICE_ATTR, specs)
            return fn

        return decorator

    return factory


before = _make_advice(AdviceType.BEFORE)
after_returning = _make_advice(AdviceType.AFTER_RETURNING)
after_throwing = _make_advice(AdviceType.AFTER_THROWING)
after = _make_advice(AdviceType.AFTER)
around = _make_advice(AdviceType.AROUND)


# ---------------------------------------------------------------------------
# Conversion of a ready aspect instance into an Aspect value
# ---------------------------------------------------------------------------


def build_aspect(instance: Any) -> Aspect:
    """Convert a constructed ``@aspect`` instance into an :class:`Aspect`.

    Entries follow method definition order (base classes first); each
    advice callback is the method bound to *instance*.

    Raises:
        TypeError: If *instance* is not an instance of an ``@aspect`` class.
    """
    klass = type(instance)
    if not is_aspect(klass):
        raise TypeError(f"{klass.__qualname__} is not decorated with @aspect")
    meta = vars(klass)[ASPECT_ATTR]

    names: dict[str, None] = {}
    for base in reversed(klass.__mro__):
        names.update(dict.fromkeys(vars(base)))

    entries: list[tuple[Pointcut, Advice]] = []
    for name in names:
        raw = inspect.getattr_static(klass, name, None)
        function = raw.__func__ if isinstance(raw, (staticmethod, classmethod)) else raw
        specs = getattr(function, ADVICE_ATTR, None)
        if not specs:
            continue
        handler = getattr(instance, name)
        for advice_type, pointcut, priority in specs:
            entries.append((pointcut, Advice(advice_type, handler, priority)))

    return Aspect(meta["id"], meta["priority"], tuple(entries))
