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
"""AspectRegistry — stores aspects and matches calls to candidate advices."""

from __future__ import annotations

import itertools
import threading
from typing import Any

import structlog

from aspectweave.aop.advice import AdviceMatch, AdviceType, Aspect
from aspectweave.aop.decorators import build_aspect
from aspectweave.aop.descriptor import MethodDescriptor
from aspectweave.kernel.exceptions import AspectNotFoundError, DuplicateAspectError

logger = structlog.get_logger("aspectweave.aop.registry")


class AspectRegistry:
    """Registry of aspects keyed by id.

    The registry only matches; ordering and execution belong to
    :class:`~aspectweave.aop.invoker.MethodInvoker`.  Every mutation bumps
    :attr:`version`, which invalidates chains cached by invokers.

    Registration is meant to finish during a single-threaded bootstrap,
    before concurrent calls begin.  Mutating the registry while calls are in
    flight is unsupported unless the caller guards it with an external
    read-write lock; when ``warn_on_live_mutation`` is set, such mutations
    are logged as warnings.

    Usage::

        registry = AspectRegistry()
        registry.register(audit_aspect)
        matches = registry.find_matching_advices(describe_method(OrderRepository, "save"))
    """

    def __init__(self, *, warn_on_live_mutation: bool = True) -> None:
        self._aspects: dict[str, Aspect] = {}
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()
        self._version = 0
        self._serving = False
        self._warn_on_live_mutation = warn_on_live_mutation
        self._lock = threading.Lock()

    @property
    def version(self) -> int:
        """Monotonic counter incremented on every mutation."""
        return self._version

    @property
    def aspects(self) -> list[Aspect]:
        """Registered aspects in registration order."""
        return list(self._aspects.values())

    def __len__(self) -> int:
        return len(self._aspects)

    def __contains__(self, aspect_id: object) -> bool:
        return aspect_id in self._aspects

    # -- mutation -------------------------------------------------------------

    def register(self, aspect: Aspect | Any) -> Aspect:
        """Register *aspect* and return it.

        Accepts an :class:`Aspect` or an instance of an ``@aspect`` class,
        which is converted with :func:`~aspectweave.aop.decorators.build_aspect`.

        Raises:
            DuplicateAspectError: If an aspect with the same id is registered.
        """
        if not isinstance(aspect, Aspect):
            aspect = build_aspect(aspect)

        with self._lock:
            if aspect.id in self._aspects:
                raise DuplicateAspectError(aspect.id)
            self._aspects[aspect.id] = aspect
            self._sequence[aspect.id] = next(self._counter)
            self._mutated("register", aspect.id)

        logger.debug(
            "aspect_registered",
            aspect_id=aspect.id,
            priority=aspect.priority,
            entries=len(aspect.entries),
        )
        return aspect

    def remove_aspect(self, aspect_id: str) -> Aspect:
        """Remove and return the aspect registered under *aspect_id*.

        Raises:
            AspectNotFoundError: If no such aspect is registered.
        """
        with self._lock:
            aspect = self._aspects.pop(aspect_id, None)
            if aspect is None:
                raise AspectNotFoundError(aspect_id)
            del self._sequence[aspect_id]
            self._mutated("remove_aspect", aspect_id)

        logger.debug("aspect_removed", aspect_id=aspect_id)
        return aspect

    def clear(self) -> None:
        """Remove every aspect."""
        with self._lock:
            count = len(self._aspects)
            self._aspects.clear()
            self._sequence.clear()
            self._mutated("clear", None)

        logger.debug("aspects_cleared", count=count)

    def _mutated(self, operation: str, aspect_id: str | None) -> None:
        self._version += 1
        if self._serving and self._warn_on_live_mutation:
            logger.warning(
                "aspect_registry_mutated_while_serving",
                operation=operation,
                aspect_id=aspect_id,
                hint="guard runtime mutation with an external read-write lock",
            )

    # -- lookup ---------------------------------------------------------------

    def get_aspect(self, aspect_id: str) -> Aspect:
        """Return the aspect registered under *aspect_id*.

        Raises:
            AspectNotFoundError: If no such aspect is registered.
        """
        try:
            return self._aspects[aspect_id]
        except KeyError:
            raise AspectNotFoundError(aspect_id) from None

    def has_aspect(self, aspect_id: str) -> bool:
        return aspect_id in self._aspects

    def find_matching_aspects(self, method: MethodDescriptor, instance: Any = None) -> list[Aspect]:
        """Return aspects with at least one entry matching the call."""
        self._serving = True
        return [
            aspect
            for aspect in list(self._aspects.values())
            if any(pointcut.matches(method, instance) for pointcut, _ in aspect.entries)
        ]

    def find_matching_advices(
        self,
        method: MethodDescriptor,
        instance: Any = None,
        advice_type: AdviceType | str | None = None,
    ) -> list[AdviceMatch]:
        """Return the ``(aspect, pointcut, advice)`` triples matching the call.

        The result is in no particular order; callers that execute advices
        must order them (see :meth:`AdviceChain.from_matches`).  When
        *advice_type* is given only advices of that type are returned.
        """
        self._serving = True
        wanted = AdviceType(advice_type) if advice_type is not None else None
        snapshot = list(self._aspects.items())
        matches: list[AdviceMatch] = []
        for aspect_id, aspect in snapshot:
            sequence = self._sequence.get(aspect_id, 0)
            for index, (pointcut, advice) in enumerate(aspect.entries):
                if wanted is not None and advice.type is not wanted:
                    continue
                if pointcut.matches(method, instance):
                    matches.append(AdviceMatch(aspect, pointcut, advice, sequence, index))
        return matches
