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
"""MethodInvoker — orders matching advices and runs them around a call.

A call's advices are layered like an onion.  The innermost layer runs the
before advices, the target method, and then the after-returning or
after-throwing advices followed by the after advices.  Around advices wrap
that layer from the inside out, so the lowest priority around advice is the
outermost wrapper.  Priority ties are broken by aspect registration order,
then by entry order inside the aspect.

Coroutine methods accept plain and coroutine advice callbacks.  Synchronous
methods accept plain callbacks only; a callback returning an awaitable there
fails with :class:`AdviceExecutionError`.
"""

from __future__ import annotations

import inspect
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from aspectweave.aop.advice import AdviceMatch, AdviceType
from aspectweave.aop.descriptor import MethodDescriptor, ReflectiveMethod, describe_method
from aspectweave.aop.registry import AspectRegistry
from aspectweave.aop.types import JoinPoint
from aspectweave.kernel.exceptions import AdviceExecutionError

logger = structlog.get_logger("aspectweave.aop.invoker")


@dataclass(frozen=True)
class AdviceChain:
    """Matching advices grouped by type, each group in execution order."""

    around: tuple[AdviceMatch, ...] = ()
    before: tuple[AdviceMatch, ...] = ()
    after_returning: tuple[AdviceMatch, ...] = ()
    after_throwing: tuple[AdviceMatch, ...] = ()
    after: tuple[AdviceMatch, ...] = ()

    @classmethod
    def from_matches(cls, matches: Iterable[AdviceMatch]) -> AdviceChain:
        """Order *matches* by (priority, registration sequence, entry index)."""
        groups: dict[AdviceType, list[AdviceMatch]] = {t: [] for t in AdviceType}
        for match in sorted(matches, key=lambda m: m.sort_key):
            groups[match.advice.type].append(match)
        return cls(
            around=tuple(groups[AdviceType.AROUND]),
            before=tuple(groups[AdviceType.BEFORE]),
            after_returning=tuple(groups[AdviceType.AFTER_RETURNING]),
            after_throwing=tuple(groups[AdviceType.AFTER_THROWING]),
            after=tuple(groups[AdviceType.AFTER]),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.around or self.before or self.after_returning or self.after_throwing or self.after)

    def __len__(self) -> int:
        return (
            len(self.around)
            + len(self.before)
            + len(self.after_returning)
            + len(self.after_throwing)
            + len(self.after)
        )

    def describe(self) -> list[str]:
        """Human-readable ``aspect:type`` labels, outermost first."""
        ordered = (*self.around, *self.before, *self.after_returning, *self.after_throwing, *self.after)
        return [f"{m.aspect.id}:{m.advice.type.value}@{m.priority}" for m in ordered]


class MethodInvoker:
    """Builds and executes advice chains for intercepted calls.

    Resolved chains are cached per ``(class, method name)`` and dropped
    whenever the registry's version changes.  Caching assumes pointcuts do
    not depend on the instance argument; pass ``cache_chains=False`` when
    they do.
    """

    def __init__(self, registry: AspectRegistry, *, cache_chains: bool = True) -> None:
        self._registry = registry
        self._cache_chains = cache_chains
        self._cache: dict[tuple[type, str], tuple[ReflectiveMethod, AdviceChain]] = {}
        self._cache_version = registry.version
        self._lock = threading.Lock()

    @property
    def registry(self) -> AspectRegistry:
        return self._registry

    # -- resolution -----------------------------------------------------------

    def resolve(self, method: MethodDescriptor, instance: Any = None) -> AdviceChain:
        """Build the ordered chain for *method* from the registry's current contents."""
        return AdviceChain.from_matches(self._registry.find_matching_advices(method, instance))

    def chain_for(self, owner: type, name: str, instance: Any = None) -> tuple[ReflectiveMethod, AdviceChain]:
        """Return the descriptor and chain for ``owner.name``, cached when enabled."""
        key = (owner, name)
        version = self._registry.version
        if self._cache_chains:
            with self._lock:
                if self._cache_version != version:
                    self._cache.clear()
                    self._cache_version = version
                cached = self._cache.get(key)
            if cached is not None:
                return cached

        method = describe_method(owner, name)
        chain = self.resolve(method, instance)
        logger.debug("advice_chain_resolved", method=str(method), advices=chain.describe())

        entry = (method, chain)
        if self._cache_chains:
            with self._lock:
                if self._cache_version == version == self._registry.version:
                    self._cache[key] = entry
        return entry

    def is_advised(self, owner: type, name: str) -> bool:
        return not self.chain_for(owner, name)[1].is_empty

    # -- execution --------------------------------------------------------------

    def invoke(
        self,
        target: Any,
        method_name: str,
        args: Iterable[Any] = (),
        kwargs: dict[str, Any] | None = None,
    ) -> Any:
        """Call ``target.method_name(*args, **kwargs)`` through its advice chain.

        Without matching advices the method is called directly.  For
        coroutine methods the return value is an awaitable.
        """
        method, chain = self.chain_for(type(target), method_name, target)
        call = getattr(target, method_name)
        if chain.is_empty:
            return call(*args, **(kwargs or {}))

        join_point = JoinPoint(method, target, args, kwargs)
        if method.is_coroutine:
            return self.execute_async(join_point, chain, call)
        return self.execute(join_point, chain, call)

    def execute(self, join_point: JoinPoint, chain: AdviceChain, call: Callable[..., Any]) -> Any:
        """Run *chain* around *call* synchronously."""
        layer = self._terminal(join_point, chain, call)
        for match in reversed(chain.around):
            layer = self._around(join_point, match, layer)

        try:
            result = join_point.bind(layer).proceed()
        except BaseException as exc:
            join_point.complete(exc)
            raise
        join_point.complete()
        return result

    async def execute_async(self, join_point: JoinPoint, chain: AdviceChain, call: Callable[..., Any]) -> Any:
        """Run *chain* around the coroutine function *call*."""
        layer = self._terminal_async(join_point, chain, call)
        for match in reversed(chain.around):
            layer = self._around_async(join_point, match, layer)

        try:
            result = await join_point.bind(layer).proceed()
        except BaseException as exc:
            join_point.complete(exc)
            raise
        join_point.complete()
        return result

    # -- sync layers ------------------------------------------------------------

    @staticmethod
    def _around(join_point: JoinPoint, match: AdviceMatch, inner: Callable[[], Any]) -> Callable[[], Any]:
        def layer() -> Any:
            result = match.advice.callback(join_point.bind(inner))
            if inspect.isawaitable(result):
                reason = _awaitable_in_sync_chain(result)
                raise _advice_error(match, join_point, reason) from reason
            return result

        return layer

    def _terminal(self, jp: JoinPoint, chain: AdviceChain, call: Callable[..., Any]) -> Callable[[], Any]:
        def layer() -> Any:
            try:
                for match in chain.before:
                    _run_advice(match, jp)
                result = call(*jp.args, **jp.kwargs)
            except Exception as exc:
                jp.exception = exc
                error: BaseException = exc
                for match in chain.after_throwing:
                    error = _replacement_error(match, jp, error, _run_advice(match, jp, error))
                    jp.exception = error
                if error is exc:
                    raise
                raise error from exc
            else:
                jp.return_value = result
                for match in chain.after_returning:
                    result = _run_advice(match, jp, result)
                    jp.return_value = result
                return result
            finally:
                for match in chain.after:
                    _run_advice(match, jp)

        return layer

    # -- async layers -----------------------------------------------------------

    @staticmethod
    def _around_async(join_point: JoinPoint, match: AdviceMatch, inner: Callable[[], Any]) -> Callable[[], Any]:
        async def layer() -> Any:
            result = match.advice.callback(join_point.bind(inner))
            if inspect.isawaitable(result):
                result = await result
            return result

        return layer

    def _terminal_async(self, jp: JoinPoint, chain: AdviceChain, call: Callable[..., Any]) -> Callable[[], Any]:
        async def layer() -> Any:
            try:
                for match in chain.before:
                    await _run_advice_async(match, jp)
                result = await call(*jp.args, **jp.kwargs)
            except Exception as exc:
                jp.exception = exc
                error: BaseException = exc
                for match in chain.after_throwing:
                    error = _replacement_error(match, jp, error, await _run_advice_async(match, jp, error))
                    jp.exception = error
                if error is exc:
                    raise
                raise error from exc
            else:
                jp.return_value = result
                for match in chain.after_returning:
                    result = await _run_advice_async(match, jp, result)
                    jp.return_value = result
                return result
            finally:
                for match in chain.after:
                    await _run_advice_async(match, jp)

        return layer


# ---------------------------------------------------------------------------
# Advice callback helpers
# ---------------------------------------------------------------------------


def _advice_error(match: AdviceMatch, jp: JoinPoint, exc: Exception) -> AdviceExecutionError:
    return AdviceExecutionError(match.aspect.id, match.advice.type.value, str(jp.method), exc)


def _run_advice(match: AdviceMatch, jp: JoinPoint, *extra: Any) -> Any:
    try:
        result = match.advice.callback(jp, *extra)
        if inspect.isawaitable(result):
            raise _awaitable_in_sync_chain(result)
        return result
    except AdviceExecutionError:
        raise
    except Exception as exc:
        raise _advice_error(match, jp, exc) from exc


def _awaitable_in_sync_chain(result: Any) -> TypeError:
    """Close an awaitable returned to a synchronous chain and describe the misuse."""
    close = getattr(result, "close", None)
    if close is not None:
        close()
    return TypeError("advice returned an awaitable for a synchronous method; use a plain function")


async def _run_advice_async(match: AdviceMatch, jp: JoinPoint, *extra: Any) -> Any:
    try:
        result = match.advice.callback(jp, *extra)
        if inspect.isawaitable(result):
            result = await result
        return result
    except AdviceExecutionError:
        raise
    except Exception as exc:
        raise _advice_error(match, jp, exc) from exc


def _replacement_error(match: AdviceMatch, jp: JoinPoint, current: BaseException, returned: Any) -> BaseException:
    """Interpret an after-throwing callback's return value."""
    if returned is None:
        return current
    if isinstance(returned, BaseException):
        return returned
    reason = TypeError(f"after_throwing advice must return an exception or None, got {type(returned).__name__}")
    raise _advice_error(match, jp, reason) from current
