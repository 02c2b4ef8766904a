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
"""AOP core types — JoinPoint and its lifecycle state."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from aspectweave.aop.descriptor import MethodDescriptor


class JoinPointState(enum.Enum):
    """Lifecycle of one intercepted call.  Transitions only move forward."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


_FORWARD: dict[JoinPointState, frozenset[JoinPointState]] = {
    JoinPointState.NOT_STARTED: frozenset({JoinPointState.IN_PROGRESS}),
    JoinPointState.IN_PROGRESS: frozenset({JoinPointState.COMPLETED, JoinPointState.FAILED}),
    JoinPointState.COMPLETED: frozenset(),
    JoinPointState.FAILED: frozenset(),
}


class _Invocation:
    """State shared by every layer's view of the same call."""

    __slots__ = ("method", "target", "args", "kwargs", "state", "return_value", "exception")

    def __init__(
        self,
        method: MethodDescriptor,
        target: Any,
        args: Iterable[Any],
        kwargs: Mapping[str, Any] | None,
    ) -> None:
        self.method = method
        self.target = target
        self.args: list[Any] = list(args)
        self.kwargs: dict[str, Any] = dict(kwargs or {})
        self.state = JoinPointState.NOT_STARTED
        self.return_value: Any = None
        self.exception: BaseException | None = None

    def advance(self, state: JoinPointState) -> None:
        if state in _FORWARD[self.state]:
            self.state = state


class JoinPoint:
    """Represents one intercepted execution of a target method.

    Every advice layer of a call sees the same arguments, target and state.
    ``proceed()`` runs the layer bound below the caller's layer; it is not
    memoized, so each call re-executes that layer.

    Attributes:
        method: Descriptor of the intercepted method.
        target: The real instance being called (``None`` for free functions).
        args: Mutable positional arguments, observed by the target method.
        kwargs: Mutable keyword arguments, observed by the target method.
        return_value: Latest result produced inside the chain.
        exception: Latest error raised inside the chain.
    """

    __slots__ = ("_invocation", "_next")

    def __init__(
        self,
        method: MethodDescriptor,
        target: Any = None,
        args: Iterable[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        proceed_to: Callable[[], Any] | None = None,
    ) -> None:
        self._invocation = _Invocation(method, target, args, kwargs)
        self._next = proceed_to

    def bind(self, proceed_to: Callable[[], Any]) -> JoinPoint:
        """Return a view of this call whose ``proceed()`` runs *proceed_to*."""
        view = object.__new__(JoinPoint)
        view._invocation = self._invocation
        view._next = proceed_to
        return view

    # -- call metadata ------------------------------------------------------

    @property
    def method(self) -> MethodDescriptor:
        return self._invocation.method

    @property
    def method_name(self) -> str:
        return self._invocation.method.name

    @property
    def target(self) -> Any:
        return self._invocation.target

    @property
    def state(self) -> JoinPointState:
        return self._invocation.state

    # -- arguments ------------------------------------------------------------

    @property
    def args(self) -> list[Any]:
        return self._invocation.args

    @args.setter
    def args(self, value: Iterable[Any]) -> None:
        self._invocation.args = list(value)

    @property
    def kwargs(self) -> dict[str, Any]:
        return self._invocation.kwargs

    @kwargs.setter
    def kwargs(self, value: Mapping[str, Any]) -> None:
        self._invocation.kwargs = dict(value)

    def get_arguments(self) -> list[Any]:
        """Return a copy of the positional arguments."""
        return list(self._invocation.args)

    def set_arguments(self, args: Iterable[Any], kwargs: Mapping[str, Any] | None = None) -> None:
        """Replace the positional (and optionally keyword) arguments."""
        self._invocation.args = list(args)
        if kwargs is not None:
            self._invocation.kwargs = dict(kwargs)

    # -- outcome ----------------------------------------------------------------

    @property
    def return_value(self) -> Any:
        return self._invocation.return_value

    @return_value.setter
    def return_value(self, value: Any) -> None:
        self._invocation.return_value = value

    @property
    def exception(self) -> BaseException | None:
        return self._invocation.exception

    @exception.setter
    def exception(self, value: BaseException | None) -> None:
        self._invocation.exception = value

    # -- execution ------------------------------------------------------------

    def proceed(self) -> Any:
        """Run the next inner layer and return its result.

        For coroutine methods the result is an awaitable.

        Raises:
            RuntimeError: If this join point has no layer to proceed to.
        """
        if self._next is None:
            raise RuntimeError(f"JoinPoint for {self.method} has no next layer to proceed to")
        self._invocation.advance(JoinPointState.IN_PROGRESS)
        return self._next()

    def complete(self, error: BaseException | None = None) -> None:
        """Mark the call finished, as ``FAILED`` if *error* escaped every layer."""
        if error is None:
            self._invocation.advance(JoinPointState.COMPLETED)
        else:
            self._invocation.exception = error
            self._invocation.advance(JoinPointState.FAILED)

    def __repr__(self) -> str:
        return f"JoinPoint(method={self.method}, state={self.state.name})"
