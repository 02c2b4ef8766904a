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
"""Method metadata — the capability pointcuts match against.

:class:`MethodDescriptor` is the contract the engine needs from a metadata
facility.  :class:`ReflectiveMethod` implements it with runtime reflection;
an implementation backed by generated code or an explicit registration
table only has to satisfy the same protocol.
"""

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from aspectweave.aop.markers import marker_matches, markers_of


@runtime_checkable
class MethodDescriptor(Protocol):
    """Metadata of one method as seen by pointcuts."""

    @property
    def name(self) -> str: ...

    @property
    def type_name(self) -> str: ...

    @property
    def qualified_type_name(self) -> str: ...

    @property
    def signature(self) -> inspect.Signature | None: ...

    @property
    def method_markers(self) -> tuple[Any, ...]: ...

    @property
    def type_markers(self) -> tuple[Any, ...]: ...


@dataclass(frozen=True)
class ReflectiveMethod:
    """A :class:`MethodDescriptor` read from a live class via ``inspect``.

    Attributes:
        owner: The class the method was looked up on (the proxied class).
        declaring_type: The class in ``owner.__mro__`` that defines the method.
        name: The method name.
        function: The underlying function object.
    """

    owner: type
    declaring_type: type
    name: str
    function: Any

    @property
    def type_name(self) -> str:
        return self.owner.__name__

    @property
    def qualified_type_name(self) -> str:
        return f"{self.owner.__module__}.{self.owner.__qualname__}"

    @property
    def qualified_name(self) -> str:
        return f"{self.qualified_type_name}.{self.name}"

    @functools.cached_property
    def signature(self) -> inspect.Signature | None:
        try:
            return inspect.signature(self.function)
        except (TypeError, ValueError):
            return None

    @property
    def is_coroutine(self) -> bool:
        return inspect.iscoroutinefunction(self.function)

    @property
    def method_markers(self) -> tuple[Any, ...]:
        return markers_of(self.function)

    @property
    def type_markers(self) -> tuple[Any, ...]:
        return markers_of(self.owner)

    def __str__(self) -> str:
        return f"{self.type_name}.{self.name}"


def find_marker(method: MethodDescriptor, marker_type: type | str) -> Any | None:
    """Return the first marker of *marker_type*, method level before type level."""
    for marker in method.method_markers:
        if marker_matches(marker, marker_type):
            return marker
    for marker in method.type_markers:
        if marker_matches(marker, marker_type):
            return marker
    return None


def describe_method(owner: type, name: str) -> ReflectiveMethod:
    """Describe method *name* as resolved on *owner*.

    Raises:
        AttributeError: If *owner* has no attribute *name*.
        TypeError: If the attribute is not a plain function.
    """
    for klass in owner.__mro__:
        if name in vars(klass):
            raw = vars(klass)[name]
            break
    else:
        raise AttributeError(f"{owner.__qualname__} has no method '{name}'")

    function = raw.__func__ if isinstance(raw, (staticmethod, classmethod)) else raw
    if not callable(function):
        raise TypeError(f"{owner.__qualname__}.{name} is not a method")
    return ReflectiveMethod(owner=owner, declaring_type=klass, name=name, function=function)
