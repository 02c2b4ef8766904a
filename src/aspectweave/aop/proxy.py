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
"""ProxyFactory — forwarding objects that route calls through a MethodInvoker.

A proxy class is generated once per target class.  It subclasses the target
class, so ``isinstance`` checks keep working, and overrides every public
instance method with a forwarder.  The target class itself is never
modified.  Attribute reads and writes that are not forwarded methods go
straight to the real instance.

Only calls made through the proxy are intercepted: a method of the target
calling another method on ``self`` reaches the real instance directly.
"""

from __future__ import annotations

import functools
import inspect
import threading
from collections.abc import Callable
from typing import Any

import structlog

from aspectweave.aop.invoker import MethodInvoker
from aspectweave.aop.registry import AspectRegistry
from aspectweave.kernel.exceptions import ProxyGenerationError

logger = structlog.get_logger("aspectweave.aop.proxy")

PROXY_ATTR = "__aspectweave_proxy__"
_TARGET = "_aspectweave_target"
_INVOKER = "_aspectweave_invoker"


def is_proxy(obj: Any) -> bool:
    """Return True if *obj* is a proxy produced by a :class:`ProxyFactory`."""
    return getattr(type(obj), PROXY_ATTR, None) is not None


def unwrap(obj: Any) -> Any:
    """Return the real instance behind a proxy, or *obj* itself."""
    if is_proxy(obj):
        return object.__getattribute__(obj, _TARGET)
    return obj


def public_methods(cls: type) -> dict[str, Any]:
    """Public instance methods of *cls* (including inherited), by name."""
    methods: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, raw in vars(klass).items():
            if name.startswith("_"):
                continue
            if inspect.isfunction(raw):
                methods[name] = raw
            else:
                # A subclass may shadow a method with a non-method attribute.
                methods.pop(name, None)
    return methods


def _forwarder(name: str, function: Callable[..., Any]) -> Callable[..., Any]:
    if inspect.iscoroutinefunction(function):

        @functools.wraps(function)
        async def forward_async(self: Any, *args: Any, **kwargs: Any) -> Any:
            invoker: MethodInvoker = object.__getattribute__(self, _INVOKER)
            return await invoker.invoke(object.__getattribute__(self, _TARGET), name, args, kwargs)

        return forward_async

    @functools.wraps(function)
    def forward(self: Any, *args: Any, **kwargs: Any) -> Any:
        invoker: MethodInvoker = object.__getattribute__(self, _INVOKER)
        return invoker.invoke(object.__getattribute__(self, _TARGET), name, args, kwargs)

    return forward


def _proxy_getattr(self: Any, name: str) -> Any:
    return getattr(object.__getattribute__(self, _TARGET), name)


def _proxy_setattr(self: Any, name: str, value: Any) -> None:
    setattr(object.__getattribute__(self, _TARGET), name, value)


def _proxy_delattr(self: Any, name: str) -> None:
    delattr(object.__getattribute__(self, _TARGET), name)


def _proxy_repr(self: Any) -> str:
    return f"<proxy of {object.__getattribute__(self, _TARGET)!r}>"


class ProxyFactory:
    """Produces intercepting proxies for target instances.

    Usage::

        registry = AspectRegistry()
        registry.register(audit_aspect)
        factory = ProxyFactory(registry)
        repo = factory.make_proxy(OrderRepository())
        repo.save(order)  # routed through the Audit aspect
    """

    def __init__(
        self,
        registry: AspectRegistry,
        invoker: MethodInvoker | None = None,
    ) -> None:
        if invoker is not None and invoker.registry is not registry:
            raise ValueError("invoker must be bound to the same AspectRegistry")
        self._registry = registry
        self._invoker = invoker or MethodInvoker(registry)
        self._proxy_classes: dict[type, type] = {}
        self._lock = threading.Lock()

    @property
    def invoker(self) -> MethodInvoker:
        return self._invoker

    def make_proxy(self, target: Any) -> Any:
        """Return a proxy routing *target*'s public method calls through the invoker.

        Proxies are returned unchanged.

        Raises:
            ProxyGenerationError: If *target*'s type cannot be proxied.
        """
        if is_proxy(target):
            return target
        if target is None or isinstance(target, type) or inspect.ismodule(target):
            raise ProxyGenerationError(type(target), "only class instances can be proxied")

        proxy_cls = self.proxy_class_for(type(target))
        try:
            proxy = object.__new__(proxy_cls)
        except TypeError as exc:
            raise ProxyGenerationError(type(target), str(exc)) from exc
        object.__setattr__(proxy, _TARGET, target)
        object.__setattr__(proxy, _INVOKER, self._invoker)
        return proxy

    def proxy_class_for(self, cls: type) -> type:
        """Return the cached proxy class for *cls*, generating it on first use."""
        with self._lock:
            proxy_cls = self._proxy_classes.get(cls)
            if proxy_cls is None:
                proxy_cls = self._generate(cls)
                self._proxy_classes[cls] = proxy_cls
        return proxy_cls

    def is_advised(self, cls: type) -> bool:
        """Return True if any public method of *cls* currently has advices."""
        return any(self._invoker.is_advised(cls, name) for name in public_methods(cls))

    def _generate(self, cls: type) -> type:
        if getattr(cls, "__final__", False):
            raise ProxyGenerationError(cls, "class is declared final")

        methods = public_methods(cls)
        namespace: dict[str, Any] = {
            name: _forwarder(name, function) for name, function in methods.items()
        }
        namespace.update(
            {
                "__module__": cls.__module__,
                "__qualname__": f"{cls.__qualname__}Proxy",
                "__doc__": cls.__doc__,
                "__getattr__": _proxy_getattr,
                "__setattr__": _proxy_setattr,
                "__delattr__": _proxy_delattr,
                "__repr__": _proxy_repr,
                PROXY_ATTR: cls,
            }
        )
        try:
            proxy_cls = type(f"{cls.__name__}Proxy", (cls,), namespace)
        except TypeError as exc:
            raise ProxyGenerationError(cls, str(exc)) from exc

        logger.debug("proxy_class_generated", target=cls.__qualname__, methods=sorted(methods))
        return proxy_cls
