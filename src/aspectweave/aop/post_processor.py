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
"""AspectBeanPostProcessor — hooks the engine into a DI container's bean lifecycle."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from aspectweave.aop.decorators import is_aspect
from aspectweave.aop.proxy import ProxyFactory
from aspectweave.aop.registry import AspectRegistry


@runtime_checkable
class BeanPostProcessor(Protocol):
    """Container hook called for every bean it creates.

    ``before_init`` runs before the bean's init callbacks, ``after_init``
    after them.  Either may return a replacement bean.
    """

    def before_init(self, bean: Any, bean_name: str) -> Any: ...

    def after_init(self, bean: Any, bean_name: str) -> Any: ...


class AspectBeanPostProcessor:
    """Registers aspect beans and replaces advised beans with proxies.

    During ``before_init``, instances of ``@aspect`` classes (fully wired by
    the container) are registered.  During ``after_init``, every other bean
    with at least one advised public method is replaced by its proxy.
    Aspect beans must be created before the beans they advise.
    """

    def __init__(
        self,
        registry: AspectRegistry | None = None,
        proxy_factory: ProxyFactory | None = None,
    ) -> None:
        if proxy_factory is not None:
            registry = registry or proxy_factory.invoker.registry
        self._registry = registry or AspectRegistry()
        self._proxy_factory = proxy_factory or ProxyFactory(self._registry)

    @property
    def registry(self) -> AspectRegistry:
        return self._registry

    @property
    def proxy_factory(self) -> ProxyFactory:
        return self._proxy_factory

    def before_init(self, bean: Any, bean_name: str) -> Any:
        """Register ``@aspect`` beans."""
        if is_aspect(bean):
            self._registry.register(bean)
        return bean

    def after_init(self, bean: Any, bean_name: str) -> Any:
        """Return a proxy for advised non-aspect beans."""
        if is_aspect(bean):
            return bean
        if not self._proxy_factory.is_advised(type(bean)):
            return bean
        return self._proxy_factory.make_proxy(bean)
