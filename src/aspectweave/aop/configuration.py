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
"""AOP configuration — binds engine settings and builds the shared infrastructure."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

from aspectweave.aop.invoker import MethodInvoker
from aspectweave.aop.post_processor import AspectBeanPostProcessor
from aspectweave.aop.proxy import ProxyFactory
from aspectweave.aop.registry import AspectRegistry
from aspectweave.core.config import Config, config_properties
from aspectweave.logging.port import LoggingPort
from aspectweave.logging.structlog_adapter import StructlogAdapter


@config_properties(prefix="aspectweave.aop")
class AopProperties(BaseModel):
    """Engine settings under ``aspectweave.aop``.

    Attributes:
        chain_cache: Cache resolved advice chains per (class, method).
        warn_on_live_mutation: Log a warning when the registry is mutated
            after it has served lookups.
    """

    chain_cache: bool = True
    warn_on_live_mutation: bool = True


@dataclass(frozen=True)
class AopInfrastructure:
    """The registry, invoker, proxy factory and logging shared by one application."""

    registry: AspectRegistry
    invoker: MethodInvoker
    proxy_factory: ProxyFactory
    logging: LoggingPort

    def post_processor(self) -> AspectBeanPostProcessor:
        return AspectBeanPostProcessor(self.registry, self.proxy_factory)


def configure_aop(config: Config | None = None, logging_port: LoggingPort | None = None) -> AopInfrastructure:
    """Build the AOP infrastructure from *config* (defaults when omitted).

    *logging_port* (a :class:`StructlogAdapter` by default) is configured
    from the same config before any engine component is created, so
    ``aspectweave.logging`` levels and format apply to the engine's events.
    """
    config = config or Config()
    logging_port = logging_port or StructlogAdapter()
    logging_port.configure(config)

    properties = config.bind(AopProperties)
    registry = AspectRegistry(warn_on_live_mutation=properties.warn_on_live_mutation)
    invoker = MethodInvoker(registry, cache_chains=properties.chain_cache)
    return AopInfrastructure(registry, invoker, ProxyFactory(registry, invoker), logging_port)
