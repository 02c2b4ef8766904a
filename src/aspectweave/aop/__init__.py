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
"""Aspect-Oriented Programming engine: pointcuts, advices, invoker and proxies."""

from aspectweave.aop.advice import Advice, AdviceMatch, AdviceType, Aspect
from aspectweave.aop.configuration import AopInfrastructure, AopProperties, configure_aop
from aspectweave.aop.decorators import after, after_returning, after_throwing, around, aspect, before, build_aspect
from aspectweave.aop.descriptor import MethodDescriptor, ReflectiveMethod, describe_method, find_marker
from aspectweave.aop.invoker import AdviceChain, MethodInvoker
from aspectweave.aop.markers import Cacheable, LogExecution, Transactional, mark
from aspectweave.aop.pointcut import Annotation, Composite, MethodPattern, Operator, Pointcut, all_of, any_of, parse
from aspectweave.aop.post_processor import AspectBeanPostProcessor, BeanPostProcessor
from aspectweave.aop.proxy import ProxyFactory, is_proxy, unwrap
from aspectweave.aop.registry import AspectRegistry
from aspectweave.aop.types import JoinPoint, JoinPointState

__all__ = [
    "Advice",
    "AdviceChain",
    "AdviceMatch",
    "AdviceType",
    "Annotation",
    "AopInfrastructure",
    "AopProperties",
    "Aspect",
    "AspectBeanPostProcessor",
    "AspectRegistry",
    "BeanPostProcessor",
    "Cacheable",
    "Composite",
    "JoinPoint",
    "JoinPointState",
    "LogExecution",
    "MethodDescriptor",
    "MethodInvoker",
    "MethodPattern",
    "Operator",
    "Pointcut",
    "ProxyFactory",
    "ReflectiveMethod",
    "Transactional",
    "after",
    "after_returning",
    "after_throwing",
    "all_of",
    "any_of",
    "around",
    "aspect",
    "before",
    "build_aspect",
    "configure_aop",
    "describe_method",
    "find_marker",
    "is_proxy",
    "mark",
    "parse",
    "unwrap",
]
