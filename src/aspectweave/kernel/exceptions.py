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
"""Exception hierarchy for the aspectweave interception engine.

Every error raised by the engine derives from :class:`AspectWeaveException`,
which carries a machine-readable ``code`` and a ``context`` dict with
structured data about the failure.
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# Base Exception
# =============================================================================


class AspectWeaveException(Exception):
    """Base exception for all aspectweave errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "AOP_DUPLICATE_ASPECT").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Declaration errors
# =============================================================================


class PointcutParseError(AspectWeaveException):
    """A pointcut expression is malformed."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(
            f"Invalid pointcut expression {expression!r}: {reason}",
            code="AOP_POINTCUT_PARSE",
            context={"expression": expression},
        )


# =============================================================================
# Registry errors
# =============================================================================


class DuplicateAspectError(AspectWeaveException):
    """An aspect with the same id is already registered."""

    def __init__(self, aspect_id: str) -> None:
        self.aspect_id = aspect_id
        super().__init__(
            f"Aspect '{aspect_id}' is already registered",
            code="AOP_DUPLICATE_ASPECT",
            context={"aspect_id": aspect_id},
        )


class AspectNotFoundError(AspectWeaveException):
    """No aspect is registered under the requested id."""

    def __init__(self, aspect_id: str) -> None:
        self.aspect_id = aspect_id
        super().__init__(
            f"No aspect registered with id '{aspect_id}'",
            code="AOP_ASPECT_NOT_FOUND",
            context={"aspect_id": aspect_id},
        )


# =============================================================================
# Runtime errors
# =============================================================================


class ProxyGenerationError(AspectWeaveException):
    """The target cannot be proxied in this interpreter."""

    def __init__(self, target_type: Any, reason: str) -> None:
        self.target_type = target_type
        self.reason = reason
        type_name = getattr(target_type, "__qualname__", repr(target_type))
        super().__init__(
            f"Cannot generate proxy for '{type_name}': {reason}",
            code="AOP_PROXY_GENERATION",
            context={"target_type": type_name},
        )


class AdviceExecutionError(AspectWeaveException):
    """A before/after/after-returning/after-throwing callback itself failed.

    Distinguishes a broken advice from a failure of the intercepted method.
    The advice's own error is available as :attr:`cause`.
    """

    def __init__(
        self,
        aspect_id: str,
        advice_type: str,
        method: str,
        cause: BaseException,
    ) -> None:
        self.aspect_id = aspect_id
        self.advice_type = advice_type
        self.method = method
        self.cause = cause
        super().__init__(
            f"{advice_type} advice of aspect '{aspect_id}' failed on {method}: {cause!r}",
            code="AOP_ADVICE_EXECUTION",
            context={"aspect_id": aspect_id, "advice_type": advice_type, "method": method},
        )
