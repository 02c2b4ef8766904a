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
"""Tests for the aspectweave exception hierarchy."""

import pytest

from aspectweave.kernel.exceptions import (
    AdviceExecutionError,
    AspectNotFoundError,
    AspectWeaveException,
    DuplicateAspectError,
    PointcutParseError,
    ProxyGenerationError,
)


class TestAspectWeaveException:
    def test_basic_creation(self):
        exc = AspectWeaveException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_code_and_context(self):
        exc = AspectWeaveException("bad", code="AOP_X", context={"key": "value"})
        assert exc.code == "AOP_X"
        assert exc.context == {"key": "value"}

    @pytest.mark.parametrize(
        "exc",
        [
            PointcutParseError("x.", "invalid"),
            DuplicateAspectError("Audit"),
            AspectNotFoundError("Audit"),
            ProxyGenerationError(bool, "cannot subclass"),
            AdviceExecutionError("Audit", "before", "Repo.save", ValueError("boom")),
        ],
    )
    def test_all_errors_share_base(self, exc):
        assert isinstance(exc, AspectWeaveException)
        assert exc.code.startswith("AOP_")


class TestDeclarationErrors:
    def test_pointcut_parse_error(self):
        exc = PointcutParseError("Repo.", "invalid method pattern ''")
        assert exc.expression == "Repo."
        assert exc.code == "AOP_POINTCUT_PARSE"
        assert "Repo." in str(exc)
        assert exc.context == {"expression": "Repo."}


class TestRegistryErrors:
    def test_duplicate_aspect(self):
        exc = DuplicateAspectError("Audit")
        assert exc.aspect_id == "Audit"
        assert exc.code == "AOP_DUPLICATE_ASPECT"
        assert "already registered" in str(exc)

    def test_aspect_not_found(self):
        exc = AspectNotFoundError("Audit")
        assert exc.context == {"aspect_id": "Audit"}
        assert exc.code == "AOP_ASPECT_NOT_FOUND"


class TestRuntimeErrors:
    def test_proxy_generation_uses_type_name(self):
        exc = ProxyGenerationError(bool, "cannot subclass")
        assert exc.target_type is bool
        assert exc.context == {"target_type": "bool"}
        assert "bool" in str(exc)

    def test_advice_execution_keeps_cause(self):
        cause = ValueError("boom")
        exc = AdviceExecutionError("Audit", "before", "Repo.save", cause)
        assert exc.cause is cause
        assert exc.context == {"aspect_id": "Audit", "advice_type": "before", "method": "Repo.save"}
        assert "before advice of aspect 'Audit'" in str(exc)
