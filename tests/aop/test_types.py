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
"""Tests for JoinPoint, Advice and Aspect value types."""

from __future__ import annotations

import pytest

from aspectweave.aop.advice import Advice, AdviceMatch, AdviceType, Aspect
from aspectweave.aop.descriptor import describe_method
from aspectweave.aop.pointcut import Annotation, MethodPattern
from aspectweave.aop.types import JoinPoint, JoinPointState


class Greeter:
    def greet(self, name: str, punctuation: str = "!") -> str:
        return f"hello {name}{punctuation}"


GREET = describe_method(Greeter, "greet")


class TestJoinPoint:
    def test_metadata(self) -> None:
        target = Greeter()
        jp = JoinPoint(GREET, target, ("bob",), {"punctuation": "?"})
        assert jp.method is GREET
        assert jp.method_name == "greet"
        assert jp.target is target
        assert jp.args == ["bob"]
        assert jp.kwargs == {"punctuation": "?"}
        assert jp.state is JoinPointState.NOT_STARTED

    def test_get_arguments_returns_copy(self) -> None:
        jp = JoinPoint(GREET, Greeter(), ("bob",))
        args = jp.get_arguments()
        args.append("extra")
        assert jp.args == ["bob"]

    def test_set_arguments(self) -> None:
        jp = JoinPoint(GREET, Greeter(), ("bob",), {"punctuation": "?"})
        jp.set_arguments(["alice"])
        assert jp.args == ["alice"]
        assert jp.kwargs == {"punctuation": "?"}
        jp.set_arguments(("carol",), {})
        assert jp.kwargs == {}

    def test_args_are_mutable_in_place(self) -> None:
        jp = JoinPoint(GREET, Greeter(), ("bob",))
        jp.args[0] = "dave"
        assert jp.get_arguments() == ["dave"]

    def test_proceed_runs_bound_layer_each_time(self) -> None:
        calls: list[int] = []
        jp = JoinPoint(GREET, Greeter(), proceed_to=lambda: calls.append(1) or len(calls))
        assert jp.proceed() == 1
        assert jp.proceed() == 2
        assert calls == [1, 1]

    def test_proceed_without_layer(self) -> None:
        jp = JoinPoint(GREET, Greeter())
        with pytest.raises(RuntimeError):
            jp.proceed()

    def test_bound_views_share_call_state(self) -> None:
        jp = JoinPoint(GREET, Greeter(), ("bob",))
        view = jp.bind(lambda: "inner")
        view.args[0] = "erin"
        view.return_value = "r"
        assert jp.args == ["erin"]
        assert jp.return_value == "r"
        assert view.proceed() == "inner"
        assert jp.state is JoinPointState.IN_PROGRESS

    def test_state_moves_forward_only(self) -> None:
        jp = JoinPoint(GREET, Greeter(), proceed_to=lambda: None)
        jp.proceed()
        jp.complete()
        assert jp.state is JoinPointState.COMPLETED
        jp.proceed()
        jp.complete(ValueError("late"))
        assert jp.state is JoinPointState.COMPLETED

    def test_failed_state_records_error(self) -> None:
        jp = JoinPoint(GREET, Greeter(), proceed_to=lambda: None)
        jp.proceed()
        error = ValueError("boom")
        jp.complete(error)
        assert jp.state is JoinPointState.FAILED
        assert jp.exception is error

    def test_complete_before_start_is_ignored(self) -> None:
        jp = JoinPoint(GREET, Greeter())
        jp.complete()
        assert jp.state is JoinPointState.NOT_STARTED


class TestAdvice:
    def test_constructors_set_type(self) -> None:
        cb = lambda jp: None  # noqa: E731
        assert Advice.before(cb).type is AdviceType.BEFORE
        assert Advice.after(cb).type is AdviceType.AFTER
        assert Advice.after_returning(cb).type is AdviceType.AFTER_RETURNING
        assert Advice.after_throwing(cb).type is AdviceType.AFTER_THROWING
        assert Advice.around(cb, priority=4).priority == 4

    def test_advice_type_values(self) -> None:
        assert AdviceType("after_returning") is AdviceType.AFTER_RETURNING

    def test_name_uses_callback_qualname(self) -> None:
        assert Advice.before(Greeter.greet).name == "Greeter.greet"


class TestAspect:
    def test_entries_accept_expressions(self) -> None:
        cb = Advice.before(lambda jp: None)
        value = Aspect("Audit", 5, [("*Repository.save*", cb), ("@Cacheable", cb)])
        assert value.entries[0][0] == MethodPattern("save*", "*Repository")
        assert value.entries[1][0] == Annotation("Cacheable")

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            Aspect("")

    def test_is_immutable(self) -> None:
        value = Aspect("Audit")
        with pytest.raises(AttributeError):
            value.priority = 3  # type: ignore[misc]

    def test_with_entry_returns_copy(self) -> None:
        base = Aspect("Audit", 1)
        extended = base.with_entry("save", Advice.before(lambda jp: None))
        assert base.entries == ()
        assert len(extended.entries) == 1
        assert extended.id == "Audit"
        assert extended.priority == 1

    def test_of(self) -> None:
        value = Aspect.of("Audit", [("save", Advice.before(lambda jp: None))], priority=7)
        assert value.priority == 7
        assert value.entries[0][0] == MethodPattern("save")


class TestAdviceMatch:
    def test_advice_priority_overrides_aspect(self) -> None:
        owner = Aspect("A", 10)
        match = AdviceMatch(owner, MethodPattern("x"), Advice.before(print, priority=1))
        assert match.priority == 1

    def test_aspect_priority_is_default(self) -> None:
        owner = Aspect("A", 10)
        match = AdviceMatch(owner, MethodPattern("x"), Advice.before(print))
        assert match.priority == 10

    def test_sort_key(self) -> None:
        owner = Aspect("A", 10)
        match = AdviceMatch(owner, MethodPattern("x"), Advice.before(print), sequence=3, index=2)
        assert match.sort_key == (10, 3, 2)
