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
"""End-to-end scenarios — declarative aspects, markers and proxies together.

Each test builds the infrastructure with ``configure_aop``, runs aspect and
service beans through the post-processor, then exercises the proxied
services.
"""

from __future__ import annotations

from typing import Any

import pytest

from aspectweave.aop.configuration import configure_aop
from aspectweave.aop.decorators import after, after_throwing, around, aspect, before
from aspectweave.aop.descriptor import find_marker
from aspectweave.aop.markers import Cacheable, LogExecution, Transactional, mark
from aspectweave.aop.types import JoinPoint


def _wire(*beans: Any) -> list[Any]:
    processor = configure_aop().post_processor()
    ready = []
    for bean in beans:
        name = type(bean).__name__
        ready.append(processor.after_init(processor.before_init(bean, name), name))
    return ready


# ---------------------------------------------------------------------------
# Caching driven by @Cacheable markers
# ---------------------------------------------------------------------------


@aspect(id="Caching", priority=20)
class CachingAspect:
    def __init__(self) -> None:
        self.store: dict[str, Any] = {}

    @around("@Cacheable")
    def cache(self, jp: JoinPoint) -> Any:
        marker = find_marker(jp.method, Cacheable)
        key = f"{marker.region or jp.method_name}:{jp.args!r}"
        if key not in self.store:
            self.store[key] = jp.proceed()
        return self.store[key]


class ProductService:
    def __init__(self) -> None:
        self.lookups = 0

    @mark(Cacheable(region="products"))
    def find(self, sku: str) -> dict[str, str]:
        self.lookups += 1
        return {"sku": sku}

    def rename(self, sku: str, name: str) -> str:
        return name


class TestCachingScenario:
    def test_cached_method_runs_once_per_key(self) -> None:
        caching, products = _wire(CachingAspect(), ProductService())
        assert products.find("a") == {"sku": "a"}
        assert products.find("a") == {"sku": "a"}
        products.find("b")
        assert products.lookups == 2
        assert set(caching.store) == {"products:['a']", "products:['b']"}

    def test_unmarked_method_is_not_cached(self) -> None:
        caching, products = _wire(CachingAspect(), ProductService())
        products.rename("a", "x")
        assert caching.store == {}


# ---------------------------------------------------------------------------
# Transactions driven by a class-level @Transactional marker
# ---------------------------------------------------------------------------


@aspect(id="Transactions", priority=10)
class TransactionAspect:
    def __init__(self) -> None:
        self.events: list[str] = []

    @around("@Transactional")
    def transaction(self, jp: JoinPoint) -> Any:
        marker = find_marker(jp.method, Transactional)
        self.events.append("begin:ro" if marker.read_only else "begin")
        try:
            result = jp.proceed()
        except marker.rollback_for:
            self.events.append("rollback")
            raise
        self.events.append("commit")
        return result


@mark(Transactional)
class AccountService:
    def __init__(self) -> None:
        self.balance = 100

    def withdraw(self, amount: int) -> int:
        if amount > self.balance:
            raise ValueError("insufficient funds")
        self.balance -= amount
        return self.balance

    @mark(Transactional(read_only=True))
    def current(self) -> int:
        return self.balance


class TestTransactionScenario:
    def test_commit_on_success(self) -> None:
        tx, accounts = _wire(TransactionAspect(), AccountService())
        assert accounts.withdraw(30) == 70
        assert tx.events == ["begin", "commit"]

    def test_rollback_on_error(self) -> None:
        tx, accounts = _wire(TransactionAspect(), AccountService())
        with pytest.raises(ValueError, match="insufficient"):
            accounts.withdraw(500)
        assert tx.events == ["begin", "rollback"]

    def test_method_marker_wins_over_class_marker(self) -> None:
        tx, accounts = _wire(TransactionAspect(), AccountService())
        accounts.current()
        assert tx.events == ["begin:ro", "commit"]


# ---------------------------------------------------------------------------
# Several aspects on one method
# ---------------------------------------------------------------------------


@aspect(id="Audit", priority=1)
class AuditAspect:
    def __init__(self, log: list[str]) -> None:
        self.log = log

    @before("*Service.*")
    def enter(self, jp: JoinPoint) -> None:
        self.log.append(f"audit:{jp.method_name}")

    @after_throwing("*Service.*")
    def failed(self, jp: JoinPoint, error: BaseException) -> None:
        self.log.append(f"audit-failed:{type(error).__name__}")

    @after("*Service.*")
    def leave(self, jp: JoinPoint) -> None:
        self.log.append("audit:done")


@aspect(id="Timing", priority=0)
class TimingAspect:
    def __init__(self, log: list[str]) -> None:
        self.log = log

    @around("@LogExecution")
    def timed(self, jp: JoinPoint) -> Any:
        self.log.append("timing:start")
        try:
            return jp.proceed()
        finally:
            self.log.append("timing:stop")


class ReportService:
    @mark(LogExecution(level="INFO"))
    def build(self, name: str) -> str:
        return f"report:{name}"

    @mark(LogExecution)
    def explode(self) -> None:
        raise KeyError("missing")


class TestCombinedAspects:
    def test_around_wraps_terminal_advices(self) -> None:
        log: list[str] = []
        _, _, reports = _wire(AuditAspect(log), TimingAspect(log), ReportService())
        assert reports.build("q1") == "report:q1"
        assert log == ["timing:start", "audit:build", "audit:done", "timing:stop"]

    def test_error_unwinds_through_every_layer(self) -> None:
        log: list[str] = []
        _, _, reports = _wire(AuditAspect(log), TimingAspect(log), ReportService())
        with pytest.raises(KeyError):
            reports.explode()
        assert log == [
            "timing:start",
            "audit:explode",
            "audit-failed:KeyError",
            "audit:done",
            "timing:stop",
        ]

    @pytest.mark.asyncio
    async def test_async_service(self) -> None:
        log: list[str] = []

        class NotificationService:
            async def send(self, to: str) -> str:
                return f"sent:{to}"

        _, notifications = _wire(AuditAspect(log), NotificationService())
        assert await notifications.send("ops") == "sent:ops"
        assert log == ["audit:send", "audit:done"]
