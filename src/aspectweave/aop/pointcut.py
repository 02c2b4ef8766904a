"""Pointcuts — pure predicates selecting which method calls an advice applies to."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from aspectweave.aop.descriptor import MethodDescriptor, find_marker
from aspectweave.kernel.exceptions import PointcutParseError

_METHOD_SEGMENT_RE = re.compile(r"[A-Za-z_*][A-Za-z0-9_*]*")
_MARKER_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*")


@runtime_checkable
class Pointcut(Protocol):
    """Predicate over a method descriptor and an optional target instance.

    Implementations must be pure: identical inputs yield identical results.
    """

    def matches(self, method: MethodDescriptor, instance: Any = None) -> bool: ...


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile *pattern* into an anchored regex where ``*`` matches any substring."""
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.DOTALL)


def _matcher(pattern: str) -> re.Pattern[str] | None:
    return _glob_to_regex(pattern) if "*" in pattern else None


@dataclass(frozen=True)
class MethodPattern:
    """Match by method name and, optionally, class name.

    ``*`` matches any substring; a pattern without ``*`` requires equality.
    A class pattern containing a dot is compared with the fully qualified
    ``module.QualName`` of the class, otherwise with its short name.

    >>> MethodPattern("save*", "*Repository")
    MethodPattern(method_pattern='save*', class_pattern='*Repository')
    """

    method_pattern: str
    class_pattern: str | None = None
    _method_re: re.Pattern[str] | None = field(init=False, repr=False, compare=False)
    _class_re: re.Pattern[str] | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_method_re", _matcher(self.method_pattern))
        object.__setattr__(
            self,
            "_class_re",
            _matcher(self.class_pattern) if self.class_pattern is not None else None,
        )

    def matches(self, method: MethodDescriptor, instance: Any = None) -> bool:
        if not _match(self.method_pattern, self._method_re, method.name):
            return False
        if self.class_pattern is None:
            return True
        type_name = method.qualified_type_name if "." in self.class_pattern else method.type_name
        return _match(self.class_pattern, self._class_re, type_name)

    @classmethod
    def parse(cls, expression: str) -> MethodPattern:
        """Parse ``"ClassPattern.methodPattern"`` or a bare ``"methodPattern"``.

        The method pattern is whatever follows the last dot, so qualified
        class patterns such as ``"app.repos.*Repository.save*"`` work.
        """
        text = expression.strip()
        if not text:
            raise PointcutParseError(expression, "expression is empty")
        class_pattern, _, method_pattern = text.rpartition(".")
        if not _METHOD_SEGMENT_RE.fullmatch(method_pattern):
            raise PointcutParseError(expression, f"invalid method pattern {method_pattern!r}")
        if not class_pattern:
            if text.startswith("."):
                raise PointcutParseError(expression, "class pattern is empty")
            return cls(method_pattern)
        for segment in class_pattern.split("."):
            if not _METHOD_SEGMENT_RE.fullmatch(segment):
                raise PointcutParseError(expression, f"invalid class pattern segment {segment!r}")
        return cls(method_pattern, class_pattern)


def _match(pattern: str, regex: re.Pattern[str] | None, value: str) -> bool:
    if regex is None:
        return value == pattern
    return regex.fullmatch(value) is not None


@dataclass(frozen=True)
class Annotation:
    """Match methods carrying a marker, on the method itself or its class.

    *marker_type* is a marker class or a string identifier naming it.
    """

    marker_type: type | str

    def matches(self, method: MethodDescriptor, instance: Any = None) -> bool:
        return find_marker(method, self.marker_type) is not None

    def marker_data(self, method: MethodDescriptor) -> Any | None:
        """Return the matching marker, preferring the method-level one."""
        return find_marker(method, self.marker_type)

    @classmethod
    def parse(cls, expression: str) -> Annotation:
        """Parse ``"@MarkerName"`` (the leading ``@`` is optional)."""
        name = expression.strip().removeprefix("@")
        if not _MARKER_NAME_RE.fullmatch(name):
            raise PointcutParseError(expression, "invalid marker identifier")
        return cls(name)


class Operator(enum.Enum):
    """How a :class:`Composite` combines its children."""

    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class Composite:
    """Combine child pointcuts with AND or OR.

    Evaluation short-circuits.  An empty composite never matches.
    """

    children: tuple[Pointcut, ...]
    operator: Operator = Operator.AND

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def matches(self, method: MethodDescriptor, instance: Any = None) -> bool:
        if not self.children:
            return False
        if self.operator is Operator.AND:
            return all(child.matches(method, instance) for child in self.children)
        return any(child.matches(method, instance) for child in self.children)


def all_of(*children: Pointcut) -> Composite:
    return Composite(children, Operator.AND)


def any_of(*children: Pointcut) -> Composite:
    return Composite(children, Operator.OR)


def parse(expression: str | Pointcut) -> Pointcut:
    """Build a pointcut from an expression.

    ``"@Marker"`` yields an :class:`Annotation`; anything else is parsed as a
    :class:`MethodPattern`.  Pointcut objects are returned unchanged.

    Raises:
        PointcutParseError: If the expression is malformed.
    """
    if not isinstance(expression, str):
        if isinstance(expression, Pointcut):
            return expression
        raise PointcutParseError(repr(expression), "not a string or pointcut")
    if expression.strip().startswith("@"):
        return Annotation.parse(expression)
    return MethodPattern.parse(expression)
