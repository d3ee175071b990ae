"""Field pattern grammar and matcher.

A field pattern describes which integer values of one calendar field match.
The grammar has five forms:

- ``*``: any value
- ``n``: exactly ``n``
- ``p1,p2,...``: any of the sub-patterns (each may be any other form)
- ``lo-hi``: ``lo <= value <= hi``
- ``*/n``, ``lo-hi/n`` or ``lo/n``: stepped values

Patterns are parsed once into immutable variants; matching a variant never
re-parses the string.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from .exceptions import PatternSyntaxError


class FieldPattern:
    """Base class for compiled field patterns."""

    def matches(self, value: int) -> bool:
        raise NotImplementedError

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Wildcard(FieldPattern):
    def matches(self, value: int) -> bool:
        return True

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True)
class Exact(FieldPattern):
    value: int

    def matches(self, value: int) -> bool:
        return value == self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Span(FieldPattern):
    start: int
    end: int

    def matches(self, value: int) -> bool:
        return self.start <= value <= self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class Step(FieldPattern):
    """Stepped values.

    With no ``start`` the step counts from zero across the whole field
    (``*/n``). Otherwise values are counted from ``start`` up to ``end``.
    """

    step: int
    start: int | None = None
    end: int | None = None

    def matches(self, value: int) -> bool:
        if self.start is None:
            return value % self.step == 0
        end = self.start if self.end is None else self.end
        return self.start <= value <= end and (value - self.start) % self.step == 0

    def __str__(self) -> str:
        if self.start is None:
            return f"*/{self.step}"
        if self.end is None:
            return f"{self.start}/{self.step}"
        return f"{self.start}-{self.end}/{self.step}"


@dataclass(frozen=True)
class AnyOf(FieldPattern):
    items: tuple[FieldPattern, ...]

    def matches(self, value: int) -> bool:
        return any(item.matches(value) for item in self.items)

    def __str__(self) -> str:
        return ",".join(str(item) for item in self.items)


WILDCARD = Wildcard()


def _parse_int(text: str, pattern: str) -> int:
    if not text or not (text.isascii() and text.isdigit()):
        raise PatternSyntaxError(pattern, f"expected a number, got {text!r}")
    return int(text)


def _parse_range(text: str, pattern: str) -> tuple[int, int]:
    parts = text.split("-")
    if len(parts) != 2:
        raise PatternSyntaxError(pattern, f"malformed range {text!r}")
    return _parse_int(parts[0], pattern), _parse_int(parts[1], pattern)


def parse_pattern(text: str) -> FieldPattern:
    """Parse a field pattern string into its compiled form.

    Args:
        text: Pattern string such as ``"*/5"`` or ``"0,15,30-45/5"``

    Returns:
        The compiled FieldPattern

    Raises:
        PatternSyntaxError: If the string is not one of the grammar forms
    """
    if not isinstance(text, str):
        raise PatternSyntaxError(repr(text), "pattern must be a string")
    pattern = text.strip()
    if pattern == "*":
        return WILDCARD
    if "," in pattern:
        return AnyOf(tuple(parse_pattern(part.strip()) for part in pattern.split(",")))
    if "/" in pattern:
        base, _, step_text = pattern.partition("/")
        step = _parse_int(step_text, text)
        if step < 1:
            raise PatternSyntaxError(text, "step must be >= 1")
        if base == "*":
            return Step(step)
        if "-" in base:
            start, end = _parse_range(base, text)
            return Step(step, start, end)
        return Step(step, _parse_int(base, text))
    if "-" in pattern:
        start, end = _parse_range(pattern, text)
        return Span(start, end)
    return Exact(_parse_int(pattern, text))


@lru_cache(maxsize=256)
def _parse_cached(text: str) -> FieldPattern:
    return parse_pattern(text)


def is_match(value: int, pattern: str | FieldPattern) -> bool:
    """Return True when ``value`` satisfies ``pattern``.

    Args:
        value: Field value (second, minute, ...)
        pattern: Pattern string or an already compiled FieldPattern
    """
    if isinstance(pattern, FieldPattern):
        return pattern.matches(value)
    return _parse_cached(pattern).matches(value)


__all__ = [
    "WILDCARD",
    "AnyOf",
    "Exact",
    "FieldPattern",
    "Span",
    "Step",
    "Wildcard",
    "is_match",
    "parse_pattern",
]
