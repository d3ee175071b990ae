"""Exceptions raised while building schedules."""

from __future__ import annotations


class DomainRangeError(ValueError):
    """Raised when a value, bound, step or timezone falls outside its domain."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            field: Name of the offending field, if any
        """
        self.field = field
        super().__init__(message)


class UnknownSymbolError(TypeError):
    """Raised for an unrecognized month/weekday name or field name."""

    def __init__(self, symbol: str, field: str | None = None) -> None:
        self.symbol = symbol
        self.field = field
        if field:
            message = f'Unknown {field} name: "{symbol}"'
        else:
            message = f'Unknown field: "{symbol}"'
        super().__init__(message)


class PatternSyntaxError(ValueError):
    """Raised when a field pattern string is not one of the grammar forms."""

    def __init__(self, pattern: str, reason: str = "") -> None:
        self.pattern = pattern
        message = f"Invalid field pattern {pattern!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


__all__ = ["DomainRangeError", "PatternSyntaxError", "UnknownSymbolError"]
