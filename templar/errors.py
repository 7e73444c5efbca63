"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from TemplarUserError.

Programming errors and bugs should NOT inherit from TemplarUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import List, Optional


class TemplarUserError(Exception):
    """
    Base class for all user-facing errors in templar.

    These errors indicate problems that the user can fix:
    malformed templates, missing files, reference cycles, bad configuration.
    """
    pass


class TemplateSyntaxError(TemplarUserError):
    """Template text does not match the grammar."""

    def __init__(
        self,
        expected: str,
        remainder: str,
        position: int,
        line: int,
        column: int,
        path: Optional[str] = None,
    ):
        self.expected = expected
        self.remainder = remainder
        self.position = position
        self.line = line
        self.column = column
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        where = f"{self.path or '<string>'}:{self.line}:{self.column}"
        snippet = self.remainder[:30].replace("\n", "\\n")
        return f"{where}: syntax error: expected {self.expected} near '{snippet}'"


class TemplateReferenceError(TemplarUserError):
    """An include/extends target (or the root template) cannot be read."""

    def __init__(self, path: str, kind: str = "template", reason: str = ""):
        self.path = path
        self.kind = kind
        self.reason = reason
        msg = f"Cannot read {kind} '{path}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class TemplateCycleError(TemplarUserError):
    """Circular include/extends chain."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__(f"Circular template reference: {' -> '.join(cycle)}")


class ConfigError(TemplarUserError):
    """Invalid templar.yaml."""
    pass


__all__ = [
    "TemplarUserError",
    "TemplateSyntaxError",
    "TemplateReferenceError",
    "TemplateCycleError",
    "ConfigError",
]
