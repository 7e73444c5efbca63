"""
Expression model for `{{ ... }}` and directive arguments.

An expression is either a variable path or a function call; both are
immutable values compared structurally and printed in canonical form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

# Attribute name or integer subscript
PathSegment = Union[str, int]


@dataclass(frozen=True)
class VariablePath:
    """
    Dotted variable path with optional subscripts: a.b[0].c

    The first segment is always an identifier.
    """
    segments: Tuple[PathSegment, ...]

    def __post_init__(self):
        if not self.segments or not isinstance(self.segments[0], str):
            raise ValueError("Variable path must start with an identifier")

    @classmethod
    def of(cls, *segments: PathSegment) -> "VariablePath":
        return cls(tuple(segments))

    def __str__(self) -> str:
        parts = [self.segments[0]]
        for seg in self.segments[1:]:
            if isinstance(seg, int):
                parts.append(f"[{seg}]")
            else:
                parts.append(f".{seg}")
        return "".join(str(p) for p in parts)


@dataclass(frozen=True)
class Var:
    """Variable reference: {{ user.name }}"""
    path: VariablePath

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class Fun:
    """Function call: {{ format(a, b.c) }}"""
    name: str
    args: Tuple["Expression", ...] = ()

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


Expression = Union[Var, Fun]


def var(dotted: str) -> Var:
    """Shorthand for building a Var from a plain dotted string (no subscripts)."""
    return Var(VariablePath(tuple(dotted.split("."))))


def expr_to_dict(expr: Expression) -> dict:
    if isinstance(expr, Var):
        return {"type": "Var", "path": list(expr.path.segments)}
    return {"type": "Fun", "name": expr.name, "args": [expr_to_dict(a) for a in expr.args]}


__all__ = ["PathSegment", "VariablePath", "Var", "Fun", "Expression", "var", "expr_to_dict"]
