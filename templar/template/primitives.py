"""
Lexical primitives consumed by the grammar: identifiers and variable paths.

identifier → [A-Za-z_][A-Za-z0-9_]*
variable   → identifier ( "." identifier | "[" digits "]" )*

No whitespace is allowed inside a variable path.
"""

from __future__ import annotations

from typing import List

from .cursor import SourceCursor
from .expr import PathSegment, VariablePath


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or ("0" <= ch <= "9")


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def parse_identifier(cursor: SourceCursor) -> str:
    ch = cursor.peek()
    if ch is None or not _is_ident_start(ch):
        raise cursor.fail("identifier")
    return cursor.take_while(_is_ident_char)


def parse_variable(cursor: SourceCursor) -> VariablePath:
    segments: List[PathSegment] = [parse_identifier(cursor)]

    while True:
        ch = cursor.peek()
        start = cursor.position
        if ch == ".":
            cursor.expect(".")
            ch = cursor.peek()
            if ch is None or not _is_ident_start(ch):
                # "a." is not part of the path
                cursor.position = start
                break
            segments.append(parse_identifier(cursor))
        elif ch == "[":
            cursor.expect("[")
            digits = cursor.take_while(_is_digit)
            if not digits or cursor.peek() != "]":
                cursor.position = start
                break
            cursor.expect("]")
            segments.append(int(digits))
        else:
            break

    return VariablePath(tuple(segments))


__all__ = ["parse_identifier", "parse_variable"]
