"""
Character cursor for the template grammar.

The grammar works directly on the character stream (there is no separate
lexer pass), so the cursor provides the primitive matching operations,
checkpoint/rewind for ordered-choice backtracking, and bookkeeping of the
furthest failure for error reporting.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple


class NoMatch(Exception):
    """
    Backtrack signal raised by a grammar rule that does not match.

    Never escapes the parser: the top level converts the furthest failure
    into a TemplateSyntaxError.
    """

    def __init__(self, expected: str, position: int):
        super().__init__(f"expected {expected} at {position}")
        self.expected = expected
        self.position = position


class SourceCursor:
    """
    Position in template text with matching primitives.

    Every failing primitive raises NoMatch and records the failure position;
    the caller is responsible for rewinding to a checkpoint.
    """

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self.length = len(text)

        # Furthest point the grammar reached before failing
        self._furthest_position = 0
        self._furthest_expected = "end of input"

    def at_end(self) -> bool:
        return self.position >= self.length

    def peek(self) -> Optional[str]:
        """Returns the current character or None at end of input."""
        if self.position >= self.length:
            return None
        return self.text[self.position]

    def remainder(self) -> str:
        return self.text[self.position:]

    def startswith(self, literal: str) -> bool:
        return self.text.startswith(literal, self.position)

    def fail(self, expected: str) -> NoMatch:
        """Records a failure at the current position and returns the signal to raise."""
        if self.position >= self._furthest_position:
            self._furthest_position = self.position
            self._furthest_expected = expected
        return NoMatch(expected, self.position)

    def expect(self, literal: str) -> str:
        """Consumes exactly `literal`."""
        if not self.text.startswith(literal, self.position):
            raise self.fail(repr(literal))
        self.position += len(literal)
        return literal

    def any_char(self) -> str:
        if self.position >= self.length:
            raise self.fail("any character")
        ch = self.text[self.position]
        self.position += 1
        return ch

    def take_while(self, pred: Callable[[str], bool]) -> str:
        start = self.position
        while self.position < self.length and pred(self.text[self.position]):
            self.position += 1
        return self.text[start:self.position]

    def take_while1(self, pred: Callable[[str], bool], expected: str) -> str:
        taken = self.take_while(pred)
        if not taken:
            raise self.fail(expected)
        return taken

    def take_until(self, terminator: str) -> str:
        """Consumes everything up to and including `terminator`, returns the text before it."""
        index = self.text.find(terminator, self.position)
        if index < 0:
            raise self.fail(repr(terminator))
        taken = self.text[self.position:index]
        self.position = index + len(terminator)
        return taken

    def skip_space(self) -> None:
        self.take_while(str.isspace)

    def skip_space1(self) -> None:
        self.take_while1(str.isspace, "whitespace")

    # ---- Error reporting ----

    def furthest_failure(self) -> Tuple[int, str]:
        return self._furthest_position, self._furthest_expected

    def line_column(self, position: int) -> Tuple[int, int]:
        """1-based line and column of a position."""
        line = self.text.count("\n", 0, position) + 1
        last_newline = self.text.rfind("\n", 0, position)
        return line, position - last_newline


__all__ = ["NoMatch", "SourceCursor"]
