"""
Recursive-descent parser for template text.

Works directly on the character stream with ordered-choice backtracking.
Top level: many(construct) followed by end of input, where construct is
tried in this order:

literal | {{ expr }} | {% if %} | {% for %} | {% include %} | {% raw %}
        | {% extends %} | {% block %} | {{ super() }} | {# comment #}

Whitespace trimming is handled through ParserState.leading_spaces: before a
construct is attempted, the whitespace run in front of it is captured as a
pending Literal. A construct opened with "{%-" discards that capture; one
closed with "-%}" also swallows the whitespace after the delimiter. When a
construct succeeds, a pending capture is emitted just before its node.
Closing tags (else / endif / endfor / endblock / endraw) fold the whitespace
captured in front of them into the body they terminate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple, TypeVar

from .cursor import NoMatch, SourceCursor
from .expr import Expression, Fun, Var
from .nodes import (
    Block, Comment, Condition, Eval, Extends, Foreach, Include, Literal, Raw, Super,
    UnresolvedAST, UnresolvedNode,
)
from .primitives import parse_identifier, parse_variable
from ..errors import TemplateSyntaxError

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class ParserState:
    """
    State threaded through one file's parse.

    leading_spaces: whitespace captured before the most recent construct,
        pending re-emission (None when absent or discarded by a trim marker).
    in_base_template: False once an extends directive has been consumed.
    """
    leading_spaces: Optional[Literal] = None
    in_base_template: bool = True


Checkpoint = Tuple[int, ParserState]


class TemplateParser:
    """
    Parser for a single template file.

    State is local to the instance; a fresh parser is created per file, so
    nothing leaks between nested file parses.
    """

    def __init__(self, text: str, path: Optional[str] = None):
        self.cursor = SourceCursor(text)
        self.state = ParserState()
        self.path = path

    # ---- Entry point ----

    def parse(self) -> UnresolvedAST:
        """
        Parses the whole text.

        Raises:
            TemplateSyntaxError: if any input remains unconsumed or the
                constructs are nested deeper than the interpreter stack allows
        """
        try:
            nodes = self._nodes()
        except RecursionError:
            raise self._nesting_error() from None
        if not self.cursor.at_end():
            raise self._syntax_error()
        return tuple(nodes)

    def _nesting_error(self) -> TemplateSyntaxError:
        position = self.cursor.position
        line, column = self.cursor.line_column(position)
        logger.debug("Nesting too deep at %d:%d", line, column)
        return TemplateSyntaxError(
            expected="nesting too deep",
            remainder=self.cursor.text[position:],
            position=position,
            line=line,
            column=column,
            path=self.path,
        )

    def _syntax_error(self) -> TemplateSyntaxError:
        # Report the furthest point any alternative reached, not where the
        # top-level loop stopped
        position, expected = self.cursor.furthest_failure()
        line, column = self.cursor.line_column(position)
        logger.debug("Syntax error at %d:%d, expected %s", line, column, expected)
        return TemplateSyntaxError(
            expected=expected,
            remainder=self.cursor.text[position:],
            position=position,
            line=line,
            column=column,
            path=self.path,
        )

    # ---- Backtracking combinators ----

    def _mark(self) -> Checkpoint:
        return self.cursor.position, self.state

    def _rewind(self, mark: Checkpoint) -> None:
        self.cursor.position, self.state = mark

    def _attempt(self, rule: Callable[[], T]) -> Optional[Tuple[T]]:
        """Runs a rule; on failure rewinds and returns None. Success is wrapped in a 1-tuple."""
        mark = self._mark()
        try:
            return (rule(),)
        except NoMatch:
            self._rewind(mark)
            return None

    def _choice(self, *rules: Callable[[], T]) -> T:
        for rule in rules:
            result = self._attempt(rule)
            if result is not None:
                return result[0]
        raise self.cursor.fail("a template construct")

    def _sep_by(self, item: Callable[[], T], sep: str) -> List[T]:
        first = self._attempt(item)
        if first is None:
            return []
        items = [first[0]]
        while True:
            def step() -> T:
                self.cursor.expect(sep)
                return item()
            nxt = self._attempt(step)
            if nxt is None:
                return items
            items.append(nxt[0])

    # ---- Whitespace-trim engine ----

    def _set_leading_spaces(self, spaces: Optional[Literal]) -> None:
        self.state = replace(self.state, leading_spaces=spaces)

    def _save_leading_spaces(self) -> None:
        spaces = self.cursor.take_while(str.isspace)
        self._set_leading_spaces(Literal(spaces) if spaces else None)

    def _statement(self, body: Callable[[], T]) -> T:
        """
        {% body %} with optional trim markers on either side.

        "{%-" drops the captured leading whitespace; "-%}" consumes the
        whitespace following the delimiter.
        """
        def opened_with(opener: str) -> T:
            self._save_leading_spaces()
            self.cursor.expect(opener)
            self.cursor.skip_space()
            result = body()
            self.cursor.skip_space()
            if self._attempt(lambda: self.cursor.expect("%}")) is None:
                self.cursor.expect("-%}")
                self.cursor.skip_space()
            return result

        def trimmed() -> T:
            result = opened_with("{%-")
            self._set_leading_spaces(None)
            return result

        return self._choice(lambda: opened_with("{%"), trimmed)

    def _with_leading_spaces_of(self, opening: Callable[[], T], rest: Callable[[T], U]) -> U:
        """
        Parses an opening tag, then the rest of the construct, and restores
        the whitespace captured in front of the opening tag so that it is
        emitted before the construct rather than before its closing tag.
        """
        opened = opening()
        spaces = self.state.leading_spaces
        result = rest(opened)
        self._set_leading_spaces(spaces)
        return result

    def _pending(self) -> List[UnresolvedNode]:
        spaces = self.state.leading_spaces
        return [spaces] if spaces is not None else []

    # ---- Construct sequence ----

    def _nodes(self) -> List[UnresolvedNode]:
        nodes: List[UnresolvedNode] = []
        constructs = (
            self._literal,
            self._eval,
            self._condition,
            self._foreach,
            self._include,
            self._raw,
            self._extends,
            self._block,
            self._super,
            self._comment,
        )

        while not self.cursor.at_end():
            mark = self._mark()
            self._set_leading_spaces(None)
            try:
                node = self._choice(*constructs)
            except NoMatch:
                self._rewind(mark)
                break
            nodes.extend(self._pending())
            nodes.append(node)

        return nodes

    # ---- Expressions ----

    def _expr(self) -> Expression:
        return self._choice(self._function, lambda: Var(parse_variable(self.cursor)))

    def _function(self) -> Fun:
        name = parse_identifier(self.cursor)
        self.cursor.skip_space()
        if name == "super":
            # Reserved for the dedicated {{ super() }} construct
            raise self.cursor.fail("function name other than 'super'")
        self.cursor.expect("(")

        def argument() -> Expression:
            self.cursor.skip_space()
            arg = self._expr()
            self.cursor.skip_space()
            return arg

        args = self._sep_by(argument, ",")
        self.cursor.expect(")")
        return Fun(name, tuple(args))

    def _quoted_path(self) -> str:
        def quoted_by(quote: str) -> str:
            self.cursor.expect(quote)
            return self.cursor.take_until(quote)

        return self._choice(lambda: quoted_by('"'), lambda: quoted_by("'"))

    # ---- Constructs ----

    def _literal(self) -> Literal:
        """
        Maximal run of text without "{".

        Whitespace directly in front of a "{" is left unconsumed so that the
        following construct can capture (or trim) it.
        """
        parts: List[str] = []
        while True:
            start = self.cursor.position
            spaces = self.cursor.take_while(str.isspace)
            ch = self.cursor.peek()
            if ch is None:
                if spaces:
                    parts.append(spaces)
                break
            if ch == "{":
                self.cursor.position = start
                break
            word = self.cursor.take_while(lambda c: c != "{" and not c.isspace())
            parts.append(spaces + word)

        if not parts:
            raise self.cursor.fail("text")
        return Literal("".join(parts))

    def _eval(self) -> Eval:
        self._save_leading_spaces()
        self.cursor.expect("{{")
        self.cursor.skip_space()
        expr = self._expr()
        self.cursor.skip_space()
        self.cursor.expect("}}")
        return Eval(expr)

    def _else_branch(self) -> Optional[List[UnresolvedNode]]:
        def branch() -> List[UnresolvedNode]:
            return self._with_leading_spaces_of(
                lambda: self._statement(lambda: self.cursor.expect("else")),
                lambda _: self._nodes(),
            )

        result = self._attempt(branch)
        return None if result is None else result[0]

    def _branches(self, end_keyword: str) -> Tuple[Tuple[UnresolvedNode, ...], Optional[Tuple[UnresolvedNode, ...]]]:
        """
        Body, optional else body and the closing tag shared by if and for.

        Whitespace before {% else %} closes the first body, whitespace before
        the end tag closes whichever body is last.
        """
        first = self._nodes()
        second = self._else_branch()
        before_else = self._pending()
        self._statement(lambda: self.cursor.expect(end_keyword))
        before_end = self._pending()

        if second is None:
            return tuple(first + before_end), None
        return tuple(first + before_else), tuple(second + before_end)

    def _condition(self) -> Condition:
        def opening() -> Expression:
            self.cursor.expect("if")
            self.cursor.skip_space1()
            return self._expr()

        def rest(cond: Expression) -> Condition:
            then, else_body = self._branches("endif")
            return Condition(cond, then, else_body)

        return self._with_leading_spaces_of(lambda: self._statement(opening), rest)

    def _foreach(self) -> Foreach:
        def opening() -> Tuple[str, Expression]:
            self.cursor.expect("for")
            self.cursor.skip_space1()
            binder = parse_identifier(self.cursor)
            self.cursor.skip_space1()
            self.cursor.expect("in")
            self.cursor.skip_space1()
            return binder, self._expr()

        def rest(header: Tuple[str, Expression]) -> Foreach:
            body, else_body = self._branches("endfor")
            return Foreach(header[0], header[1], body, else_body)

        return self._with_leading_spaces_of(lambda: self._statement(opening), rest)

    def _include(self) -> Include:
        def body() -> str:
            self.cursor.expect("include")
            self.cursor.skip_space()
            return self._quoted_path()

        return Include(self._statement(body))

    def _raw(self) -> Raw:
        def rest(_: str) -> Raw:
            chars: List[str] = []
            while True:
                closed = self._attempt(lambda: self._statement(lambda: self.cursor.expect("endraw")))
                if closed is not None:
                    break
                # A failed close at the start of a whitespace run fails at every
                # position inside it
                run = self.cursor.take_while(str.isspace)
                chars.append(run or self.cursor.any_char())
            spaces = self.state.leading_spaces
            return Raw("".join(chars) + (spaces.text if spaces is not None else ""))

        return self._with_leading_spaces_of(
            lambda: self._statement(lambda: self.cursor.expect("raw")), rest
        )

    def _extends(self) -> Extends:
        if not self.state.in_base_template:
            raise self.cursor.fail("at most one extends per template")

        def body() -> str:
            self.cursor.expect("extends")
            self.cursor.skip_space()
            return self._quoted_path()

        path = self._statement(body)
        self.state = replace(self.state, in_base_template=False)
        return Extends(path)

    def _block(self) -> Block:
        defined_in_base = self.state.in_base_template

        def opening() -> str:
            self.cursor.expect("block")
            self.cursor.skip_space1()
            return parse_identifier(self.cursor)

        def end_name() -> str:
            self.cursor.skip_space1()
            return parse_identifier(self.cursor)

        def closing() -> Optional[str]:
            self.cursor.expect("endblock")
            named = self._attempt(end_name)
            return None if named is None else named[0]

        def rest(name: str) -> Block:
            body = self._nodes()
            closing_name = self._statement(closing)
            if closing_name is not None and closing_name != name:
                raise self.cursor.fail(f"endblock for '{name}'")
            return Block(defined_in_base, name, False, tuple(body + self._pending()))

        return self._with_leading_spaces_of(lambda: self._statement(opening), rest)

    def _super(self) -> Super:
        self._save_leading_spaces()
        self.cursor.expect("{{")
        self.cursor.skip_space()
        self.cursor.expect("super")
        self.cursor.skip_space()
        self.cursor.expect("(")
        self.cursor.skip_space()
        self.cursor.expect(")")
        self.cursor.skip_space()
        self.cursor.expect("}}")
        return Super()

    def _comment(self) -> Comment:
        self._save_leading_spaces()
        self.cursor.expect("{#")
        return Comment(self.cursor.take_until("#}"))


def parse_template(text: str, path: Optional[str] = None) -> UnresolvedAST:
    """
    Parses template text into an unresolved node sequence.

    Args:
        text: Template source
        path: Source file, used only in error messages

    Raises:
        TemplateSyntaxError: on any grammar mismatch
    """
    return TemplateParser(text, path).parse()


__all__ = ["ParserState", "TemplateParser", "parse_template"]
