"""Ordered-choice (PEG) parsing primitives.

A grammar is a graph of ``Rule`` objects.  ``Rule.parse(state)`` either
matches at ``state.pos`` and advances, or returns False leaving the state as
it found it (cursor, value stack and capture frame).  Rules hold no per-parse
data, so one grammar can serve any number of parses at once.

Semantic actions run as the grammar matches: ``Leaf`` pushes a node built from
the matched text, ``Capture`` moves the entry a rule just pushed into the
current production's frame, and ``Action`` runs a reduction over the stack.
"""

import re
from collections.abc import Callable, Iterator
from typing import Any

from ..core.errors import GrammarActionError, NestingTooDeepError, ThriftSyntaxError


class ValueStack:
    """Persistent linked stack; snapshots are O(1) and restore exactly."""

    __slots__ = ("_top", "_size")

    def __init__(self):
        self._top: tuple | None = None
        self._size = 0

    def push(self, value: Any) -> None:
        self._top = (value, self._top)
        self._size += 1

    def peek(self) -> Any:
        if self._top is None:
            return None
        return self._top[0]

    def pop(self) -> Any:
        if self._top is None:
            raise GrammarActionError("pop from an empty value stack")
        value, self._top = self._top
        self._size -= 1
        return value

    def snapshot(self) -> tuple:
        return (self._top, self._size)

    def restore(self, snapshot: tuple) -> None:
        self._top, self._size = snapshot

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Any]:
        cell = self._top
        while cell is not None:
            yield cell[0]
            cell = cell[1]


class ParseState:
    """Everything that changes while one input is parsed."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.stack = ValueStack()
        self.frame: dict[str, Any] = {}
        self.furthest = 0
        self.expected: set[str] = set()
        self._quiet = 0

    def mark(self) -> tuple:
        return (self.pos, self.stack.snapshot(), self.frame)

    def reset(self, mark: tuple) -> None:
        self.pos, snapshot, self.frame = mark
        self.stack.restore(snapshot)

    def capture(self, slot: str, value: Any) -> None:
        # Copy on write so marks taken earlier keep the old frame.
        self.frame = {**self.frame, slot: value}

    def fail(self, label: str, pos: int | None = None) -> None:
        if self._quiet:
            return
        if pos is None:
            pos = self.pos
        if pos > self.furthest:
            self.furthest = pos
            self.expected = {label}
        elif pos == self.furthest:
            self.expected.add(label)

    def line_column(self, pos: int) -> tuple[int, int]:
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def syntax_error(self, source: str | None = None) -> ThriftSyntaxError:
        line, column = self.line_column(self.furthest)
        return ThriftSyntaxError(self.furthest, line, column, self.expected, source)


class Rule:
    label: str = "?"

    def parse(self, state: ParseState) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label}>"


class Literal(Rule):
    def __init__(self, text: str):
        self.text = text
        self.label = repr(text)

    def parse(self, state):
        if state.text.startswith(self.text, state.pos):
            state.pos += len(self.text)
            return True
        state.fail(self.label)
        return False


class Pattern(Rule):
    """Match a regular expression anchored at the cursor."""

    def __init__(self, regex: str, label: str | None = None):
        self.regex = re.compile(regex)
        self.label = label or regex

    def parse(self, state):
        m = self.regex.match(state.text, state.pos)
        if m is None:
            state.fail(self.label)
            return False
        state.pos = m.end()
        return True


IDENT_CHAR = r"[A-Za-z0-9_.]"


class Keyword(Pattern):
    """A word that must not run on into an identifier."""

    def __init__(self, word: str):
        super().__init__(re.escape(word) + f"(?!{IDENT_CHAR})", repr(word))


class Sequence(Rule):
    def __init__(self, *rules: Rule | None):
        self.rules = tuple(r for r in rules if r is not None)
        self.label = " ".join(r.label for r in self.rules)

    def parse(self, state):
        mark = state.mark()
        for rule in self.rules:
            if not rule.parse(state):
                state.reset(mark)
                return False
        return True


class FirstOf(Rule):
    """Ordered choice: the first alternative that matches wins."""

    def __init__(self, *rules: Rule):
        self.rules = rules
        self.label = " | ".join(r.label for r in rules)

    def parse(self, state):
        for rule in self.rules:
            if rule.parse(state):
                return True
        return False


class ZeroOrMore(Rule):
    def __init__(self, rule: Rule):
        self.rule = rule
        self.label = f"({rule.label})*"

    def parse(self, state):
        while True:
            start = state.pos
            if not self.rule.parse(state) or state.pos == start:
                return True


class OneOrMore(Rule):
    def __init__(self, rule: Rule):
        self.rule = rule
        self.label = f"({rule.label})+"

    def parse(self, state):
        if not self.rule.parse(state):
            return False
        while True:
            start = state.pos
            if not self.rule.parse(state) or state.pos == start:
                return True


class Optional(Rule):
    def __init__(self, rule: Rule):
        self.rule = rule
        self.label = f"({rule.label})?"

    def parse(self, state):
        self.rule.parse(state)
        return True


class Not(Rule):
    """Negative lookahead; never consumes input."""

    def __init__(self, rule: Rule):
        self.rule = rule
        self.label = f"!{rule.label}"

    def parse(self, state):
        mark = state.mark()
        state._quiet += 1
        try:
            matched = self.rule.parse(state)
        finally:
            state._quiet -= 1
        state.reset(mark)
        return not matched


class EndOfInput(Rule):
    label = "end of input"

    def parse(self, state):
        if state.pos == len(state.text):
            return True
        state.fail(self.label)
        return False


class Forward(Rule):
    """Placeholder for a rule defined later, for recursive productions."""

    def __init__(self, label: str):
        self.label = label
        self.rule: Rule | None = None

    def define(self, rule: Rule) -> "Forward":
        self.rule = rule
        return self

    def parse(self, state):
        return self.rule.parse(state)


class Token(Rule):
    """Report failures of ``rule`` as a single named expectation at its start."""

    def __init__(self, label: str, rule: Rule):
        self.label = label
        self.rule = rule

    def parse(self, state):
        start = state.pos
        state._quiet += 1
        try:
            matched = self.rule.parse(state)
        finally:
            state._quiet -= 1
        if not matched:
            state.fail(self.label, start)
        return matched


class Action(Rule):
    """Run ``fn(state)`` without consuming input; always succeeds."""

    def __init__(self, fn: Callable[[ParseState], None]):
        self.fn = fn
        self.label = getattr(fn, "__name__", "action")

    def parse(self, state):
        self.fn(state)
        return True


class Leaf(Rule):
    """Push ``build(matched_text)`` after ``rule`` matches."""

    def __init__(self, rule: Rule, build: Callable[[str], Any]):
        self.rule = rule
        self.build = build
        self.label = rule.label

    def parse(self, state):
        start = state.pos
        if not self.rule.parse(state):
            return False
        state.stack.push(self.build(state.text[start:state.pos]))
        return True


class Capture(Rule):
    """Move the single entry ``rule`` pushed into the frame slot ``slot``."""

    def __init__(self, slot: str, rule: Rule):
        self.slot = slot
        self.rule = rule
        self.label = rule.label

    def parse(self, state):
        if not self.rule.parse(state):
            return False
        state.capture(self.slot, state.stack.pop())
        return True


class SetSlot(Rule):
    """Store a constant in the frame; always succeeds."""

    def __init__(self, slot: str, value: Any = True):
        self.slot = slot
        self.value = value
        self.label = slot

    def parse(self, state):
        state.capture(self.slot, self.value)
        return True


class Scope(Rule):
    """Give one invocation of ``rule`` its own fresh capture frame."""

    def __init__(self, rule: Rule):
        self.rule = rule
        self.label = rule.label

    def parse(self, state):
        outer = state.frame
        state.frame = {}
        try:
            return self.rule.parse(state)
        finally:
            state.frame = outer


def run(rule: Rule, text: str, source: str | None = None) -> ParseState:
    """Match ``rule`` against ``text``; raise ThriftSyntaxError on failure.

    Input nested past the interpreter's recursion limit raises
    NestingTooDeepError, a ThriftSyntaxError carrying the position reached.
    """
    state = ParseState(text)
    try:
        matched = rule.parse(state)
    except RecursionError:
        line, column = state.line_column(state.pos)
        raise NestingTooDeepError(state.pos, line, column, source) from None
    if not matched:
        raise state.syntax_error(source)
    return state
