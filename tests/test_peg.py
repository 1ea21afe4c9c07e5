"""Tests for the ordered-choice parsing primitives."""

import pytest
from thrift_idl.core.errors import GrammarActionError, ThriftSyntaxError
from thrift_idl.dsl.peg import (
    Action,
    Capture,
    EndOfInput,
    FirstOf,
    Keyword,
    Leaf,
    Literal,
    Not,
    OneOrMore,
    Optional,
    ParseState,
    Pattern,
    Scope,
    Sequence,
    Token,
    ValueStack,
    ZeroOrMore,
    run,
)


def digits():
    return Leaf(Pattern(r"[0-9]+", "digits"), int)


def test_value_stack_snapshot_restores():
    stack = ValueStack()
    stack.push(1)
    snapshot = stack.snapshot()
    stack.push(2)
    stack.push(3)

    stack.restore(snapshot)

    assert len(stack) == 1
    assert list(stack) == [1]


def test_value_stack_pop_empty_raises():
    with pytest.raises(GrammarActionError):
        ValueStack().pop()
    assert ValueStack().peek() is None


def test_failed_sequence_restores_cursor_and_stack():
    """Test that a failing sequence leaves no pushed values behind."""
    state = ParseState("12+")
    rule = Sequence(digits(), Literal("-"))

    assert rule.parse(state) is False
    assert state.pos == 0
    assert len(state.stack) == 0


def test_first_of_is_ordered():
    rule = FirstOf(Leaf(Literal("a"), lambda t: "first"), Leaf(Literal("ab"), lambda t: "second"))
    state = ParseState("ab")

    assert rule.parse(state)
    assert state.stack.peek() == "first"
    assert state.pos == 1


def test_repetition():
    state = ParseState("1,2,3")
    rule = Sequence(digits(), ZeroOrMore(Sequence(Literal(","), digits())), EndOfInput())

    assert rule.parse(state)
    assert list(state.stack) == [3, 2, 1]
    assert OneOrMore(Literal("x")).parse(ParseState("y")) is False
    assert Optional(Literal("x")).parse(ParseState("y")) is True


def test_zero_or_more_stops_without_progress():
    state = ParseState("abc")

    assert ZeroOrMore(Optional(Literal("z"))).parse(state)
    assert state.pos == 0


def test_not_never_consumes():
    state = ParseState("abc")

    assert Not(Literal("x")).parse(state)
    assert Not(Literal("a")).parse(state) is False
    assert state.pos == 0


def test_keyword_needs_word_boundary():
    assert Keyword("i32").parse(ParseState("i32 x"))
    assert Keyword("i32").parse(ParseState("i32x")) is False
    assert Keyword("py").parse(ParseState("py.twisted")) is False


def test_capture_and_scope():
    """Test that captures land in a frame local to one scope."""
    seen = []

    def record(state):
        seen.append(dict(state.frame))

    inner = Scope(Sequence(Capture("n", digits()), Action(record)))
    state = ParseState("7")

    assert inner.parse(state)
    assert seen == [{"n": 7}]
    assert state.frame == {}
    assert len(state.stack) == 0


def test_backtracking_restores_frame():
    state = ParseState("5x")
    rule = Sequence(Capture("n", digits()), Literal("y"))

    assert rule.parse(state) is False
    assert state.frame == {}


def test_run_reports_furthest_failure():
    rule = Sequence(Literal("a\n"), Token("number", digits()), EndOfInput())

    with pytest.raises(ThriftSyntaxError) as exc_info:
        run(rule, "a\nzz", source="mem")

    error = exc_info.value
    assert (error.line, error.column, error.position) == (2, 1, 2)
    assert error.expected == ("number",)
    assert error.source == "mem"
