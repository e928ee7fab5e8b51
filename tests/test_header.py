"""Tests for seqmacro.header and seqmacro.ranges modules."""

import pytest

from seqmacro.header import Sequence, parse_sequence, parse_int_literal
from seqmacro.lexer import tokenize
from seqmacro.ranges import SequenceRange
from seqmacro.tokens import HeaderSyntaxError, Ident, Lit, Span


def _parse(text: str) -> Sequence:
    return parse_sequence(tokenize(text))


class TestSequenceRange:
    """Tests for the range model."""

    def test_exclusive(self):
        assert list(SequenceRange(0, 4).values()) == [0, 1, 2, 3]

    def test_inclusive(self):
        assert list(SequenceRange(0, 4, True).values()) == [0, 1, 2, 3, 4]

    def test_single_inclusive(self):
        assert list(SequenceRange(5, 5, True).values()) == [5]

    def test_empty(self):
        assert list(SequenceRange(3, 3)) == []
        assert len(SequenceRange(3, 3)) == 0

    def test_reversed_is_empty(self):
        assert list(SequenceRange(5, 2)) == []
        assert len(SequenceRange(5, 2, True)) == 0

    def test_yields_literals(self):
        assert list(SequenceRange(8, 11)) == [Lit("8"), Lit("9"), Lit("10")]

    def test_restartable(self):
        r = SequenceRange(1, 3)
        assert list(r) == list(r) == [Lit("1"), Lit("2")]

    def test_len(self):
        assert len(SequenceRange(2, 7)) == 5
        assert len(SequenceRange(2, 7, True)) == 6

    def test_str(self):
        assert str(SequenceRange(0, 4)) == "0..4"
        assert str(SequenceRange(0, 4, True)) == "0..=4"


class TestParseIntLiteral:
    """Tests for parse_int_literal."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("0", 0),
            ("16", 16),
            ("1_000", 1000),
            ("0x10", 16),
            ("0o17", 15),
            ("0b101", 5),
            ("3usize", 3),
            ("255u8", 255),
            ("007", 7),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_int_literal(text) == expected

    @pytest.mark.parametrize("text", ["1.5", "1e3", "2f32", "0x", "0x_", "\"3\"", "'a'", "3u7"])
    def test_invalid(self, text):
        assert parse_int_literal(text) is None


class TestParseSequence:
    """Tests for parse_sequence."""

    def test_exclusive(self):
        s = _parse("N in 0..4 { f(N); }")
        assert s.ident == Ident("N")
        assert s.range == SequenceRange(0, 4, False)
        assert s.content == tokenize("f(N);")

    def test_inclusive(self):
        s = _parse("i in 1..=3 {}")
        assert s.range == SequenceRange(1, 3, True)
        assert s.content == ()

    def test_suffixed_bounds(self):
        s = _parse("N in 0usize..0x10 { }")
        assert s.range == SequenceRange(0, 16)

    def test_spaced_range_operator(self):
        s = _parse("N in 0 .. = 2 { }")
        assert s.range == SequenceRange(0, 2, True)

    def test_body_not_mutated(self):
        toks = tokenize("N in 0..2 { a N }")
        _ = parse_sequence(toks)
        assert toks == tokenize("N in 0..2 { a N }")


class TestParseSequenceErrors:
    """Tests for header error reporting."""

    @pytest.mark.parametrize(
        "text, fragment",
        [
            ("", "expected identifier"),
            ("1 in 0..2 {}", "expected identifier"),
            ("N 0..2 {}", "expected `in`"),
            ("N of 0..2 {}", "expected `in`"),
            ("N in a..2 {}", "integer literal"),
            ("N in 0 2 {}", "expected `..`"),
            ("N in 0. .2 {}", "expected `..`"),
            ("N in 0...2 {}", "integer literal"),
            ("N in 0..b {}", "integer literal"),
            ("N in 1.5..2 {}", "non-negative integer"),
            ("N in 0..-2 {}", "integer literal"),
            ("N in 0..2", "curly braces"),
            ("N in 0..2 ( )", "curly braces"),
            ("N in 0..2 [ ]", "curly braces"),
            ("N in 0..2 {} extra", "unexpected token"),
        ],
    )
    def test_error(self, text, fragment):
        with pytest.raises(HeaderSyntaxError) as exc:
            _parse(text)
        assert fragment in str(exc.value)

    def test_error_anchored_at_token(self):
        with pytest.raises(HeaderSyntaxError) as exc:
            _parse("N in 0..2\n  (x)")
        assert exc.value.span == Span(2, 3)

    def test_end_of_input_anchored_at_last_token(self):
        with pytest.raises(HeaderSyntaxError) as exc:
            _parse("N in 0..2")
        assert exc.value.span == Span(1, 9)
        assert "unexpected end of input" in str(exc.value)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            _parse("N")
