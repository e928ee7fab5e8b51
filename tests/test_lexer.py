"""Tests for seqmacro.lexer module."""

import pytest

from seqmacro import seq_state as state
from seqmacro.lexer import tokenize, render
from seqmacro.tokens import Group, Ident, LexError, Lit, Punct, Span


@pytest.fixture(autouse=True)
def reset_settings():
    state.reset_settings()
    yield
    state.reset_settings()


class TestTokenize:
    """Tests for tokenize scanner."""

    def test_empty(self):
        assert tokenize("") == ()
        assert tokenize("  \n\t ") == ()

    def test_identifiers(self):
        assert tokenize("foo _bar baz9") == (Ident("foo"), Ident("_bar"), Ident("baz9"))

    def test_keyword_is_identifier(self):
        assert tokenize("in") == (Ident("in"),)

    def test_raw_identifier(self):
        assert tokenize("r#match") == (Ident("r#match"),)

    def test_integer_with_suffix(self):
        assert tokenize("3usize 0xffu8 1_000") == (Lit("3usize"), Lit("0xffu8"), Lit("1_000"))

    def test_float(self):
        assert tokenize("1.5 2e10 3.0f64") == (Lit("1.5"), Lit("2e10"), Lit("3.0f64"))

    def test_range_does_not_lex_as_float(self):
        assert tokenize("0..3") == (Lit("0"), Punct(".", True), Punct(".", False), Lit("3"))

    def test_inclusive_range(self):
        assert tokenize("0..=3") == (
            Lit("0"),
            Punct(".", True),
            Punct(".", True),
            Punct("=", False),
            Lit("3"),
        )

    def test_string_with_escape(self):
        assert tokenize(r'"a\"b" x') == (Lit(r'"a\"b"'), Ident("x"))

    def test_raw_and_byte_strings(self):
        assert tokenize('r"a" r#"b"# b"c" b\'d\'') == (
            Lit('r"a"'),
            Lit('r#"b"#'),
            Lit('b"c"'),
            Lit("b'd'"),
        )

    def test_char_literal(self):
        assert tokenize(r"'a' '\n'") == (Lit("'a'"), Lit(r"'\n'"))

    def test_lifetime(self):
        assert tokenize("&'a str") == (
            Punct("&", False),
            Punct("'", True),
            Ident("a"),
            Ident("str"),
        )

    def test_groups(self):
        assert tokenize("f(a, [b]) {c}") == (
            Ident("f"),
            Group("PAREN", (Ident("a"), Punct(","), Group("BRACKET", (Ident("b"),)))),
            Group("BRACE", (Ident("c"),)),
        )

    def test_comments_dropped(self):
        assert tokenize("a // line\n b /* x /* nested */ y */ c") == (
            Ident("a"),
            Ident("b"),
            Ident("c"),
        )

    def test_joint_punct(self):
        toks = tokenize("a->b :: c")
        assert toks[1] == Punct("-", True)
        assert toks[2] == Punct(">", False)
        assert toks[4] == Punct(":", True)
        assert toks[5] == Punct(":", False)

    def test_spans(self):
        toks = tokenize("a\n  b(c)")
        assert toks[0].span == Span(1, 1)
        assert toks[1].span == Span(2, 3)
        assert toks[2].span == Span(2, 4)
        assert toks[2].stream[0].span == Span(2, 5)

    def test_spans_ignored_by_equality(self):
        assert tokenize("  x") == tokenize("x")


class TestTokenizeErrors:
    """Tests for lexer error reporting."""

    @pytest.mark.parametrize(
        "text",
        ["(", "a)", "(]", '"abc', "'\\n", "/* open", "r\"abc", "`"],
    )
    def test_lex_error(self, text):
        with pytest.raises(LexError):
            tokenize(text)

    def test_error_has_position(self):
        with pytest.raises(LexError) as exc:
            tokenize("ok\n  (]")
        assert exc.value.span == Span(2, 4)
        assert str(exc.value).startswith("2:4:")

    def test_unclosed_points_at_opener(self):
        with pytest.raises(LexError) as exc:
            tokenize("a {")
        assert exc.value.span == Span(1, 3)

    def test_nesting_limit(self):
        state.set_setting("max_depth", 3)
        assert tokenize("[({})]")[0].delim == "BRACKET"
        with pytest.raises(LexError, match="max_depth=3") as exc:
            tokenize("a ( [ { ( } ] )")
        assert exc.value.span == Span(1, 9)

    def test_default_nesting_limit(self):
        with pytest.raises(LexError) as exc:
            tokenize("(" * 1500 + ")" * 1500)
        assert exc.value.span == Span(1, 129)


class TestRender:
    """Tests for render."""

    def test_space_separated(self):
        assert render(tokenize("a  b\n c")) == "a b c"

    def test_groups(self):
        assert render(tokenize("f ( a , b ) [ ] { }")) == "f (a , b) [] {}"

    def test_joint_punct_glued(self):
        assert render(tokenize("a -> b")) == "a -> b"
        assert render(tokenize("x::y")) == "x :: y"

    def test_retokenizes_equal(self):
        text = "fn f<'a>(x: &'a [u8; 4]) -> Option<u8> { x.get(0..=2).copied() }"
        toks = tokenize(text)
        assert tokenize(render(toks)) == toks
