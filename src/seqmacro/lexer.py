#!/usr/bin/env python
# lexer.py — text <-> token tree

"""
One-pass scanner producing token trees, and the matching renderer.

Scanner output:
  - Ident(name)          identifiers, keywords, raw identifiers r#name
  - Lit(text)            numbers, strings, raw strings, byte strings, chars
  - Punct(ch, joint)     one token per punctuation character
  - Group(delim, stream) for (...), [...], {...}

Whitespace and comments (// and nested /* */) separate tokens and are dropped.
A '.' only continues a number when a digit follows, so "0..3" is
Lit("0"), Punct("."), Punct("."), Lit("3").
"""
from __future__ import annotations

import bisect
from typing import List

from . import seq_state as state
from .tokens import (
    CLOSE,
    OPEN,
    Group,
    Ident,
    LexError,
    Lit,
    Punct,
    Span,
    TokenTree,
)

__all__ = ["tokenize", "render", "PUNCT_CHARS"]

PUNCT_CHARS = "~!@#$%^&*-+=|\\:;,.<>/?'"

_OPENERS = {"(": "PAREN", "[": "BRACKET", "{": "BRACE"}
_CLOSERS = {")": "PAREN", "]": "BRACKET", "}": "BRACE"}


# ============================================================
# Low-level scanners
# ============================================================

def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_char(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _scan_ident(s: str, i: int) -> int:
    """Given s[i] starts an identifier, return index one-past its end."""
    n = len(s)
    i += 1
    while i < n and _is_ident_char(s[i]):
        i += 1
    return i


def _scan_quoted(s: str, start: int, quote: str) -> int | None:
    """
    Given s[start] == quote, return index one-past the closing quote.
    Backslash escapes the next character.
    """
    i = start + 1
    n = len(s)
    while i < n:
        ch = s[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return None


def _scan_raw_string(s: str, start: int) -> int | None:
    """
    Given s[start] is the 'r' of r"..." / r#"..."#, return index one-past
    the closing delimiter, or None if unterminated or not a raw string.
    """
    i = start + 1
    n = len(s)
    hashes = 0
    while i < n and s[i] == "#":
        hashes += 1
        i += 1
    if i >= n or s[i] != '"':
        return None
    closing = '"' + "#" * hashes
    end = s.find(closing, i + 1)
    if end < 0:
        return None
    return end + len(closing)


def _scan_suffix(s: str, i: int) -> int:
    n = len(s)
    while i < n and _is_ident_char(s[i]):
        i += 1
    return i


def _scan_number(s: str, start: int) -> int:
    """Given s[start] is a digit, return index one-past the numeric literal (suffix included)."""
    n = len(s)
    i = start

    if s[i] == "0" and i + 1 < n and s[i + 1] in "xob":
        radix = s[i + 1]
        digits = {
            "x": "0123456789abcdefABCDEF_",
            "o": "01234567_",
            "b": "01_",
        }[radix]
        i += 2
        while i < n and s[i] in digits:
            i += 1
        return _scan_suffix(s, i)

    while i < n and (s[i].isdigit() or s[i] == "_"):
        i += 1

    # fraction: only when a digit follows the dot
    if i + 1 < n and s[i] == "." and s[i + 1].isdigit():
        i += 1
        while i < n and (s[i].isdigit() or s[i] == "_"):
            i += 1

    # exponent
    if i < n and s[i] in "eE":
        j = i + 1
        if j < n and s[j] in "+-":
            j += 1
        if j < n and s[j].isdigit():
            i = j
            while i < n and (s[i].isdigit() or s[i] == "_"):
                i += 1

    return _scan_suffix(s, i)


def _scan_char(s: str, start: int) -> int | None:
    """
    Given s[start] == "'", return index one-past a char literal, or None
    when the quote is a lifetime / label marker instead.
    """
    n = len(s)
    if start + 1 >= n:
        return None
    if s[start + 1] == "\\":
        end = _scan_quoted(s, start, "'")
        return end
    if start + 2 < n and s[start + 2] == "'" and s[start + 1] != "'":
        return start + 3
    return None


def _skip_block_comment(s: str, start: int) -> int | None:
    """Given s[start:start+2] == '/*', return index one-past the matching '*/' (nesting allowed)."""
    depth = 1
    i = start + 2
    n = len(s)
    while i < n and depth > 0:
        if s.startswith("/*", i):
            depth += 1
            i += 2
        elif s.startswith("*/", i):
            depth -= 1
            i += 2
        else:
            i += 1
    return i if depth == 0 else None


# ============================================================
# Scanner
# ============================================================

def tokenize(text: str) -> tuple:
    """
    Scan text into a tuple of token trees.

    Raises:
        LexError: unterminated literal or comment, unbalanced or mismatched
                  delimiters, a character that starts no token, or groups
                  nested deeper than the max_depth setting.
    """
    line_starts = [0]
    for k, ch in enumerate(text):
        if ch == "\n":
            line_starts.append(k + 1)

    def pos(k: int) -> Span:
        line = bisect.bisect_right(line_starts, k) - 1
        return Span(line + 1, k - line_starts[line] + 1)

    # stack of (delim, tokens, span); bottom entry is the top level
    stack: List[tuple] = [(None, [], None)]
    max_depth = state.get_setting("max_depth")

    def emit(tt: TokenTree) -> None:
        stack[-1][1].append(tt)

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
            continue

        # --- comments ---
        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end < 0 else end + 1
            continue
        if text.startswith("/*", i):
            end = _skip_block_comment(text, i)
            if end is None:
                raise LexError("unterminated block comment", pos(i))
            i = end
            continue

        # --- groups ---
        if ch in _OPENERS:
            stack.append((_OPENERS[ch], [], pos(i)))
            if len(stack) - 1 > max_depth:
                raise LexError(f"nesting deeper than max_depth={max_depth}", pos(i))
            i += 1
            continue
        if ch in _CLOSERS:
            delim, toks, span = stack[-1]
            if delim is None:
                raise LexError(f"unexpected closing delimiter '{ch}'", pos(i))
            if delim != _CLOSERS[ch]:
                raise LexError(
                    f"mismatched closing delimiter '{ch}', expected '{CLOSE[delim]}'",
                    pos(i),
                )
            stack.pop()
            emit(Group(delim, tuple(toks), span))
            i += 1
            continue

        # --- byte / raw literals and identifiers ---
        if _is_ident_start(ch):
            if ch == "b" and i + 1 < n and text[i + 1] == "'":
                end = _scan_quoted(text, i + 1, "'")
                if end is None:
                    raise LexError("unterminated byte literal", pos(i))
                emit(Lit(text[i:end], pos(i)))
                i = end
                continue
            if ch == "b" and i + 1 < n and text[i + 1] == '"':
                end = _scan_quoted(text, i + 1, '"')
                if end is None:
                    raise LexError("unterminated byte string", pos(i))
                emit(Lit(text[i:end], pos(i)))
                i = end
                continue
            if ch == "b" and i + 1 < n and text[i + 1] == "r":
                end = _scan_raw_string(text, i + 1)
                if end is not None:
                    emit(Lit(text[i:end], pos(i)))
                    i = end
                    continue
            if ch == "r" and i + 1 < n and text[i + 1] in '"#':
                end = _scan_raw_string(text, i)
                if end is not None:
                    emit(Lit(text[i:end], pos(i)))
                    i = end
                    continue
                if text[i + 1] == '"' or text.startswith('r#"', i):
                    raise LexError("unterminated raw string", pos(i))
                if i + 2 < n and text[i + 1] == "#" and _is_ident_start(text[i + 2]):
                    end = _scan_ident(text, i + 2)
                    emit(Ident(text[i:end], pos(i)))
                    i = end
                    continue
            end = _scan_ident(text, i)
            emit(Ident(text[i:end], pos(i)))
            i = end
            continue

        # --- numbers ---
        if ch.isdigit():
            end = _scan_number(text, i)
            emit(Lit(text[i:end], pos(i)))
            i = end
            continue

        # --- strings ---
        if ch == '"':
            end = _scan_quoted(text, i, '"')
            if end is None:
                raise LexError("unterminated string literal", pos(i))
            emit(Lit(text[i:end], pos(i)))
            i = end
            continue

        # --- char literal or lifetime quote ---
        if ch == "'":
            end = _scan_char(text, i)
            if end is not None:
                emit(Lit(text[i:end], pos(i)))
                i = end
                continue
            if i + 1 < n and text[i + 1] == "\\":
                raise LexError("unterminated character literal", pos(i))
            joint = i + 1 < n and _is_ident_start(text[i + 1])
            emit(Punct("'", joint, pos(i)))
            i += 1
            continue

        # --- punctuation ---
        if ch in PUNCT_CHARS:
            joint = i + 1 < n and text[i + 1] in PUNCT_CHARS and text[i + 1] != "'"
            emit(Punct(ch, joint, pos(i)))
            i += 1
            continue

        raise LexError(f"unknown start of token: {ch!r}", pos(i))

    if len(stack) > 1:
        delim, _, span = stack[-1]
        raise LexError(f"unclosed delimiter, expected '{CLOSE[delim]}'", span)

    return tuple(stack[0][1])


# ============================================================
# Renderer
# ============================================================

def render(tokens) -> str:
    """
    Render token trees back to text.

    Tokens are separated by one space; a joint punctuation character is
    glued to the token after it. Groups render as open + inner + close.
    """
    parts: List[str] = []
    glue = True
    for tt in tokens:
        if not glue:
            parts.append(" ")
        if isinstance(tt, Group):
            parts.append(OPEN[tt.delim])
            parts.append(render(tt.stream))
            parts.append(CLOSE[tt.delim])
        else:
            parts.append(str(tt))
        glue = isinstance(tt, Punct) and tt.joint
    return "".join(parts)


# ============================================================
# Selftest
# ============================================================

def _selftest() -> None:
    def kinds(text: str):
        return [type(t).__name__ for t in tokenize(text)]

    assert kinds("a 1 + (b)") == ["Ident", "Lit", "Punct", "Group"]
    assert tokenize("0..3") == (Lit("0"), Punct(".", True), Punct("."), Lit("3"))
    assert tokenize("1.5f32") == (Lit("1.5f32"),)
    assert tokenize("'a'") == (Lit("'a'"),)
    assert tokenize("'a") == (Punct("'", True), Ident("a"))
    assert tokenize("r#\"x\"# r#fn") == (Lit('r#"x"#'), Ident("r#fn"))
    assert tokenize("a // c\n/* b /* n */ */ d") == (Ident("a"), Ident("d"))
    assert render(tokenize("fn f ( ) -> u8 { 0 }")) == "fn f () -> u8 {0}"
    assert render(tokenize("0..=3")) == "0 ..= 3"

    for bad in ("(", ")", "(]", '"abc', "`"):
        try:
            tokenize(bad)
        except LexError:
            pass
        else:
            raise AssertionError(f"expected LexError for {bad!r}")

    print("lexer selftest: OK")
