#!/usr/bin/env python
# header.py — parse "N in START..END { body }"

"""
Parse a seq invocation into a Sequence.

    invocation := IDENT "in" INT ".." ["="] INT "{" body "}"

The body is kept as an unparsed token stream. Parsing is all-or-nothing:
any missing or wrong token raises HeaderSyntaxError anchored at it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .ranges import SequenceRange
from .tokens import (
    Group,
    HeaderSyntaxError,
    Ident,
    Lit,
    is_ident,
    is_punct,
)

__all__ = ["Sequence", "parse_sequence", "parse_int_literal"]


@dataclass(frozen=True)
class Sequence:
    ident: Ident
    range: SequenceRange
    content: tuple


# ============================================================
# regexes
# ============================================================

_INT_RE = re.compile(
    r"""
    ^(?P<digits>
        0x[0-9a-fA-F_]+
      | 0o[0-7_]+
      | 0b[01_]+
      | [0-9][0-9_]*
    )
    (?P<suffix>[iu](?:8|16|32|64|128|size))?$
    """,
    re.VERBOSE,
)

_RADIX = {"0x": 16, "0o": 8, "0b": 2}


def parse_int_literal(text: str) -> Optional[int]:
    """
    Base-10 value of an integer literal, or None.

    Accepts '_' separators, 0x/0o/0b prefixes and an integer type suffix:
      "16" -> 16, "1_000" -> 1000, "0x10" -> 16, "3usize" -> 3
    """
    m = _INT_RE.match(text)
    if not m:
        return None
    digits = m.group("digits")
    base = _RADIX.get(digits[:2], 10)
    if base != 10:
        digits = digits[2:]
    digits = digits.replace("_", "")
    if not digits:
        return None
    return int(digits, base)


# ============================================================
# Cursor
# ============================================================

class _Cursor:
    def __init__(self, tokens):
        self.tokens = tuple(tokens)
        self.i = 0

    def peek(self, k: int = 0):
        j = self.i + k
        return self.tokens[j] if j < len(self.tokens) else None

    def next(self):
        tt = self.peek()
        self.i += 1
        return tt

    def error(self, expected: str) -> HeaderSyntaxError:
        tt = self.peek()
        if tt is None:
            span = self.tokens[-1].span if self.tokens else None
            return HeaderSyntaxError(f"unexpected end of input, expected {expected}", span)
        return HeaderSyntaxError(f"expected {expected}, found `{tt}`", tt.span)


def _expect_int(cur: _Cursor, what: str) -> int:
    tt = cur.peek()
    if not isinstance(tt, Lit):
        raise cur.error(f"integer literal ({what})")
    value = parse_int_literal(tt.text)
    if value is None:
        raise HeaderSyntaxError(
            f"invalid {what} bound `{tt.text}`: expected a non-negative integer", tt.span
        )
    cur.next()
    return value


# ============================================================
# Parser
# ============================================================

def parse_sequence(tokens) -> Sequence:
    """
    Parse invocation tokens into a Sequence.

    Raises:
        HeaderSyntaxError: missing `in`, missing `..`, a bound that is not a
                           non-negative integer, missing brace body, or
                           trailing tokens after the body.
    """
    cur = _Cursor(tokens)

    ident = cur.peek()
    if not isinstance(ident, Ident):
        raise cur.error("identifier")
    cur.next()

    if not is_ident(cur.peek(), "in"):
        raise cur.error("`in`")
    cur.next()

    start = _expect_int(cur, "start")

    dot = cur.peek()
    if not (is_punct(dot, ".") and dot.joint and is_punct(cur.peek(1), ".")):
        raise cur.error("`..`")
    cur.next()
    cur.next()

    inclusive = is_punct(cur.peek(), "=")
    if inclusive:
        cur.next()

    end = _expect_int(cur, "end")

    body = cur.peek()
    if not (isinstance(body, Group) and body.delim == "BRACE"):
        raise cur.error("curly braces")
    cur.next()

    extra = cur.peek()
    if extra is not None:
        raise HeaderSyntaxError(f"unexpected token `{extra}`", extra.span)

    return Sequence(ident, SequenceRange(start, end, inclusive), body.stream)

