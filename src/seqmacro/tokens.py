# -------------------------------------
# token trees
# -------------------------------------
"""
Token tree types shared by the lexer, the header parser and the expander.

  - Ident(name)           identifier or keyword
  - Lit(text)             numeric / string / char literal, raw text kept
  - Punct(ch, joint)      single punctuation character
  - Group(delim, stream)  delimited nested token sequence

Spans record where a token came from; they never take part in equality.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

__all__ = [
    "Span",
    "Ident",
    "Lit",
    "Punct",
    "Group",
    "TokenTree",
    "DelimKind",
    "OPEN",
    "CLOSE",
    "SeqError",
    "LexError",
    "HeaderSyntaxError",
    "ExpansionError",
    "is_punct",
    "is_ident",
    "int_lit",
]


# ============================================================
# Spans
# ============================================================

@dataclass(frozen=True)
class Span:
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"


# ============================================================
# Tokens
# ============================================================

DelimKind = Literal["PAREN", "BRACKET", "BRACE"]

OPEN: dict[str, str] = {"PAREN": "(", "BRACKET": "[", "BRACE": "{"}
CLOSE: dict[str, str] = {"PAREN": ")", "BRACKET": "]", "BRACE": "}"}


@dataclass(frozen=True)
class Ident:
    name: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Lit:
    text: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Punct:
    ch: str
    joint: bool = False  # next char is punctuation with no space between
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.ch


@dataclass(frozen=True)
class Group:
    delim: DelimKind
    stream: tuple = ()
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        inner = " ".join(str(t) for t in self.stream)
        return f"{OPEN[self.delim]}{inner}{CLOSE[self.delim]}"


TokenTree = Union[Ident, Lit, Punct, Group]


# ============================================================
# Errors
# ============================================================

class SeqError(ValueError):
    """Base error; prefixed with line:col when the span is known."""

    def __init__(self, message: str, span: Optional[Span] = None):
        self.message = message
        self.span = span
        super().__init__(f"{span}: {message}" if span is not None else message)


class LexError(SeqError):
    pass


class HeaderSyntaxError(SeqError):
    pass


class ExpansionError(SeqError):
    pass


# ============================================================
# Helpers
# ============================================================

def is_punct(tt, ch: str) -> bool:
    return isinstance(tt, Punct) and tt.ch == ch


def is_ident(tt, name: str | None = None) -> bool:
    if not isinstance(tt, Ident):
        return False
    return name is None or tt.name == name


def int_lit(value: int, span: Optional[Span] = None) -> Lit:
    """Unsuffixed decimal literal for value."""
    return Lit(str(int(value)), span)
