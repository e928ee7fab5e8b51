#!/usr/bin/env python
"""
expander.py

Sequence expansion core.

Invocation (after the header is parsed, see header.py):
  N in 0..3 { fn f~N() -> u64 { N } }

Substitution, per range value v:
  - N               -> v            numeric literal
  - #N              -> v            index form, used inside repeat sections
  - pre~N           -> prev         one identifier
  - pre~N~suf       -> prevsuf      one identifier
  splice beats bare substitution: "N~N" is a splice with prefix N.

Modes, chosen once per invocation:
  - flat:   the whole body is substituted once per value and concatenated
  - repeat: the body holds a #( ... )* marker, either directly or inside one
            of its immediate groups; only the marker's contents are repeated,
            everything else is emitted once, unsubstituted.
    Detection is shallow: a marker two groups deep leaves the invocation flat.
"""
from __future__ import annotations

import argparse
import sys
from typing import List

import yaml

from . import seq_state as state
from .header import Sequence, parse_sequence
from .lexer import render, tokenize
from .ranges import SequenceRange
from .tokens import (
    ExpansionError,
    Group,
    HeaderSyntaxError,
    Ident,
    Lit,
    SeqError,
    is_ident,
    is_punct,
)

__all__ = [
    "substitute",
    "is_repeat_section",
    "has_repeat_section",
    "repeat_section",
    "expand_sequence",
    "seq",
    "expand_text",
    "expand_source",
    "main",
]


def _peek(toks: tuple, i: int):
    return toks[i] if i < len(toks) else None


def _check_depth(depth: int, tt=None) -> None:
    limit = state.get_setting("max_depth")
    if depth > limit:
        span = getattr(tt, "span", None)
        raise ExpansionError(f"nesting deeper than max_depth={limit}", span)


# ============================================================
# Substitution
# ============================================================

def substitute(content, target: Ident, substitution: Lit, _depth: int = 0) -> tuple:
    """
    Replace every use of `target` in `content` with `substitution`.

    Pure: returns a new token tuple, groups are rebuilt with their original
    delimiter. Tokens that are neither the target nor part of a splice are
    returned as-is.
    """
    toks = tuple(content)
    name = target.name
    value = substitution.text
    out: List = []

    i = 0
    n = len(toks)
    while i < n:
        tt = toks[i]

        if isinstance(tt, Ident):
            is_prefix = is_punct(_peek(toks, i + 1), "~") and is_ident(_peek(toks, i + 2), name)
            is_suffix = is_punct(_peek(toks, i + 3), "~") and isinstance(_peek(toks, i + 4), Ident)

            if is_prefix and is_suffix:
                suffix = toks[i + 4]
                out.append(Ident(f"{tt.name}{value}{suffix.name}", tt.span))
                i += 5
            elif is_prefix:
                out.append(Ident(f"{tt.name}{value}", tt.span))
                i += 3
            elif tt.name == name:
                out.append(Lit(value, tt.span))
                i += 1
            else:
                out.append(tt)
                i += 1
            continue

        if (
            is_punct(tt, "#")
            and is_ident(_peek(toks, i + 1), name)
            and not is_punct(_peek(toks, i + 2), "~")
        ):
            out.append(Lit(value, toks[i + 1].span))
            i += 2
            continue

        if isinstance(tt, Group):
            _check_depth(_depth + 1, tt)
            stream = substitute(tt.stream, target, substitution, _depth + 1)
            out.append(Group(tt.delim, stream, tt.span))
            i += 1
            continue

        out.append(tt)
        i += 1

    return tuple(out)


# ============================================================
# Repeat sections
# ============================================================

def _is_marker(toks: tuple, i: int) -> bool:
    """True when toks[i:i+3] is  # ( ... ) *"""
    inner = _peek(toks, i + 1)
    return (
        is_punct(_peek(toks, i), "#")
        and isinstance(inner, Group)
        and inner.delim == "PAREN"
        and is_punct(_peek(toks, i + 2), "*")
    )


def _has_marker(stream) -> bool:
    toks = tuple(stream)
    return any(_is_marker(toks, i) for i in range(len(toks)))


def is_repeat_section(group: Group) -> bool:
    """True when the group's own contents hold a #( ... )* marker."""
    return _has_marker(group.stream)


def has_repeat_section(content) -> bool:
    """
    Shallow scan: a marker directly in `content`, or directly inside one of
    its immediate groups. Deeper markers are not looked for.
    """
    toks = tuple(content)
    if _has_marker(toks):
        return True
    return any(isinstance(tt, Group) and is_repeat_section(tt) for tt in toks)


def _expand_markers(content, target: Ident, literals: SequenceRange, nested: bool) -> tuple:
    toks = tuple(content)
    out: List = []

    i = 0
    n = len(toks)
    while i < n:
        if _is_marker(toks, i):
            body = toks[i + 1].stream
            for substitution in literals:
                out.extend(substitute(body, target, substitution))
            i += 3
            continue

        tt = toks[i]
        if nested and isinstance(tt, Group) and is_repeat_section(tt):
            stream = _expand_markers(tt.stream, target, literals, nested=False)
            out.append(Group(tt.delim, stream, tt.span))
        else:
            out.append(tt)
        i += 1

    return tuple(out)


def repeat_section(content, target: Ident, literals: SequenceRange) -> tuple:
    """
    Expand every marker at the detection level once per range value;
    copy all other tokens through once, unsubstituted.
    """
    return _expand_markers(content, target, literals, nested=True)


# ============================================================
# Driver
# ============================================================

def expand_sequence(sequence: Sequence) -> tuple:
    ident, literals, content = sequence.ident, sequence.range, sequence.content

    if has_repeat_section(content):
        state.trace(f"{ident} in {literals}: repeat mode, {len(literals)} copies")
        return repeat_section(content, ident, literals)

    state.trace(f"{ident} in {literals}: flat mode, {len(literals)} copies")
    out: List = []
    for substitution in literals:
        out.extend(substitute(content, ident, substitution))
    return tuple(out)


def seq(tokens) -> tuple:
    """Parse invocation tokens and expand them."""
    return expand_sequence(parse_sequence(tokens))


def expand_text(text: str) -> str:
    """Expand a bare invocation text "N in a..b { ... }" and render it."""
    return render(seq(tokenize(text)))


# ============================================================
# Source driver
# ============================================================

def _expand_invocations(content, depth: int) -> tuple:
    name = state.get_setting("macro_name")
    toks = tuple(content)
    out: List = []

    i = 0
    n = len(toks)
    while i < n:
        tt = toks[i]
        group = _peek(toks, i + 2)

        if is_ident(tt, name) and is_punct(_peek(toks, i + 1), "!") and isinstance(group, Group):
            _check_depth(depth + 1, tt)
            try:
                expanded = seq(group.stream)
            except HeaderSyntaxError as e:
                if e.span is not None:
                    raise
                raise HeaderSyntaxError(e.message, group.span) from e
            out.extend(_expand_invocations(expanded, depth + 1))
            i += 3
            continue

        if isinstance(tt, Group):
            _check_depth(depth + 1, tt)
            out.append(Group(tt.delim, _expand_invocations(tt.stream, depth + 1), tt.span))
        else:
            out.append(tt)
        i += 1

    return tuple(out)


def expand_source(text: str) -> str:
    """
    Expand every `seq!( ... )` in a source text.

    Invocations are found at any depth; the output of one expansion is
    scanned again, so an inner seq! runs once per outer copy.
    """
    return render(_expand_invocations(tokenize(text), 0))


# ============================================================
# Selftest
# ============================================================

def _selftest() -> None:
    from . import lexer

    lexer._selftest()

    def x(text: str) -> str:
        return expand_text(text)

    # --- flat mode ---
    assert x("N in 0..3 { N }") == "0 1 2"
    assert x("N in 0..=3 { N }") == "0 1 2 3"
    assert x("N in 2..=2 { N }") == "2"
    assert x("N in 4..4 { N }") == ""
    assert x("N in 0..2 { a }") == "a a"
    assert x("N in 1..3 { f~N() }") == "f1 () f2 ()"
    assert x("N in 3..4 { field~N~len }") == "field3len"
    assert x("N in 0..1 { field~N~len }") == "field0len"
    assert x("N in 0..2 { [N] }") == "[0] [1]"
    assert x("N in 0..1 { N~N }") == "N0"
    assert x("N in 0..1 { a ~ }") == "a ~"

    # --- repeat mode ---
    assert x("N in 0..3 { const M: usize = 0; #( arr[#N] = 0; )* }") == (
        "const M : usize = 0 ; arr [0] = 0 ; arr [1] = 0 ; arr [2] = 0 ;"
    )
    assert x("N in 0..2 { enum E { #( V~N, )* } }") == "enum E {V0 , V1 ,}"
    assert has_repeat_section(tokenize("x { #( a )* }"))
    assert not has_repeat_section(tokenize("x { { #( a )* } }"))

    # --- source driver ---
    assert expand_source("a seq!(N in 0..2 { b~N }) c") == "a b0 b1 c"

    # --- errors ---
    for bad in ("N 0..3 {}", "N in a..3 {}", "N in 0...3 {}", "N in 0..3 ()", "N in 0..3 {} x"):
        try:
            x(bad)
        except HeaderSyntaxError:
            pass
        else:
            raise AssertionError(f"expected HeaderSyntaxError for {bad!r}")

    print("selftest: OK")


# ============================================================
# CLI
# ============================================================

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        description="Expand seq invocations 'N in START..END { body }' over token trees."
    )
    ap.add_argument("spec", nargs="?", help="Invocation text, e.g. 'N in 0..3 { f~N(); }'")
    ap.add_argument("--file", "-f", help="Source file (or '-' for stdin): expand every seq!(...) in it")
    ap.add_argument("--config", "-c", help="YAML settings file")
    ap.add_argument("--tokens", action="store_true", help="Print the token tree of spec instead of expanding")
    ap.add_argument("--mode", action="store_true", help="Print 'flat' or 'repeat' for spec")
    ap.add_argument("--verbose", "-v", action="store_true", help="Trace expansion on stderr")
    ap.add_argument("--selftest", action="store_true", help="Run selftest and exit")
    args = ap.parse_args(argv)

    if args.config:
        try:
            state.load_config(args.config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            ap.error(f"cannot load config '{args.config}': {e}")
    if args.verbose:
        state.set_setting("verbose", True)

    if args.selftest:
        _selftest()
        return 0

    if args.spec is None and args.file is None:
        ap.error("spec or --file is required unless --selftest is given")

    try:
        if args.file is not None:
            if args.file == "-":
                text = sys.stdin.read()
            else:
                with open(args.file, "r", encoding="utf-8") as f:
                    text = f.read()
            print(expand_source(text))
            return 0

        tokens = tokenize(args.spec)

        if args.tokens:
            for tt in tokens:
                print(repr(tt))
            return 0

        if args.mode:
            sequence = parse_sequence(tokens)
            print("repeat" if has_repeat_section(sequence.content) else "flat")
            return 0

        print(render(seq(tokens)))
        return 0

    except SeqError as e:
        print(f"seqmacro error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
