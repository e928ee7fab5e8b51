# -------------------------------------
# sequence ranges
# -------------------------------------
"""
Range model for seq invocations.

  N in 0..4    -> 0, 1, 2, 3
  N in 0..=4   -> 0, 1, 2, 3, 4

A SequenceRange is a value: every iteration starts fresh from `start`,
so a repeat section can drive it once per repeated group.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .tokens import Lit, int_lit


@dataclass(frozen=True)
class SequenceRange:
    start: int
    end: int
    inclusive: bool = False

    @property
    def stop(self) -> int:
        """Exclusive upper bound."""
        return self.end + 1 if self.inclusive else self.end

    def values(self) -> Iterator[int]:
        return iter(range(self.start, self.stop))

    def __iter__(self) -> Iterator[Lit]:
        for v in range(self.start, self.stop):
            yield int_lit(v)

    def __len__(self) -> int:
        return max(0, self.stop - self.start)

    def __str__(self) -> str:
        op = "..=" if self.inclusive else ".."
        return f"{self.start}{op}{self.end}"
