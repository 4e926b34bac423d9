#!/usr/bin/env python3
"""Exception types raised while building Q-score plots.

Two failure kinds reach callers of the plotting functions:

- InvalidReadError: the filter names a read the run does not have
- IndexOutOfBoundsError: a bin table points outside the histogram

Empty metric collections are not errors; they produce an empty plot.
"""

from typing import Iterable, Optional


class QScorePlotError(Exception):
    """Base class for all Q-score plot errors."""


class InvalidReadError(QScorePlotError, KeyError):
    """Raised when a read number is not present in the run info."""

    def __init__(self, read: int, known_reads: Optional[Iterable[int]] = None):
        self.read = read
        self.known_reads = sorted(known_reads or [])
        super().__init__(read)

    def __str__(self) -> str:
        if self.known_reads:
            known = ", ".join(str(r) for r in self.known_reads)
            return f"Read number not found in run info: {self.read} (reads: {known})"
        return f"Read number not found in run info: {self.read}"


class IndexOutOfBoundsError(QScorePlotError, IndexError):
    """Raised when a Q-score bin maps outside the histogram."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Bin index out of bounds: {index} < {size} does not hold")
