"""Check a three line candidate against the 5-7-5 structure."""
from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Tuple

from .models import Counts, HaikuCandidate
from .syllables import count_line

TARGET_COUNTS: Counts = (5, 7, 5)

_ORDINALS = ("Première", "Deuxième", "Troisième")


@dataclass(frozen=True)
class ValidationResult:
    counts: Counts
    valid: bool
    errors: Tuple[str, ...] = ()


class LineStatus(NamedTuple):
    count: int
    correct: bool
    indicator: str


def validate(candidate: HaikuCandidate) -> ValidationResult:
    """Count each line and report every line that misses its target."""

    line1, line2, line3 = (count_line(line) for line in candidate.lines)
    counts: Counts = (line1, line2, line3)
    errors = tuple(
        f"{ordinal} ligne: {actual} syllabes (attendu: {expected})"
        for ordinal, actual, expected in zip(_ORDINALS, counts, TARGET_COUNTS)
        if actual != expected
    )
    return ValidationResult(counts=counts, valid=not errors, errors=errors)


def format_counts(counts: Counts) -> str:
    return "-".join(str(count) for count in counts)


def line_status(expected: int, actual: int) -> LineStatus:
    correct = actual == expected
    return LineStatus(count=actual, correct=correct, indicator="✓" if correct else "✗")
