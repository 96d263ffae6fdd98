"""Heuristic French syllable counting."""
from __future__ import annotations

import re
import unicodedata
from functools import lru_cache
from typing import List, Tuple

# ---------------------------------------------------------------------------
# Alphabet
# ---------------------------------------------------------------------------

ACCENTED_VOWELS = "àáâäèéêëìíîïòóôöùúûü"
VOWELS = "aeiouy" + ACCENTED_VOWELS

_NON_LETTERS = re.compile(f"[^a-z{ACCENTED_VOWELS}]")

# Sentinel written over a matched cluster; never a vowel.
_MASK = "X"

# ---------------------------------------------------------------------------
# Vowel clusters
# ---------------------------------------------------------------------------

_CLUSTERS = (
    "eaux",
    "tion",
    "sion",
    "eau",
    "ion",
    "ai",
    "au",
    "eu",
    "ou",
    "oi",
    "ei",
    "ay",
    "ey",
    "oy",
    "uy",
    "an",
    "en",
    "in",
    "on",
    "un",
    "am",
    "em",
    "im",
    "om",
    "um",
)

# Longest first; equal lengths keep their declared order.
VOWEL_CLUSTERS: Tuple[str, ...] = tuple(sorted(_CLUSTERS, key=len, reverse=True))


def normalize(word: str) -> str:
    """Lower-case ``word`` and drop everything but letters and French vowels."""

    return _NON_LETTERS.sub("", unicodedata.normalize("NFC", word.lower()))


def count_word(word: str) -> int:
    """Approximate the number of syllables in a French word."""

    return _count_normalized(normalize(word))


@lru_cache(maxsize=8192)
def _count_normalized(word: str) -> int:
    if not word:
        return 0

    count = 0
    masked = word
    for cluster in VOWEL_CLUSTERS:
        occurrences = masked.count(cluster)
        if occurrences:
            count += occurrences
            masked = masked.replace(cluster, _MASK * len(cluster))

    in_run = False
    for char in masked:
        is_vowel = char in VOWELS
        if is_vowel and not in_run:
            count += 1
        in_run = is_vowel

    # mute e
    if word.endswith("e") and count > 1:
        count -= 1
    return max(1, count)


def count_line(line: str) -> int:
    """Sum the syllables of every whitespace separated token in ``line``."""

    return sum(count_word(token) for token in line.split())


def line_breakdown(line: str) -> List[Tuple[str, int]]:
    """Return ``(token, syllables)`` pairs for each token of ``line``."""

    return [(token, count_word(token)) for token in line.split()]
