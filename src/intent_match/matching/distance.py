"""String distance helpers for fuzzy matching.

Implements the optimal-string-alignment variant of Damerau-Levenshtein
distance, plus the text folding applied before any comparison.
"""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def fold_text(text: str) -> str:
    """Fold text for comparison.

    Casefolds, trims, and collapses whitespace runs to single spaces.

    Args:
        text: Text to fold

    Returns:
        Folded text
    """
    return _WHITESPACE_RE.sub(" ", text.casefold()).strip()


def damerau_levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Damerau-Levenshtein distance between two strings.

    The minimum number of single-character insertions, deletions,
    substitutions, and adjacent transpositions needed to turn one string
    into the other. This is the optimal-string-alignment form: no substring
    is edited more than once, which is enough for the swapped-letter typos
    ("tiem" for "time") seen in transcripts.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Number of edits needed
    """
    if s1 == s2:
        return 0
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # Three rows: a transposition looks back two rows
    before_previous: list[int] = []
    previous_row = list(range(len(s2) + 1))

    for i in range(1, len(s1) + 1):
        current_row = [i] + [0] * len(s2)
        c1 = s1[i - 1]

        for j in range(1, len(s2) + 1):
            c2 = s2[j - 1]
            cost = 0 if c1 == c2 else 1

            best = min(
                previous_row[j] + 1,  # deletion
                current_row[j - 1] + 1,  # insertion
                previous_row[j - 1] + cost,  # substitution
            )

            if i > 1 and j > 1 and c1 == s2[j - 2] and s1[i - 2] == c2:
                best = min(best, before_previous[j - 2] + 1)

            current_row[j] = best

        before_previous, previous_row = previous_row, current_row

    return previous_row[len(s2)]


def common_prefix_length(s1: str, s2: str) -> int:
    """Count leading characters the two strings share."""
    length = 0
    for c1, c2 in zip(s1, s2):
        if c1 != c2:
            break
        length += 1
    return length
