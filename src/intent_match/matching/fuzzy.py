"""Fuzzy scoring of input text against phrase entries.

Scores are distances in [0, 1]: 0 for identical (folded) strings, rising
towards 1 as the strings share less. Two views of each string are scored
and the better one wins:

- the phrase view compares the folded strings as a whole;
- the keyword view compares what is left after dropping filler words, so
  "what's the time" and "what time is it" meet on "time".
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

from intent_match.corpus import PhraseEntry
from intent_match.errors import ConfigurationError
from intent_match.matching.distance import (
    common_prefix_length,
    damerau_levenshtein_distance,
    fold_text,
)

_TOKEN_RE = re.compile(r"\w+(?:'\w+)*")

# Request framing that carries no intent on its own. Apostrophes are
# stripped before lookup, so "what's" appears as "whats".
DEFAULT_FILLER_WORDS: frozenset[str] = frozenset({
    "a", "an", "the",
    "is", "it", "its", "are", "was",
    "what", "whats", "hows", "how",
    "me", "my", "i", "im", "you", "your",
    "tell", "please", "can", "could", "would", "will",
    "do", "does", "to", "of", "for",
    "hey", "um", "uh", "so", "just",
})


@lru_cache(maxsize=4096)
def keyword_skeleton(text: str, filler_words: frozenset[str] = DEFAULT_FILLER_WORDS) -> str:
    """Reduce text to its non-filler tokens.

    Args:
        text: Text to reduce (folded or not)
        filler_words: Tokens to drop, apostrophes removed

    Returns:
        Remaining tokens joined by single spaces (may be empty)
    """
    folded = fold_text(text).replace("’", "'")
    tokens = (t.replace("'", "") for t in _TOKEN_RE.findall(folded))
    return " ".join(t for t in tokens if t not in filler_words)


class FuzzyMatcher:
    """Computes approximate-match scores between input and phrase entries.

    Each view is scored as the Damerau-Levenshtein distance divided by the
    longer string's length, plus a small penalty for mismatched lengths,
    minus a small bonus for a shared prefix. The keyword view carries a fixed
    penalty so it never ties an exact phrase match.

    Instances hold only configuration and are safe to share across threads.
    """

    DEFAULT_LENGTH_PENALTY = 0.05
    DEFAULT_PREFIX_BONUS = 0.05
    DEFAULT_PREFIX_WINDOW = 4
    DEFAULT_KEYWORD_PENALTY = 0.04

    MAX_LENGTH_PENALTY = 0.1
    MAX_PREFIX_BONUS = 0.05

    def __init__(
        self,
        length_penalty: float = DEFAULT_LENGTH_PENALTY,
        prefix_bonus: float = DEFAULT_PREFIX_BONUS,
        prefix_window: int = DEFAULT_PREFIX_WINDOW,
        keyword_penalty: float = DEFAULT_KEYWORD_PENALTY,
        filler_words: Iterable[str] | None = None,
        use_keywords: bool = True,
    ):
        """Initialize matcher.

        Args:
            length_penalty: Weight of the relative length mismatch (0 to 0.1)
            prefix_bonus: Largest reduction for a shared prefix (0 to 0.05)
            prefix_window: Prefix length that earns the full bonus
            keyword_penalty: Added to keyword-view scores (above 0, at most 1)
            filler_words: Tokens dropped by the keyword view
            use_keywords: Score the keyword view at all

        Raises:
            ConfigurationError: If a weight is out of range
        """
        if not 0.0 <= length_penalty <= self.MAX_LENGTH_PENALTY:
            raise ConfigurationError(
                "length_penalty out of range",
                context={"value": length_penalty, "max": self.MAX_LENGTH_PENALTY},
            )
        if not 0.0 <= prefix_bonus <= self.MAX_PREFIX_BONUS:
            raise ConfigurationError(
                "prefix_bonus out of range",
                context={"value": prefix_bonus, "max": self.MAX_PREFIX_BONUS},
            )
        if prefix_window < 1:
            raise ConfigurationError("prefix_window must be at least 1", context={"value": prefix_window})
        # Positive so a keyword-only match never ties an identical phrase at 0
        if not 0.0 < keyword_penalty <= 1.0:
            raise ConfigurationError("keyword_penalty out of range", context={"value": keyword_penalty})

        self.length_penalty = length_penalty
        self.prefix_bonus = prefix_bonus
        self.prefix_window = prefix_window
        self.keyword_penalty = keyword_penalty
        self.filler_words = (
            DEFAULT_FILLER_WORDS
            if filler_words is None
            else frozenset(w.casefold().replace("'", "") for w in filler_words)
        )
        self.use_keywords = use_keywords

    def score(self, normalized: str, entry: PhraseEntry) -> float:
        """Score input against a phrase entry.

        Args:
            normalized: Corrected input text
            entry: Phrase entry to compare with

        Returns:
            Distance in [0, 1]; 0 means an exact (folded) match
        """
        return self.score_text(normalized, entry.reference_text)

    def score_text(self, text: str, reference: str) -> float:
        """Score two strings.

        Args:
            text: Input text
            reference: Reference phrase

        Returns:
            Distance in [0, 1]
        """
        a = fold_text(text)
        b = fold_text(reference)
        if not a or not b:
            return 0.0 if a == b else 1.0

        best = self._view_score(a, b)
        if best == 0.0 or not self.use_keywords:
            return best

        ka = keyword_skeleton(a, self.filler_words)
        kb = keyword_skeleton(b, self.filler_words)
        if ka and kb:
            best = min(best, min(1.0, self._view_score(ka, kb) + self.keyword_penalty))

        return best

    def _view_score(self, a: str, b: str) -> float:
        if a == b:
            return 0.0

        longest = max(len(a), len(b))
        ratio = damerau_levenshtein_distance(a, b) / longest

        score = ratio + self.length_penalty * abs(len(a) - len(b)) / longest

        prefix = min(common_prefix_length(a, b), self.prefix_window)
        # Capped so unequal strings never reach 0
        score -= min(self.prefix_bonus * prefix / self.prefix_window, ratio / 2)

        return min(1.0, max(0.0, score))


_default_matcher = FuzzyMatcher()


def score(normalized: str, entry: PhraseEntry) -> float:
    """Score `normalized` against `entry` with default matcher settings."""
    return _default_matcher.score(normalized, entry)
