"""Best-match selection over a phrase corpus.

Scores every corpus entry, keeps the lowest score, and turns it into a
ResolvedIntent when it falls within the match threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from intent_match.corpus import PhraseCorpus, PhraseEntry
from intent_match.errors import ConfigurationError
from intent_match.matching.distance import fold_text
from intent_match.matching.fuzzy import FuzzyMatcher

DEFAULT_MATCH_THRESHOLD = 0.4


def check_threshold(threshold: float) -> float:
    """Return `threshold` if it is a number in [0, 1].

    Raises:
        ConfigurationError: If the threshold is out of range or NaN
    """
    is_number = isinstance(threshold, (int, float)) and not isinstance(threshold, bool)
    if not is_number or not 0.0 <= threshold <= 1.0:
        raise ConfigurationError("Match threshold must be between 0 and 1", context={"value": threshold})
    return float(threshold)


def confidence_from_score(raw_score: float) -> int:
    """Convert a raw distance score to a 0-100 confidence.

    Args:
        raw_score: Distance in [0, 1]

    Returns:
        round((1 - raw_score) * 100), clamped to [0, 100]
    """
    return max(0, min(100, round((1.0 - raw_score) * 100)))


@dataclass(frozen=True)
class MatchCandidate:
    """One corpus entry scored against one input."""

    entry: PhraseEntry
    raw_score: float  # 0 = perfect match, 1 = no similarity

    @property
    def confidence(self) -> int:
        """Confidence this candidate would resolve with."""
        return confidence_from_score(self.raw_score)


@dataclass(frozen=True)
class ResolvedIntent:
    """The intent an input resolved to.

    Attributes:
        payload_key: Key of the matched phrase entry
        intent_type: Category/subject of the intent
        item: Specific item within the category
        confidence: Match quality from 0 to 100
    """

    payload_key: str
    intent_type: str
    item: str
    confidence: int

    def __post_init__(self) -> None:
        for name in ("payload_key", "intent_type", "item"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"ResolvedIntent.{name} must be a non-empty string")
        if isinstance(self.confidence, bool) or not isinstance(self.confidence, int):
            raise ValueError("ResolvedIntent.confidence must be an integer")
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"ResolvedIntent.confidence out of range: {self.confidence}")

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate) -> "ResolvedIntent":
        """Create from a scored candidate."""
        return cls(
            payload_key=candidate.entry.key,
            intent_type=candidate.entry.intent_type,
            item=candidate.entry.item,
            confidence=candidate.confidence,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "payload_key": self.payload_key,
            "intent_type": self.intent_type,
            "item": self.item,
            "confidence": self.confidence,
        }

    def to_message(self) -> dict[str, Any]:
        """Convert to the flow message fields downstream nodes read."""
        return {
            "payload": self.payload_key,
            "intentType": self.intent_type,
            "item": self.item,
            "confidence": self.confidence,
        }


class RankingSelector:
    """Selects the best corpus entry for an input.

    Runs a full scan of the corpus. The lowest raw score wins; exact ties go
    to the entry that comes first in the corpus. A best score above the
    threshold means no match.
    """

    def __init__(
        self,
        matcher: FuzzyMatcher | None = None,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
    ):
        """Initialize selector.

        Args:
            matcher: Scorer used when `select` is not given one
            threshold: Largest raw score accepted when `select` is not given one

        Raises:
            ConfigurationError: If the threshold is outside [0, 1]
        """
        self.matcher = matcher or FuzzyMatcher()
        self.threshold = check_threshold(threshold)

    def best(
        self,
        normalized: str,
        corpus: PhraseCorpus,
        matcher: FuzzyMatcher | None = None,
    ) -> MatchCandidate | None:
        """Find the lowest-scoring candidate regardless of threshold.

        Args:
            normalized: Corrected input text
            corpus: Entries to scan
            matcher: Scorer (defaults to the selector's)

        Returns:
            Best candidate, or None for empty input or an empty corpus
        """
        if not fold_text(normalized):
            return None

        matcher = matcher or self.matcher
        best: MatchCandidate | None = None

        for entry in corpus:
            raw_score = matcher.score(normalized, entry)
            # Strict comparison keeps the earliest entry on ties
            if best is None or raw_score < best.raw_score:
                best = MatchCandidate(entry=entry, raw_score=raw_score)
                if raw_score == 0.0:
                    break

        return best

    def select(
        self,
        normalized: str,
        corpus: PhraseCorpus,
        matcher: FuzzyMatcher | None = None,
        threshold: float | None = None,
    ) -> ResolvedIntent | None:
        """Resolve input to an intent.

        Args:
            normalized: Corrected input text
            corpus: Entries to scan
            matcher: Scorer (defaults to the selector's)
            threshold: Largest accepted raw score, inclusive (defaults to the selector's)

        Returns:
            ResolvedIntent, or None when nothing scores within the threshold

        Raises:
            ConfigurationError: If the threshold is outside [0, 1]
        """
        threshold = self.threshold if threshold is None else check_threshold(threshold)

        best = self.best(normalized, corpus, matcher)
        if best is None or best.raw_score > threshold:
            return None

        return ResolvedIntent.from_candidate(best)

    def rank(
        self,
        normalized: str,
        corpus: PhraseCorpus,
        matcher: FuzzyMatcher | None = None,
        limit: int | None = None,
    ) -> list[MatchCandidate]:
        """Score every entry and order candidates best-first.

        Args:
            normalized: Corrected input text
            corpus: Entries to scan
            matcher: Scorer (defaults to the selector's)
            limit: Maximum number of candidates to return

        Returns:
            Candidates sorted by raw score, corpus order on ties
        """
        if not fold_text(normalized):
            return []

        matcher = matcher or self.matcher
        candidates = [
            MatchCandidate(entry=entry, raw_score=matcher.score(normalized, entry))
            for entry in corpus
        ]
        # sorted() is stable, so ties stay in corpus order
        candidates = sorted(candidates, key=lambda c: c.raw_score)

        if limit is not None:
            candidates = candidates[:limit]
        return candidates


def select(
    normalized: str,
    corpus: PhraseCorpus,
    matcher: FuzzyMatcher | None = None,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> ResolvedIntent | None:
    """Resolve `normalized` against `corpus` with a one-off selector."""
    return RankingSelector(matcher).select(normalized, corpus, threshold=threshold)
