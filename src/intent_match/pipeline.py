"""End-to-end intent resolution.

Runs correction and then selection for one utterance at a time. The
correction table and phrase corpus are handed in once and only read
afterwards, so a single pipeline can serve concurrent requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from intent_match.config import IntentMatchConfig
from intent_match.corpus import PhraseCorpus
from intent_match.corrections.processor import CorrectionLog, CorrectionProcessor
from intent_match.corrections.table import CorrectionTable
from intent_match.logging import get_logger
from intent_match.matching.distance import fold_text
from intent_match.matching.fuzzy import FuzzyMatcher
from intent_match.matching.ranking import (
    DEFAULT_MATCH_THRESHOLD,
    MatchCandidate,
    RankingSelector,
    ResolvedIntent,
)

logger = get_logger(__name__)


class ResolutionStatus(str, Enum):
    """Outcome of resolving one utterance."""

    MATCHED = "matched"
    NO_MATCH = "no_match"  # Best score above the threshold, or empty corpus
    EMPTY_INPUT = "empty_input"  # Nothing left to match after correction


@dataclass
class Resolution:
    """Result of resolving one utterance.

    Attributes:
        status: Outcome
        raw_text: Input as received
        normalized_text: Input after corrections
        intent: Resolved intent when status is MATCHED
        best_score: Lowest raw score seen, if any entry was scored
        corrections: Substitutions applied to the input
    """

    status: ResolutionStatus
    raw_text: str
    normalized_text: str
    intent: ResolvedIntent | None = None
    best_score: float | None = None
    corrections: CorrectionLog = field(default_factory=CorrectionLog)

    @property
    def matched(self) -> bool:
        """Whether an intent was resolved."""
        return self.status is ResolutionStatus.MATCHED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "raw_text": self.raw_text,
            "normalized_text": self.normalized_text,
            "intent": self.intent.to_dict() if self.intent else None,
            "best_score": self.best_score,
            "corrections": self.corrections.to_list(),
        }


class IntentPipeline:
    """Resolves raw utterances to intents.

    Example:
        pipeline = IntentPipeline(
            CorrectionTable.from_mapping({"dime": "time"}),
            PhraseCorpus([PhraseEntry("NOW", "what time is it", "TIME", "NOW")]),
        )
        pipeline.resolve("what's the dime").intent.payload_key  # Returns "NOW"
    """

    def __init__(
        self,
        corrections: CorrectionTable,
        corpus: PhraseCorpus,
        matcher: FuzzyMatcher | None = None,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
    ):
        """Initialize pipeline.

        Args:
            corrections: Corrections applied before matching
            corpus: Phrases to match against
            matcher: Scorer (defaults to FuzzyMatcher())
            threshold: Largest raw score accepted as a match

        Raises:
            ConfigurationError: If a matcher weight or the threshold is out of range
        """
        self.corrections = corrections
        self.corpus = corpus
        self.processor = CorrectionProcessor()
        self.selector = RankingSelector(matcher=matcher, threshold=threshold)

    @classmethod
    def from_config(
        cls,
        config: IntentMatchConfig,
        corrections: CorrectionTable,
        corpus: PhraseCorpus,
    ) -> "IntentPipeline":
        """Create a pipeline using configured matcher settings."""
        return cls(
            corrections,
            corpus,
            matcher=config.matcher.build_matcher(),
            threshold=config.matcher.match_threshold,
        )

    @property
    def matcher(self) -> FuzzyMatcher:
        return self.selector.matcher

    @property
    def threshold(self) -> float:
        return self.selector.threshold

    def normalize(self, text: str) -> str:
        """Apply the correction table to `text`."""
        return self.processor.normalize(text, self.corrections)

    def resolve(self, text: str) -> Resolution:
        """Resolve one utterance.

        Args:
            text: Raw transcribed text

        Returns:
            Resolution describing the outcome; never raises for bad input
        """
        text = text or ""
        normalized, log = self.processor.correct(text, self.corrections)

        logger.debug(
            f"Corrected input: {normalized}",
            extra={"corrections": len(log)},
        )

        if not fold_text(normalized):
            logger.info("Empty input, nothing to match")
            return Resolution(
                status=ResolutionStatus.EMPTY_INPUT,
                raw_text=text,
                normalized_text=normalized,
                corrections=log,
            )

        best = self.selector.best(normalized, self.corpus)
        if best is None or best.raw_score > self.threshold:
            logger.info(
                "No match",
                extra={
                    "best_key": best.entry.key if best else None,
                    "best_score": round(best.raw_score, 4) if best else None,
                    "threshold": self.threshold,
                },
            )
            return Resolution(
                status=ResolutionStatus.NO_MATCH,
                raw_text=text,
                normalized_text=normalized,
                best_score=best.raw_score if best else None,
                corrections=log,
            )

        intent = ResolvedIntent.from_candidate(best)
        logger.info(
            f"Top match: {intent.payload_key} [{intent.confidence}]",
            extra={"intent_type": intent.intent_type, "item": intent.item},
        )
        return Resolution(
            status=ResolutionStatus.MATCHED,
            raw_text=text,
            normalized_text=normalized,
            intent=intent,
            best_score=best.raw_score,
            corrections=log,
        )

    def rank(self, text: str, limit: int | None = None) -> list[MatchCandidate]:
        """Correct `text` and return candidates ordered best-first.

        Args:
            text: Raw transcribed text
            limit: Maximum number of candidates

        Returns:
            Scored candidates, ignoring the threshold
        """
        return self.selector.rank(self.normalize(text or ""), self.corpus, limit=limit)
