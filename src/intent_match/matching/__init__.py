"""Matching module for resolving input to phrase entries.

Provides edit-distance scoring of corrected input against the phrase
corpus and selection of the best entry within a confidence threshold.
"""

from intent_match.matching.distance import (
    common_prefix_length,
    damerau_levenshtein_distance,
    fold_text,
)
from intent_match.matching.fuzzy import (
    DEFAULT_FILLER_WORDS,
    FuzzyMatcher,
    keyword_skeleton,
    score,
)
from intent_match.matching.ranking import (
    DEFAULT_MATCH_THRESHOLD,
    MatchCandidate,
    RankingSelector,
    ResolvedIntent,
    check_threshold,
    confidence_from_score,
    select,
)

__all__ = [
    "common_prefix_length",
    "damerau_levenshtein_distance",
    "fold_text",
    "DEFAULT_FILLER_WORDS",
    "FuzzyMatcher",
    "keyword_skeleton",
    "score",
    "DEFAULT_MATCH_THRESHOLD",
    "MatchCandidate",
    "RankingSelector",
    "ResolvedIntent",
    "check_threshold",
    "confidence_from_score",
    "select",
]
