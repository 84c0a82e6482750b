"""Correction module for transcribed input.

Provides whole-word substitution of known speech-to-text mistakes
before the input is matched against the phrase corpus.
"""

from intent_match.corrections.table import CorrectionRule, CorrectionTable
from intent_match.corrections.processor import (
    Correction,
    CorrectionLog,
    CorrectionProcessor,
    normalize,
)

__all__ = [
    "CorrectionRule",
    "CorrectionTable",
    "Correction",
    "CorrectionLog",
    "CorrectionProcessor",
    "normalize",
]
