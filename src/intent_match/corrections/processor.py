"""Apply correction tables to transcribed text.

Substitution runs before fuzzy matching so that known speech-to-text
mistakes ("dime" for "time") do not cost edit distance later.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from intent_match.corrections.table import CorrectionRule, CorrectionTable


@dataclass
class Correction:
    """Represents a single substitution made to the input."""

    original: str  # Text as it appeared in the input
    corrected: str  # Replacement inserted
    rule: CorrectionRule
    position: int  # Character position in the working string

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original": self.original,
            "corrected": self.corrected,
            "rule": self.rule.to_dict(),
            "position": self.position,
        }


@dataclass
class CorrectionLog:
    """Log of all substitutions made during one correction pass."""

    corrections: list[Correction] = field(default_factory=list)

    def add(self, correction: Correction) -> None:
        """Add a correction to the log."""
        self.corrections.append(correction)

    def __len__(self) -> int:
        """Return number of corrections."""
        return len(self.corrections)

    def __iter__(self):
        return iter(self.corrections)

    def to_list(self) -> list[dict[str, Any]]:
        """Convert to list of dicts for JSON serialization."""
        return [c.to_dict() for c in self.corrections]


class CorrectionProcessor:
    """Applies a correction table to raw input text.

    Each rule replaces every case-insensitive whole-word occurrence of its
    wrong token with its right token, inserted verbatim. Rules run in table
    order and are cumulative: a later rule may match text introduced by an
    earlier one.
    """

    def normalize(self, text: str, table: CorrectionTable) -> str:
        """Apply all rules and return the corrected text.

        Args:
            text: Raw transcribed text
            table: Corrections to apply

        Returns:
            Corrected text (unchanged if the table is empty)
        """
        if not text:
            return ""

        for rule in table:
            # Callable replacement keeps backslashes in `right` literal
            text = rule.pattern.sub(lambda _m, r=rule.right: r, text)
        return text

    def correct(self, text: str, table: CorrectionTable) -> tuple[str, CorrectionLog]:
        """Apply all rules, recording each substitution.

        Args:
            text: Raw transcribed text
            table: Corrections to apply

        Returns:
            Tuple of (corrected_text, correction_log)
        """
        log = CorrectionLog()
        if not text:
            return "", log

        corrected = text
        for rule in table:
            pieces = []
            last = 0
            offset = 0
            for match in rule.pattern.finditer(corrected):
                start, end = match.span()
                pieces.append(corrected[last:start])
                pieces.append(rule.right)
                log.add(Correction(
                    original=match.group(0),
                    corrected=rule.right,
                    rule=rule,
                    position=start + offset,
                ))
                offset += len(rule.right) - (end - start)
                last = end
            if pieces:
                pieces.append(corrected[last:])
                corrected = "".join(pieces)

        return corrected, log


_default_processor = CorrectionProcessor()


def normalize(text: str, table: CorrectionTable) -> str:
    """Apply `table` to `text` with the shared processor."""
    return _default_processor.normalize(text, table)
