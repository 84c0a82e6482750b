"""Correction rules and tables.

A correction table maps known mis-transcribed tokens to the tokens the
phrase corpus expects. Tables are built once and never mutated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from intent_match.errors import InvalidRuleError


@dataclass(frozen=True)
class CorrectionRule:
    """A single whole-word substitution.

    Attributes:
        wrong: Token as the transcriber produces it (matched case-insensitively)
        right: Token inserted verbatim in its place
    """

    wrong: str
    right: str
    pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.wrong, str) or not self.wrong.strip():
            raise InvalidRuleError(
                "Correction rule has an empty wrong token",
                context={"wrong": self.wrong, "right": self.right},
            )
        if not isinstance(self.right, str):
            raise InvalidRuleError(
                "Correction rule replacement must be a string",
                context={"wrong": self.wrong, "right": self.right},
            )
        if self.wrong == self.right:
            raise InvalidRuleError(
                f"Correction rule '{self.wrong}' replaces a token with itself",
                context={"wrong": self.wrong},
            )

        # Lookarounds rather than \b so tokens with punctuation at either
        # edge still need a non-word character (or string end) beside them
        pattern = re.compile(r"(?<!\w)" + re.escape(self.wrong) + r"(?!\w)", re.IGNORECASE)
        object.__setattr__(self, "pattern", pattern)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"wrong": self.wrong, "right": self.right}


class CorrectionTable:
    """Ordered, read-only collection of correction rules.

    Rules are applied in insertion order. Because each rule sees the output
    of the ones before it, overlapping rules are order-sensitive.

    Example:
        table = CorrectionTable.from_mapping({"dime": "time"})
        table.get("DIME")  # Returns "time"
    """

    def __init__(self, rules: Iterable[CorrectionRule | tuple[str, str]] = ()):
        """Initialize table.

        Args:
            rules: Rules or (wrong, right) pairs, in application order

        Raises:
            InvalidRuleError: If any rule is invalid
        """
        built: list[CorrectionRule] = []
        for rule in rules:
            if not isinstance(rule, CorrectionRule):
                wrong, right = rule
                rule = CorrectionRule(wrong, right)
            built.append(rule)

        self._rules: tuple[CorrectionRule, ...] = tuple(built)

    @classmethod
    def from_mapping(cls, corrections: Mapping[str, str]) -> "CorrectionTable":
        """Create a table from a wrong -> right mapping.

        Args:
            corrections: Mapping in application order

        Returns:
            CorrectionTable instance
        """
        return cls(corrections.items())

    @property
    def rules(self) -> tuple[CorrectionRule, ...]:
        """Rules in application order."""
        return self._rules

    def get(self, wrong: str) -> str | None:
        """Get the replacement of the first rule whose wrong token matches.

        Args:
            wrong: Token to look up (case-insensitive)

        Returns:
            Replacement token, or None if no rule covers it
        """
        needle = wrong.lower()
        for rule in self._rules:
            if rule.wrong.lower() == needle:
                return rule.right
        return None

    def to_dict(self) -> dict[str, str]:
        """Export as a wrong -> right mapping.

        Later rules with a duplicate wrong token overwrite earlier ones here,
        so use `rules` when order and duplicates matter.
        """
        return {rule.wrong: rule.right for rule in self._rules}

    def __iter__(self) -> Iterator[CorrectionRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        """Return number of rules."""
        return len(self._rules)

    def __bool__(self) -> bool:
        return bool(self._rules)

    def __contains__(self, wrong: object) -> bool:
        return isinstance(wrong, str) and self.get(wrong) is not None

    def __repr__(self) -> str:
        return f"CorrectionTable({len(self._rules)} rules)"
