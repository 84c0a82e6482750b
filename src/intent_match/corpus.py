"""Phrase corpus for intent matching.

The corpus is the fixed, ordered set of canonical phrases that input is
matched against, each carrying the intent it resolves to.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Iterable, Iterator

from intent_match.errors import InvalidPhraseEntryError


@dataclass(frozen=True)
class PhraseEntry:
    """A canonical phrase and the intent it resolves to.

    Attributes:
        key: Unique intent identifier, emitted as the payload (e.g. "NOW")
        reference_text: Phrase to fuzzy-match against (e.g. "what time is it")
        intent_type: Category/subject of the intent (e.g. "TIME")
        item: Specific item within the category (e.g. "NOW")
    """

    key: str
    reference_text: str
    intent_type: str
    item: str

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidPhraseEntryError(
                    f"Phrase entry field '{f.name}' must be a non-empty string",
                    context={"key": self.key, "field": f.name},
                )

    def to_dict(self) -> dict[str, str]:
        """Convert to the phrase file record shape."""
        return {
            "key": self.key,
            "text": self.reference_text,
            "subject": self.intent_type,
            "item": self.item,
        }


class PhraseCorpus:
    """Immutable ordered collection of phrase entries.

    Iteration order is construction order; the ranking tie-break relies on it.
    """

    def __init__(self, entries: Iterable[PhraseEntry]):
        """Initialize corpus.

        Args:
            entries: Phrase entries in priority order

        Raises:
            InvalidPhraseEntryError: If an item is not a PhraseEntry or a key repeats
        """
        by_key: dict[str, PhraseEntry] = {}
        ordered: list[PhraseEntry] = []

        for index, entry in enumerate(entries):
            if not isinstance(entry, PhraseEntry):
                raise InvalidPhraseEntryError(
                    "Corpus items must be PhraseEntry instances",
                    context={"index": index, "type": type(entry).__name__},
                )
            if entry.key in by_key:
                raise InvalidPhraseEntryError(
                    f"Duplicate phrase key '{entry.key}'",
                    context={"key": entry.key, "index": index},
                )
            by_key[entry.key] = entry
            ordered.append(entry)

        self._entries: tuple[PhraseEntry, ...] = tuple(ordered)
        self._by_key = by_key

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "PhraseCorpus":
        """Create a corpus from phrase file records.

        Records use the phrase file field names: key, text, subject, item.

        Args:
            records: Record dicts in priority order

        Returns:
            PhraseCorpus instance

        Raises:
            InvalidPhraseEntryError: If a record is missing a field
        """
        entries = []
        for index, record in enumerate(records):
            missing = [name for name in ("key", "text", "subject", "item") if name not in record]
            if missing:
                raise InvalidPhraseEntryError(
                    f"Phrase record is missing {', '.join(missing)}",
                    context={"index": index, "key": record.get("key")},
                )
            entries.append(PhraseEntry(
                key=record["key"],
                reference_text=record["text"],
                intent_type=record["subject"],
                item=record["item"],
            ))
        return cls(entries)

    @property
    def entries(self) -> tuple[PhraseEntry, ...]:
        """Entries in corpus order."""
        return self._entries

    def get(self, key: str) -> PhraseEntry | None:
        """Look up an entry by key.

        Args:
            key: Intent key

        Returns:
            The entry, or None if not in the corpus
        """
        return self._by_key.get(key)

    def intent_types(self) -> list[str]:
        """Get distinct intent types in first-seen order."""
        return list(dict.fromkeys(e.intent_type for e in self._entries))

    def to_records(self) -> list[dict[str, str]]:
        """Export entries as phrase file records."""
        return [e.to_dict() for e in self._entries]

    def __iter__(self) -> Iterator[PhraseEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        """Return number of entries."""
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __repr__(self) -> str:
        return f"PhraseCorpus({len(self._entries)} entries)"
