"""Loading phrase and correction tables from JSON files.

Phrase files hold a list of records with the fields key, text, subject,
and item. Correction files hold either a wrong -> right object (key order
is rule order) or a list of {"wrong", "right"} records. Either may be
wrapped in an object under "phrases" / "corrections".
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from intent_match.corpus import PhraseCorpus
from intent_match.corrections.table import CorrectionTable
from intent_match.errors import InvalidPhraseEntryError, InvalidRuleError, ResourceError
from intent_match.logging import get_logger

logger = get_logger(__name__)


def read_json(path: Path) -> Any:
    """Read JSON data from a file.

    Args:
        path: File path to read

    Returns:
        Parsed JSON data

    Raises:
        ResourceError: If the file is missing, unreadable, or not valid JSON
    """
    if not path.exists():
        raise ResourceError(f"File not found: {path}", context={"path": str(path)})

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ResourceError(f"Invalid JSON in {path}: {e}", context={"path": str(path)}) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceError(f"Cannot read {path}: {e}", context={"path": str(path)}) from e


def parse_corrections(data: Any) -> CorrectionTable:
    """Build a correction table from decoded JSON.

    Args:
        data: Mapping, list of records, or either wrapped under "corrections"

    Returns:
        CorrectionTable in file order

    Raises:
        InvalidRuleError: If the data has the wrong shape or a rule is invalid
    """
    if isinstance(data, dict) and isinstance(data.get("corrections"), (dict, list)):
        data = data["corrections"]

    if isinstance(data, dict):
        return CorrectionTable.from_mapping(data)

    if isinstance(data, list):
        pairs = []
        for index, record in enumerate(data):
            if not isinstance(record, dict) or "wrong" not in record or "right" not in record:
                raise InvalidRuleError(
                    "Correction record needs 'wrong' and 'right'",
                    context={"index": index},
                )
            pairs.append((record["wrong"], record["right"]))
        return CorrectionTable(pairs)

    raise InvalidRuleError(
        "Corrections must be an object or a list",
        context={"type": type(data).__name__},
    )


def parse_phrases(data: Any) -> PhraseCorpus:
    """Build a phrase corpus from decoded JSON.

    Args:
        data: List of records, or the list wrapped under "phrases"

    Returns:
        PhraseCorpus in file order

    Raises:
        InvalidPhraseEntryError: If the data has the wrong shape or an entry is invalid
    """
    if isinstance(data, dict) and "phrases" in data:
        data = data["phrases"]

    if not isinstance(data, list):
        raise InvalidPhraseEntryError(
            "Phrases must be a list of records",
            context={"type": type(data).__name__},
        )

    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise InvalidPhraseEntryError("Phrase record must be an object", context={"index": index})

    return PhraseCorpus.from_records(data)


def load_corrections(path: Path | str) -> CorrectionTable:
    """Load a correction table from a JSON file.

    Args:
        path: Path to the corrections file

    Returns:
        CorrectionTable instance
    """
    path = Path(path)
    table = parse_corrections(read_json(path))
    logger.debug(f"Loaded {len(table)} correction rules", extra={"path": str(path)})
    return table


def load_phrases(path: Path | str) -> PhraseCorpus:
    """Load a phrase corpus from a JSON file.

    Args:
        path: Path to the phrases file

    Returns:
        PhraseCorpus instance
    """
    path = Path(path)
    corpus = parse_phrases(read_json(path))
    logger.debug(f"Loaded {len(corpus)} phrases", extra={"path": str(path)})
    return corpus
