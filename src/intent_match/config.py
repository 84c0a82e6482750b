"""Configuration loading and management for intent-match.

Handles matcher settings and table locations, loaded from a JSON file
with optional environment overrides.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from intent_match.errors import ConfigurationError, ResourceError
from intent_match.matching.fuzzy import DEFAULT_FILLER_WORDS, FuzzyMatcher
from intent_match.matching.ranking import DEFAULT_MATCH_THRESHOLD, check_threshold

CONFIG_ENV_VAR = "INTENT_MATCH_CONFIG"
THRESHOLD_ENV_VAR = "INTENT_MATCH_THRESHOLD"


class MatcherSettings(BaseModel):
    """Fuzzy matcher and selection settings."""

    # Largest raw score accepted as a match (lower = stricter)
    match_threshold: float = Field(default=DEFAULT_MATCH_THRESHOLD, ge=0.0, le=1.0, allow_inf_nan=False)
    length_penalty: float = Field(
        default=FuzzyMatcher.DEFAULT_LENGTH_PENALTY, ge=0.0, le=FuzzyMatcher.MAX_LENGTH_PENALTY
    )
    prefix_bonus: float = Field(
        default=FuzzyMatcher.DEFAULT_PREFIX_BONUS, ge=0.0, le=FuzzyMatcher.MAX_PREFIX_BONUS
    )
    prefix_window: int = Field(default=FuzzyMatcher.DEFAULT_PREFIX_WINDOW, ge=1)
    # Positive so only identical text scores 0
    keyword_penalty: float = Field(default=FuzzyMatcher.DEFAULT_KEYWORD_PENALTY, gt=0.0, le=1.0)
    # Compare filler-free keywords as well as whole phrases
    use_keywords: bool = True
    filler_words: list[str] = Field(default_factory=lambda: sorted(DEFAULT_FILLER_WORDS))

    def build_matcher(self) -> FuzzyMatcher:
        """Create a FuzzyMatcher with these settings."""
        return FuzzyMatcher(
            length_penalty=self.length_penalty,
            prefix_bonus=self.prefix_bonus,
            prefix_window=self.prefix_window,
            keyword_penalty=self.keyword_penalty,
            filler_words=self.filler_words,
            use_keywords=self.use_keywords,
        )


class IntentMatchConfig(BaseModel):
    """Top-level configuration: where the tables live and how to match."""

    # Relative paths are resolved against the config file's directory
    phrases_file: str | None = None
    corrections_file: str | None = None
    matcher: MatcherSettings = Field(default_factory=MatcherSettings)

    def resolve_path(self, value: str | None, base_dir: Path) -> Path | None:
        """Resolve a configured file path.

        Args:
            value: Configured path, possibly relative
            base_dir: Directory relative paths are anchored to

        Returns:
            Absolute path, or None if not configured
        """
        if not value:
            return None
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        return path


def load_config(path: Path | str) -> IntentMatchConfig:
    """Load configuration from a JSON file.

    Args:
        path: Path to the config file

    Returns:
        IntentMatchConfig object

    Raises:
        ResourceError: If the file can't be read or isn't valid JSON
        ConfigurationError: If a setting is invalid or the data is not an object
    """
    path = Path(path)
    if not path.exists():
        raise ResourceError(f"Config file not found: {path}", context={"path": str(path)})

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ResourceError(f"Config file is not valid JSON: {e}", context={"path": str(path)}) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceError(f"Cannot read config file: {e}", context={"path": str(path)}) from e

    try:
        return IntentMatchConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid config: {e}", context={"path": str(path)}) from e


def save_config(path: Path | str, config: IntentMatchConfig) -> Path:
    """Save configuration to a JSON file with atomic write.

    Args:
        path: Destination file
        config: Configuration to save

    Returns:
        Path to the saved config file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")

    with open(temp_path, "w", encoding="utf-8") as f:
        json.dump(config.model_dump(), f, indent=2)

    temp_path.replace(path)
    return path


def apply_env_overrides(config: IntentMatchConfig) -> IntentMatchConfig:
    """Apply environment variable overrides.

    Args:
        config: Base configuration

    Returns:
        Configuration with `INTENT_MATCH_THRESHOLD` applied if set

    Raises:
        ConfigurationError: If the override is not a float in [0, 1]
    """
    raw = os.environ.get(THRESHOLD_ENV_VAR)
    if raw is None or raw.strip() == "":
        return config

    try:
        threshold = float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{THRESHOLD_ENV_VAR} is not a number", context={"value": raw}
        ) from e

    return with_threshold(config, threshold)


def with_threshold(config: IntentMatchConfig, threshold: float) -> IntentMatchConfig:
    """Return a copy of `config` with a different match threshold.

    Raises:
        ConfigurationError: If the threshold is outside [0, 1]
    """
    matcher = config.matcher.model_copy(update={"match_threshold": check_threshold(threshold)})
    return config.model_copy(update={"matcher": matcher})
