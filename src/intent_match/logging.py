"""Structured logging for intent-match.

All package loggers live under the ``intent_match`` namespace. Handlers are
attached to that namespace only, so embedding applications keep control of
the root logger. Fields passed through ``extra=`` are rendered as context
after the message (text) or under a ``context`` key (JSON).
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, MutableMapping

ROOT_LOGGER_NAME = "intent_match"

# Present on every LogRecord; anything else arrived through `extra`
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class LogLevel(IntEnum):
    """Verbosity levels exposed to the CLI."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2  # Match decisions
    DEBUG = 3  # Corrected input


_LEVEL_MAP = {
    LogLevel.QUIET: logging.ERROR,
    LogLevel.NORMAL: logging.WARNING,
    LogLevel.VERBOSE: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


@dataclass
class LogConfig:
    """Logging setup for the package.

    Attributes:
        level: Verbosity for the console handler
        log_file: Also write every record (DEBUG and up) to this file
        json_format: One JSON object per record instead of text lines
        include_timestamp: Prefix records with their creation time
        include_context: Render `extra` fields
    """

    level: LogLevel = LogLevel.NORMAL
    log_file: Path | None = None
    json_format: bool = False
    include_timestamp: bool = True
    include_context: bool = True


class StructuredFormatter(logging.Formatter):
    """Renders records as text lines or JSON objects, with their context."""

    def __init__(
        self,
        json_format: bool = False,
        include_timestamp: bool = True,
        include_context: bool = True,
    ):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.json_format = json_format
        self.include_timestamp = include_timestamp
        self.include_context = include_context

    @staticmethod
    def context_of(record: logging.LogRecord) -> dict[str, Any]:
        """Fields attached to `record` through `extra`."""
        return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}

    def format(self, record: logging.LogRecord) -> str:
        context = self.context_of(record) if self.include_context else {}
        if self.json_format:
            return self._as_json(record, context)
        return self._as_text(record, context)

    def _as_json(self, record: logging.LogRecord, context: dict[str, Any]) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            payload["timestamp"] = self.formatTime(record, "%Y-%m-%dT%H:%M:%S")
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # Values json can't encode (entries, paths) fall back to str()
        return json.dumps(payload, default=str)

    def _as_text(self, record: logging.LogRecord, context: dict[str, Any]) -> str:
        line = f"{record.levelname:<7} {record.name}: {record.getMessage()}"
        if self.include_timestamp:
            line = f"{self.formatTime(record, self.datefmt)} {line}"
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that adds bound fields to every record's `extra`.

    Fields passed at the call site win over bound ones.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextAdapter":
        """Return a new adapter with more fields bound."""
        return ContextAdapter(self.logger, {**self.extra, **context})


_config = LogConfig()
_configured = False


def _handler(stream_or_path: Any, level: int, config: LogConfig) -> logging.Handler:
    if isinstance(stream_or_path, Path):
        stream_or_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(stream_or_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(stream_or_path)
    handler.setLevel(level)
    handler.setFormatter(
        StructuredFormatter(
            json_format=config.json_format,
            include_timestamp=config.include_timestamp,
            include_context=config.include_context,
        )
    )
    return handler


def configure_logging(config: LogConfig | None = None) -> None:
    """(Re)configure handlers on the package logger.

    Args:
        config: New configuration; the current one is reused when omitted
    """
    global _config, _configured

    if config is not None:
        _config = config

    console_level = _LEVEL_MAP[_config.level]
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)

    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()

    package_logger.addHandler(_handler(sys.stderr, console_level, _config))
    if _config.log_file:
        package_logger.addHandler(_handler(_config.log_file, logging.DEBUG, _config))
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(console_level)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a package logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


def bind(logger: logging.Logger | ContextAdapter, **context: Any) -> ContextAdapter:
    """Attach fields that every record from the returned logger carries.

    Example:
        log = bind(get_logger(__name__), request="r1")
        log.info("Resolved")  # record.request == "r1"
    """
    if isinstance(logger, ContextAdapter):
        return logger.bind(**context)
    return ContextAdapter(logger, context)


def set_verbosity(level: LogLevel) -> None:
    """Change console verbosity, keeping the rest of the configuration."""
    _config.level = level
    configure_logging(_config)
