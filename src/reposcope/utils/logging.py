"""Logging for analysis runs.

Three output modes share one record shape. Records emitted through
``RepoScopeLogger.structured`` carry an ``extra_data`` dict; when it holds a
``run_id`` (and optionally a ``stage``) console output is prefixed with
``[run/stage]`` so interleaved runs stay readable:

- Human mode: [LEVEL] [1a2b3c4d/detect_patterns] message
- Verbose mode: [LEVEL][HH:MM:SS] [1a2b3c4d/detect_patterns] message
- JSON mode: one object per line with level, ts, msg and every structured field
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO

ROOT_LOGGER = "reposcope"
RUN_ID_PREFIX_LENGTH = 8

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("LiteLLM", "httpx")

_RESET = "\033[0m"
_LEVEL_COLORS = {
    logging.DEBUG: "\033[90m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[31m",
}


class LogMode(Enum):
    """Logging output mode."""

    HUMAN = "human"
    VERBOSE = "verbose"
    JSON = "json"


def _supports_color(stream: TextIO | None) -> bool:
    stream = stream or sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "extra_data", None) or {}


class _ConsoleFormatter(logging.Formatter):
    """Shared console layout: colored level tag, header, run prefix, message."""

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and _supports_color(None)

    def header(self, record: logging.LogRecord) -> str:
        return ""

    def run_prefix(self, record: logging.LogRecord) -> str:
        fields = _structured_fields(record)
        if "run_id" not in fields:
            return ""
        run_id = str(fields["run_id"])[:RUN_ID_PREFIX_LENGTH]
        stage = fields.get("stage")
        return f"[{run_id}/{stage}] " if stage else f"[{run_id}] "

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname}]"
        if self.use_colors:
            tag = f"{_LEVEL_COLORS.get(record.levelno, _RESET)}{tag}{_RESET}"
        return f"{tag}{self.header(record)} {self.run_prefix(record)}{record.getMessage()}"


class HumanFormatter(_ConsoleFormatter):
    """Default console output: [LEVEL] message."""


class VerboseFormatter(_ConsoleFormatter):
    """Console output with a wall-clock timestamp after the level."""

    def header(self, record: logging.LogRecord) -> str:
        return datetime.fromtimestamp(record.created).strftime("[%H:%M:%S]")


class JSONFormatter(logging.Formatter):
    """JSON lines output for CI and log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": record.levelname,
            "ts": datetime.now(UTC).isoformat(),
            "msg": record.getMessage(),
            **_structured_fields(record),
        }
        return json.dumps(entry, default=str)


class RepoScopeLogger(logging.Logger):
    """Logger with a ``structured`` call for run and stage events."""

    def structured(self, level: int, msg: str, *args: Any, **fields: Any) -> None:
        """Log ``msg`` with ``fields`` attached as structured data.

        Args:
            level: Log level
            msg: Message, may contain %-style placeholders
            *args: Placeholder arguments
            **fields: Structured fields such as run_id, stage, duration_ms
        """
        if not self.isEnabledFor(level):
            return
        record = self.makeRecord(self.name, level, "(unknown)", 0, msg, args, None)
        if fields:
            record.extra_data = fields  # type: ignore[attr-defined]
        self.handle(record)


logging.setLoggerClass(RepoScopeLogger)


def get_logger(name: str = ROOT_LOGGER) -> RepoScopeLogger:
    """Return the named logger as a RepoScopeLogger."""
    logger = logging.getLogger(name)
    if not isinstance(logger, RepoScopeLogger):
        # created before setLoggerClass ran
        logger.__class__ = RepoScopeLogger
    return logger  # type: ignore[return-value]


def _formatter_for(mode: LogMode, stream: TextIO | None) -> logging.Formatter:
    if mode == LogMode.JSON:
        return JSONFormatter()
    use_colors = _supports_color(stream)
    if mode == LogMode.VERBOSE:
        return VerboseFormatter(use_colors=use_colors)
    return HumanFormatter(use_colors=use_colors)


def setup_logging(
    mode: LogMode = LogMode.HUMAN,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Install a single handler on the ``reposcope`` logger.

    Args:
        mode: Output mode
        level: Minimum level for RepoScope messages
        stream: Destination; stderr by default so stdout carries results only
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_formatter_for(mode, stream))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def configure_from_cli(verbose: bool = False, quiet: bool = False, ci: bool = False) -> None:
    """Map the global CLI flags onto a mode and level.

    ``--ci`` selects JSON output, ``--verbose`` adds timestamps and DEBUG
    messages, ``--quiet`` keeps warnings and errors only.
    """
    if ci:
        mode = LogMode.JSON
    elif verbose:
        mode = LogMode.VERBOSE
    else:
        mode = LogMode.HUMAN

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    setup_logging(mode=mode, level=level)
