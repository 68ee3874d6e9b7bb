# provider_resolver/config/logging.py
"""
Centralized logging configuration for provider-resolver.

Includes secret redaction (always active) and optional file logging
with rotation. Provider options carry API keys, so every handler installed
here filters them out.
"""

from __future__ import annotations

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


# ── Secret redaction ─────────────────────────────────────────────────────────

# Patterns that match sensitive values in log messages
_SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Bearer tokens: "Bearer eyJ..." or "Bearer sk-..."
    (re.compile(r"(Bearer\s+)\S+", re.IGNORECASE), r"\1[REDACTED]"),
    # API keys: sk-... (OpenAI / Anthropic style)
    (re.compile(r"\bsk-[A-Za-z0-9_-]{10,}\b"), "[REDACTED_API_KEY]"),
    # Generic "api_key=..." / "apiKey: ..." values, also inside dict reprs
    (
        re.compile(r"""(['"]?api[_-]?key['"]?\s*[=:]\s*)['"]?[^\s,'"}]+['"]?""", re.IGNORECASE),
        r"\1[REDACTED]",
    ),
    # OAuth tokens in JSON-ish contexts: "access": "...", "refresh": "..."
    (
        re.compile(r"""(['"](?:access|refresh|token)['"]\s*:\s*['"])[^'"]+(['"])""", re.IGNORECASE),
        r"\1[REDACTED]\2",
    ),
    # Authorization headers: "Authorization: Basic xyz" or "Authorization=token"
    (
        re.compile(r"(Authorization\s*[=:]\s*)\S+(?:\s+\S+)?", re.IGNORECASE),
        r"\1[REDACTED]",
    ),
]


class SecretRedactingFilter(logging.Filter):
    """Logging filter that redacts secrets from log messages.

    Catches Bearer tokens, API keys (sk-...), api_key values, stored OAuth
    tokens and Authorization header values. Always active on all handlers.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            for pattern, replacement in _SECRET_PATTERNS:
                record.msg = pattern.sub(replacement, record.msg)
        # Also redact formatted args if they've been interpolated
        if record.args:
            formatted = record.getMessage()
            for pattern, replacement in _SECRET_PATTERNS:
                formatted = pattern.sub(replacement, formatted)
            record.msg = formatted
            record.args = None
        return True


# Module-level singleton so callers can add it to custom handlers
secret_filter = SecretRedactingFilter()

# Client SDKs and transports that log every request at INFO/DEBUG
_NOISY_LOGGERS = [
    "urllib3",
    "httpx",
    "httpcore",
    "asyncio",
    "openai",
    "anthropic",
    "chuk_llm",
]


# ── Core setup ───────────────────────────────────────────────────────────────


def setup_logging(
    level: str = "WARNING",
    quiet: bool = False,
    verbose: bool = False,
    format_style: str = "simple",
    log_file: str | None = None,
) -> None:
    """
    Configure centralized logging for provider-resolver and its client SDKs.

    Args:
        level: Base logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        quiet: If True, suppress most output except errors
        verbose: If True, enable debug logging
        format_style: "simple", "detailed", or "json"
        log_file: Optional file path for rotating file log (DEBUG level).
                  Expands ~ and creates parent directories automatically.
    """
    # Determine effective log level
    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    else:
        numeric_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f"Invalid log level: {level}")
        log_level = numeric_level

    # Clear any existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if format_style == "json":
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"message": "%(message)s", "logger": "%(name)s"}'
        )
    elif format_style == "detailed":
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s:%(lineno)d - %(message)s"
        )
    else:  # simple
        formatter = logging.Formatter("%(levelname)-8s %(message)s")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    console_handler.addFilter(secret_filter)

    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if log_file:
        _add_file_handler(root_logger, log_file)

    # Silence noisy third-party loggers unless in debug mode
    if log_level > logging.DEBUG:
        for logger_name in _NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.ERROR)

    # The file log captures everything; the console handler filters by level
    logging.getLogger("provider_resolver").setLevel(
        logging.DEBUG if log_file else log_level
    )


def _add_file_handler(root_logger: logging.Logger, log_file: str) -> None:
    """Add a rotating file handler with JSON format and secret redaction."""
    from provider_resolver.config.defaults import (
        DEFAULT_LOG_BACKUP_COUNT,
        DEFAULT_LOG_MAX_BYTES,
    )

    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    file_formatter = logging.Formatter(
        '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
        '"logger": "%(name)s", "line": %(lineno)d, "message": "%(message)s"}'
    )

    file_handler = RotatingFileHandler(
        str(path),
        maxBytes=DEFAULT_LOG_MAX_BYTES,
        backupCount=DEFAULT_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)
    file_handler.addFilter(secret_filter)

    # File handler always logs at DEBUG so root must accept DEBUG too
    if root_logger.level > logging.DEBUG:
        root_logger.setLevel(logging.DEBUG)

    root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the provider_resolver namespace."""
    return logging.getLogger(f"provider_resolver.{name}")
