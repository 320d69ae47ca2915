"""Logging setup that keeps GitHub and model API credentials out of log output."""

import json
import logging
import os
import re
from collections.abc import Iterable

SECRET_ENV_VARS = ("GH_STATS_TOKEN", "GITHUB_TOKEN", "OPENAI_API_KEY")

# Shorter values are too likely to collide with ordinary words.
MIN_KNOWN_SECRET_LENGTH = 8

TOKEN_SHAPES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"github_pat_[A-Za-z0-9_]{20,}"), "[REDACTED_GH_TOKEN]"),
    (re.compile(r"gh[opsu]_[A-Za-z0-9]{20,}"), "[REDACTED_GH_TOKEN]"),
    (re.compile(r"sk-[A-Za-z0-9_\-]{16,}"), "[REDACTED_API_KEY]"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9_\-\.]+"), r"\1[REDACTED]"),
    (re.compile(r"(Authorization:\s*)[^\s,\]]+", re.IGNORECASE), r"\1[REDACTED]"),
]


def redact(text: str, known_secrets: Iterable[str] = ()) -> str:
    """Replace credentials in text.

    Exact values are replaced first so that tokens without a recognizable
    prefix (40-character classic tokens, keys for non-OpenAI endpoints) are
    caught as well.
    """
    for secret in known_secrets:
        text = text.replace(secret, "[REDACTED]")
    for pattern, replacement in TOKEN_SHAPES:
        text = pattern.sub(replacement, text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Redact credentials from the fully formatted message of each record."""

    def __init__(self, known_secrets: Iterable[str] = ()) -> None:
        super().__init__()
        # Longest first so a secret containing another is replaced whole.
        self.known_secrets = tuple(
            sorted(
                {s for s in known_secrets if len(s) >= MIN_KNOWN_SECRET_LENGTH},
                key=len,
                reverse=True,
            )
        )

    def filter(self, record: logging.LogRecord) -> bool:
        # Merging args first also covers secrets inside non-string arguments,
        # such as httpx exceptions carrying a request URL.
        record.msg = redact(record.getMessage(), self.known_secrets)
        record.args = ()
        return True


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, for CI job logs."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def install_redaction(env_names: Iterable[str] = SECRET_ENV_VARS) -> SecretRedactingFilter:
    """Attach a redacting filter for the values of env_names to every root handler.

    Any filter installed by an earlier call is replaced, so the command can
    widen the set once it knows which variables the config names.
    """
    known = [os.environ[name] for name in dict.fromkeys(env_names) if os.environ.get(name)]
    redactor = SecretRedactingFilter(known)
    for handler in logging.getLogger().handlers:
        for existing in [f for f in handler.filters if isinstance(f, SecretRedactingFilter)]:
            handler.removeFilter(existing)
        handler.addFilter(redactor)
    return redactor


def setup_logging(verbose: bool = False, json_format: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: Enable debug level logging.
        json_format: Emit JSON lines instead of plain text.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if json_format:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(JsonLogFormatter())

    install_redaction()

    # Request lines from httpx would otherwise drown the report output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
