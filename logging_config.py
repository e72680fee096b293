from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Iterable, Sequence

from settings import get_settings

_CONTEXT_KEYS = (
    "method",
    "path",
    "status_code",
    "duration_ms",
    "user_id",
    "client_id",
    "batch_id",
    "invoice_id",
    "session_id",
    "attempt",
    "endpoint",
    "reason",
)

# Chatty third-party loggers stay at WARNING unless the caller asks for DEBUG.
_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")

_configured = False


class ContextualFormatter(logging.Formatter):
    """Append whitelisted ``extra=`` fields as ``key=value`` pairs.

    Timestamps are rendered in UTC. Values containing whitespace are quoted
    so that a ``reason`` message stays a single token.
    """

    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._context_keys: Sequence[str] = tuple(context_keys or _CONTEXT_KEYS)

    def _context(self, record: logging.LogRecord) -> str:
        pairs = []
        for key in self._context_keys:
            value = record.__dict__.get(key)
            if value is None:
                continue
            text = str(value)
            if not text or any(char.isspace() for char in text):
                text = repr(text)
            pairs.append(f"{key}={text}")
        return " ".join(pairs)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = self._context(record)
        return f"{message} | {context}" if context else message


def configure_logging(
    level: str | int | None = None,
    *,
    stream: str = "ext://sys.stdout",
    force: bool = False,
) -> None:
    """Configure process-wide logging once.

    The API server logs to stdout at ``LOG_LEVEL``. The CLI passes
    ``stream="ext://sys.stderr"`` so diagnostics never mix with command output,
    and ``force=True`` to replace an earlier configuration.
    """
    global _configured
    if _configured and not force:
        return

    log_level = level if level is not None else get_settings().log_level
    if isinstance(log_level, str):
        log_level = log_level.upper()
    noisy_level = "DEBUG" if log_level in ("DEBUG", logging.DEBUG) else "WARNING"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "context_keys": list(_CONTEXT_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": stream,
                    "formatter": "contextual",
                }
            },
            "loggers": {name: {"level": noisy_level} for name in _NOISY_LOGGERS},
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
