"""Structured JSON logging for the clinic stock backend.

Every record is emitted as one JSON line. Staff contact details (emails,
phone numbers) and session credentials are masked before they reach a
handler, and records carry the request id of the HTTP request that
produced them.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import uuid
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

_request_id: ContextVar[str] = ContextVar("request_id", default="")


def set_request_id(value: str | None = None) -> str:
    """Bind a request id to the current context (a fresh UUID if none given)."""
    rid = value or str(uuid.uuid4())
    _request_id.set(rid)
    return rid


def get_request_id() -> str:
    """Request id bound to the current context, or an empty string."""
    return _request_id.get()


MASK = "***"

# (pattern, replacement) applied to every string value
_MASKS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)\bBearer\s+[A-Za-z0-9._-]{10,}\b"), "Bearer ***"),
    (re.compile(r"\beyJhbGciOi[A-Za-z0-9+/=_-]{20,}\b"), "eyJ***"),
    # keep the mail domain, it is enough to trace delivery problems
    (re.compile(r"\b[A-Za-z0-9._%+-]+@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b"), r"***@\1"),
    # international numbers only; ISO dates and quantities must survive
    (re.compile(r"(?<![\w+])\+\d[\d\s-]{7,}\d\b"), "***phone***"),
)

# Extras under these keys are replaced wholesale
SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "cookie",
        "session",
        "token",
        "access_token",
        "password",
        "secret",
        "email",
        "phone",
        "phone_number",
    }
)

# LogRecord attributes that are not user-supplied extras
_RECORD_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def mask_text(text: str) -> str:
    for pattern, replacement in _MASKS:
        text = pattern.sub(replacement, text)
    return text


def mask(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive content masked.

    Mappings are masked by key, containers element-wise, and anything else
    is rendered with ``str`` and scrubbed. Numbers and booleans pass through.
    """
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Mapping):
        return {
            key: MASK if str(key).lower() in SENSITIVE_KEYS else mask(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set)):
        return type(value)(mask(item) for item in value)
    return mask_text(str(value))


def _timestamp(created: float) -> str:
    moment = datetime.fromtimestamp(created, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class JsonFormatter(logging.Formatter):
    """Render a LogRecord as a single masked JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": _timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "msg": mask_text(record.getMessage()),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
            "request_id": get_request_id() or None,
        }

        extra = {k: v for k, v in vars(record).items() if k not in _RECORD_FIELDS}
        if extra:
            payload["extra"] = mask(extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def setup_logging(
    level: str | int = "INFO",
    to_stdout: bool = True,
    file_path: str | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Route the root logger through JsonFormatter.

    Existing root handlers are replaced. With ``file_path`` set, a rotating
    file handler is added next to stdout; its directory is created if needed.
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handlers: list[logging.Handler] = []
    if to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        )

    formatter = JsonFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = [
    "JsonFormatter",
    "get_logger",
    "get_request_id",
    "mask",
    "set_request_id",
    "setup_logging",
]
