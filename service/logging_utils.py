# service/logging_utils.py
from __future__ import annotations

import datetime as _dt
import json
import os
import socket
from collections.abc import Iterable
from typing import Any

# ---- Configuration (env-driven, read per write so tests can redirect) -------

_DEFAULT_LOG_DIR = os.path.join("local", "logs")

# Substrings of keys whose values never reach disk (case-insensitive)
_DEFAULT_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "smtp_",
    "authorization",
    "cookie",
}

_HOSTNAME = socket.gethostname()
_PID = os.getpid()


# ---- Public API --------------------------------------------------------------


def write_activity_log(record: dict[str, Any]) -> None:
    """
    Persist a single structured activity record as one JSON line.

    May raise on unrecoverable I/O/serialization errors.
    Never mutates the passed-in dict.
    """
    _write_jsonl(get_log_path(os.getenv("ACTIVITY_LOG_PREFIX", "activity")), record)


def write_error_log(record: dict[str, Any]) -> None:
    """Persist a single structured error record, parallel to the activity log."""
    _write_jsonl(get_log_path(os.getenv("ERROR_LOG_PREFIX", "error")), record)


def get_log_path(prefix: str) -> str:
    """Return today's log path for `prefix` (<LOG_DIR>/<prefix>-YYYY-MM-DD.jsonl)."""
    today = _dt.date.today().isoformat()
    log_dir = os.getenv("LOG_DIR") or _DEFAULT_LOG_DIR
    return os.path.join(log_dir, f"{prefix}-{today}.jsonl")


def redact(record: dict[str, Any], keys: set[str] | None = None) -> dict[str, Any]:
    """
    Produce a redacted deep copy of `record` by scrubbing values whose KEYS
    contain any of the substrings in `keys` (case-insensitive).
    """
    return _redact_deep(record, keys or _DEFAULT_REDACT_KEYS)


# ---- Internal helpers --------------------------------------------------------


def _key_matches(name: str, patterns: Iterable[str]) -> bool:
    n = name.lower()
    return any(pat in n for pat in patterns)


def _redact_deep(value: Any, patterns: Iterable[str]) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if isinstance(k, str) and _key_matches(k, patterns):
                out[k] = "***REDACTED***"
            else:
                out[k] = _redact_deep(v, patterns)
        return out
    if isinstance(value, list):
        return [_redact_deep(v, patterns) for v in value]
    if isinstance(value, tuple):
        return tuple(_redact_deep(v, patterns) for v in value)
    return value


def _write_jsonl(path: str, record: dict[str, Any]) -> None:
    """
    Redact, stamp with host/pid/ts, and append one line.
    A single os.write on an O_APPEND descriptor keeps concurrent writers from interleaving.
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    payload = dict(_redact_deep(record, _DEFAULT_REDACT_KEYS))
    payload["_meta"] = {
        "host": _HOSTNAME,
        "pid": _PID,
        "ts": _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="seconds"),
    }

    # Serialize first so any serialization errors happen before file ops.
    data = (json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str) + "\n").encode("utf-8")

    fd = os.open(path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o644)
    try:
        os.write(fd, data)
    finally:
        os.close(fd)
