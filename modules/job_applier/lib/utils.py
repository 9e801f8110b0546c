from __future__ import annotations

import os
from datetime import datetime, timezone


def now_iso() -> str:
    """
    UTC ISO-8601 timestamp with 'Z' suffix.
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def now_rfc3339_millis() -> str:
    """UTC timestamp with millisecond precision, e.g. 2025-01-01T00:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def getenv_str(name: str, default: str | None = None) -> str | None:
    """
    Typed wrapper for environment access. Empty strings count as unset.
    """
    val = os.getenv(name)
    return val if val else default
