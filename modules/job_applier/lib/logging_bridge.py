from __future__ import annotations

import copy
import logging
from typing import Any

from service import logging_utils as _sink

# Keys that should be redacted from structured logs
_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "smtp_password",
    "smtp_token",
    "authorization",
    "auth",
    "bearer",
}


def _redact_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow-copy record and redact obvious secret-like fields at top level.
    The file sink redacts nested keys as well.
    """
    redacted = copy.copy(record)
    for k in list(redacted.keys()):
        lk = str(k).lower()
        if lk in _REDACT_KEYS or lk.startswith("smtp_") or lk.endswith("_secret"):
            redacted[k] = "***REDACTED***"
    return redacted


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record to the JSONL activity log.
    Falls back to stdlib logging as structured info if the sink fails.
    """
    payload = _redact_record(record)
    try:
        _sink.write_activity_log(payload)
        return
    except Exception:
        logging.getLogger("job_applier.activity").debug("activity sink failed", exc_info=True)
    logging.getLogger("job_applier.activity").info(payload)


def error(record: dict[str, Any]) -> None:
    """
    Write an error record to the JSONL error log.
    Falls back to stdlib logging as structured error if the sink fails.
    """
    payload = _redact_record(record)
    try:
        _sink.write_error_log(payload)
        return
    except Exception:
        logging.getLogger("job_applier.error").debug("error sink failed", exc_info=True)
    logging.getLogger("job_applier.error").error(payload)
