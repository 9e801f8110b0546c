from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    """Terminal state of one `Pipeline.process` call."""

    SENT = "sent"
    ALREADY_SENT = "already_sent"
    NO_EMAIL = "no_email"
    ERROR = "error"


class CacheResult(str, Enum):
    FRESH = "fresh"
    ALREADY_PROCESSED = "already_processed"


class ClaimResult(str, Enum):
    CLAIMED = "claimed"
    ALREADY_CLAIMED = "already_claimed"


class LogResult(str, Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class Email:
    """
    An application email, built only once a recipient is known. Never persisted.
    """

    subject: str
    body: str
    recipient: str
