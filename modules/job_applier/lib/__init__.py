# modules/job_applier/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .advert import Advert, InvalidAdvert, resolve
from .cache import CacheError, CorruptCache, DetailCache, FileDetailStore, MemoryDetailStore
from .config import ConfigError, MailConfig, Settings
from .db import LoggingError
from .detail import AdvertDetail
from .models import CacheResult, Email, Outcome
from .pipeline import Pipeline
from .recipient import find_email

__all__ = [
    "Advert",
    "AdvertDetail",
    "CacheError",
    "CacheResult",
    "ConfigError",
    "CorruptCache",
    "DetailCache",
    "Email",
    "FileDetailStore",
    "InvalidAdvert",
    "LoggingError",
    "MailConfig",
    "MemoryDetailStore",
    "Outcome",
    "Pipeline",
    "Settings",
    "find_email",
    "resolve",
]
