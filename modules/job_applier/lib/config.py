from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .utils import getenv_str


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env/files cannot form a valid configuration."""


# -----------------------------
# Models
# -----------------------------
@dataclass(frozen=True)
class MailConfig:
    """
    SMTP credentials and the résumé to attach, from <config-root>/config.json:

        {"SMTP": {"username": "...", "token": "...", "server": "...", "port": 587},
         "resumePath": "/path/to/cv.pdf"}
    """

    username: str
    token: str
    server: str
    resume_path: str
    port: int = 587

    def smtp_settings(self) -> dict:
        return {
            "host": self.server,
            "port": self.port,
            "username": self.username,
            "password": self.token,
        }


@dataclass
class Settings:
    """
    Canonical configuration for a 'job_applier' run.

    All state lives under `config_root` (default: ~/.config/JobApplier):
        config.json           SMTP credentials + résumé path
        personal_letter.txt   email body
        Jobs/<id>.json        cached advert detail (dedup marker)
        log.db                outcome log
    """

    config_root: str
    region: str = "Jonkoping"
    search: str = "servering"
    http_timeout: float = 15.0

    @property
    def jobs_dir(self) -> str:
        return os.path.join(self.config_root, "Jobs")

    @property
    def sqlite_path(self) -> str:
        return os.path.join(self.config_root, "log.db")

    @property
    def config_path(self) -> str:
        return os.path.join(self.config_root, "config.json")

    @property
    def letter_path(self) -> str:
        return os.path.join(self.config_root, "personal_letter.txt")

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs, falling back to env, with validation.

        Expected kwargs (all optional):

            config_root: str    # else $JOB_APPLIER_HOME, else ~/.config/JobApplier
            region: str = "Jonkoping"   # else $JOB_APPLIER_REGION
            search: str = "servering"   # else $JOB_APPLIER_SEARCH
            http_timeout: float = 15.0
        """
        kw = dict(kwargs or {})

        config_root = str(kw.get("config_root") or "").strip() or getenv_str("JOB_APPLIER_HOME")
        if not config_root:
            config_root = str(default_config_root())

        raw_timeout = kw.get("http_timeout")
        try:
            http_timeout = 15.0 if raw_timeout is None else float(raw_timeout)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"'http_timeout' must be a number (got {raw_timeout!r}).") from e

        settings = cls(
            config_root=config_root,
            region=str(kw.get("region") or getenv_str("JOB_APPLIER_REGION", "Jonkoping")).strip(),
            search=str(kw.get("search") or getenv_str("JOB_APPLIER_SEARCH", "servering")).strip(),
            http_timeout=http_timeout,
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Loaders
# -----------------------------
def default_config_root() -> Path:
    """
    ~/.config/JobApplier for the current user.

    Raises:
        ConfigError if no home directory can be resolved.
    """
    try:
        home = Path.home()
    except RuntimeError as e:
        raise ConfigError("Could not resolve $HOME; set JOB_APPLIER_HOME or pass 'config_root'.") from e
    if not str(home).strip() or str(home) == "~":
        raise ConfigError("Could not resolve $HOME; set JOB_APPLIER_HOME or pass 'config_root'.")
    return home / ".config" / "JobApplier"


def load_mail_config(path: str) -> MailConfig:
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            f"Config file not found: {path}. Expected SMTP credentials and 'resumePath'."
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file is invalid JSON: {path}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must hold a JSON object: {path}")
    smtp = raw.get("SMTP")
    if not isinstance(smtp, dict):
        raise ConfigError(f"Config file requires an 'SMTP' object: {path}")

    missing = [k for k in ("username", "token", "server") if not smtp.get(k)]
    if missing:
        raise ConfigError(f"SMTP config is missing {', '.join(missing)}: {path}")
    resume_path = raw.get("resumePath")
    if not resume_path:
        raise ConfigError(f"Config file requires 'resumePath': {path}")

    try:
        port = int(smtp.get("port") or 587)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"SMTP 'port' must be an integer: {path}") from e

    return MailConfig(
        username=str(smtp["username"]),
        token=str(smtp["token"]),
        server=str(smtp["server"]),
        resume_path=str(resume_path),
        port=port,
    )


def load_personal_letter(path: str) -> str:
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError as e:
        raise ConfigError(f"Personal letter not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Personal letter could not be read: {path}: {e}") from e


# -----------------------------
# Helpers
# -----------------------------
def _validate_settings(s: Settings) -> None:
    if not s.config_root.strip():
        raise ConfigError("'config_root' cannot be empty.")
    if not s.region:
        raise ConfigError("'region' cannot be empty.")
    if not s.search:
        raise ConfigError("'search' cannot be empty.")
    if not s.http_timeout > 0:
        raise ConfigError("'http_timeout' must be > 0.")
