from __future__ import annotations

import contextlib
import os
import sqlite3

from .detail import AdvertDetail
from .logging_bridge import error as log_error
from .models import LogResult
from .recipient import find_email
from .utils import now_iso

EMPTY = "empty"
NO_EMAIL = "none"


class LoggingError(RuntimeError):
    """Raised when an outcome row cannot be written."""


# ---- Public API -------------------------------------------------------------


def init_db(sqlite_path: str) -> None:
    """
    Ensure the SQLite database and schema exist.
    Safe to call multiple times.
    """
    _ensure_dir(sqlite_path)
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)


def record(sqlite_path: str, detail: AdvertDetail) -> LogResult:
    """
    Log one processed advert.

    Dedupe key: advert id. A second call for the same id leaves the first row
    untouched and returns DUPLICATE.

    Raises:
        LoggingError on any sqlite/filesystem failure (also written to the error log).
    """
    row = (
        detail.advert_id,
        _or_empty(detail.title),
        _or_empty(detail.occupation),
        _or_empty(detail.work_time_extent),
        _or_empty(detail.company_name),
        _or_empty(detail.region),
        _or_none(find_email(detail)),
        now_iso(),
    )

    try:
        init_db(sqlite_path)
        with contextlib.closing(_connect(sqlite_path)) as conn:
            _apply_pragmas(conn)
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO log (id, title, occupation, workTimeExtent, company, city, email, date)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO NOTHING
                """,
                row,
            )
            inserted = cur.rowcount == 1
    except (sqlite3.Error, OSError, OverflowError, ValueError) as e:
        log_error({
            "component": "job_applier.db",
            "op": "record",
            "sqlite_path": sqlite_path,
            "advert_id": detail.advert_id,
            "error": repr(e),
        })
        raise LoggingError(f"Could not log advert {detail.advert_id}: {e}") from e

    return LogResult.INSERTED if inserted else LogResult.DUPLICATE


# ---- Helpers for tests, diagnostics and scripts ------------------------------


def count_rows(sqlite_path: str) -> int:
    """Return total rows in the log table; 0 if DB missing/empty."""
    if not os.path.exists(sqlite_path):
        return 0
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _ensure_schema(conn)
        (n,) = conn.execute("SELECT COUNT(*) FROM log").fetchone()
    return int(n or 0)


def latest_rows(sqlite_path: str, limit: int = 15) -> list[dict]:
    """Most recent rows first, as dicts keyed by column name."""
    if not os.path.exists(sqlite_path):
        return []
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _ensure_schema(conn)
        conn.row_factory = sqlite3.Row
        rows = conn.execute(
            "SELECT * FROM log ORDER BY date DESC, id DESC LIMIT ?",
            (limit,),
        ).fetchall()
    return [dict(r) for r in rows]


def reset_db(sqlite_path: str) -> None:
    """
    Remove the DB file entirely (for pytest fixtures).
    Safe if it doesn't exist.
    """
    with contextlib.suppress(FileNotFoundError):
        os.remove(sqlite_path)


# ---- Internal utilities -----------------------------------------------------


def _or_empty(value: str | None) -> str:
    return EMPTY if value is None else value


def _or_none(email: str | None) -> str:
    return NO_EMAIL if email is None else email


def _ensure_dir(sqlite_path: str) -> None:
    d = os.path.dirname(os.path.abspath(sqlite_path)) or "."
    os.makedirs(d, exist_ok=True)


def _connect(sqlite_path: str) -> sqlite3.Connection:
    # isolation_level=None gives autocommit mode; each INSERT is its own transaction.
    return sqlite3.connect(sqlite_path, timeout=30.0, isolation_level=None)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")


def _ensure_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS log (
          id INTEGER PRIMARY KEY,
          title TEXT NOT NULL,
          occupation TEXT NOT NULL,
          workTimeExtent TEXT NOT NULL,
          company TEXT NOT NULL,
          city TEXT NOT NULL,
          email TEXT,
          date TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )
