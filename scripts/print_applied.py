#!/usr/bin/env python3
"""Print the most recent rows of the job applier outcome log."""

import os
import sys
from datetime import datetime

from modules.job_applier.lib import db
from modules.job_applier.lib.config import ConfigError, Settings


def format_timestamp(iso_str: str) -> str:
    """Convert ISO timestamp to readable local format."""
    try:
        dt = datetime.fromisoformat(iso_str.replace("Z", "+00:00"))
    except ValueError:
        return iso_str
    if dt.tzinfo is None:
        # Rows written with the schema default (CURRENT_TIMESTAMP) are naive UTC.
        return iso_str
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")


def main() -> int:
    try:
        settings = Settings.from_env_and_kwargs({})
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if not os.path.exists(settings.sqlite_path):
        print(f"No log database at {settings.sqlite_path}")
        return 1

    limit = 15
    if len(sys.argv) > 1:
        try:
            limit = int(sys.argv[1])
            if limit <= 0:
                raise ValueError
        except ValueError:
            print(f"Invalid limit: {sys.argv[1]}. Using default (15).", file=sys.stderr)
            limit = 15

    rows = db.latest_rows(settings.sqlite_path, limit)
    print(f"DATABASE: {settings.sqlite_path} ({db.count_rows(settings.sqlite_path)} rows, showing {len(rows)})")
    print("-" * 80)
    for i, row in enumerate(rows, 1):
        print(f"{i:2d}. [{format_timestamp(row['date'])}] {row['id']}")
        print(f"     Title:   {row['title']} ({row['occupation']}, {row['workTimeExtent']})")
        print(f"     Company: {row['company']}, {row['city']}")
        print(f"     Email:   {row['email']}")
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
