# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parents[1] / "sql"
DDL_CREATE = (SQL_DIR / "create.sql").read_text(encoding="utf-8")
DDL_INSERT = (SQL_DIR / "insert.sql").read_text(encoding="utf-8")

_VERIFY_QUERY = "SELECT username FROM users WHERE username = ? AND password = ? LIMIT 1"


class StoreError(Exception):
    """The credential store could not be opened or queried."""


class CredentialStore:
    """Single-table username/password store backed by an SQLite file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def bootstrap(self) -> None:
        """Create the users table and seed it when it is empty.

        Used once at startup; raises StoreError if the file cannot be
        opened or the DDL fails.
        """
        logger.info("Opening DB %s...", self.path)
        try:
            with closing(sqlite3.connect(str(self.path))) as conn:
                with conn:
                    conn.executescript(DDL_CREATE)
                    (count,) = conn.execute("SELECT COUNT(*) FROM users").fetchone()
                    if count == 0:
                        conn.executescript(DDL_INSERT)
                        logger.info("Seeded users table in %s", self.path)
        except sqlite3.Error as e:
            raise StoreError(f"Error opening db {self.path}: {e}") from e

    def _connect_existing(self) -> sqlite3.Connection:
        # read-only: a missing file is an error, never a fresh empty db
        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        return sqlite3.connect(uri, uri=True)

    def verify(self, username: str, password: str) -> Optional[str]:
        """Return the stored username when both fields match a row exactly."""
        try:
            with closing(self._connect_existing()) as conn:
                row = conn.execute(_VERIFY_QUERY, (username, password)).fetchone()
        except sqlite3.Error as e:
            logger.error("Credential lookup failed on %s: %s", self.path, e)
            raise StoreError(str(e)) from e
        if row is None:
            return None
        return row[0]
