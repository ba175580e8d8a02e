"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and helpers for the JSON-encoded skill list columns.

Applied migration versions are stored in the ``migrations`` table and
new migrations are executed in order.
"""

import json
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .config import settings


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    Absolute paths in ``settings.database_url`` are used as is; relative
    paths are resolved against the package root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # skill_swap_api/
    return str((base_dir / db_url).resolve())


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if isinstance(value, str) else value


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign key enforcement is switched on per connection.  A
    ``casefold(text)`` SQL function is registered for Unicode-aware
    case-insensitive matching.
    """
    db_path = get_database_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def dump_skills(skills: Optional[Iterable[str]]) -> str:
    """Serialise a skill list for storage in a TEXT column."""
    return json.dumps(list(skills or []))


def load_skills(raw: Optional[str]) -> List[str]:
    """Inverse of :func:`dump_skills`; tolerates NULL columns."""
    if not raw:
        return []
    return list(json.loads(raw))


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any newer entries from the
    migration list.  New migrations are appended with an incremented
    version number.
    """
    migrations: list[tuple[int, str]] = [
        # Migration 1: base schema
        (
            1,
            """
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                email TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                password TEXT,
                location TEXT,
                availability TEXT,
                skills_offered TEXT NOT NULL DEFAULT '[]',
                skills_wanted TEXT NOT NULL DEFAULT '[]',
                is_public INTEGER NOT NULL DEFAULT 1,
                is_banned INTEGER NOT NULL DEFAULT 0,
                is_admin INTEGER NOT NULL DEFAULT 0,
                rating REAL NOT NULL DEFAULT 0,
                total_ratings INTEGER NOT NULL DEFAULT 0,
                rating_sum INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS swap_requests (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                requester_id INTEGER NOT NULL,
                target_id INTEGER NOT NULL,
                message TEXT NOT NULL,
                skills_offered TEXT NOT NULL DEFAULT '[]',
                skills_requested TEXT NOT NULL DEFAULT '[]',
                status TEXT NOT NULL DEFAULT 'pending',
                completed_at TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                CHECK (requester_id <> target_id),
                CHECK (status IN ('pending', 'accepted', 'rejected', 'completed', 'cancelled')),
                FOREIGN KEY(requester_id) REFERENCES users(id),
                FOREIGN KEY(target_id) REFERENCES users(id)
            );

            CREATE TABLE IF NOT EXISTS ratings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                rater_id INTEGER NOT NULL,
                rated_user_id INTEGER NOT NULL,
                swap_request_id INTEGER NOT NULL,
                score INTEGER NOT NULL CHECK (score BETWEEN 1 AND 5),
                feedback TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY(rater_id) REFERENCES users(id),
                FOREIGN KEY(rated_user_id) REFERENCES users(id),
                FOREIGN KEY(swap_request_id) REFERENCES swap_requests(id)
            );

            CREATE TABLE IF NOT EXISTS admin_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                admin_id INTEGER NOT NULL,
                action TEXT NOT NULL,
                target_user_id INTEGER,
                details TEXT,
                metadata TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY(admin_id) REFERENCES users(id),
                FOREIGN KEY(target_user_id) REFERENCES users(id)
            );
            """,
        ),
        # Migration 2: lookup and uniqueness indexes
        (
            2,
            """
            CREATE INDEX IF NOT EXISTS idx_swap_requests_requester_status
                ON swap_requests(requester_id, status);
            CREATE INDEX IF NOT EXISTS idx_swap_requests_target_status
                ON swap_requests(target_id, status);
            -- At most one pending request per direction (requester -> target).
            CREATE UNIQUE INDEX IF NOT EXISTS idx_swap_requests_pending_pair
                ON swap_requests(requester_id, target_id) WHERE status = 'pending';
            CREATE UNIQUE INDEX IF NOT EXISTS idx_ratings_rater_swap
                ON ratings(rater_id, swap_request_id);
            CREATE INDEX IF NOT EXISTS idx_ratings_rated_user ON ratings(rated_user_id);
            CREATE INDEX IF NOT EXISTS idx_admin_logs_created ON admin_logs(created_at);
            """,
        ),
        # Migration 3: platform alerts broadcast by administrators
        (
            3,
            """
            CREATE TABLE IF NOT EXISTS alerts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                admin_id INTEGER NOT NULL,
                title TEXT NOT NULL,
                message TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY(admin_id) REFERENCES users(id)
            );
            """,
        ),
    ]

    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in migrations:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
