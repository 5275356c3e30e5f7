"""Database connection factory for SQLite (local) and PostgreSQL (cloud)."""

import json
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg2
from psycopg2.extras import RealDictCursor

from talentmatch.config import DATA_DIR, DATABASE_URL, DB_PATH


class DatabaseConnection:
    """Wrapper for database connections that provides a consistent interface."""

    def __init__(self, conn: Any, is_postgres: bool = False):
        self.conn = conn
        self.is_postgres = is_postgres
        self._cursor = None

    def cursor(self, dictionary: bool = False) -> Any:
        """Get a cursor for executing database operations.

        Args:
            dictionary: If True, rows are returned as dict-like objects
                (RealDictCursor on PostgreSQL, sqlite3.Row on SQLite) so
                columns can be accessed by name.

        Returns:
            Database cursor object for executing queries and fetching results.
        """
        if self.is_postgres:
            self._cursor = self.conn.cursor(cursor_factory=RealDictCursor if dictionary else None)
        else:
            self._cursor = self.conn.cursor()
            if dictionary:
                self.conn.row_factory = sqlite3.Row
        return self._cursor

    def commit(self) -> None:
        """Commit the transaction."""
        self.conn.commit()

    def rollback(self) -> None:
        """Roll back the current transaction."""
        self.conn.rollback()

    def close(self) -> None:
        """Close the connection."""
        if self._cursor:
            self._cursor.close()
        self.conn.close()

    @property
    def placeholder(self) -> str:
        """Return the parameter placeholder for this database."""
        return "%s" if self.is_postgres else "?"


@contextmanager
def get_connection() -> Generator[DatabaseConnection, None, None]:
    """Get a database connection.

    Uses PostgreSQL if DATABASE_URL is set, otherwise falls back to SQLite.

    Yields:
        DatabaseConnection wrapper with consistent interface.
    """
    if DATABASE_URL:
        conn = psycopg2.connect(DATABASE_URL)
        db = DatabaseConnection(conn, is_postgres=True)
    else:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(DB_PATH, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        conn.row_factory = sqlite3.Row
        db = DatabaseConnection(conn, is_postgres=False)

    try:
        yield db
    finally:
        db.close()


def init_tables() -> None:
    """Initialize database tables.

    Creates all required tables if they don't exist.
    Uses appropriate syntax for PostgreSQL or SQLite.
    """
    with get_connection() as db:
        if db.is_postgres:
            _init_postgres_tables(db)
        else:
            _init_sqlite_tables(db)
        db.commit()


def _init_postgres_tables(db: DatabaseConnection) -> None:
    """Create PostgreSQL tables."""
    cursor = db.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS jobs (
            uid TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            requirements JSONB,
            benefits JSONB,
            skill_names JSONB,
            company_name TEXT,
            category TEXT,
            experience_level TEXT,
            job_type TEXT,
            location TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS candidates (
            seq SERIAL PRIMARY KEY,
            uid TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            phone TEXT,
            location TEXT,
            bio TEXT,
            avatar_url TEXT,
            resume_url TEXT,
            skill_ids JSONB,
            experiences JSONB,
            embedding JSONB,
            embedded_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Match cache: one live ranking per job
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS match_results (
            job_uid TEXT PRIMARY KEY,
            query_text TEXT,
            job_embedding JSONB NOT NULL,
            ranked_candidates JSONB NOT NULL,
            analyzed_at TIMESTAMPTZ NOT NULL,
            job_snapshot JSONB
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS cv_analyses (
            id SERIAL PRIMARY KEY,
            user_id TEXT NOT NULL,
            job_uid TEXT NOT NULL,
            resume_url TEXT NOT NULL,
            strengths JSONB NOT NULL,
            weaknesses JSONB NOT NULL,
            suggestions JSONB NOT NULL,
            resume_text_preview TEXT,
            job_snapshot JSONB,
            fallback BOOLEAN DEFAULT FALSE,
            analyzed_at TIMESTAMPTZ NOT NULL,
            UNIQUE (user_id, job_uid)
        )
    """)

    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_cv_analyses_analyzed_at
        ON cv_analyses(analyzed_at DESC)
    """)


def _init_sqlite_tables(db: DatabaseConnection) -> None:
    """Create SQLite tables (for local development/testing)."""
    cursor = db.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS jobs (
            uid TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            requirements TEXT,
            benefits TEXT,
            skill_names TEXT,
            company_name TEXT,
            category TEXT,
            experience_level TEXT,
            job_type TEXT,
            location TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS candidates (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            phone TEXT,
            location TEXT,
            bio TEXT,
            avatar_url TEXT,
            resume_url TEXT,
            skill_ids TEXT,
            experiences TEXT,
            embedding TEXT,
            embedded_at TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # Match cache: one live ranking per job
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS match_results (
            job_uid TEXT PRIMARY KEY,
            query_text TEXT,
            job_embedding TEXT NOT NULL,
            ranked_candidates TEXT NOT NULL,
            analyzed_at TEXT NOT NULL,
            job_snapshot TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS cv_analyses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            job_uid TEXT NOT NULL,
            resume_url TEXT NOT NULL,
            strengths TEXT NOT NULL,
            weaknesses TEXT NOT NULL,
            suggestions TEXT NOT NULL,
            resume_text_preview TEXT,
            job_snapshot TEXT,
            fallback INTEGER DEFAULT 0,
            analyzed_at TEXT NOT NULL,
            UNIQUE (user_id, job_uid)
        )
    """)


def load_json(value: Any) -> Any:
    """Decode a JSON column.

    PostgreSQL JSONB columns come back already decoded, SQLite TEXT
    columns come back as strings.
    """
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
