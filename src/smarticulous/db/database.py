"""SQLite connection and schema management.

Provides the explicit database handle shared by the repositories and the
schema initialization for the grading store.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

MEMORY_PATH = ":memory:"

# URL prefixes mapped to the sqlite3 location that follows them
_URL_PREFIXES = ("sqlite:///", "jdbc:sqlite:")


class DatabaseNotOpenError(sqlite3.ProgrammingError):
    """Raised when an operation needs a connection that is not open."""

    pass


def parse_database_url(url: str) -> str:
    """Resolve a connection URL to a location sqlite3 can open.

    Accepts ``sqlite:///path``, ``jdbc:sqlite:path``, ``sqlite://`` or
    ``:memory:`` for an in-memory store, and bare filesystem paths.

    Raises:
        ValueError: If the URL is empty or uses another scheme
    """
    url = url.strip()
    if not url:
        raise ValueError("Database URL is empty")

    if url in ("sqlite://", MEMORY_PATH):
        return MEMORY_PATH

    for prefix in _URL_PREFIXES:
        if url.startswith(prefix):
            location = url[len(prefix):]
            return location or MEMORY_PATH

    if "://" in url or url.startswith("jdbc:"):
        raise ValueError(f"Unsupported database URL: {url}")

    return url


class Database:
    """An open (or closed) connection to the grading store.

    Example:
        db = Database.open("sqlite:///db/smarticulous.db")
        with db.transaction() as cur:
            cur.execute("SELECT COUNT(*) FROM User")
        db.close()
    """

    def __init__(self, conn: sqlite3.Connection, location: str):
        self._conn: sqlite3.Connection | None = conn
        self.location = location

    @classmethod
    def open(cls, url: str) -> Database:
        """Open the store at ``url``, creating it and its tables if needed.

        Raises:
            ValueError: If the URL is not a supported SQLite URL
            sqlite3.Error: If the store cannot be opened or initialized
        """
        location = parse_database_url(url)

        if location != MEMORY_PATH:
            Path(location).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(location)
        conn.row_factory = sqlite3.Row

        try:
            create_schema(conn)
        except sqlite3.Error:
            conn.close()
            logger.error("database.schema_failed", location=location)
            raise

        logger.info("database.opened", location=location)
        return cls(conn, location)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def ensure_open(self) -> None:
        """Raise DatabaseNotOpenError if the handle has been closed."""
        if self._conn is None:
            raise DatabaseNotOpenError("DB connection is not established.")

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying connection.

        Raises:
            DatabaseNotOpenError: If the handle has been closed
        """
        self.ensure_open()
        return self._conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Borrow a cursor for one unit of work.

        Commits on success and rolls back on any exception. The cursor is
        closed on every exit path.

        Yields:
            Cursor on the shared connection
        """
        conn = self.connection
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def close(self) -> None:
        """Close the connection. Calling it again is a no-op."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("database.closed", location=self.location)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the five grading tables.

    Uses IF NOT EXISTS so reopening an existing store is non-destructive.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS User (
            UserId INTEGER PRIMARY KEY,
            Username TEXT UNIQUE,
            Firstname TEXT,
            Lastname TEXT,
            Password TEXT
        );

        CREATE TABLE IF NOT EXISTS Exercise (
            ExerciseId INTEGER PRIMARY KEY,
            Name TEXT,
            DueDate INTEGER
        );

        -- QuestionId is the question's position inside its exercise
        CREATE TABLE IF NOT EXISTS Question (
            ExerciseId INTEGER,
            QuestionId INTEGER,
            Name TEXT,
            "Desc" TEXT,
            Points INTEGER,
            PRIMARY KEY (ExerciseId, QuestionId)
        );

        CREATE TABLE IF NOT EXISTS Submission (
            SubmissionId INTEGER PRIMARY KEY,
            UserId INTEGER,
            ExerciseId INTEGER,
            SubmissionTime INTEGER
        );

        CREATE TABLE IF NOT EXISTS QuestionGrade (
            SubmissionId INTEGER,
            QuestionId INTEGER,
            Grade REAL,
            PRIMARY KEY (SubmissionId, QuestionId)
        );
        """
    )
