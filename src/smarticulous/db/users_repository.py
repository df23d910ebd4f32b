"""Repository for the User table.

Passwords are stored and compared in plaintext. This is a placeholder and
must not be used as a reference for credential handling.
"""

from __future__ import annotations

import structlog

from smarticulous.db.database import Database
from smarticulous.models import User

logger = structlog.get_logger(__name__)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class UsersRepository:
    """Upsert and look up users by username."""

    def __init__(self, db: Database):
        self.db = db

    def add_or_update_user(self, user: User, password: str) -> int | None:
        """Insert a user, or update names and password of an existing one.

        Args:
            user: User to store; ``username`` is the identity key
            password: Plaintext password

        Returns:
            The row's UserId, or None if username or password is blank
        """
        self.db.ensure_open()

        if _is_blank(user.username) or _is_blank(password):
            logger.debug("users.rejected_blank", username=user.username)
            return None

        with self.db.transaction() as cur:
            cur.execute(
                """
                INSERT INTO User (Username, Firstname, Lastname, Password)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(Username) DO UPDATE SET
                    Firstname = excluded.Firstname,
                    Lastname = excluded.Lastname,
                    Password = excluded.Password
                """,
                (user.username, user.firstname, user.lastname, password),
            )
            row = cur.execute(
                "SELECT UserId FROM User WHERE Username = ?", (user.username,)
            ).fetchone()

        if row is None:
            return None

        user_id = row["UserId"]
        logger.debug("users.upserted", username=user.username, user_id=user_id)
        return user_id

    def verify_login(self, username: str, password: str) -> bool:
        """Check a username/password pair.

        Returns:
            True only if a user with exactly these credentials exists
        """
        with self.db.transaction() as cur:
            row = cur.execute(
                "SELECT COUNT(*) AS n FROM User WHERE Username = ? AND Password = ?",
                (username, password),
            ).fetchone()

        return row["n"] > 0

    def get_user(self, username: str) -> User | None:
        """Get user by username.

        Returns:
            User if found, None otherwise
        """
        with self.db.transaction() as cur:
            row = cur.execute(
                "SELECT Username, Firstname, Lastname FROM User WHERE Username = ?",
                (username,),
            ).fetchone()

        if row is None:
            return None

        return User(
            username=row["Username"],
            firstname=row["Firstname"],
            lastname=row["Lastname"],
        )

