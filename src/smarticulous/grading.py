"""Grading system facade.

Bundles one open Database with the user, exercise and submission
repositories that share it.

Usage:
    with Smarticulous.open("sqlite:///db/smarticulous.db") as app:
        user_id = app.add_or_update_user(User("alice", "Alice", "Liddell"), "pw")
"""

from __future__ import annotations

import structlog

from smarticulous.config.app_config import get_database_url
from smarticulous.db.database import Database
from smarticulous.db.exercises_repository import ExercisesRepository
from smarticulous.db.submissions_repository import SubmissionsRepository
from smarticulous.db.users_repository import UsersRepository
from smarticulous.models import Exercise, Submission, User

logger = structlog.get_logger(__name__)


class Smarticulous:
    """A grading system backed by a single SQLite connection."""

    def __init__(self, db: Database):
        self.db = db
        self.users = UsersRepository(db)
        self.exercises = ExercisesRepository(db)
        self.submissions = SubmissionsRepository(db)

    @classmethod
    def open(cls, url: str | None = None) -> Smarticulous:
        """Open the grading store.

        Args:
            url: Database URL. Defaults to the configured URL.
        """
        if url is None:
            url = get_database_url()
            logger.debug("grading.configured_url", url=url)
        return cls(Database.open(url))

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> Smarticulous:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # USERS
    # =========================================================================

    def add_or_update_user(self, user: User, password: str) -> int | None:
        return self.users.add_or_update_user(user, password)

    def verify_login(self, username: str, password: str) -> bool:
        return self.users.verify_login(username, password)

    def get_user(self, username: str) -> User | None:
        return self.users.get_user(username)

    # =========================================================================
    # EXERCISES
    # =========================================================================

    def add_exercise(self, exercise: Exercise) -> int | None:
        return self.exercises.add_exercise(exercise)

    def load_exercises(self) -> list[Exercise]:
        return self.exercises.load_exercises()

    # =========================================================================
    # SUBMISSIONS
    # =========================================================================

    def store_submission(self, submission: Submission) -> int | None:
        return self.submissions.store_submission(submission)

    def get_last_submission(self, user: User, exercise: Exercise) -> Submission | None:
        return self.submissions.get_last_submission(user, exercise)

    def get_best_submission(self, user: User, exercise: Exercise) -> Submission | None:
        return self.submissions.get_best_submission(user, exercise)
