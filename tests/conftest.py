"""Shared fixtures for grading store tests."""

from datetime import datetime, timezone

import pytest

from smarticulous.config.app_config import clear_config_cache
from smarticulous.db.database import Database
from smarticulous.grading import Smarticulous
from smarticulous.models import Exercise, Submission, User


@pytest.fixture(autouse=True)
def _reset_config_cache():
    """Each test sees freshly loaded configuration."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db_url(tmp_path):
    """URL of a file store inside the test's temp directory."""
    return f"sqlite:///{tmp_path / 'db' / 'smarticulous.db'}"


@pytest.fixture
def db(db_url):
    """Open database handle, closed after the test."""
    database = Database.open(db_url)
    yield database
    database.close()


@pytest.fixture
def app(db):
    """Smarticulous facade over the test database."""
    return Smarticulous(db)


@pytest.fixture
def alice() -> User:
    return User(username="alice", firstname="Alice", lastname="Liddell")


@pytest.fixture
def bob() -> User:
    return User(username="bob", firstname="Bob", lastname="Builder")


@pytest.fixture
def sample_exercise() -> Exercise:
    """Exercise with three questions worth 10, 20 and 30 points."""
    exercise = Exercise(
        id=1,
        name="SQL basics",
        due_date=datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc),
    )
    exercise.add_question("select", "Write a SELECT query", 10)
    exercise.add_question("join", "Join two tables", 20)
    exercise.add_question("group", "Aggregate with GROUP BY", 30)
    return exercise


@pytest.fixture
def make_submission():
    """Factory for submissions at a given hour on 2024-02-20 UTC."""

    def _make(user, exercise, grades, hour=12, submission_id=None):
        return Submission(
            id=submission_id,
            user=user,
            exercise=exercise,
            submission_time=datetime(2024, 2, 20, hour, 0, tzinfo=timezone.utc),
            grades=list(grades),
        )

    return _make


@pytest.fixture
def graded_setup(app, alice, sample_exercise):
    """Store with alice registered and the sample exercise added."""
    app.add_or_update_user(alice, "secret")
    app.add_exercise(sample_exercise)
    return app
