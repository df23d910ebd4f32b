"""End-to-end tests through the Smarticulous facade."""

from datetime import datetime, timezone

from smarticulous import Exercise, Smarticulous, Submission, User
from smarticulous.config.app_config import DB_URL_ENV


class TestOpen:
    """Tests for opening the facade."""

    def test_open_with_url(self, db_url):
        with Smarticulous.open(db_url) as app:
            assert app.db.is_open
        assert not app.db.is_open

    def test_open_uses_configured_url(self, tmp_path, monkeypatch):
        path = tmp_path / "configured.db"
        monkeypatch.setenv(DB_URL_ENV, f"sqlite:///{path}")

        app = Smarticulous.open()
        try:
            assert app.db.location == str(path)
            assert path.exists()
        finally:
            app.close()

    def test_repositories_share_handle(self, app):
        assert app.users.db is app.db
        assert app.exercises.db is app.db
        assert app.submissions.db is app.db

    def test_get_user_through_facade(self, app):
        alice = User("alice", "Alice", "Liddell")
        app.add_or_update_user(alice, "pw")

        assert app.get_user("alice") == alice
        assert app.get_user("nobody") is None


class TestGradingFlow:
    """A user submits twice; last and best are retrieved after reopening."""

    def test_full_flow_survives_reopen(self, db_url):
        alice = User("alice", "Alice", "Liddell")
        exercise = Exercise(
            id=10,
            name="Normal forms",
            due_date=datetime(2024, 4, 1, tzinfo=timezone.utc),
        )
        exercise.add_question("1NF", "First normal form", 2)
        exercise.add_question("3NF", "Third normal form", 8)

        with Smarticulous.open(db_url) as app:
            assert app.add_or_update_user(alice, "pw") is not None
            assert app.add_exercise(exercise) == 10
            assert app.add_exercise(exercise) is None

            first = Submission(
                id=None,
                user=alice,
                exercise=exercise,
                submission_time=datetime(2024, 3, 30, 10, tzinfo=timezone.utc),
                grades=[1.0, 0.75],
            )
            second = Submission(
                id=None,
                user=alice,
                exercise=exercise,
                submission_time=datetime(2024, 3, 31, 10, tzinfo=timezone.utc),
                grades=[1.0, 0.5],
            )
            first_id = app.store_submission(first)
            second_id = app.store_submission(second)

        with Smarticulous.open(db_url) as app:
            assert app.verify_login("alice", "pw")
            (loaded,) = app.load_exercises()
            assert loaded == exercise

            best = app.get_best_submission(alice, loaded)
            last = app.get_last_submission(alice, loaded)

        assert best.id == first_id
        assert best.grades == [1.0, 0.75]
        assert best.score == 8.0
        assert last.id == second_id
        assert last.submission_time == second.submission_time
