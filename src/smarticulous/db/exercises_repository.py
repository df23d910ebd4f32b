"""Repository for the Exercise and Question tables."""

from __future__ import annotations

import sqlite3

import structlog

from smarticulous.db.database import Database
from smarticulous.models import Exercise, from_epoch_millis, to_epoch_millis

logger = structlog.get_logger(__name__)


class ExercisesRepository:
    """Append-only storage of exercises and their questions."""

    def __init__(self, db: Database):
        self.db = db

    def add_exercise(self, exercise: Exercise) -> int | None:
        """Insert an exercise and its questions.

        Questions get QuestionId = position in ``exercise.questions``.

        Returns:
            The exercise id, or None if an exercise with that id exists
        """
        with self.db.transaction() as cur:
            exists = cur.execute(
                "SELECT EXISTS (SELECT 1 FROM Exercise WHERE ExerciseId = ?)",
                (exercise.id,),
            ).fetchone()[0]

            if exists:
                logger.info("exercises.duplicate_id", exercise_id=exercise.id)
                return None

            cur.execute(
                "INSERT INTO Exercise (ExerciseId, Name, DueDate) VALUES (?, ?, ?)",
                (exercise.id, exercise.name, to_epoch_millis(exercise.due_date)),
            )
            cur.executemany(
                """
                INSERT INTO Question (ExerciseId, QuestionId, Name, "Desc", Points)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (exercise.id, position, q.name, q.desc, q.points)
                    for position, q in enumerate(exercise.questions)
                ],
            )

        logger.debug(
            "exercises.inserted",
            exercise_id=exercise.id,
            questions=len(exercise.questions),
        )
        return exercise.id

    def load_exercises(self) -> list[Exercise]:
        """Load all exercises ordered by id, with their questions attached."""
        exercises = []
        with self.db.transaction() as cur:
            rows = cur.execute(
                "SELECT ExerciseId, Name, DueDate FROM Exercise ORDER BY ExerciseId ASC"
            ).fetchall()

            for row in rows:
                exercise = Exercise(
                    id=row["ExerciseId"],
                    name=row["Name"],
                    due_date=from_epoch_millis(row["DueDate"]),
                )
                _attach_questions(cur, exercise)
                exercises.append(exercise)

        return exercises


def _attach_questions(cur: sqlite3.Cursor, exercise: Exercise) -> None:
    rows = cur.execute(
        """
        SELECT Name, "Desc", Points FROM Question
        WHERE ExerciseId = ?
        ORDER BY QuestionId ASC
        """,
        (exercise.id,),
    ).fetchall()

    for row in rows:
        exercise.add_question(row["Name"], row["Desc"], row["Points"])


def stored_question_count(cur: sqlite3.Cursor, exercise_id: int) -> int | None:
    """Count an exercise's stored questions; None if the exercise is unknown."""
    row = cur.execute(
        """
        SELECT
            EXISTS (SELECT 1 FROM Exercise WHERE ExerciseId = :id) AS known,
            (SELECT COUNT(*) FROM Question WHERE ExerciseId = :id) AS n
        """,
        {"id": exercise_id},
    ).fetchone()
    return row["n"] if row["known"] else None
