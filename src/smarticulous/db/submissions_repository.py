"""Repository for the Submission and QuestionGrade tables.

Retrieval queries:
- last: greatest SubmissionTime, ties to the greater SubmissionId
- best: greatest SUM(Grade * Points), ties to the earliest SubmissionTime,
  then the smaller SubmissionId

Both take (username, exercise_id, question_count). A subquery picks exactly
one SubmissionId; the outer query returns that submission's grade rows
ordered by QuestionId, capped at the question count.
"""

from __future__ import annotations

import sqlite3

import structlog

from smarticulous.db.database import Database
from smarticulous.db.exercises_repository import stored_question_count
from smarticulous.models import (
    Exercise,
    Submission,
    User,
    from_epoch_millis,
    to_epoch_millis,
)

logger = structlog.get_logger(__name__)

LAST_SUBMISSION_GRADES_SQL = """
    SELECT s.SubmissionId, qg.QuestionId, qg.Grade, s.SubmissionTime
    FROM Submission s
    JOIN QuestionGrade qg ON qg.SubmissionId = s.SubmissionId
    WHERE s.SubmissionId = (
        SELECT ls.SubmissionId
        FROM Submission ls
        JOIN User u ON u.UserId = ls.UserId
        WHERE u.Username = ? AND ls.ExerciseId = ?
        ORDER BY ls.SubmissionTime DESC, ls.SubmissionId DESC
        LIMIT 1
    )
    ORDER BY qg.QuestionId ASC
    LIMIT ?
"""

BEST_SUBMISSION_GRADES_SQL = """
    WITH Scores AS (
        SELECT s.SubmissionId, s.SubmissionTime,
               SUM(qg.Grade * q.Points) AS Score
        FROM Submission s
        JOIN User u ON u.UserId = s.UserId
        JOIN QuestionGrade qg ON qg.SubmissionId = s.SubmissionId
        JOIN Question q
            ON q.ExerciseId = s.ExerciseId AND q.QuestionId = qg.QuestionId
        WHERE u.Username = ? AND s.ExerciseId = ?
        GROUP BY s.SubmissionId
    )
    SELECT s.SubmissionId, qg.QuestionId, qg.Grade, s.SubmissionTime
    FROM Submission s
    JOIN QuestionGrade qg ON qg.SubmissionId = s.SubmissionId
    WHERE s.SubmissionId = (
        SELECT SubmissionId FROM Scores
        ORDER BY Score DESC, SubmissionTime ASC, SubmissionId ASC
        LIMIT 1
    )
    ORDER BY qg.QuestionId ASC
    LIMIT ?
"""


class SubmissionsRepository:
    """Stores graded submissions and retrieves the last or best one."""

    def __init__(self, db: Database):
        self.db = db

    def store_submission(self, submission: Submission) -> int | None:
        """Persist a submission header and one grade row per question.

        A new SubmissionId is generated when ``submission.id`` is None or
        negative (``UNASSIGNED_ID``).

        Returns:
            The SubmissionId, or None if the user or exercise is unknown or
            the grade count differs from the exercise's question count

        Raises:
            sqlite3.IntegrityError: If a supplied id is already taken
        """
        with self.db.transaction() as cur:
            user_row = cur.execute(
                "SELECT UserId FROM User WHERE Username = ?",
                (submission.user.username,),
            ).fetchone()
            if user_row is None:
                logger.info(
                    "submissions.unknown_user", username=submission.user.username
                )
                return None

            exercise_id = submission.exercise.id
            question_count = stored_question_count(cur, exercise_id)
            if question_count is None:
                logger.info("submissions.unknown_exercise", exercise_id=exercise_id)
                return None

            if len(submission.grades) != question_count:
                logger.info(
                    "submissions.grade_count_mismatch",
                    exercise_id=exercise_id,
                    expected=question_count,
                    got=len(submission.grades),
                )
                return None

            cur.execute(
                """
                INSERT INTO Submission (SubmissionId, UserId, ExerciseId, SubmissionTime)
                VALUES (?, ?, ?, ?)
                """,
                (
                    None if submission.is_unassigned else submission.id,
                    user_row["UserId"],
                    exercise_id,
                    to_epoch_millis(submission.submission_time),
                ),
            )
            submission_id = cur.lastrowid

            cur.executemany(
                """
                INSERT INTO QuestionGrade (SubmissionId, QuestionId, Grade)
                VALUES (?, ?, ?)
                """,
                [
                    (submission_id, question_id, float(grade))
                    for question_id, grade in enumerate(submission.grades)
                ],
            )

        logger.debug(
            "submissions.stored",
            submission_id=submission_id,
            username=submission.user.username,
            exercise_id=exercise_id,
        )
        return submission_id

    def get_last_submission(self, user: User, exercise: Exercise) -> Submission | None:
        """Most recent submission of ``user`` for ``exercise``, or None."""
        return self._get_submission(user, exercise, LAST_SUBMISSION_GRADES_SQL)

    def get_best_submission(self, user: User, exercise: Exercise) -> Submission | None:
        """Highest scoring submission of ``user`` for ``exercise``, or None."""
        return self._get_submission(user, exercise, BEST_SUBMISSION_GRADES_SQL)

    def _get_submission(
        self, user: User, exercise: Exercise, sql: str
    ) -> Submission | None:
        question_count = len(exercise.questions)
        with self.db.transaction() as cur:
            rows = cur.execute(
                sql, (user.username, exercise.id, question_count)
            ).fetchall()

        return _rows_to_submission(rows, user, exercise)


def _rows_to_submission(
    rows: list[sqlite3.Row], user: User, exercise: Exercise
) -> Submission | None:
    """Assemble grade rows of a single submission into a Submission.

    Grades are placed by QuestionId; questions without a row stay at 0.0.
    """
    if not rows:
        return None

    first = rows[0]
    grades = [0.0] * len(exercise.questions)
    for row in rows:
        question_id = row["QuestionId"]
        if 0 <= question_id < len(grades):
            grades[question_id] = row["Grade"]

    return Submission(
        id=first["SubmissionId"],
        user=user,
        exercise=exercise,
        submission_time=from_epoch_millis(first["SubmissionTime"]),
        grades=grades,
    )
