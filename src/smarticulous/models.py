"""Domain objects for the grading store.

Timestamps are persisted as integer epoch milliseconds. Exercise and
Submission normalize their timestamps on construction to timezone-aware UTC
truncated to whole milliseconds, so a stored object loads back equal.
Naive datetimes are treated as UTC.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)

# Submission id asking the store to assign a new one (any negative id works)
UNASSIGNED_ID = -1


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to integer milliseconds since the epoch."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // _ONE_MILLISECOND


def from_epoch_millis(millis: int) -> datetime:
    """Convert epoch milliseconds back to a UTC datetime."""
    return EPOCH + timedelta(milliseconds=millis)


def normalize_timestamp(value: datetime) -> datetime:
    """Aware UTC datetime with the precision the store keeps."""
    return from_epoch_millis(to_epoch_millis(value))


@dataclass
class User:
    """A user account (the password is never held on the object)."""

    username: str
    firstname: str = ""
    lastname: str = ""


@dataclass
class Question:
    """A gradable part of an exercise."""

    name: str
    desc: str
    points: int


@dataclass
class Exercise:
    """A graded assignment made of ordered questions."""

    id: int
    name: str
    due_date: datetime
    questions: list[Question] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.due_date = normalize_timestamp(self.due_date)

    def add_question(self, name: str, desc: str, points: int) -> Question:
        """Append a question and return it."""
        question = Question(name=name, desc=desc, points=points)
        self.questions.append(question)
        return question


@dataclass
class Submission:
    """One attempt by a user at an exercise.

    ``grades[i]`` is the grade for ``exercise.questions[i]``. An ``id`` of
    None or UNASSIGNED_ID asks the store to assign a new one.
    """

    id: int | None
    user: User
    exercise: Exercise
    submission_time: datetime
    grades: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.submission_time = normalize_timestamp(self.submission_time)

    @property
    def is_unassigned(self) -> bool:
        return self.id is None or self.id < 0

    @property
    def score(self) -> float:
        """Points earned, weighting each grade by its question's points."""
        return sum(
            grade * question.points
            for grade, question in zip(self.grades, self.exercise.questions)
        )
