"""Smarticulous: a small SQLite-backed grading store.

Users, exercises with ordered questions, submissions and per-question grades.
"""

from smarticulous.grading import Smarticulous
from smarticulous.models import Exercise, Question, Submission, User

__all__ = ["Exercise", "Question", "Smarticulous", "Submission", "User"]

__version__ = "0.1.0"
