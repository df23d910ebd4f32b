"""Database module for SQLite persistence.

Provides:
- Connection management and schema initialization (Database)
- Repositories for users, exercises and submissions
"""

from smarticulous.db.database import Database, DatabaseNotOpenError, parse_database_url
from smarticulous.db.exercises_repository import ExercisesRepository
from smarticulous.db.submissions_repository import SubmissionsRepository
from smarticulous.db.users_repository import UsersRepository

__all__ = [
    "Database",
    "DatabaseNotOpenError",
    "ExercisesRepository",
    "SubmissionsRepository",
    "UsersRepository",
    "parse_database_url",
]
