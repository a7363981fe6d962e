"""
Repositories package - data access layer.

Repositories handle all database operations.
No business logic - only queries and data transformation.

Usage:
    from repositories import SignaturesRepository

    repo = SignaturesRepository(supabase_client)
    samples = await repo.list_by_student(student_id)
"""

from repositories.base import BaseRepository
from repositories.signatures_repo import SignaturesRepository
from repositories.students_repo import StudentsRepository
from repositories.training_repo import TrainingRepository

__all__ = [
    'BaseRepository',
    'SignaturesRepository',
    'StudentsRepository',
    'TrainingRepository',
]
