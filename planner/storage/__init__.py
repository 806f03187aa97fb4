"""
Storage layer: query construction and repositories over PlannerDatabase.
"""
from planner.storage.query_builder import QueryBuilder
from planner.storage.repositories import TaskRepository, UserRepository

__all__ = ["QueryBuilder", "TaskRepository", "UserRepository"]
