"""
Abstract Unit of Work contract shared by the writer and read-only variants.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from expense_api.repositories import ExpenseRepository, UserRepository


class UnitOfWork(ABC):
    """
    Transactional boundary for one use case.

    Both repositories are bound to the same session, so everything staged
    through ``users`` and ``expenses`` commits or rolls back together.
    """

    users: UserRepository
    expenses: ExpenseRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
