"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the expense list in a local file today
2. Use in-memory storage for testing
3. Swap in another local store later without touching the tracker

The interface is intentionally tiny: the whole collection is loaded once
and saved whole after every change. There are no partial updates,
no transactions and no versioning. The last full write wins.
"""

from abc import ABC, abstractmethod

from bills_tracker.models.expense import Expense
from bills_tracker.models.preferences import AppPreferences


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for the expense collection.

    Callers never overlap load/save calls; the tracker runs
    commands one at a time.
    """

    # (index, reason) for each record the most recent load() skipped
    dropped_on_last_load: tuple[tuple[int, str], ...] = ()

    @abstractmethod
    async def load(self) -> list[Expense]:
        """
        Load the full expense collection.

        Malformed records are dropped, not raised.

        Returns:
            All well-formed expenses, in stored order (empty if nothing stored)

        Raises:
            StorageError: If the store itself cannot be read
        """
        pass

    @abstractmethod
    async def save(self, expenses: list[Expense]) -> None:
        """
        Replace the stored collection with `expenses`.

        Raises:
            StorageError: If the write fails (nothing is retried)
        """
        pass


class PreferencesStorageInterface(ABC):
    """Abstract interface for display preferences."""

    @abstractmethod
    async def load(self) -> AppPreferences:
        """Load preferences, falling back to defaults for anything missing."""
        pass

    @abstractmethod
    async def save(self, preferences: AppPreferences) -> None:
        """
        Persist preferences.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in the collection."""
    pass
