"""
In-Memory Storage

Used in tests and when the local store is not configured.
Records are kept in their stored form so that what comes back from
load() never shares objects with what was passed to save().
"""

from typing import Optional

from bills_tracker.models.expense import Expense
from bills_tracker.models.preferences import AppPreferences
from bills_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    PreferencesStorageInterface,
    StorageError,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """
    Expense storage that lives only as long as the process.

    Set `fail_saves` to make every save raise StorageError.
    """

    def __init__(self, initial: Optional[list[Expense]] = None):
        self._records: list[dict] = [e.to_storage_dict() for e in initial or []]
        self.save_count = 0
        self.fail_saves = False

    async def load(self) -> list[Expense]:
        return [Expense.from_storage_dict(record) for record in self._records]

    async def save(self, expenses: list[Expense]) -> None:
        if self.fail_saves:
            raise StorageError("In-memory store is set to fail saves")
        self._records = [e.to_storage_dict() for e in expenses]
        self.save_count += 1

    @property
    def records(self) -> list[dict]:
        """The stored structures, as they would be written to disk."""
        return list(self._records)


class InMemoryPreferencesStorage(PreferencesStorageInterface):
    """Preferences storage that lives only as long as the process."""

    def __init__(self):
        self._preferences = AppPreferences()

    async def load(self) -> AppPreferences:
        return self._preferences.model_copy()

    async def save(self, preferences: AppPreferences) -> None:
        self._preferences = preferences.model_copy()
