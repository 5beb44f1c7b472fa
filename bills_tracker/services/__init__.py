"""Services package."""

from bills_tracker.services.storage import (
    ExpenseStorageInterface,
    InMemoryExpenseStorage,
    InMemoryPreferencesStorage,
    KeyValueFileStore,
    LocalExpenseStorage,
    LocalPreferencesStorage,
    NotFoundError,
    PreferencesStorageInterface,
    StorageError,
)

__all__ = [
    "ExpenseStorageInterface",
    "InMemoryExpenseStorage",
    "InMemoryPreferencesStorage",
    "KeyValueFileStore",
    "LocalExpenseStorage",
    "LocalPreferencesStorage",
    "NotFoundError",
    "PreferencesStorageInterface",
    "StorageError",
]
