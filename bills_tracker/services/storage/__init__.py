"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local JSON key-value file as the backend, plus an
in-memory variant for tests.
"""

from bills_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    NotFoundError,
    PreferencesStorageInterface,
    StorageError,
)
from bills_tracker.services.storage.local_store import (
    KeyValueFileStore,
    LocalExpenseStorage,
    LocalPreferencesStorage,
    decode_expense_list,
    encode_expense_list,
)
from bills_tracker.services.storage.memory import (
    InMemoryExpenseStorage,
    InMemoryPreferencesStorage,
)

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "PreferencesStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # Local file implementation
    "KeyValueFileStore",
    "LocalExpenseStorage",
    "LocalPreferencesStorage",
    "decode_expense_list",
    "encode_expense_list",
    # In-memory implementation
    "InMemoryExpenseStorage",
    "InMemoryPreferencesStorage",
]
