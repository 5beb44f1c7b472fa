"""
Local File Storage Implementation

DESIGN DECISION: A single JSON file acts as a small key-value store,
the way a phone app keeps its preferences. This is used because:
1. The tracker is single-user and single-device
2. No database setup required
3. The file is human-readable and easy to back up

TRADEOFFS:
- The whole file is rewritten on every change (fine for a few dozen bills)
- No locking; callers never write concurrently

The expense list lives under one key as a JSON string, so the value
is a self-contained blob that can be copied between stores as-is.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from bills_tracker.config import get_settings
from bills_tracker.models.expense import Expense
from bills_tracker.models.preferences import DEFAULT_SEED_COLOR, AppPreferences
from bills_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    PreferencesStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

THEME_DARK_KEY = "theme_dark"
SEED_COLOR_KEY = "seed_color"


class KeyValueFileStore:
    """
    Low-level key-value store backed by one JSON object on disk.

    Every write replaces the file atomically (temp file + rename).
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_settings().storage.store_path

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as e:
            raise StorageError(f"Store file is not valid JSON: {self._path}") from e
        except OSError as e:
            raise StorageError(f"Failed to read store file: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Store file does not hold a JSON object: {self._path}")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write store file: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def get_string(self, key: str) -> Optional[str]:
        """Get a string value; a non-string value reads as missing."""
        value = self.get(key)
        return value if isinstance(value, str) else None

    def get_bool(self, key: str) -> Optional[bool]:
        value = self.get(key)
        return value if isinstance(value, bool) else None

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def set_many(self, values: dict[str, Any]) -> None:
        data = self._read_all()
        data.update(values)
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def decode_expense_list(raw: str) -> tuple[list[Expense], list[tuple[int, str]]]:
    """
    Decode the stored blob into expenses.

    Returns:
        (expenses, dropped) where dropped lists (index, reason) for every
        record that was malformed or reused an earlier record's id

    Raises:
        StorageError: If the blob is not a JSON array
    """
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Stored expense list is not valid JSON: {e}") from e

    if not isinstance(items, list):
        raise StorageError("Stored expense list is not a JSON array")

    expenses = []
    dropped = []
    seen_ids = set()

    for index, item in enumerate(items):
        if not isinstance(item, dict):
            dropped.append((index, "record is not an object"))
            continue
        try:
            expense = Expense.from_storage_dict(item)
        except ValidationError as e:
            dropped.append((index, "; ".join(err["msg"] for err in e.errors())))
            continue
        if expense.id in seen_ids:
            dropped.append((index, f"duplicate id {expense.id}"))
            continue
        seen_ids.add(expense.id)
        expenses.append(expense)

    return expenses, dropped


def encode_expense_list(expenses: list[Expense]) -> str:
    """Encode expenses as the JSON array string kept in the store."""
    return json.dumps([e.to_storage_dict() for e in expenses], ensure_ascii=False)


class LocalExpenseStorage(ExpenseStorageInterface):
    """
    Expense collection kept under one key of a KeyValueFileStore.
    """

    def __init__(
        self,
        store: Optional[KeyValueFileStore] = None,
        key: Optional[str] = None,
    ):
        self._store = store or KeyValueFileStore()
        self._key = key or get_settings().storage.expenses_key
        self.dropped_on_last_load = ()

    async def load(self) -> list[Expense]:
        """
        Load expenses, dropping malformed records.

        Raises:
            StorageError: If the stored value is not a JSON array string
        """
        raw = self._store.get(self._key)
        if raw is None:
            self.dropped_on_last_load = ()
            return []
        if not isinstance(raw, str):
            raise StorageError(
                f"Stored expense list under '{self._key}' is not a string "
                f"(got {type(raw).__name__})"
            )

        expenses, dropped = decode_expense_list(raw)

        for index, reason in dropped:
            logger.warning(
                "expense_record_dropped",
                index=index,
                reason=reason,
                store=str(self._store.path),
            )
        self.dropped_on_last_load = tuple(dropped)

        return expenses

    async def save(self, expenses: list[Expense]) -> None:
        """Replace the stored list."""
        self._store.set(self._key, encode_expense_list(expenses))


class LocalPreferencesStorage(PreferencesStorageInterface):
    """Display preferences kept as separate keys of a KeyValueFileStore."""

    def __init__(self, store: Optional[KeyValueFileStore] = None):
        self._store = store or KeyValueFileStore()

    async def load(self) -> AppPreferences:
        dark = self._store.get_bool(THEME_DARK_KEY)
        seed = self._store.get_string(SEED_COLOR_KEY)

        try:
            return AppPreferences(
                dark_mode=bool(dark),
                seed_color=seed or DEFAULT_SEED_COLOR,
            )
        except ValidationError:
            logger.warning("preferences_seed_color_invalid", seed_color=seed)
            return AppPreferences(dark_mode=bool(dark))

    async def save(self, preferences: AppPreferences) -> None:
        self._store.set_many({
            THEME_DARK_KEY: preferences.dark_mode,
            SEED_COLOR_KEY: preferences.seed_color,
        })
