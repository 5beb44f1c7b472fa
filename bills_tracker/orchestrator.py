"""
Main Orchestrator for Bills Tracker

This module owns the expense collection and defines the commands
any front end (Streamlit, console, tests) uses to change it:
1. add_expense    (form → validate → append → save)
2. update_expense (form → validate → replace, keeping payment history → save)
3. delete_expense (remove → save)
4. toggle_paid    (flip this month's paid state → save)

DESIGN DECISION: The tracker is the only writer.
- The whole collection is saved after every change
- Commands run one at a time; callers await each before the next
- Every command is audited
- Queries are pure functions over the current list; nothing is cached
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

import structlog

from bills_tracker.audit import AuditLogger, configure_logging
from bills_tracker.config import get_settings
from bills_tracker.models.audit import AuditEvent, AuditEventBuilder
from bills_tracker.models.expense import (
    BillRow,
    CommandResult,
    Expense,
    ExpenseDraft,
    LegendEntry,
    OverviewMetrics,
    ValidationResult,
)
from bills_tracker.models.preferences import AppPreferences
from bills_tracker.queries import (
    build_bill_rows,
    category_legend,
    category_totals,
    month_key,
    overview_metrics,
)
from bills_tracker.queries.aggregation import DEFAULT_DUE_SOON_DAYS
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
from bills_tracker.validation import ExpenseInputValidator


logger = structlog.get_logger(__name__)

# Fields compared when describing an edit in the audit log
EDITABLE_FIELDS = ("name", "category", "amount", "due_day")


class BillsTracker:
    """
    State container for the expense collection.

    Flow:
    1. load() once at startup
    2. Query through bill_rows / overview / category_breakdown
    3. Mutate through the commands, which save the whole list

    Commands return a CommandResult instead of raising, so the caller
    can show the message and decide whether to ask the user again.
    A failed save leaves the change applied in memory; the next
    successful save writes it.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        validator: Optional[ExpenseInputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    ):
        self._storage = storage
        self._validator = validator or ExpenseInputValidator()
        self._audit_logger = audit_logger
        self._clock = clock or datetime.now
        self._due_soon_days = due_soon_days
        self._expenses: list[Expense] = []
        self._loaded = False

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def expenses(self) -> list[Expense]:
        """The current collection (a new list; the records are shared)."""
        return list(self._expenses)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def now(self) -> datetime:
        return self._clock()

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    def _index_of(self, expense_id: str) -> int:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        raise NotFoundError(f"Expense not found: {expense_id}")

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    async def load(self) -> list[Expense]:
        """
        Load the collection from storage, replacing what is in memory.

        Raises:
            StorageError: If the store cannot be read at all
        """
        try:
            self._expenses = await self._storage.load()
        except StorageError as e:
            self._audit(AuditEventBuilder.load_failed(str(e)))
            raise

        dropped = self._storage.dropped_on_last_load
        for index, reason in dropped:
            self._audit(AuditEventBuilder.record_dropped(index, reason))

        self._loaded = True
        self._audit(AuditEventBuilder.expenses_loaded(
            count=len(self._expenses),
            dropped=len(dropped),
        ))
        return self.expenses

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def add_expense(self, draft: ExpenseDraft) -> CommandResult:
        """
        Validate the form values and append a new expense.

        A new id is generated here.
        """
        validation = self._validator.validate(draft, existing=self._expenses)
        if not validation.is_valid:
            return self._rejected(validation)

        expense = Expense(
            name=validation.name,
            category=validation.category,
            amount=validation.amount,
            due_day=validation.due_day,
        )
        self._expenses.append(expense)

        self._audit(AuditEventBuilder.expense_added(
            expense_id=expense.id,
            name=expense.name,
            amount=str(expense.amount),
        ))

        return await self._persist(expense, validation)

    async def update_expense(
        self,
        expense_id: str,
        draft: ExpenseDraft,
    ) -> CommandResult:
        """
        Replace an expense with new form values.

        The id and the paid-by-month history are carried over.
        """
        try:
            index = self._index_of(expense_id)
        except NotFoundError as e:
            return self._not_found(expense_id, "update", e)

        validation = self._validator.validate(
            draft,
            existing=self._expenses,
            editing_id=expense_id,
        )
        if not validation.is_valid:
            return self._rejected(validation, expense_id)

        previous = self._expenses[index]
        updated = Expense(
            id=previous.id,
            name=validation.name,
            category=validation.category,
            amount=validation.amount,
            due_day=validation.due_day,
            paid_by_month=dict(previous.paid_by_month),
        )
        self._expenses[index] = updated

        self._audit(AuditEventBuilder.expense_updated(
            expense_id=updated.id,
            changes=_describe_changes(previous, updated),
        ))

        return await self._persist(updated, validation)

    async def delete_expense(self, expense_id: str) -> CommandResult:
        """Remove an expense."""
        try:
            index = self._index_of(expense_id)
        except NotFoundError as e:
            return self._not_found(expense_id, "delete", e)

        removed = self._expenses.pop(index)

        self._audit(AuditEventBuilder.expense_deleted(
            expense_id=removed.id,
            name=removed.name,
        ))

        return await self._persist(removed)

    async def toggle_paid(
        self,
        expense_id: str,
        now: Optional[datetime] = None,
    ) -> CommandResult:
        """
        Flip the paid state of an expense for the month of `now`.

        Args:
            expense_id: Expense to toggle
            now: Reference time (defaults to the tracker's clock); also
                the timestamp recorded when marking paid
        """
        try:
            index = self._index_of(expense_id)
        except NotFoundError as e:
            return self._not_found(expense_id, "toggle payment of", e)

        now = now or self._clock()
        mk = month_key(now)
        expense = self._expenses[index]
        paid = expense.toggle_paid(mk, now)

        self._audit(AuditEventBuilder.payment_toggled(
            expense_id=expense.id,
            month_key=mk,
            paid=paid,
        ))

        return await self._persist(expense)

    async def _persist(
        self,
        expense: Optional[Expense] = None,
        validation: Optional[ValidationResult] = None,
    ) -> CommandResult:
        """Save the whole collection and report how it went."""
        try:
            await self._storage.save(self._expenses)
        except StorageError as e:
            self._audit(AuditEventBuilder.save_failed(
                error_message=str(e),
                expense_count=len(self._expenses),
            ))
            return CommandResult(
                success=False,
                error_message=f"Your change was made but could not be saved: {e}",
                expenses=self.expenses,
                expense=expense,
                validation=validation,
                saved=False,
            )

        return CommandResult(
            success=True,
            expenses=self.expenses,
            expense=expense,
            validation=validation,
            saved=True,
        )

    def _rejected(
        self,
        validation: ValidationResult,
        expense_id: Optional[str] = None,
    ) -> CommandResult:
        issues = [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in validation.issues
        ]
        self._audit(AuditEventBuilder.input_rejected(issues, expense_id))
        return CommandResult(
            success=False,
            error_message=self._validator.get_user_friendly_summary(validation),
            expenses=self.expenses,
            expense=self.get_expense(expense_id) if expense_id else None,
            validation=validation,
        )

    def _not_found(
        self,
        expense_id: str,
        action: str,
        error: NotFoundError,
    ) -> CommandResult:
        self._audit(AuditEventBuilder.expense_not_found(expense_id, action))
        return CommandResult(
            success=False,
            error_message=str(error),
            expenses=self.expenses,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def bill_rows(self, now: Optional[datetime] = None) -> list[BillRow]:
        """The bills list, sorted by due date then name."""
        return build_bill_rows(
            self._expenses,
            now or self._clock(),
            self._due_soon_days,
        )

    def overview(self, now: Optional[datetime] = None) -> OverviewMetrics:
        return overview_metrics(self._expenses, now or self._clock())

    def category_breakdown(
        self,
        paid_only: bool,
        now: Optional[datetime] = None,
    ) -> dict[str, Decimal]:
        return category_totals(self._expenses, now or self._clock(), paid_only)

    def category_legend(
        self,
        paid_only: bool,
        now: Optional[datetime] = None,
    ) -> list[LegendEntry]:
        return category_legend(self.category_breakdown(paid_only, now))


class PreferencesManager:
    """Loads and saves display preferences, auditing each save."""

    def __init__(
        self,
        storage: PreferencesStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    async def load(self) -> AppPreferences:
        return await self._storage.load()

    async def save(self, preferences: AppPreferences) -> bool:
        """
        Save preferences.

        Returns False (and logs) if the store could not be written.
        """
        try:
            await self._storage.save(preferences)
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.system_error(
                    error_type="preferences_save_failed",
                    error_message=str(e),
                ))
            return False

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.preferences_saved(
                dark_mode=preferences.dark_mode,
                seed_color=preferences.seed_color,
            ))
        return True


def _describe_changes(previous: Expense, updated: Expense) -> dict:
    changes = {}
    for field in EDITABLE_FIELDS:
        before = getattr(previous, field)
        after = getattr(updated, field)
        if before != after:
            changes[field] = {"from": str(before), "to": str(after)}
    return changes


def create_app_components(
    use_storage: bool = True,
    store_path: Optional[Path] = None,
) -> tuple[BillsTracker, PreferencesManager, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the local store file.
                    Set to False for an in-memory session.
        store_path: Override the configured store file location

    Returns:
        (tracker, preferences_manager, audit_logger)
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, app_settings.log_json)

    audit_logger = AuditLogger()

    expense_storage: ExpenseStorageInterface
    preferences_storage: PreferencesStorageInterface

    if use_storage:
        try:
            store = KeyValueFileStore(store_path)
            expense_storage = LocalExpenseStorage(store)
            preferences_storage = LocalPreferencesStorage(store)
        except ValueError as e:
            # Storage settings invalid - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            expense_storage = InMemoryExpenseStorage()
            preferences_storage = InMemoryPreferencesStorage()
    else:
        expense_storage = InMemoryExpenseStorage()
        preferences_storage = InMemoryPreferencesStorage()

    tracker = BillsTracker(
        storage=expense_storage,
        audit_logger=audit_logger,
        due_soon_days=app_settings.due_soon_days,
    )
    preferences = PreferencesManager(preferences_storage, audit_logger)

    return tracker, preferences, audit_logger
