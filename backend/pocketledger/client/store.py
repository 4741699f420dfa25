"""
Client application store.

Holds three slices (calendar, transactions, budgets) and is the single place
that serializes writes. Each data slice has exactly one writer path: the
``begin_*`` / ``fulfill_*`` / ``reject_*`` lifecycle used by its fetch
service. A response is applied only if it answers the latest request issued
for that slice and its period is still the current calendar selection.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable

from pocketledger.core.exceptions import InvalidSelectionError
from pocketledger.core.logging import get_logger
from pocketledger.core.utils import is_valid_period, shift_month
from pocketledger.schemas.client_models import (
    BudgetQuery,
    BudgetsState,
    CalendarSelection,
    TransactionQuery,
    TransactionsState,
)
from pocketledger.schemas.models import Pagination, TransactionSummary

logger = get_logger("pocketledger.client.store")

CalendarListener = Callable[[CalendarSelection], None]


class AppStore:
    def __init__(self, selection: CalendarSelection | None = None) -> None:
        if selection is None:
            today = date.today()
            selection = CalendarSelection(month=today.month, year=today.year)
        self._calendar = selection
        self._transactions = TransactionsState()
        self._budgets = BudgetsState()
        self._listeners: list[CalendarListener] = []
        self._latest_request: dict[str, int] = {"transactions": 0, "budgets": 0}
        self._request_seq = 0
        self.version = 0

    # =========================================================================
    # Reads
    # =========================================================================

    @property
    def calendar(self) -> CalendarSelection:
        return self._calendar

    @property
    def transactions(self) -> TransactionsState:
        return self._transactions

    @property
    def budgets(self) -> BudgetsState:
        return self._budgets

    def read_calendar_selection(self) -> CalendarSelection:
        return self._calendar

    # =========================================================================
    # Calendar slice
    # =========================================================================

    def subscribe(self, listener: CalendarListener) -> Callable[[], None]:
        """Register a calendar-change listener; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_calendar(self, month: int, year: int) -> None:
        """Select a period. Unchanged selections do not notify listeners.

        Raises:
            InvalidSelectionError: If month/year is out of range
        """
        if not is_valid_period(month, year):
            raise InvalidSelectionError(month, year)
        if (month, year) == self._calendar.key:
            return

        self._calendar = CalendarSelection(month=month, year=year)
        self.version += 1
        logger.debug(f"Calendar changed to {month}/{year}")
        for listener in list(self._listeners):
            listener(self._calendar)

    def next_month(self) -> None:
        self.set_calendar(*shift_month(self._calendar.month, self._calendar.year, 1))

    def previous_month(self) -> None:
        self.set_calendar(*shift_month(self._calendar.month, self._calendar.year, -1))

    # =========================================================================
    # Request bookkeeping
    # =========================================================================

    def _issue(self, slice_name: str) -> int:
        self._request_seq += 1
        self._latest_request[slice_name] = self._request_seq
        return self._request_seq

    def _is_current(self, slice_name: str, request_id: int, period: tuple[int, int]) -> bool:
        if request_id != self._latest_request[slice_name]:
            logger.debug(f"Discarding superseded {slice_name} response (request {request_id})")
            return False
        if period != self._calendar.key:
            logger.debug(
                f"Discarding stale {slice_name} response for {period[0]}/{period[1]} "
                f"(current {self._calendar.month}/{self._calendar.year})"
            )
            self._clear_loading(slice_name)
            return False
        return True

    def _cancel(self, slice_name: str, request_id: int) -> bool:
        if request_id != self._latest_request[slice_name]:
            return False
        self._clear_loading(slice_name)
        return True

    def _clear_loading(self, slice_name: str) -> None:
        if slice_name == "transactions":
            self._transactions = self._transactions.model_copy(update={"loading": False})
        else:
            self._budgets = self._budgets.model_copy(update={"loading": False})
        self.version += 1

    # =========================================================================
    # Transactions slice
    # =========================================================================

    def begin_transactions(self, query: TransactionQuery) -> int:
        request_id = self._issue("transactions")
        self._transactions = self._transactions.model_copy(
            update={"loading": True, "error": None}
        )
        self.version += 1
        return request_id

    def fulfill_transactions(self, request_id: int, query: TransactionQuery, payload: dict[str, Any]) -> bool:
        if not self._is_current("transactions", request_id, query.period):
            return False
        self._transactions = TransactionsState(
            items=list(payload.get("transactions", [])),
            pagination=Pagination(**payload["pagination"]) if payload.get("pagination") else None,
            summary=TransactionSummary(**(payload.get("summary") or {})),
            period=query.period,
            loading=False,
            error=None,
        )
        self.version += 1
        return True

    def reject_transactions(self, request_id: int, query: TransactionQuery, error: str) -> bool:
        if not self._is_current("transactions", request_id, query.period):
            return False
        # Prior data stays visible alongside the error
        self._transactions = self._transactions.model_copy(update={"loading": False, "error": error})
        self.version += 1
        return True

    def cancel_transactions(self, request_id: int) -> bool:
        """Clear the loading flag of an abandoned request if nothing newer replaced it."""
        return self._cancel("transactions", request_id)

    # =========================================================================
    # Budgets slice
    # =========================================================================

    def begin_budgets(self, query: BudgetQuery) -> int:
        request_id = self._issue("budgets")
        self._budgets = self._budgets.model_copy(update={"loading": True, "error": None})
        self.version += 1
        return request_id

    def fulfill_budgets(self, request_id: int, query: BudgetQuery, payload: dict[str, Any]) -> bool:
        if not self._is_current("budgets", request_id, query.period):
            return False
        self._budgets = BudgetsState(
            items=list(payload.get("budgets", [])),
            period=query.period,
            loading=False,
            error=None,
        )
        self.version += 1
        return True

    def reject_budgets(self, request_id: int, query: BudgetQuery, error: str) -> bool:
        if not self._is_current("budgets", request_id, query.period):
            return False
        self._budgets = self._budgets.model_copy(update={"loading": False, "error": error})
        self.version += 1
        return True

    def cancel_budgets(self, request_id: int) -> bool:
        return self._cancel("budgets", request_id)
