"""
Calendar-scoped refresh.

Keeps the transaction and budget slices in step with the selected period:
every change of the (month, year) selection, and the initial mount, issues one
transaction fetch followed by one budget fetch for that period. Repeated
notifications for the period already fetched are ignored.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable

from pocketledger.client.api_client import LedgerApiClient
from pocketledger.client.services import fetch_budgets, fetch_transactions
from pocketledger.client.store import AppStore
from pocketledger.core.logging import LogContext, get_logger
from pocketledger.core.utils import is_valid_period
from pocketledger.schemas.client_models import BudgetQuery, CalendarSelection, TransactionQuery

logger = get_logger("pocketledger.client.refresh")

TransactionFetcher = Callable[[TransactionQuery], Awaitable[Any]]
BudgetFetcher = Callable[[BudgetQuery], Awaitable[Any]]


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class CalendarRefreshCoordinator:
    PAGE_SIZE = 10

    def __init__(
        self,
        store: AppStore,
        fetch_transactions: TransactionFetcher,
        fetch_budgets: BudgetFetcher,
    ) -> None:
        self.store = store
        self._fetch_transactions = fetch_transactions
        self._fetch_budgets = fetch_budgets
        self._last_period: tuple[int, int] | None = None
        self._pending: set[asyncio.Task] = set()
        self._unsubscribe: Callable[[], None] | None = None
        self.cycles = 0

    @property
    def state(self) -> RefreshState:
        return RefreshState.REFRESHING if self._pending else RefreshState.IDLE

    @property
    def last_period(self) -> tuple[int, int] | None:
        return self._last_period

    def mount(self) -> None:
        """Start observing the calendar and refresh once for the current selection.

        Must be called from a running event loop.
        """
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self.store.subscribe(self._on_calendar_change)
        self._on_calendar_change(self.store.read_calendar_selection())

    def unmount(self) -> None:
        """Stop observing the calendar and cancel requests still in flight."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._pending):
            task.cancel()
        self._last_period = None

    def _on_calendar_change(self, selection: CalendarSelection) -> None:
        self.handle_selection(selection.month, selection.year)

    def handle_selection(self, month: int, year: int) -> bool:
        """Run one refresh cycle for (month, year) unless it was the last one fetched.

        Fetches are scheduled on the running event loop, so this must be called
        from inside one. If neither fetch could be scheduled the period is not
        recorded, and a repeat of the same selection tries again.

        Returns:
            True if at least one fetch was dispatched
        """
        if not is_valid_period(month, year):
            logger.warning(f"Skipping refresh for invalid calendar selection {month!r}/{year!r}")
            return False

        period = (month, year)
        if period == self._last_period:
            logger.debug(f"Calendar selection {month}/{year} unchanged; refresh suppressed")
            return False

        previous_period = self._last_period
        self._last_period = period
        self.cycles += 1

        with LogContext(logger, "refresh cycle", month=month, year=year, cycle=self.cycles):
            transaction_query = TransactionQuery(
                search_query="",
                current_month=month,
                current_year=year,
                page=1,
                limit=self.PAGE_SIZE,
                # Pagination totals must reflect the live dataset
                use_cache=False,
            )
            budget_query = BudgetQuery(current_month=month, current_year=year)

            dispatched = self._dispatch("transactions", self._fetch_transactions, transaction_query)
            dispatched = self._dispatch("budgets", self._fetch_budgets, budget_query) or dispatched

        if not dispatched:
            self._last_period = previous_period
            return False
        return True

    def _dispatch(self, name: str, fetcher: Callable[[Any], Awaitable[Any]], query: Any) -> bool:
        awaitable = None
        try:
            awaitable = fetcher(query)
            task = asyncio.ensure_future(awaitable)
        except Exception:
            logger.error(f"Failed to dispatch {name} fetch for {query.period}", exc_info=True)
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            return False

        self._pending.add(task)
        task.add_done_callback(partial(self._on_settled, name))
        return True

    def _on_settled(self, name: str, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.debug(f"{name} fetch cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"{name} fetch raised: {error}", exc_info=error)
        if not self._pending:
            logger.debug("Refresh settled; coordinator idle")

    async def wait_idle(self) -> None:
        """Wait until every dispatched fetch has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def create_refresh_coordinator(store: AppStore, api: LedgerApiClient) -> CalendarRefreshCoordinator:
    """Wire a coordinator to the store-writing fetch services."""
    return CalendarRefreshCoordinator(
        store,
        fetch_transactions=partial(fetch_transactions, store, api),
        fetch_budgets=partial(fetch_budgets, store, api),
    )
