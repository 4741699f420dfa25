"""
Fetch services: run one API request and record its outcome in the store.

Each service is the only writer of its store slice. Failures are recorded as
slice errors and never raised to the caller.
"""

from __future__ import annotations

import asyncio

from pocketledger.client.api_client import LedgerApiClient
from pocketledger.client.store import AppStore
from pocketledger.core.exceptions import FetchFailedError
from pocketledger.core.logging import get_logger
from pocketledger.schemas.client_models import BudgetQuery, TransactionQuery

logger = get_logger("pocketledger.client.services")


async def fetch_transactions(store: AppStore, api: LedgerApiClient, query: TransactionQuery) -> bool:
    """Fetch a transaction page into the store.

    Returns:
        True if the response was applied, False if it failed or was stale
    """
    request_id = store.begin_transactions(query)
    try:
        payload = await api.get_transactions(query)
    except asyncio.CancelledError:
        store.cancel_transactions(request_id)
        raise
    except FetchFailedError as e:
        logger.warning(f"Transaction fetch for {query.current_month}/{query.current_year} failed: {e.message}")
        store.reject_transactions(request_id, query, e.message)
        return False
    return store.fulfill_transactions(request_id, query, payload)


async def fetch_budgets(store: AppStore, api: LedgerApiClient, query: BudgetQuery) -> bool:
    request_id = store.begin_budgets(query)
    try:
        payload = await api.get_budgets(query)
    except asyncio.CancelledError:
        store.cancel_budgets(request_id)
        raise
    except FetchFailedError as e:
        logger.warning(f"Budget fetch for {query.current_month}/{query.current_year} failed: {e.message}")
        store.reject_budgets(request_id, query, e.message)
        return False
    return store.fulfill_budgets(request_id, query, payload)
