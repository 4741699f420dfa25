"""Async HTTP client for the PocketLedger API."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from pocketledger.core.config import get_settings
from pocketledger.core.exceptions import FetchFailedError
from pocketledger.core.logging import get_logger
from pocketledger.schemas.client_models import BudgetQuery, TransactionQuery
from pocketledger.schemas.models import BudgetList, TransactionPage

logger = get_logger("pocketledger.client.api")

CacheKey = tuple[str, tuple[tuple[str, Any], ...]]


class LedgerApiClient:
    """Thin wrapper around ``httpx.AsyncClient`` with an optional response cache.

    Cached answers are only served when a query asks for them
    (``use_cache=True``); uncached calls always hit the network and refresh
    the stored entry.
    """

    def __init__(
        self,
        base_url: str | None = None,
        user_id: str = "local",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.fetch_timeout_secs,
        )
        self._headers = {"X-User-Id": user_id}
        self._cache: dict[CacheKey, dict[str, Any]] = {}

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "LedgerApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def clear_cache(self) -> None:
        self._cache.clear()

    async def get_transactions(self, query: TransactionQuery) -> dict[str, Any]:
        return await self._get("/transactions", query.to_params(), TransactionPage, use_cache=query.use_cache)

    async def get_budgets(self, query: BudgetQuery) -> dict[str, Any]:
        return await self._get("/budgets", query.to_params(), BudgetList, use_cache=False)

    async def _get(
        self, path: str, params: dict[str, Any], model: type[BaseModel], use_cache: bool
    ) -> dict[str, Any]:
        key: CacheKey = (path, tuple(sorted(params.items())))
        if use_cache and key in self._cache:
            logger.debug(f"Cache hit for GET {path} {params}")
            return self._cache[key]

        try:
            response = await self._client.get(path, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"GET {path} failed: {e}")
            raise FetchFailedError(f"Request to {path} failed: {e}") from e

        if response.status_code >= 400:
            detail = self._error_detail(response)
            logger.error(f"GET {path} returned {response.status_code}: {detail}")
            raise FetchFailedError(
                f"{path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FetchFailedError(f"{path} returned a non-JSON body", status_code=response.status_code) from e

        # Only well-formed bodies reach the store or the cache
        try:
            model.model_validate(data)
        except ValidationError as e:
            logger.error(f"GET {path} returned an unexpected body: {e.error_count()} validation errors")
            raise FetchFailedError(
                f"{path} returned an unexpected body",
                status_code=response.status_code,
                details={"errors": e.errors(include_url=False)},
            ) from e

        self._cache[key] = data
        return data

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and "detail" in body:
            return str(body["detail"])
        return str(body)[:200]
