from __future__ import annotations

from datetime import date
import math
from typing import Any, Protocol
from uuid import uuid4

import pandas as pd

from pocketledger.core.exceptions import NotFoundError, ValidationError
from pocketledger.core.logging import get_logger
from pocketledger.core.utils import is_valid_period, month_bounds, utc_now_iso
from pocketledger.schemas.models import TransactionCreate

logger = get_logger("pocketledger.services.transaction")


class TransactionRepository(Protocol):
    def list_transactions(self, user_id: str) -> list[dict[str, Any]]: ...

    def get_transaction(self, transaction_id: str, user_id: str) -> dict[str, Any] | None: ...

    def save_transaction(self, transaction: dict[str, Any], user_id: str) -> dict[str, Any]: ...

    def delete_transaction(self, transaction_id: str, user_id: str) -> bool: ...


class TransactionService:
    MAX_PAGE_SIZE = 100

    def __init__(self, repository: TransactionRepository) -> None:
        self.repository = repository

    def list_transactions(
        self,
        user_id: str,
        search: str = "",
        month: int | None = None,
        year: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        """List a user's transactions for one period, newest first.

        Args:
            user_id: Owner's user ID
            search: Case-insensitive substring matched against title, category and note
            month: Calendar month (1-12); must be given together with year
            year: Calendar year; must be given together with month
            page: 1-based page number
            limit: Page size

        Returns:
            Dict with ``transactions``, ``pagination`` and ``summary`` keys.
            The summary covers every match, not only the returned page.

        Raises:
            ValidationError: If the period or paging parameters are invalid
        """
        if (month is None) != (year is None):
            raise ValidationError("month and year must be provided together.")
        if month is not None and not is_valid_period(month, year):
            raise ValidationError(f"Invalid period: {month}/{year}.")
        if page < 1:
            raise ValidationError("page must be at least 1.")
        if not 0 < limit <= self.MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {self.MAX_PAGE_SIZE}.")

        transactions = self.repository.list_transactions(user_id)
        if month is not None:
            transactions = self._filter_period(transactions, month, year)
        if search.strip():
            transactions = self._filter_search(transactions, search)

        transactions.sort(key=lambda t: (t.get("date", ""), t.get("created_at", "")), reverse=True)

        total = len(transactions)
        total_pages = math.ceil(total / limit) if total else 0
        start = (page - 1) * limit
        page_items = transactions[start:start + limit]

        logger.debug(
            f"Listed {len(page_items)}/{total} transactions for {user_id} "
            f"(period={month}/{year}, search={search!r}, page={page})"
        )
        return {
            "transactions": page_items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_more": page < total_pages,
            },
            "summary": self._build_summary(transactions),
        }

    def create_transaction(self, payload: TransactionCreate, user_id: str) -> dict[str, Any]:
        transaction = payload.model_dump(mode="json")
        transaction.update(
            {
                "id": str(uuid4()),
                "user_id": user_id,
                "created_at": utc_now_iso(),
            }
        )
        saved = self.repository.save_transaction(transaction, user_id=user_id)
        logger.info(
            f"Created {saved['type']} transaction {saved['id']} for {user_id}: "
            f"{saved['amount']:,.2f} in {saved['category']}"
        )
        return saved

    def get_transaction(self, transaction_id: str, user_id: str) -> dict[str, Any]:
        """Get a transaction by ID.

        Raises:
            NotFoundError: If the transaction does not exist for this user
        """
        transaction = self.repository.get_transaction(transaction_id, user_id=user_id)
        if not transaction:
            logger.warning(f"Transaction not found: {transaction_id}")
            raise NotFoundError("Transaction not found.", {"id": transaction_id})
        return transaction

    def delete_transaction(self, transaction_id: str, user_id: str) -> None:
        if not self.repository.delete_transaction(transaction_id, user_id=user_id):
            logger.warning(f"Delete failed, transaction not found: {transaction_id}")
            raise NotFoundError("Transaction not found.", {"id": transaction_id})
        logger.info(f"Deleted transaction {transaction_id} for {user_id}")

    @staticmethod
    def _filter_period(transactions: list[dict[str, Any]], month: int, year: int) -> list[dict[str, Any]]:
        start, end = month_bounds(month, year)
        selected = []
        for txn in transactions:
            try:
                txn_date = date.fromisoformat(str(txn.get("date", ""))[:10])
            except ValueError:
                logger.warning(f"Skipping transaction with unreadable date: {txn.get('id')}")
                continue
            if start <= txn_date < end:
                selected.append(txn)
        return selected

    @staticmethod
    def _filter_search(transactions: list[dict[str, Any]], search: str) -> list[dict[str, Any]]:
        needle = search.strip().lower()
        return [
            txn
            for txn in transactions
            if any(needle in str(txn.get(field) or "").lower() for field in ("title", "category", "note"))
        ]

    @staticmethod
    def _build_summary(transactions: list[dict[str, Any]]) -> dict[str, float]:
        if not transactions:
            return {"total_income": 0.0, "total_expenses": 0.0, "net_balance": 0.0}

        df = pd.DataFrame(transactions, columns=["type", "amount"])
        df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
        totals = df.groupby("type")["amount"].sum()

        income = round(float(totals.get("income", 0.0)), 2)
        expenses = round(float(totals.get("expense", 0.0)), 2)
        return {
            "total_income": income,
            "total_expenses": expenses,
            "net_balance": round(income - expenses, 2),
        }
