from __future__ import annotations

from typing import Any, Protocol
from uuid import uuid4

import pandas as pd

from pocketledger.core.exceptions import NotFoundError, ValidationError
from pocketledger.core.logging import get_logger
from pocketledger.core.utils import is_valid_period, utc_now_iso
from pocketledger.schemas.models import BudgetCreate

logger = get_logger("pocketledger.services.budget")


class BudgetRepository(Protocol):
    def list_transactions(self, user_id: str) -> list[dict[str, Any]]: ...

    def list_budgets(self, user_id: str, month: int | None = None, year: int | None = None) -> list[dict[str, Any]]: ...

    def save_budget(self, budget: dict[str, Any], user_id: str) -> dict[str, Any]: ...

    def delete_budget(self, budget_id: str, user_id: str) -> bool: ...


class BudgetService:
    def __init__(self, repository: BudgetRepository) -> None:
        self.repository = repository

    def list_budgets(self, user_id: str, month: int, year: int) -> list[dict[str, Any]]:
        """List budgets of one period with spending computed from that period's expenses."""
        if not is_valid_period(month, year):
            raise ValidationError(f"Invalid period: {month}/{year}.")

        budgets = self.repository.list_budgets(user_id, month=month, year=year)
        if not budgets:
            return []

        spent_by_category = self._compute_spent(self.repository.list_transactions(user_id), month, year)

        result = []
        for budget in sorted(budgets, key=lambda b: str(b.get("category", "")).lower()):
            spent = round(spent_by_category.get(self._category_key(budget.get("category")), 0.0), 2)
            result.append(
                budget | {"spent": spent, "remaining": round(float(budget["amount"]) - spent, 2)}
            )

        logger.debug(f"Listed {len(result)} budgets for {user_id} ({month}/{year})")
        return result

    def create_budget(self, payload: BudgetCreate, user_id: str) -> dict[str, Any]:
        """Create a budget, rejecting a second budget for the same category and period.

        Raises:
            ValidationError: If a budget for this category already exists in the period
        """
        category = payload.category
        existing = self.repository.list_budgets(user_id, month=payload.month, year=payload.year)
        if any(self._category_key(b.get("category")) == self._category_key(category) for b in existing):
            logger.warning(f"Duplicate budget rejected: {category} {payload.month}/{payload.year} for {user_id}")
            raise ValidationError(
                f"A budget for '{category}' already exists for {payload.month}/{payload.year}.",
                {"category": category, "month": payload.month, "year": payload.year},
            )

        budget = payload.model_dump(mode="json") | {
            "id": str(uuid4()),
            "user_id": user_id,
            "created_at": utc_now_iso(),
        }
        saved = self.repository.save_budget(budget, user_id=user_id)
        logger.info(f"Created budget {saved['id']} for {user_id}: {category} {saved['amount']:,.2f}")
        return saved | {"spent": 0.0, "remaining": float(saved["amount"])}

    def delete_budget(self, budget_id: str, user_id: str) -> None:
        if not self.repository.delete_budget(budget_id, user_id=user_id):
            logger.warning(f"Delete failed, budget not found: {budget_id}")
            raise NotFoundError("Budget not found.", {"id": budget_id})
        logger.info(f"Deleted budget {budget_id} for {user_id}")

    @staticmethod
    def _category_key(category: Any) -> str:
        return str(category or "").strip().lower()

    @classmethod
    def _compute_spent(cls, transactions: list[dict[str, Any]], month: int, year: int) -> dict[str, float]:
        """Sum expense amounts per (normalized) category within the period."""
        if not transactions:
            return {}

        df = pd.DataFrame(transactions, columns=["type", "amount", "category", "date"])
        df["date"] = pd.to_datetime(df["date"], errors="coerce")
        df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
        mask = (
            (df["type"] == "expense")
            & (df["date"].dt.month == month)
            & (df["date"].dt.year == year)
        )
        expenses = df.loc[mask]
        if expenses.empty:
            return {}

        keys = expenses["category"].map(cls._category_key)
        return {str(k): float(v) for k, v in expenses.groupby(keys)["amount"].sum().items()}
