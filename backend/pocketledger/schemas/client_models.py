"""
Client-side query and state models.

These are the ephemeral request descriptions built per refresh and the
calendar selection they are derived from.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pocketledger.schemas.models import Pagination, TransactionSummary


class CalendarSelection(BaseModel):
    """The user-chosen (month, year) scope for transactions and budgets."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970, le=9999)

    @property
    def key(self) -> tuple[int, int]:
        return (self.month, self.year)


class TransactionQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_query: str = ""
    current_month: int
    current_year: int
    page: int = Field(1, ge=1)
    limit: int = Field(10, gt=0)
    use_cache: bool = True

    @property
    def period(self) -> tuple[int, int]:
        return (self.current_month, self.current_year)

    def to_params(self) -> dict[str, Any]:
        """Query-string parameters understood by ``GET /transactions``."""
        return {
            "search": self.search_query,
            "month": self.current_month,
            "year": self.current_year,
            "page": self.page,
            "limit": self.limit,
        }


class BudgetQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_month: int
    current_year: int

    @property
    def period(self) -> tuple[int, int]:
        return (self.current_month, self.current_year)

    def to_params(self) -> dict[str, Any]:
        return {"month": self.current_month, "year": self.current_year}


class TransactionsState(BaseModel):
    items: list[dict[str, Any]] = Field(default_factory=list)
    pagination: Pagination | None = None
    summary: TransactionSummary = Field(default_factory=TransactionSummary)
    period: tuple[int, int] | None = None
    loading: bool = False
    error: str | None = None


class BudgetsState(BaseModel):
    items: list[dict[str, Any]] = Field(default_factory=list)
    period: tuple[int, int] | None = None
    loading: bool = False
    error: str | None = None
