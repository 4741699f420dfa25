from datetime import date as Date
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0, description="Always positive; direction comes from type.")
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    date: Date
    note: str | None = None

    @field_validator("title", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class Transaction(TransactionCreate):
    id: str
    user_id: str
    created_at: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class TransactionSummary(BaseModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_balance: float = 0.0


class TransactionPage(BaseModel):
    transactions: list[Transaction]
    pagination: Pagination
    summary: TransactionSummary


class BudgetCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970, le=9999)

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, value):
        return value.strip() if isinstance(value, str) else value


class Budget(BudgetCreate):
    id: str
    user_id: str
    created_at: str
    spent: float = 0.0
    remaining: float = 0.0


class BudgetList(BaseModel):
    month: int
    year: int
    budgets: list[Budget]
