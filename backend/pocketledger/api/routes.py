import re
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status

from pocketledger.core.config import get_settings
from pocketledger.core.logging import get_logger
from pocketledger.repositories.firestore_repo import FirestoreRepository
from pocketledger.repositories.local_repo import LocalRepository
from pocketledger.schemas.models import (
    Budget,
    BudgetCreate,
    BudgetList,
    Transaction,
    TransactionCreate,
    TransactionPage,
)
from pocketledger.services.budget_service import BudgetService
from pocketledger.services.transaction_service import TransactionService

logger = get_logger("pocketledger.api")

router = APIRouter()

USER_ID_PATTERN = re.compile(r"^(?!\.+$)[A-Za-z0-9_.-]{1,64}$")

# Lazy initialization to avoid a Firestore connection at import time (breaks tests)
_repo: LocalRepository | FirestoreRepository | None = None


def get_repo() -> LocalRepository | FirestoreRepository:
    global _repo
    if _repo is None:
        settings = get_settings()
        if settings.storage_backend == "firestore":
            _repo = FirestoreRepository()
        else:
            _repo = LocalRepository(settings.data_dir)
        logger.info(f"Using {settings.storage_backend} storage backend")
    return _repo


def get_transaction_service(
    repo: LocalRepository | FirestoreRepository = Depends(get_repo),
) -> TransactionService:
    return TransactionService(repo)


def get_budget_service(
    repo: LocalRepository | FirestoreRepository = Depends(get_repo),
) -> BudgetService:
    return BudgetService(repo)


def get_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """Identify the caller. Data is partitioned per user; there is no authentication."""
    user_id = (x_user_id or "local").strip()
    if not USER_ID_PATTERN.fullmatch(user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-User-Id header.")
    return user_id


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/transactions", response_model=TransactionPage)
def list_transactions(
    search: str = "",
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=TransactionService.MAX_PAGE_SIZE),
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionPage:
    """List transactions for a calendar period.

    Args:
        search: Case-insensitive text filter on title, category and note
        month: Calendar month; omit together with year for all periods
        year: Calendar year
        page: 1-based page number
        limit: Page size
    """
    payload = service.list_transactions(
        user_id, search=search, month=month, year=year, page=page, limit=limit
    )
    return TransactionPage(**payload)


@router.post("/transactions", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> Transaction:
    return Transaction(**service.create_transaction(payload, user_id=user_id))


@router.get("/transactions/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> Transaction:
    return Transaction(**service.get_transaction(transaction_id, user_id=user_id))


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> Response:
    service.delete_transaction(transaction_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/budgets", response_model=BudgetList)
def list_budgets(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
) -> BudgetList:
    """List budgets of a period with spent and remaining amounts."""
    budgets = service.list_budgets(user_id, month=month, year=year)
    return BudgetList(month=month, year=year, budgets=[Budget(**b) for b in budgets])


@router.post("/budgets", response_model=Budget, status_code=status.HTTP_201_CREATED)
def create_budget(
    payload: BudgetCreate,
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    return Budget(**service.create_budget(payload, user_id=user_id))


@router.delete("/budgets/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: str,
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
) -> Response:
    service.delete_budget(budget_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
