"""Pytest fixtures and configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

# Set environment variables before importing app modules
os.environ["VERCEL"] = "1"
os.environ["ENVIRONMENT"] = "development"
os.environ["STORAGE_BACKEND"] = "local"
os.environ.pop("SHIELD_KEY", None)

from pocketledger.repositories.local_repo import LocalRepository  # noqa: E402


@pytest.fixture
def sample_transactions() -> list[dict[str, Any]]:
    """Sample stored transactions spanning two months."""
    return [
        {
            "id": "t1",
            "user_id": "tester",
            "title": "Salary",
            "amount": 5000.00,
            "type": "income",
            "category": "Salary",
            "date": "2024-01-01",
            "note": "January pay",
            "created_at": "2024-01-01T09:00:00+00:00",
        },
        {
            "id": "t2",
            "user_id": "tester",
            "title": "Groceries at Market",
            "amount": 120.50,
            "type": "expense",
            "category": "Food",
            "date": "2024-01-15",
            "note": None,
            "created_at": "2024-01-15T18:00:00+00:00",
        },
        {
            "id": "t3",
            "user_id": "tester",
            "title": "Coffee",
            "amount": 4.50,
            "type": "expense",
            "category": "food",
            "date": "2024-01-31",
            "note": "Latte",
            "created_at": "2024-01-31T08:00:00+00:00",
        },
        {
            "id": "t4",
            "user_id": "tester",
            "title": "Electric Bill",
            "amount": 80.00,
            "type": "expense",
            "category": "Utilities",
            "date": "2024-02-01",
            "note": None,
            "created_at": "2024-02-01T10:00:00+00:00",
        },
    ]


@pytest.fixture
def local_repo(tmp_path: Path) -> LocalRepository:
    """Local repository rooted in a temporary directory."""
    return LocalRepository(tmp_path / "data")


@pytest.fixture
def seeded_repo(local_repo: LocalRepository, sample_transactions) -> LocalRepository:
    for txn in sample_transactions:
        local_repo.save_transaction(dict(txn), user_id="tester")
    return local_repo


@pytest.fixture
def client(local_repo: LocalRepository) -> Generator[TestClient, None, None]:
    """Test client backed by a temporary local repository."""
    from pocketledger.api.routes import get_repo
    from pocketledger.main import app

    app.dependency_overrides[get_repo] = lambda: local_repo

    test_client = TestClient(app)
    test_client.headers["X-User-Id"] = "tester"
    yield test_client

    app.dependency_overrides.pop(get_repo, None)
