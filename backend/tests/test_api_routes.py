"""Integration tests for API routes."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient


def _transaction(**overrides):
    payload = {
        "title": "Lunch",
        "amount": 12.5,
        "type": "expense",
        "category": "Food",
        "date": "2024-03-10",
    }
    payload.update(overrides)
    return payload


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestTransactionEndpoints:
    """Tests for transaction CRUD and listing."""

    def test_create_transaction(self, client):
        response = client.post("/transactions", json=_transaction(title="  Lunch  "))
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Lunch"
        assert data["user_id"] == "tester"
        assert data["date"] == "2024-03-10"
        assert data["id"]

    def test_create_rejects_non_positive_amount(self, client):
        response = client.post("/transactions", json=_transaction(amount=0))
        assert response.status_code == 422

    def test_create_rejects_unknown_type(self, client):
        response = client.post("/transactions", json=_transaction(type="transfer"))
        assert response.status_code == 422

    def test_get_and_delete_transaction(self, client):
        created = client.post("/transactions", json=_transaction()).json()

        fetched = client.get(f"/transactions/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == created["id"]

        deleted = client.delete(f"/transactions/{created['id']}")
        assert deleted.status_code == 204

        assert client.get(f"/transactions/{created['id']}").status_code == 404

    def test_delete_missing_transaction_returns_404(self, client):
        response = client.delete("/transactions/does-not-exist")
        assert response.status_code == 404
        assert response.json()["detail"] == "Transaction not found."

    def test_list_scoped_to_period(self, client, seeded_repo):
        response = client.get("/transactions", params={"month": 1, "year": 2024})
        assert response.status_code == 200
        data = response.json()
        assert [t["id"] for t in data["transactions"]] == ["t3", "t2", "t1"]
        assert data["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 3,
            "total_pages": 1,
            "has_more": False,
        }
        assert data["summary"]["total_income"] == 5000.0
        assert data["summary"]["total_expenses"] == 125.0
        assert data["summary"]["net_balance"] == 4875.0

    def test_list_paginates(self, client, seeded_repo):
        response = client.get("/transactions", params={"month": 1, "year": 2024, "limit": 2, "page": 2})
        data = response.json()
        assert [t["id"] for t in data["transactions"]] == ["t1"]
        assert data["pagination"]["total_pages"] == 2
        assert data["pagination"]["has_more"] is False

    def test_list_search(self, client, seeded_repo):
        response = client.get("/transactions", params={"search": "FOOD", "month": 1, "year": 2024})
        assert {t["id"] for t in response.json()["transactions"]} == {"t2", "t3"}

    def test_list_without_period_returns_everything(self, client, seeded_repo):
        response = client.get("/transactions")
        assert response.json()["pagination"]["total"] == 4

    def test_month_without_year_is_rejected(self, client):
        response = client.get("/transactions", params={"month": 1})
        assert response.status_code == 400
        assert "together" in response.json()["detail"]

    def test_month_out_of_range_is_rejected(self, client):
        response = client.get("/transactions", params={"month": 13, "year": 2024})
        assert response.status_code == 422

    def test_data_is_isolated_per_user(self, client, seeded_repo):
        response = client.get("/transactions", headers={"X-User-Id": "someone-else"})
        assert response.json()["pagination"]["total"] == 0

    def test_invalid_user_header(self, client):
        response = client.get("/transactions", headers={"X-User-Id": "../etc"})
        assert response.status_code == 400

    @pytest.mark.parametrize("user_id", ["..", ".", "...", "a/b"])
    def test_traversal_user_header_rejected(self, client, user_id):
        response = client.get("/transactions", headers={"X-User-Id": user_id})
        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["title", "category"])
    def test_create_rejects_blank_text(self, client, field):
        response = client.post("/transactions", json=_transaction(**{field: "   "}))
        assert response.status_code == 422


class TestBudgetEndpoints:
    """Tests for budget endpoints."""

    def test_create_and_list_with_spent(self, client, seeded_repo):
        created = client.post(
            "/budgets", json={"category": "Food", "amount": 200, "month": 1, "year": 2024}
        )
        assert created.status_code == 201
        assert created.json()["spent"] == 0.0

        response = client.get("/budgets", params={"month": 1, "year": 2024})
        assert response.status_code == 200
        data = response.json()
        assert data["month"] == 1 and data["year"] == 2024
        assert len(data["budgets"]) == 1
        budget = data["budgets"][0]
        assert budget["spent"] == 125.0
        assert budget["remaining"] == 75.0

    def test_budgets_of_other_period_hidden(self, client):
        client.post("/budgets", json={"category": "Food", "amount": 200, "month": 1, "year": 2024})
        response = client.get("/budgets", params={"month": 2, "year": 2024})
        assert response.json()["budgets"] == []

    def test_duplicate_budget_rejected(self, client):
        body = {"category": "Food", "amount": 200, "month": 1, "year": 2024}
        assert client.post("/budgets", json=body).status_code == 201
        response = client.post("/budgets", json=body | {"category": " food "})
        assert response.status_code == 400

    def test_blank_category_rejected(self, client):
        body = {"category": "  ", "amount": 200, "month": 1, "year": 2024}
        assert client.post("/budgets", json=body).status_code == 422

    def test_category_is_trimmed(self, client):
        body = {"category": "  Travel ", "amount": 300, "month": 1, "year": 2024}
        assert client.post("/budgets", json=body).json()["category"] == "Travel"

    def test_list_requires_period(self, client):
        assert client.get("/budgets").status_code == 422

    def test_delete_budget(self, client):
        created = client.post(
            "/budgets", json={"category": "Rent", "amount": 900, "month": 5, "year": 2024}
        ).json()
        assert client.delete(f"/budgets/{created['id']}").status_code == 204
        assert client.delete(f"/budgets/{created['id']}").status_code == 404


class TestBotProtectionInstalled:
    """The bot-protection middleware must not interfere with requests."""

    def test_requests_pass_through(self, client: TestClient):
        from pocketledger.main import app
        from pocketledger.middleware.bot_protection import BotProtectionMiddleware

        assert any(
            getattr(m.cls, "func", m.cls) is BotProtectionMiddleware for m in app.user_middleware
        )
        assert client.get("/health").status_code == 200


@pytest.mark.parametrize("limit", [0, 101])
def test_limit_bounds(client, limit):
    response = client.get("/transactions", params={"limit": limit})
    assert response.status_code == 422
