"""Tests for the file-backed repository."""

from __future__ import annotations

import pytest

from pocketledger.repositories.local_repo import LocalRepository


class TestTransactions:
    def test_round_trip(self, local_repo: LocalRepository):
        local_repo.save_transaction({"id": "t1", "title": "Coffee"}, user_id="alice")
        assert local_repo.get_transaction("t1", user_id="alice") == {"id": "t1", "title": "Coffee"}
        assert local_repo.list_transactions("alice") == [{"id": "t1", "title": "Coffee"}]

    def test_users_are_isolated(self, local_repo: LocalRepository):
        local_repo.save_transaction({"id": "t1"}, user_id="alice")
        assert local_repo.get_transaction("t1", user_id="bob") is None
        assert local_repo.list_transactions("bob") == []
        assert local_repo.delete_transaction("t1", user_id="bob") is False

    def test_delete(self, local_repo: LocalRepository):
        local_repo.save_transaction({"id": "t1"}, user_id="alice")
        assert local_repo.delete_transaction("t1", user_id="alice") is True
        assert local_repo.get_transaction("t1", user_id="alice") is None

    def test_requires_id(self, local_repo: LocalRepository):
        with pytest.raises(ValueError):
            local_repo.save_transaction({"title": "no id"}, user_id="alice")

    @pytest.mark.parametrize("user_id", ["..", ".", "", "alice/../..", "nested/user"])
    def test_user_id_cannot_leave_data_dir(self, local_repo: LocalRepository, user_id):
        with pytest.raises(ValueError):
            local_repo.save_transaction({"id": "t1"}, user_id=user_id)
        assert list(local_repo.data_dir.parent.glob("*/t1.json")) == []


class TestBudgets:
    def test_period_filter(self, local_repo: LocalRepository):
        local_repo.save_budget({"id": "b1", "month": 1, "year": 2024}, user_id="alice")
        local_repo.save_budget({"id": "b2", "month": 2, "year": 2024}, user_id="alice")
        local_repo.save_budget({"id": "b3", "month": 1, "year": 2025}, user_id="alice")

        assert [b["id"] for b in local_repo.list_budgets("alice", month=1, year=2024)] == ["b1"]
        assert len(local_repo.list_budgets("alice")) == 3

    def test_delete_budget(self, local_repo: LocalRepository):
        local_repo.save_budget({"id": "b1", "month": 1, "year": 2024}, user_id="alice")
        assert local_repo.delete_budget("b1", user_id="alice") is True
        assert local_repo.delete_budget("b1", user_id="alice") is False
