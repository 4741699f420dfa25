import json
from pathlib import Path
from typing import Any


class LocalRepository:
    """File-backed repository: one JSON document per record under ``<data_dir>/<user_id>/``."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.data_dir = base_dir or Path(__file__).resolve().parents[2] / "data"
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _collection_dir(self, user_id: str, collection: str) -> Path:
        root = self.data_dir.resolve()
        path = (root / user_id / collection).resolve()
        # Each user's records must stay inside their own directory under data_dir
        if path.parent.parent != root:
            raise ValueError(f"Invalid user id for local storage: {user_id!r}")
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _read_all(self, user_id: str, collection: str) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for path in sorted(self._collection_dir(user_id, collection).glob("*.json")):
            records.append(json.loads(path.read_text(encoding="utf-8")))
        return records

    def _read_one(self, user_id: str, collection: str, record_id: str) -> dict[str, Any] | None:
        path = self._collection_dir(user_id, collection) / f"{record_id}.json"
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, user_id: str, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        record_id = record.get("id")
        if not record_id:
            raise ValueError(f"{collection} record requires an id.")
        path = self._collection_dir(user_id, collection) / f"{record_id}.json"
        path.write_text(json.dumps(record, ensure_ascii=False, indent=2), encoding="utf-8")
        return record

    def _delete(self, user_id: str, collection: str, record_id: str) -> bool:
        path = self._collection_dir(user_id, collection) / f"{record_id}.json"
        if not path.exists():
            return False
        path.unlink()
        return True

    def list_transactions(self, user_id: str) -> list[dict[str, Any]]:
        return self._read_all(user_id, "transactions")

    def get_transaction(self, transaction_id: str, user_id: str) -> dict[str, Any] | None:
        return self._read_one(user_id, "transactions", transaction_id)

    def save_transaction(self, transaction: dict[str, Any], user_id: str) -> dict[str, Any]:
        return self._write(user_id, "transactions", transaction)

    def delete_transaction(self, transaction_id: str, user_id: str) -> bool:
        return self._delete(user_id, "transactions", transaction_id)

    def list_budgets(self, user_id: str, month: int | None = None, year: int | None = None) -> list[dict[str, Any]]:
        budgets = self._read_all(user_id, "budgets")
        if month is not None:
            budgets = [b for b in budgets if b.get("month") == month]
        if year is not None:
            budgets = [b for b in budgets if b.get("year") == year]
        return budgets

    def save_budget(self, budget: dict[str, Any], user_id: str) -> dict[str, Any]:
        return self._write(user_id, "budgets", budget)

    def delete_budget(self, budget_id: str, user_id: str) -> bool:
        return self._delete(user_id, "budgets", budget_id)
