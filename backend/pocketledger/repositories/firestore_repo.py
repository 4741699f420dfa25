"""
Firestore Repository

Repository implementation using Firestore for data persistence.
Supports multi-tenancy with user_id filtering.

Data Structure:
    transactions/{transaction_id}   - Individual transactions (user_id field)
    budgets/{budget_id}             - Monthly category budgets (user_id field)
"""

from typing import Any, Optional

import firebase_admin
from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter


class FirestoreRepository:
    """Repository using Firestore for data persistence with multi-tenant support."""

    def __init__(self) -> None:
        # Initialize Firebase Admin SDK with Application Default Credentials
        if not firebase_admin._apps:
            firebase_admin.initialize_app()

        self.db = firestore.client()

        # Collection references
        self.transactions_collection = "transactions"
        self.budgets_collection = "budgets"

    # =========================================================================
    # Shared helpers
    # =========================================================================

    def _save(self, collection: str, record: dict[str, Any], user_id: str) -> dict[str, Any]:
        record_id = record.get("id")
        if not record_id:
            raise ValueError(f"{collection} record requires an id.")

        record["user_id"] = user_id
        self.db.collection(collection).document(record_id).set(record)
        return record

    def _get(self, collection: str, record_id: str, user_id: Optional[str]) -> dict[str, Any] | None:
        doc = self.db.collection(collection).document(record_id).get()
        if not doc.exists:
            return None

        data = doc.to_dict()

        if user_id and data.get("user_id") != user_id:
            return None

        return data

    def _delete(self, collection: str, record_id: str, user_id: Optional[str]) -> bool:
        doc_ref = self.db.collection(collection).document(record_id)
        doc = doc_ref.get()

        if not doc.exists:
            return False

        if user_id and doc.to_dict().get("user_id") != user_id:
            return False

        doc_ref.delete()
        return True

    # =========================================================================
    # Transaction Methods
    # =========================================================================

    def list_transactions(self, user_id: str) -> list[dict[str, Any]]:
        """
        List all transactions owned by a user.

        Period filtering, search and pagination happen in the service layer so
        that both repositories behave identically.
        """
        query = self.db.collection(self.transactions_collection).where(
            filter=FieldFilter("user_id", "==", user_id)
        )
        return [doc.to_dict() for doc in query.stream()]

    def get_transaction(self, transaction_id: str, user_id: Optional[str] = None) -> dict[str, Any] | None:
        return self._get(self.transactions_collection, transaction_id, user_id)

    def save_transaction(self, transaction: dict[str, Any], user_id: str) -> dict[str, Any]:
        return self._save(self.transactions_collection, transaction, user_id)

    def delete_transaction(self, transaction_id: str, user_id: Optional[str] = None) -> bool:
        return self._delete(self.transactions_collection, transaction_id, user_id)

    # =========================================================================
    # Budget Methods
    # =========================================================================

    def list_budgets(
        self,
        user_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        List budgets for a user, optionally restricted to one period.

        Args:
            user_id: Owner's user ID
            month: Calendar month (1-12)
            year: Calendar year

        Returns:
            List of budget documents
        """
        query = self.db.collection(self.budgets_collection).where(
            filter=FieldFilter("user_id", "==", user_id)
        )
        if month is not None:
            query = query.where(filter=FieldFilter("month", "==", month))
        if year is not None:
            query = query.where(filter=FieldFilter("year", "==", year))
        return [doc.to_dict() for doc in query.stream()]

    def save_budget(self, budget: dict[str, Any], user_id: str) -> dict[str, Any]:
        return self._save(self.budgets_collection, budget, user_id)

    def delete_budget(self, budget_id: str, user_id: Optional[str] = None) -> bool:
        return self._delete(self.budgets_collection, budget_id, user_id)
