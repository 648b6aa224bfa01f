import logging
from typing import Optional
from approval_flow.engine.errors import ConcurrentModification
from approval_flow.models.approval import DecisionState
from approval_flow.models.expense import Expense, ExpenseStatus, utcnow
from approval_flow.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# Fields the approval engine is allowed to change
APPROVAL_FIELDS = ("status", "stage_roles", "approval_flow", "current_stage_index", "audit_log")

class ExpenseRepository(BaseRepository[Expense]):

    async def get_by_expense_id(self, expense_id: str) -> Optional[Expense]:
        return await self.get_by_field("expense_id", expense_id)

    async def save_approval_state(self, expense: Expense) -> Expense:
        """
        Persist the approval fields with a compare-and-swap on `version`.
        Raises ConcurrentModification if someone else saved in between.
        """
        data = expense.to_mongo()
        update = {field: data[field] for field in APPROVAL_FIELDS}
        update["updated_at"] = utcnow()

        result = await self.collection.update_one(
            {"expense_id": expense.expense_id, "version": expense.version},
            {"$set": update, "$inc": {"version": 1}},
        )
        if result.modified_count == 0:
            logger.warning(f"Version conflict saving expense {expense.expense_id} at v{expense.version}")
            raise ConcurrentModification(expense.expense_id, expense.version)

        expense.version += 1
        expense.updated_at = update["updated_at"]
        return expense

    async def count_pending_for_approver(self, approver_id: str) -> int:
        """
        Pending expenses where this user holds an open slot in the current
        stage. Slots left pending in a closed stage are not counted.
        """
        return await self.count({
            "status": ExpenseStatus.PENDING.value,
            "approval_flow": {
                "$elemMatch": {
                    "approver_id": approver_id,
                    "decision_state": DecisionState.PENDING.value,
                }
            },
            # the current stage is the role of the last appended entry
            "$expr": {
                "$anyElementTrue": [{
                    "$map": {
                        "input": "$approval_flow",
                        "as": "entry",
                        "in": {"$and": [
                            {"$eq": ["$$entry.approver_id", approver_id]},
                            {"$eq": ["$$entry.decision_state", DecisionState.PENDING.value]},
                            {"$eq": ["$$entry.role", {"$arrayElemAt": ["$approval_flow.role", -1]}]},
                        ]},
                    }
                }]
            },
        })
