from datetime import datetime
from typing import List
from pydantic import BaseModel

from approval_flow.engine.stages import current_stage
from approval_flow.models.approval import DecisionState
from approval_flow.models.expense import Expense, ExpenseStatus
from approval_flow.models.user import UserRole

class PendingApprover(BaseModel):
    approver_id: str
    role: UserRole
    due_date: datetime

class ApprovalProgress(BaseModel):
    expense_id: str
    status: ExpenseStatus
    current_stage: int
    total_entries: int
    completed_entries: int
    percentage: int
    current_approvers: List[PendingApprover] = []

def approval_progress(expense: Expense) -> ApprovalProgress:
    """Summarise how far an expense has travelled through its approval flow."""
    flow = expense.approval_flow
    total = len(flow)
    completed = sum(1 for e in flow if e.decision_state != DecisionState.PENDING)
    percentage = round(completed / total * 100) if total else 0

    # Only the current stage can hold live pending entries; a rejected
    # expense keeps its untouched peers pending but nobody is waiting on them.
    waiting = []
    if expense.status == ExpenseStatus.PENDING:
        waiting = [
            PendingApprover(approver_id=e.approver_id, role=e.role, due_date=e.due_date)
            for e in current_stage(flow)
            if e.decision_state == DecisionState.PENDING
        ]

    return ApprovalProgress(
        expense_id=expense.expense_id,
        status=expense.status,
        current_stage=expense.current_stage_index + 1,
        total_entries=total,
        completed_entries=completed,
        percentage=percentage,
        current_approvers=waiting,
    )
