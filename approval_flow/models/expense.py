from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from pydantic import Field
from approval_flow.models.base import MongoModel
from approval_flow.models.approval import ApprovalStageEntry, DecisionState, current_stage
from approval_flow.models.user import UserRole

class ExpenseStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"
    CANCELLED = "cancelled"

TERMINAL_STATUSES = frozenset({ExpenseStatus.APPROVED, ExpenseStatus.REJECTED})

class AuditAction(str, Enum):
    SUBMITTED_FOR_APPROVAL = "submitted_for_approval"
    APPROVED_BY_APPROVER = "approved_by_approver"
    REJECTED_BY_APPROVER = "rejected_by_approver"
    MOVED_TO_NEXT_STAGE = "moved_to_next_stage"
    EXPENSE_APPROVED = "expense_approved"
    EXPENSE_REJECTED = "expense_rejected"

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class AuditEntry(MongoModel):
    """Append-only record of a decision or transition on an expense."""
    action: AuditAction
    actor_id: str
    comment: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)

class Expense(MongoModel):
    """
    Expense aggregate. The approval engine owns `status`, `stage_roles`,
    `approval_flow`, `current_stage_index` and `audit_log`; everything else
    is read-only to it.
    """
    expense_id: str = Field(..., description="Business key (EXP-YYYY-XXX)")
    company_id: str
    submitted_by: str

    # Amounts (converted_amount is in company currency)
    amount: float = Field(..., gt=0)
    currency: str = "USD"
    converted_amount: float = Field(..., ge=0)

    title: Optional[str] = None
    category: Optional[str] = None

    status: ExpenseStatus = ExpenseStatus.DRAFT
    # Stage order fixed at submission; later config edits do not reroute it
    stage_roles: List[UserRole] = Field(default_factory=list)
    approval_flow: List[ApprovalStageEntry] = Field(default_factory=list)
    current_stage_index: int = Field(0, ge=0)
    audit_log: List[AuditEntry] = Field(default_factory=list)

    # Optimistic concurrency counter, bumped on every save
    version: int = 0

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def current_stage_entries(self) -> List[ApprovalStageEntry]:
        return current_stage(self.approval_flow)

    def pending_entries(self) -> List[ApprovalStageEntry]:
        """
        Open slots of the current stage. Entries left pending in a stage that
        already closed are history, not work.
        """
        return [e for e in self.current_stage_entries() if e.decision_state == DecisionState.PENDING]

    def find_pending_entry(self, approver_id: str) -> Optional[ApprovalStageEntry]:
        for entry in self.pending_entries():
            if entry.approver_id == approver_id:
                return entry
        return None
