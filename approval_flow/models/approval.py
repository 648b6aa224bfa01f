from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence
from pydantic import Field
from approval_flow.models.base import MongoModel
from approval_flow.models.user import UserRole

class DecisionState(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SKIPPED = "skipped"

# What an approver may submit
DECISIONS = frozenset({DecisionState.APPROVED, DecisionState.REJECTED})

class ApprovalStageEntry(MongoModel):
    """
    One approver's slot in the approval flow.
    All entries sharing a role form one stage.
    """
    approver_id: str = Field(..., description="User asked to decide")
    role: UserRole = Field(..., description="Stage this entry belongs to")
    decision_state: DecisionState = DecisionState.PENDING
    comment: Optional[str] = None
    decided_at: Optional[datetime] = None
    due_date: datetime

    @property
    def is_pending(self) -> bool:
        return self.decision_state == DecisionState.PENDING

def current_stage_role(flow: Sequence[ApprovalStageEntry]) -> Optional[UserRole]:
    """Stages are appended one at a time, so the last entry's role is the open stage."""
    if not flow:
        return None
    return flow[-1].role

def current_stage(flow: Sequence[ApprovalStageEntry]) -> List[ApprovalStageEntry]:
    role = current_stage_role(flow)
    if role is None:
        return []
    return [entry for entry in flow if entry.role == role]
