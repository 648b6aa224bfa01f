"""
Stage views over the flat approval flow.

The flow is stored as one ordered list for audit fidelity; a "stage" is the
set of entries sharing a role. Stages are appended one at a time, so the
role of the last entry is always the stage currently awaiting decisions.
`current_stage` lives with the models so the aggregate and the engine share
one definition.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from approval_flow.models.approval import ApprovalStageEntry, DecisionState, current_stage, current_stage_role
from approval_flow.models.user import UserRole


@dataclass(frozen=True)
class StageTally:
    role: UserRole
    approved: int
    rejected: int
    pending: int
    skipped: int = 0

    @property
    def size(self) -> int:
        return self.approved + self.rejected + self.pending + self.skipped


def required_approvals(roster_size: int, percentage: int) -> int:
    """ceil(roster_size * percentage / 100), never below one."""
    needed = -(-roster_size * percentage // 100)
    return max(1, needed)


def stage_roster(flow: Sequence[ApprovalStageEntry], role: UserRole) -> List[ApprovalStageEntry]:
    return [entry for entry in flow if entry.role == role]


def next_stage_role(stage_roles: Sequence[UserRole], role: UserRole) -> Optional[UserRole]:
    """Role of the stage after `role` in the order fixed at submission, None after the last."""
    position = list(stage_roles).index(role) + 1
    if position < len(stage_roles):
        return stage_roles[position]
    return None


def tally(role: UserRole, roster: Sequence[ApprovalStageEntry]) -> StageTally:
    counts = {state: 0 for state in DecisionState}
    for entry in roster:
        counts[entry.decision_state] += 1
    return StageTally(
        role=role,
        approved=counts[DecisionState.APPROVED],
        rejected=counts[DecisionState.REJECTED],
        pending=counts[DecisionState.PENDING],
        skipped=counts[DecisionState.SKIPPED],
    )
