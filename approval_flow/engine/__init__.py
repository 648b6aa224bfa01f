from approval_flow.engine.errors import (
    ApprovalFlowError,
    ErrorCode,
    NoApproversConfigured,
    AlreadyFinalized,
    NotAnActiveApprover,
    InvalidDecision,
    ConcurrentModification,
)
from approval_flow.engine.directory import ApproverDirectory, StaticApproverDirectory
from approval_flow.engine.stages import (
    StageTally,
    current_stage,
    current_stage_role,
    next_stage_role,
    required_approvals,
    stage_roster,
    tally,
)
from approval_flow.engine.flow_engine import ApprovalFlowEngine, approval_engine, SYSTEM_ACTOR, AUTO_APPROVED_COMMENT
from approval_flow.engine.progress import ApprovalProgress, approval_progress
