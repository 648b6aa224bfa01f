"""
Approval flow state machine.

`initialize` decides at submission time whether an expense is auto-approved
or enters the first approval stage. `record_decision` applies one approver's
decision, evaluates the stage consensus and moves the expense forward.

Both calls are synchronous and do no I/O: approver lookups go through the
injected directory and persistence is left to the caller. Callers must
serialise `record_decision` per expense (lock, transaction or version check).
"""
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Union

from approval_flow.engine.directory import ApproverDirectory
from approval_flow.engine.errors import (
    AlreadyFinalized,
    InvalidDecision,
    NoApproversConfigured,
    NotAnActiveApprover,
)
from approval_flow.engine.stages import StageTally, next_stage_role, required_approvals, stage_roster, tally
from approval_flow.models.approval import ApprovalStageEntry, DecisionState, DECISIONS
from approval_flow.models.config import ApprovalFlowConfig
from approval_flow.models.expense import AuditAction, AuditEntry, Expense, ExpenseStatus, utcnow
from approval_flow.models.user import UserRole

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"
AUTO_APPROVED_COMMENT = "Auto-approved (below threshold)"


class StageOutcome(str, Enum):
    REJECTED = "rejected"
    ADVANCED = "advanced"
    APPROVED = "approved"
    INSUFFICIENT = "insufficient"
    OPEN = "open"


class ApprovalFlowEngine:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utcnow

    def initialize(self, expense: Expense, config: ApprovalFlowConfig,
                   directory: ApproverDirectory) -> Expense:
        """
        Build the approval flow for a freshly submitted expense.

        Amounts at or below the auto-approve threshold get every configured
        stage resolved and marked approved so reporting sees a complete flow.
        Everything else gets a pending roster for the first stage only.
        """
        if expense.approval_flow or expense.status not in (ExpenseStatus.DRAFT, ExpenseStatus.PENDING):
            raise AlreadyFinalized(expense.expense_id, expense.status.value)

        now = self._clock()

        if expense.converted_amount <= config.auto_approve_threshold:
            # Resolve everything first so a missing role leaves the expense untouched
            rosters = [
                (role, self._resolve(expense.company_id, role, directory))
                for role in config.stage_roles
            ]
            flow: List[ApprovalStageEntry] = []
            for role, approvers in rosters:
                for entry in self._new_entries(role, approvers, now, config):
                    entry.decision_state = DecisionState.APPROVED
                    entry.comment = AUTO_APPROVED_COMMENT
                    entry.decided_at = now
                    flow.append(entry)

            expense.stage_roles = list(config.stage_roles)
            expense.approval_flow = flow
            expense.current_stage_index = len(config.stage_roles) - 1
            expense.status = ExpenseStatus.APPROVED
            self._audit(expense, AuditAction.EXPENSE_APPROVED, SYSTEM_ACTOR,
                        "auto-approved (below threshold)", now)
            logger.info(
                f"Expense {expense.expense_id} auto-approved "
                f"(amount: {expense.converted_amount} <= {config.auto_approve_threshold})"
            )
            return expense

        first_role = config.stage_roles[0]
        approvers = self._resolve(expense.company_id, first_role, directory)

        expense.stage_roles = list(config.stage_roles)
        expense.approval_flow = self._new_entries(first_role, approvers, now, config)
        expense.current_stage_index = 0
        expense.status = ExpenseStatus.PENDING
        self._audit(expense, AuditAction.SUBMITTED_FOR_APPROVAL, expense.submitted_by,
                    f"Awaiting {first_role.value} approval", now)
        logger.info(f"Expense {expense.expense_id} sent to {len(approvers)} {first_role.value} approver(s)")
        return expense

    def record_decision(self, expense: Expense, approver_id: str,
                        decision: Union[DecisionState, str],
                        config: ApprovalFlowConfig, directory: ApproverDirectory,
                        comment: Optional[str] = None) -> Expense:
        """
        Apply one approver's decision and evaluate the current stage.
        Only a pending entry in the current stage may decide; the stage order
        comes from `expense.stage_roles`, fixed when the flow was initialised.

        Rules, in order: any rejection rejects the expense; reaching the
        consensus threshold advances to the next stage (or approves when none
        is left); a fully decided stage short of the threshold is rejected;
        otherwise the stage stays open.
        """
        decision = self._coerce_decision(decision)

        if expense.status != ExpenseStatus.PENDING:
            raise AlreadyFinalized(expense.expense_id, expense.status.value)

        entry = expense.find_pending_entry(approver_id)
        if entry is None:
            raise NotAnActiveApprover(expense.expense_id, approver_id)

        role = entry.role
        roster = stage_roster(expense.approval_flow, role)
        projected = self._project(tally(role, roster), decision)
        needed = required_approvals(projected.size, config.percentage_for(role))

        logger.debug(
            f"Stage {role.value} on {expense.expense_id}: {projected.approved}/{needed} approved, "
            f"{projected.rejected} rejected, {projected.pending} pending"
        )

        next_role: Optional[UserRole] = None
        next_approvers = set()
        if projected.rejected > 0:
            outcome = StageOutcome.REJECTED
        elif projected.approved >= needed:
            next_role = next_stage_role(expense.stage_roles, role)
            if next_role is not None:
                # Looked up before any write so a failure leaves the aggregate as it was
                next_approvers = self._resolve(expense.company_id, next_role, directory)
                outcome = StageOutcome.ADVANCED
            else:
                outcome = StageOutcome.APPROVED
        elif projected.pending == 0:
            outcome = StageOutcome.INSUFFICIENT
        else:
            outcome = StageOutcome.OPEN

        now = self._clock()
        entry.decision_state = decision
        entry.comment = comment
        entry.decided_at = now
        raw_action = (AuditAction.APPROVED_BY_APPROVER if decision == DecisionState.APPROVED
                      else AuditAction.REJECTED_BY_APPROVER)
        self._audit(expense, raw_action, approver_id, comment, now)

        if outcome == StageOutcome.REJECTED:
            # Untouched peers stay pending: the record shows who never got to act
            expense.status = ExpenseStatus.REJECTED
            self._audit(expense, AuditAction.EXPENSE_REJECTED, approver_id,
                        f"rejected by {role.value} stage ({projected.rejected} rejection(s))", now)
            logger.info(f"Expense {expense.expense_id} rejected by {role.value} stage")

        elif outcome == StageOutcome.ADVANCED:
            expense.approval_flow.extend(self._new_entries(next_role, next_approvers, now, config))
            expense.current_stage_index = expense.stage_roles.index(next_role)
            self._audit(expense, AuditAction.MOVED_TO_NEXT_STAGE, approver_id,
                        f"moved from {role.value} to {next_role.value} stage", now)
            logger.info(f"Expense {expense.expense_id} moved to {next_role.value} approval stage")

        elif outcome == StageOutcome.APPROVED:
            expense.status = ExpenseStatus.APPROVED
            self._audit(expense, AuditAction.EXPENSE_APPROVED, approver_id, "fully approved", now)
            logger.info(f"Expense {expense.expense_id} fully approved")

        elif outcome == StageOutcome.INSUFFICIENT:
            expense.status = ExpenseStatus.REJECTED
            self._audit(expense, AuditAction.EXPENSE_REJECTED, approver_id,
                        "rejected (insufficient approvals for stage)", now)
            logger.warning(f"Expense {expense.expense_id} rejected: insufficient approvals for {role.value} stage")

        logger.info(f"Decision recorded on {expense.expense_id} by {approver_id}: {decision.value}")
        return expense

    def _resolve(self, company_id: str, role: UserRole, directory: ApproverDirectory) -> List[str]:
        approvers = directory.resolve_approvers(company_id, role)
        if not approvers:
            logger.error(f"No active {role.value} approvers for company {company_id}")
            raise NoApproversConfigured(company_id, role.value)
        return sorted(approvers)

    def _new_entries(self, role: UserRole, approvers, now: datetime,
                     config: ApprovalFlowConfig) -> List[ApprovalStageEntry]:
        due = now + timedelta(days=config.approval_sla_days)
        return [
            ApprovalStageEntry(approver_id=approver_id, role=role, due_date=due)
            for approver_id in approvers
        ]

    @staticmethod
    def _project(current: StageTally, decision: DecisionState) -> StageTally:
        """Tally as it will look once the decision is applied."""
        return StageTally(
            role=current.role,
            approved=current.approved + int(decision == DecisionState.APPROVED),
            rejected=current.rejected + int(decision == DecisionState.REJECTED),
            pending=current.pending - 1,
            skipped=current.skipped,
        )

    @staticmethod
    def _coerce_decision(decision: Union[DecisionState, str]) -> DecisionState:
        try:
            value = DecisionState(decision)
        except ValueError:
            raise InvalidDecision(decision)
        if value not in DECISIONS:
            raise InvalidDecision(decision)
        return value

    @staticmethod
    def _audit(expense: Expense, action: AuditAction, actor_id: str,
               comment: Optional[str], now: datetime) -> None:
        expense.audit_log.append(
            AuditEntry(action=action, actor_id=actor_id, comment=comment, timestamp=now)
        )


approval_engine = ApprovalFlowEngine()
