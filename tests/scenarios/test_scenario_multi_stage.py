import sys
import os
sys.path.append(os.getcwd())
import pytest

from approval_flow.engine import NotAnActiveApprover, StaticApproverDirectory, approval_progress
from approval_flow.models import ApprovalFlowConfig, AuditAction, DecisionState, ExpenseStatus, UserRole
from approval_flow.services.approval_service import ApprovalService


@pytest.mark.asyncio
async def test_three_stage_expense_with_partial_manager_consensus(engine, mock_db, mock_notifications, make_expense):
    # Scenario: 3 managers at 60% (2 needed), then a single finance and a single admin approver
    directory = StaticApproverDirectory({
        "acme": {
            UserRole.MANAGER: ["m1", "m2", "m3"],
            UserRole.FINANCE: ["f1"],
            UserRole.ADMIN: ["a1"],
        }
    })
    config = ApprovalFlowConfig(
        stage_roles=[UserRole.MANAGER, UserRole.FINANCE, UserRole.ADMIN],
        consensus_percentage=60,
        auto_approve_threshold=50,
    )
    expense = make_expense(amount=1200.0, title="Conference travel")
    mock_db.expenses.get_by_expense_id.return_value = expense
    mock_db.users.build_directory.return_value = directory
    mock_db.config.get_approval_config.return_value = config
    service = ApprovalService(engine=engine)

    await service.submit_expense("EXP-2026-001")
    assert [e.approver_id for e in expense.pending_entries()] == ["m1", "m2", "m3"]

    await service.decide("EXP-2026-001", "m2", "approved")
    assert expense.current_stage_index == 0

    await service.decide("EXP-2026-001", "m3", "approved", "within budget")
    assert expense.current_stage_index == 1
    # m1 never acted; the stage closed without them
    assert expense.approval_flow[0].decision_state == DecisionState.PENDING

    progress = approval_progress(expense)
    assert progress.current_stage == 2
    assert [a.approver_id for a in progress.current_approvers] == ["f1"]

    # m1 still holds a pending slot in the closed manager stage; it is not a vote
    with pytest.raises(NotAnActiveApprover):
        await service.decide("EXP-2026-001", "m1", "rejected")
    assert expense.status == ExpenseStatus.PENDING
    assert mock_db.expenses.save_approval_state.await_count == 3

    # an admin reorders the company flow while the expense is with finance
    mock_db.config.get_approval_config.return_value = ApprovalFlowConfig(
        stage_roles=[UserRole.ADMIN, UserRole.FINANCE, UserRole.MANAGER],
        consensus_percentage=60,
    )

    await service.decide("EXP-2026-001", "f1", "approved")
    await service.decide("EXP-2026-001", "a1", "approved")

    assert expense.status == ExpenseStatus.APPROVED
    assert expense.current_stage_index == 2
    assert [a.action for a in expense.audit_log] == [
        AuditAction.SUBMITTED_FOR_APPROVAL,
        AuditAction.APPROVED_BY_APPROVER,
        AuditAction.APPROVED_BY_APPROVER,
        AuditAction.MOVED_TO_NEXT_STAGE,
        AuditAction.APPROVED_BY_APPROVER,
        AuditAction.MOVED_TO_NEXT_STAGE,
        AuditAction.APPROVED_BY_APPROVER,
        AuditAction.EXPENSE_APPROVED,
    ]
    mock_notifications.notify_submitter.assert_awaited_once_with(expense)
    assert mock_notifications.notify_approvers.await_count == 3
