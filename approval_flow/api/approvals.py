from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Body
from pydantic import BaseModel

from approval_flow.api.auth import get_current_user
from approval_flow.engine.errors import (
    AlreadyFinalized,
    ApprovalFlowError,
    ConcurrentModification,
    InvalidDecision,
    NoApproversConfigured,
    NotAnActiveApprover,
)
from approval_flow.engine.progress import ApprovalProgress
from approval_flow.guardrails.decorators import ExpensePermission, require_permission
from approval_flow.guardrails.permissions import Permission
from approval_flow.models.approval import DecisionState
from approval_flow.models.user import User
from approval_flow.services.approval_service import ExpenseNotFound, approval_service

router = APIRouter(prefix="/api/approvals", tags=["Approvals"])

ERROR_STATUS = {
    AlreadyFinalized: 400,
    NotAnActiveApprover: 403,
    NoApproversConfigured: 409,
    ConcurrentModification: 409,
    InvalidDecision: 422,
}

class DecisionRequest(BaseModel):
    decision: DecisionState
    comment: Optional[str] = None

class ApprovalResponse(BaseModel):
    message: str
    expense_id: str
    status: str
    current_stage_index: int

class PendingCountResponse(BaseModel):
    approver_id: str
    pending: int

def _to_http(error: ApprovalFlowError) -> HTTPException:
    status = ERROR_STATUS.get(type(error), 400)
    detail = error.to_dict()
    if isinstance(error, AlreadyFinalized):
        detail["message"] = "Expense not found or already processed"
    return HTTPException(status_code=status, detail=detail)

@router.post("/{expense_id}/submit", response_model=ApprovalResponse)
async def submit_expense(
    expense_id: str,
    current_user: User = Depends(ExpensePermission(Permission.SUBMIT_EXPENSE)),
):
    try:
        expense = await approval_service.submit_expense(expense_id)
    except ExpenseNotFound:
        raise HTTPException(status_code=404, detail="Expense not found")
    except ApprovalFlowError as e:
        raise _to_http(e)

    message = "Expense auto-approved" if expense.is_terminal else "Expense submitted for approval"
    return ApprovalResponse(
        message=message,
        expense_id=expense.expense_id,
        status=expense.status.value,
        current_stage_index=expense.current_stage_index,
    )

@router.post("/{expense_id}/decision", response_model=ApprovalResponse)
async def record_decision(
    expense_id: str,
    body: DecisionRequest = Body(...),
    current_user: User = Depends(require_permission(Permission.DECIDE_EXPENSE)),
):
    try:
        expense = await approval_service.decide(expense_id, current_user.user_id, body.decision, body.comment)
    except ExpenseNotFound:
        raise HTTPException(status_code=404, detail="Expense not found")
    except ApprovalFlowError as e:
        raise _to_http(e)

    return ApprovalResponse(
        message=f"Decision recorded: {body.decision.value}",
        expense_id=expense.expense_id,
        status=expense.status.value,
        current_stage_index=expense.current_stage_index,
    )

@router.get("/pending/count", response_model=PendingCountResponse)
async def pending_count(current_user: User = Depends(get_current_user)):
    count = await approval_service.pending_count(current_user.user_id)
    return PendingCountResponse(approver_id=current_user.user_id, pending=count)

@router.get("/{expense_id}/progress", response_model=ApprovalProgress)
async def get_progress(
    expense_id: str,
    current_user: User = Depends(ExpensePermission(Permission.VIEW_EXPENSE)),
):
    try:
        return await approval_service.progress(expense_id)
    except ExpenseNotFound:
        raise HTTPException(status_code=404, detail="Expense not found")
