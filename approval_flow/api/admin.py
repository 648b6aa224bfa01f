from fastapi import APIRouter, Depends, HTTPException, Body

from approval_flow.database import Database, get_db
from approval_flow.guardrails.decorators import require_permission
from approval_flow.guardrails.permissions import Permission
from approval_flow.models.config import ApprovalFlowConfig
from approval_flow.models.user import User

router = APIRouter(prefix="/api/admin", tags=["Admin"])

@router.get("/approval-flow", response_model=ApprovalFlowConfig)
async def get_approval_flow(
    current_user: User = Depends(require_permission(Permission.CONFIGURE_APPROVAL_FLOW)),
    database: Database = Depends(get_db),
):
    return await database.config.get_approval_config(current_user.company_id)

@router.put("/approval-flow", response_model=ApprovalFlowConfig)
async def update_approval_flow(
    approval_flow: ApprovalFlowConfig = Body(...),
    current_user: User = Depends(require_permission(Permission.CONFIGURE_APPROVAL_FLOW)),
    database: Database = Depends(get_db),
):
    updated = await database.config.update_approval_config(current_user.company_id, approval_flow)
    if updated is None:
        raise HTTPException(status_code=404, detail="Company config not found")
    return updated
