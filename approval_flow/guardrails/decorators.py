from fastapi import Depends, HTTPException
from approval_flow.api.auth import get_current_user
from approval_flow.database import Database, get_db
from approval_flow.guardrails.permissions import Permission, ROLE_PERMISSIONS, check_permission
from approval_flow.models.user import User

class ExpensePermission:
    """
    Route dependency: loads the expense named by the `expense_id` path
    parameter and checks the caller's capabilities on it before the handler
    (and the engine) runs.
    """
    def __init__(self, permission: Permission):
        self.permission = permission

    async def __call__(
        self,
        expense_id: str,
        current_user: User = Depends(get_current_user),
        database: Database = Depends(get_db),
    ) -> User:
        expense = await database.expenses.get_by_expense_id(expense_id)
        if expense is None:
            raise HTTPException(status_code=404, detail="Expense not found")
        if not check_permission(current_user, expense, self.permission):
            raise HTTPException(
                status_code=403,
                detail=f"Permission denied: {self.permission.value} required"
            )
        return current_user

def require_permission(permission: Permission):
    """
    Dependency to check a static role permission. Stage membership is left
    to the engine so its own errors reach the caller.
    """
    def check(current_user: User = Depends(get_current_user)) -> User:
        if permission not in ROLE_PERMISSIONS.get(current_user.role, set()):
            raise HTTPException(
                status_code=403,
                detail=f"Permission denied: {permission.value} required"
            )
        return current_user
    return check
