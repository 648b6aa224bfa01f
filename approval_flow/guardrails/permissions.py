from enum import Enum
from typing import Set
import logging
from approval_flow.models.expense import Expense, ExpenseStatus
from approval_flow.models.user import User, UserRole

logger = logging.getLogger(__name__)

class Permission(str, Enum):
    SUBMIT_EXPENSE = "SUBMIT_EXPENSE"
    VIEW_EXPENSE = "VIEW_EXPENSE"
    DECIDE_EXPENSE = "DECIDE_EXPENSE"
    VIEW_ALL_EXPENSES = "VIEW_ALL_EXPENSES"
    CONFIGURE_APPROVAL_FLOW = "CONFIGURE_APPROVAL_FLOW"

# Role -> static permissions
ROLE_PERMISSIONS = {
    UserRole.ADMIN: {p for p in Permission},
    UserRole.FINANCE: {
        Permission.SUBMIT_EXPENSE, Permission.VIEW_EXPENSE,
        Permission.DECIDE_EXPENSE, Permission.VIEW_ALL_EXPENSES,
    },
    UserRole.MANAGER: {
        Permission.SUBMIT_EXPENSE, Permission.VIEW_EXPENSE, Permission.DECIDE_EXPENSE,
    },
    UserRole.EMPLOYEE: {
        Permission.SUBMIT_EXPENSE, Permission.VIEW_EXPENSE,
    },
}

def capabilities_for(user: User, expense: Expense) -> Set[Permission]:
    """
    What `user` may do with `expense` right now.
    Pure: depends only on the user record and the expense aggregate.
    """
    if not user.is_active or user.company_id != expense.company_id:
        return set()

    allowed = ROLE_PERMISSIONS.get(user.role, set())
    caps: Set[Permission] = set()

    is_submitter = user.user_id == expense.submitted_by
    is_assigned = any(e.approver_id == user.user_id for e in expense.approval_flow)

    if is_submitter:
        caps.add(Permission.VIEW_EXPENSE)
        if expense.status == ExpenseStatus.DRAFT and Permission.SUBMIT_EXPENSE in allowed:
            caps.add(Permission.SUBMIT_EXPENSE)

    if is_assigned or Permission.VIEW_ALL_EXPENSES in allowed:
        caps.add(Permission.VIEW_EXPENSE)
    if Permission.VIEW_ALL_EXPENSES in allowed:
        caps.add(Permission.VIEW_ALL_EXPENSES)

    # Only a pending slot in the current stage of a pending expense can decide
    if (Permission.DECIDE_EXPENSE in allowed
            and expense.status == ExpenseStatus.PENDING
            and expense.find_pending_entry(user.user_id) is not None):
        caps.add(Permission.DECIDE_EXPENSE)

    if Permission.CONFIGURE_APPROVAL_FLOW in allowed:
        caps.add(Permission.CONFIGURE_APPROVAL_FLOW)

    return caps

def check_permission(user: User, expense: Expense, permission: Permission) -> bool:
    if permission in capabilities_for(user, expense):
        return True
    logger.warning(f"User {user.user_id} ({user.role.value}) denied {permission.value} on {expense.expense_id}")
    return False

def can_decide(user: User, expense: Expense) -> bool:
    return Permission.DECIDE_EXPENSE in capabilities_for(user, expense)
