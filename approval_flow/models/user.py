from enum import Enum
from typing import Optional
from pydantic import Field
from approval_flow.models.base import MongoModel

class UserRole(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    FINANCE = "finance"
    ADMIN = "admin"

# Roles allowed to sit in an approval stage
APPROVER_ROLES = frozenset({UserRole.MANAGER, UserRole.FINANCE, UserRole.ADMIN})

class User(MongoModel):
    user_id: str = Field(..., description="Stable user identifier")
    company_id: str
    name: str
    email: Optional[str] = None
    role: UserRole = UserRole.EMPLOYEE
    is_active: bool = True
