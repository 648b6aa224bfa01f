"""
Where approver rosters come from. The engine only sees the protocol; the
service layer hands it a snapshot built from the users collection.
"""
from typing import Dict, Iterable, Mapping, Optional, Protocol, Set
from approval_flow.models.user import User, UserRole, APPROVER_ROLES

class ApproverDirectory(Protocol):
    """Resolves the active users holding a role in a company."""

    def resolve_approvers(self, company_id: str, role: UserRole) -> Set[str]:
        ...

class StaticApproverDirectory:
    """
    In-memory directory. The service layer builds one per call from the
    users collection so the engine itself never touches the database.
    """

    def __init__(self, approvers: Optional[Mapping[str, Mapping[UserRole, Iterable[str]]]] = None):
        self._approvers: Dict[str, Dict[UserRole, Set[str]]] = {}
        for company_id, by_role in (approvers or {}).items():
            for role, user_ids in by_role.items():
                for user_id in user_ids:
                    self.add(company_id, UserRole(role), user_id)

    @classmethod
    def from_users(cls, users: Iterable[User]) -> "StaticApproverDirectory":
        directory = cls()
        for user in users:
            if user.is_active and user.role in APPROVER_ROLES:
                directory.add(user.company_id, user.role, user.user_id)
        return directory

    def add(self, company_id: str, role: UserRole, user_id: str) -> None:
        self._approvers.setdefault(company_id, {}).setdefault(role, set()).add(user_id)

    def resolve_approvers(self, company_id: str, role: UserRole) -> Set[str]:
        # copy so callers cannot mutate the snapshot
        return set(self._approvers.get(company_id, {}).get(role, set()))
