from typing import Optional
from approval_flow.engine.directory import StaticApproverDirectory
from approval_flow.models.user import User, APPROVER_ROLES
from approval_flow.repositories.base import BaseRepository

class UserRepository(BaseRepository[User]):

    async def get_by_user_id(self, user_id: str) -> Optional[User]:
        return await self.get_by_field("user_id", user_id)

    async def build_directory(self, company_id: str) -> StaticApproverDirectory:
        """Snapshot of the company's active approvers, grouped by role."""
        cursor = self.collection.find({
            "company_id": company_id,
            "is_active": True,
            "role": {"$in": [role.value for role in APPROVER_ROLES]},
        })
        docs = await cursor.to_list(length=None)
        return StaticApproverDirectory.from_users(User.from_mongo(doc) for doc in docs)
