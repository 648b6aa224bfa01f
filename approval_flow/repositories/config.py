import logging
from typing import Optional
from approval_flow.config import settings
from approval_flow.models.config import ApprovalFlowConfig, CompanyConfig
from approval_flow.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

class ConfigRepository(BaseRepository[CompanyConfig]):
    async def get_by_company_id(self, company_id: str) -> Optional[CompanyConfig]:
        doc = await self.collection.find_one({"company_id": company_id})
        return self.model_cls.from_mongo(doc) if doc else None

    async def get_approval_config(self, company_id: str) -> ApprovalFlowConfig:
        config = await self.get_by_company_id(company_id)
        if config is None:
            logger.warning(f"No config found for {company_id}, using default approval flow")
            return ApprovalFlowConfig(
                auto_approve_threshold=settings.DEFAULT_AUTO_APPROVE_LIMIT,
                consensus_percentage=settings.DEFAULT_CONSENSUS_PERCENTAGE,
                approval_sla_days=settings.APPROVAL_SLA_DAYS,
            )
        return config.approval_flow

    async def update_approval_config(self, company_id: str, approval_flow: ApprovalFlowConfig) -> Optional[ApprovalFlowConfig]:
        """
        Replace a company's approval flow. Expenses already in flight keep the
        stage order they were submitted under.
        """
        result = await self.collection.update_one(
            {"company_id": company_id},
            {"$set": {"approval_flow": approval_flow.to_mongo()}},
        )
        if result.matched_count == 0:
            return None
        logger.info(f"Approval flow for {company_id} set to {[r.value for r in approval_flow.stage_roles]}")
        return approval_flow
