from typing import Dict, List
from pydantic import Field, field_validator
from approval_flow.models.base import MongoModel
from approval_flow.models.user import UserRole, APPROVER_ROLES

class ApprovalFlowConfig(MongoModel):
    """
    Per-company approval settings. Read-only to the engine.
    """
    stage_roles: List[UserRole] = Field(
        default_factory=lambda: [UserRole.MANAGER],
        description="Ordered approval stages, one role per stage",
    )
    consensus_percentage: int = Field(60, ge=1, le=100, description="Share of a stage roster that must approve")
    role_percentages: Dict[UserRole, int] = Field(
        default_factory=dict,
        description="Per-role overrides of consensus_percentage",
    )
    auto_approve_threshold: float = Field(50.0, ge=0, description="Amounts at or below this skip review")
    approval_sla_days: int = Field(7, ge=1, description="Days an approver has to decide")

    @field_validator("stage_roles")
    @classmethod
    def validate_stage_roles(cls, v):
        if not v:
            raise ValueError("stage_roles must contain at least one role")
        if len(set(v)) != len(v):
            # stages are grouped by role, so a repeated role would merge two stages
            raise ValueError("stage_roles must not repeat a role")
        invalid = [r.value for r in v if r not in APPROVER_ROLES]
        if invalid:
            raise ValueError(f"roles cannot approve expenses: {invalid}")
        return v

    @field_validator("role_percentages")
    @classmethod
    def validate_role_percentages(cls, v):
        for role, pct in v.items():
            if not 1 <= pct <= 100:
                raise ValueError(f"percentage for {role.value} must be between 1 and 100")
        return v

    def percentage_for(self, role: UserRole) -> int:
        return self.role_percentages.get(role, self.consensus_percentage)

class CompanyConfig(MongoModel):
    """
    Multi-tenant configuration document.
    """
    company_id: str = Field(..., description="Unique Tenant ID")
    company_name: str

    base_currency: str = "USD"
    approval_flow: ApprovalFlowConfig = Field(default_factory=ApprovalFlowConfig)
