from approval_flow.models.base import MongoModel
from approval_flow.models.user import User, UserRole, APPROVER_ROLES
from approval_flow.models.approval import ApprovalStageEntry, DecisionState, DECISIONS
from approval_flow.models.expense import Expense, ExpenseStatus, AuditEntry, AuditAction, TERMINAL_STATUSES
from approval_flow.models.config import ApprovalFlowConfig, CompanyConfig
