"""
Approval flow errors.

All of these are local, synchronous failures. The engine never retries and
never leaves a half-applied transition behind when it raises one.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Stable codes for client handling."""
    NO_APPROVERS_CONFIGURED = "NO_APPROVERS_CONFIGURED"
    ALREADY_FINALIZED = "ALREADY_FINALIZED"
    NOT_AN_ACTIVE_APPROVER = "NOT_AN_ACTIVE_APPROVER"
    INVALID_DECISION = "INVALID_DECISION"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"


class ApprovalFlowError(Exception):
    """Base exception with structured error info."""

    code: ErrorCode

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error": self.code.value,
            "message": self.message,
        }
        if self.context:
            result["context"] = self.context
        return result


class NoApproversConfigured(ApprovalFlowError):
    """A stage role resolved to zero active users."""
    code = ErrorCode.NO_APPROVERS_CONFIGURED

    def __init__(self, company_id: str, role: str):
        super().__init__(
            f"No active {role} approvers configured for company {company_id}",
            {"company_id": company_id, "role": role},
        )


class AlreadyFinalized(ApprovalFlowError):
    """The expense is past the point where this call can change it."""
    code = ErrorCode.ALREADY_FINALIZED

    def __init__(self, expense_id: str, status: str):
        super().__init__(
            f"Expense {expense_id} was already processed (status: {status})",
            {"expense_id": expense_id, "status": status},
        )


class NotAnActiveApprover(ApprovalFlowError):
    """The caller holds no pending entry in the current stage."""
    code = ErrorCode.NOT_AN_ACTIVE_APPROVER

    def __init__(self, expense_id: str, approver_id: str):
        super().__init__(
            f"User {approver_id} has no pending approval on expense {expense_id}",
            {"expense_id": expense_id, "approver_id": approver_id},
        )


class InvalidDecision(ApprovalFlowError):
    code = ErrorCode.INVALID_DECISION

    def __init__(self, decision: Any):
        super().__init__(
            f"Decision must be 'approved' or 'rejected', got {decision!r}",
            {"decision": str(decision)},
        )


class ConcurrentModification(ApprovalFlowError):
    """Another writer saved the expense since it was loaded."""
    code = ErrorCode.CONCURRENT_MODIFICATION

    def __init__(self, expense_id: str, expected_version: int):
        super().__init__(
            f"Expense {expense_id} changed since version {expected_version}",
            {"expense_id": expense_id, "expected_version": expected_version},
        )
