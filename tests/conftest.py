import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from approval_flow.engine import ApprovalFlowEngine, StaticApproverDirectory
from approval_flow.models import ApprovalFlowConfig, Expense, UserRole

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)
COMPANY_ID = "acme"


@pytest.fixture
def engine():
    # Deterministic clock so due dates and decided_at can be asserted exactly
    return ApprovalFlowEngine(clock=lambda: FIXED_NOW)


@pytest.fixture
def directory():
    return StaticApproverDirectory({
        COMPANY_ID: {
            UserRole.MANAGER: ["m1", "m2"],
            UserRole.FINANCE: ["f1"],
            UserRole.ADMIN: ["a1"],
        }
    })


@pytest.fixture
def manager_config():
    return ApprovalFlowConfig(
        stage_roles=[UserRole.MANAGER],
        consensus_percentage=60,
        auto_approve_threshold=50,
    )


@pytest.fixture
def three_stage_config():
    return ApprovalFlowConfig(
        stage_roles=[UserRole.MANAGER, UserRole.FINANCE, UserRole.ADMIN],
        consensus_percentage=100,
        auto_approve_threshold=50,
    )


@pytest.fixture
def make_expense():
    def _make(amount=200.0, expense_id="EXP-2026-001", converted_amount=None, **kwargs):
        return Expense(
            expense_id=expense_id,
            company_id=COMPANY_ID,
            submitted_by="e1",
            amount=amount,
            converted_amount=amount if converted_amount is None else converted_amount,
            **kwargs,
        )
    return _make


@pytest.fixture
def mock_db():
    with patch("approval_flow.services.approval_service.db") as mock:
        mock.expenses = MagicMock()
        mock.users = MagicMock()
        mock.config = MagicMock()
        mock.expenses.get_by_expense_id = AsyncMock()
        mock.expenses.save_approval_state = AsyncMock(side_effect=lambda e: e)
        mock.expenses.count_pending_for_approver = AsyncMock(return_value=0)
        mock.users.build_directory = AsyncMock()
        mock.config.get_approval_config = AsyncMock()
        yield mock


@pytest.fixture
def mock_notifications():
    with patch("approval_flow.services.approval_service.notification_tool") as mock:
        mock.notify_approvers = AsyncMock()
        mock.notify_submitter = AsyncMock()
        yield mock
