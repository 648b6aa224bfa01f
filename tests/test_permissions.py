import sys
import os
sys.path.append(os.getcwd())
import pytest

from approval_flow.guardrails.permissions import Permission, can_decide, capabilities_for, check_permission
from approval_flow.models import ExpenseStatus, User, UserRole


def _user(user_id, role, company_id="acme", is_active=True):
    return User(user_id=user_id, company_id=company_id, name=user_id,
                email=f"{user_id}@acme.test", role=role, is_active=is_active)


@pytest.fixture
def pending_expense(engine, directory, manager_config, make_expense):
    expense = make_expense(amount=200.0)
    engine.initialize(expense, manager_config, directory)
    return expense


def test_submitter_can_submit_own_draft(make_expense):
    caps = capabilities_for(_user("e1", UserRole.EMPLOYEE), make_expense())
    assert caps == {Permission.SUBMIT_EXPENSE, Permission.VIEW_EXPENSE}


def test_submitter_cannot_resubmit(pending_expense):
    caps = capabilities_for(_user("e1", UserRole.EMPLOYEE), pending_expense)
    assert Permission.SUBMIT_EXPENSE not in caps
    assert Permission.VIEW_EXPENSE in caps


def test_other_employee_sees_nothing(pending_expense):
    assert capabilities_for(_user("e2", UserRole.EMPLOYEE), pending_expense) == set()


def test_assigned_manager_can_decide(pending_expense):
    caps = capabilities_for(_user("m1", UserRole.MANAGER), pending_expense)
    assert Permission.DECIDE_EXPENSE in caps
    assert Permission.VIEW_EXPENSE in caps


def test_manager_loses_decide_after_deciding(engine, directory, manager_config, pending_expense):
    engine.record_decision(pending_expense, "m1", "approved", manager_config, directory)
    caps = capabilities_for(_user("m1", UserRole.MANAGER), pending_expense)
    assert Permission.DECIDE_EXPENSE not in caps
    assert Permission.VIEW_EXPENSE in caps


def test_unassigned_manager_cannot_view(pending_expense):
    assert capabilities_for(_user("m9", UserRole.MANAGER), pending_expense) == set()


def test_finance_views_all_but_decides_only_own_stage(pending_expense):
    caps = capabilities_for(_user("f1", UserRole.FINANCE), pending_expense)
    assert Permission.VIEW_EXPENSE in caps
    assert Permission.VIEW_ALL_EXPENSES in caps
    assert Permission.DECIDE_EXPENSE not in caps


def test_admin_configures(pending_expense):
    caps = capabilities_for(_user("a1", UserRole.ADMIN), pending_expense)
    assert Permission.CONFIGURE_APPROVAL_FLOW in caps
    assert Permission.DECIDE_EXPENSE not in caps


def test_other_company_and_inactive_users_get_nothing(pending_expense):
    assert capabilities_for(_user("m1", UserRole.MANAGER, company_id="globex"), pending_expense) == set()
    assert capabilities_for(_user("m1", UserRole.MANAGER, is_active=False), pending_expense) == set()


def test_no_decide_once_finalized(engine, directory, manager_config, pending_expense):
    engine.record_decision(pending_expense, "m1", "rejected", manager_config, directory)
    caps = capabilities_for(_user("m2", UserRole.MANAGER), pending_expense)
    assert pending_expense.status == ExpenseStatus.REJECTED
    assert Permission.DECIDE_EXPENSE not in caps


def test_check_permission(pending_expense):
    assert check_permission(_user("m2", UserRole.MANAGER), pending_expense, Permission.DECIDE_EXPENSE)
    assert not check_permission(_user("e2", UserRole.EMPLOYEE), pending_expense, Permission.VIEW_EXPENSE)


def test_can_decide(pending_expense):
    assert can_decide(_user("m1", UserRole.MANAGER), pending_expense)
    assert not can_decide(_user("f1", UserRole.FINANCE), pending_expense)


def test_leftover_slot_in_closed_stage_grants_no_decision(engine, make_expense):
    from approval_flow.engine import StaticApproverDirectory
    from approval_flow.models import ApprovalFlowConfig
    config = ApprovalFlowConfig(stage_roles=[UserRole.MANAGER, UserRole.FINANCE], consensus_percentage=60)
    directory = StaticApproverDirectory({"acme": {UserRole.MANAGER: ["m1", "m2", "m3"], UserRole.FINANCE: ["f1"]}})
    expense = make_expense(amount=900.0)
    engine.initialize(expense, config, directory)
    engine.record_decision(expense, "m1", "approved", config, directory)
    engine.record_decision(expense, "m3", "approved", config, directory)

    caps = capabilities_for(_user("m2", UserRole.MANAGER), expense)

    # still assigned, so still allowed to look
    assert Permission.VIEW_EXPENSE in caps
    assert Permission.DECIDE_EXPENSE not in caps
    assert can_decide(_user("f1", UserRole.FINANCE), expense)
