import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from approval_flow.models import ApprovalFlowConfig, ApprovalStageEntry, CompanyConfig, Expense, ExpenseStatus, UserRole

def test_config_defaults():
    config = ApprovalFlowConfig()
    assert config.stage_roles == [UserRole.MANAGER]
    assert config.consensus_percentage == 60
    assert config.auto_approve_threshold == 50.0
    assert config.approval_sla_days == 7

def test_config_accepts_role_strings():
    config = ApprovalFlowConfig(stage_roles=["manager", "finance", "admin"])
    assert config.stage_roles == [UserRole.MANAGER, UserRole.FINANCE, UserRole.ADMIN]

@pytest.mark.parametrize("stage_roles", [[], ["manager", "manager"], ["employee"], ["cfo"]])
def test_config_rejects_bad_stage_roles(stage_roles):
    with pytest.raises(ValidationError):
        ApprovalFlowConfig(stage_roles=stage_roles)

@pytest.mark.parametrize("percentage", [0, 101, -5])
def test_config_rejects_out_of_range_percentage(percentage):
    with pytest.raises(ValidationError):
        ApprovalFlowConfig(consensus_percentage=percentage)

def test_config_rejects_out_of_range_role_percentage():
    with pytest.raises(ValidationError):
        ApprovalFlowConfig(role_percentages={"finance": 0})

def test_config_rejects_negative_threshold():
    with pytest.raises(ValidationError):
        ApprovalFlowConfig(auto_approve_threshold=-1)

def test_percentage_for_falls_back_to_global():
    config = ApprovalFlowConfig(consensus_percentage=60, role_percentages={"finance": 100})
    assert config.percentage_for(UserRole.FINANCE) == 100
    assert config.percentage_for(UserRole.MANAGER) == 60

def test_company_config_carries_default_flow():
    company = CompanyConfig(company_id="acme", company_name="Acme")
    assert company.approval_flow.stage_roles == [UserRole.MANAGER]

def test_expense_mongo_round_trip():
    expense = Expense(
        expense_id="EXP-1", company_id="acme", submitted_by="e1",
        amount=120.0, converted_amount=120.0,
    )
    doc = expense.to_mongo()
    assert "_id" not in doc
    assert doc["status"] == "draft"

    doc["_id"] = "65f0c0ffee0000000000abcd"
    loaded = Expense.from_mongo(doc)
    assert loaded.id == "65f0c0ffee0000000000abcd"
    assert loaded.status == ExpenseStatus.DRAFT

def test_from_mongo_empty_document():
    assert Expense.from_mongo(None) is None

def test_expense_amount_must_be_positive():
    with pytest.raises(ValidationError):
        Expense(expense_id="EXP-1", company_id="acme", submitted_by="e1", amount=0, converted_amount=0)

def test_pending_entries_are_scoped_to_current_stage():
    due = datetime(2026, 3, 9, tzinfo=timezone.utc)
    expense = Expense(
        expense_id="EXP-2", company_id="acme", submitted_by="e1",
        amount=900.0, converted_amount=900.0, status=ExpenseStatus.PENDING,
        stage_roles=["manager", "finance"], current_stage_index=1,
        approval_flow=[
            ApprovalStageEntry(approver_id="m1", role="manager", decision_state="approved", due_date=due),
            ApprovalStageEntry(approver_id="m2", role="manager", due_date=due),
            ApprovalStageEntry(approver_id="f1", role="finance", due_date=due),
        ],
    )

    assert [e.approver_id for e in expense.current_stage_entries()] == ["f1"]
    assert [e.approver_id for e in expense.pending_entries()] == ["f1"]
    assert expense.find_pending_entry("m2") is None
    assert expense.find_pending_entry("f1").role == UserRole.FINANCE
