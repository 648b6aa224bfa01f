import argparse
import logging

from approval_flow.engine import ApprovalFlowEngine, ApprovalFlowError, StaticApproverDirectory, approval_progress
from approval_flow.models import ApprovalFlowConfig, Expense, UserRole

COMPANY = "acme_corp"

SCENARIOS = {
    # name: (config, managers, amount, decisions)
    "single": (
        ApprovalFlowConfig(stage_roles=[UserRole.MANAGER], consensus_percentage=100, auto_approve_threshold=50),
        ["m1"], 200.0, [("m1", "approved")],
    ),
    "consensus": (
        ApprovalFlowConfig(stage_roles=[UserRole.MANAGER], consensus_percentage=60, auto_approve_threshold=50),
        ["m1", "m2"], 200.0, [("m1", "approved"), ("m2", "approved")],
    ),
    "rejected": (
        ApprovalFlowConfig(stage_roles=[UserRole.MANAGER], consensus_percentage=60, auto_approve_threshold=50),
        ["m1", "m2"], 200.0, [("m1", "approved"), ("m2", "rejected")],
    ),
    "multi-stage": (
        ApprovalFlowConfig(stage_roles=[UserRole.MANAGER, UserRole.FINANCE], auto_approve_threshold=50),
        ["m1", "m2"], 900.0, [("m1", "approved"), ("m2", "approved"), ("f1", "approved")],
    ),
    "auto": (
        ApprovalFlowConfig(stage_roles=[UserRole.MANAGER, UserRole.FINANCE], auto_approve_threshold=50),
        ["m1"], 10.0, [],
    ),
}

def run_scenario(name: str):
    print(f"--- Running Scenario: {name} ---")
    config, managers, amount, decisions = SCENARIOS[name]
    directory = StaticApproverDirectory({
        COMPANY: {UserRole.MANAGER: managers, UserRole.FINANCE: ["f1"]},
    })
    engine = ApprovalFlowEngine()
    expense = Expense(
        expense_id=f"EXP-DEMO-{name}", company_id=COMPANY, submitted_by="e1",
        amount=amount, converted_amount=amount,
    )

    engine.initialize(expense, config, directory)
    print(f"Submitted: {expense.status.value}")
    for approver_id, decision in decisions:
        try:
            engine.record_decision(expense, approver_id, decision, config, directory)
        except ApprovalFlowError as e:
            print(f"  {approver_id} {decision}: refused ({e.code.value})")
            continue
        print(f"  {approver_id} {decision}: {expense.status.value}")

    progress = approval_progress(expense)
    print(f"Result Status: {progress.status.value} ({progress.completed_entries}/{progress.total_entries} decided)")
    for entry in expense.audit_log:
        print(f"  [{entry.action.value}] {entry.actor_id}: {entry.comment or ''}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Walk expenses through the approval engine in memory")
    parser.add_argument("--scenario", type=str, default="all", help=f"One of {', '.join(SCENARIOS)} or all")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)
    names = list(SCENARIOS) if args.scenario == "all" else [args.scenario]
    for scenario in names:
        run_scenario(scenario)
