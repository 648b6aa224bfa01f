import argparse
import asyncio
from approval_flow.database import db
from approval_flow.models.config import ApprovalFlowConfig

async def configure_company(company_id: str, flow: ApprovalFlowConfig):
    print(f"Configuring company: {company_id}")

    await db.config.collection.update_one(
        {"company_id": company_id},
        {"$set": {"company_id": company_id, "approval_flow": flow.to_mongo()}},
        upsert=True
    )
    print(f"Approval flow set to {[r.value for r in flow.stage_roles]}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Configure a company's expense approval flow")
    parser.add_argument("--company", type=str, required=True, help="Company ID to configure")
    parser.add_argument("--stages", type=str, default="manager", help="Comma-separated roles, in order")
    parser.add_argument("--percentage", type=int, default=60, help="Consensus percentage per stage")
    parser.add_argument("--auto-approve", type=float, default=50.0, help="Auto-approve threshold")
    args = parser.parse_args()

    # Validates roles, percentage and threshold before touching the database
    flow = ApprovalFlowConfig(
        stage_roles=[s.strip() for s in args.stages.split(",") if s.strip()],
        consensus_percentage=args.percentage,
        auto_approve_threshold=args.auto_approve,
    )

    db.connect()
    try:
        asyncio.run(configure_company(args.company, flow))
    finally:
        db.close()
