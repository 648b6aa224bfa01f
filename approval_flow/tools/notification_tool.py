import logging
from typing import List, Optional

from approval_flow.models.approval import ApprovalStageEntry
from approval_flow.models.expense import Expense

logger = logging.getLogger(__name__)

class NotificationTool:
    """
    Dispatches approval notifications. Delivery itself (SMTP, chat) lives
    outside this service; here messages are only routed and logged.
    """

    async def send_notification(self, users: List[str], subject: str, message: str,
                                channels: Optional[List[str]] = None):
        for user in users:
            for channel in channels or ["email"]:
                if channel == "in_app":
                    await self._send_in_app(user, subject)
                elif channel == "email":
                    await self._send_email(user, subject, message)

    async def notify_approvers(self, expense: Expense, entries: List[ApprovalStageEntry]):
        """Ask newly assigned approvers for a decision."""
        if not entries:
            return
        approvers = [entry.approver_id for entry in entries]
        role = entries[0].role.value
        due = min(entry.due_date for entry in entries)
        await self.send_notification(
            approvers,
            f"Approval needed: expense {expense.expense_id}",
            f"{expense.converted_amount} awaiting {role} approval, due {due:%Y-%m-%d}",
            channels=["email", "in_app"],
        )

    async def notify_submitter(self, expense: Expense):
        """Tell the submitter their expense reached a terminal status."""
        await self.send_notification(
            [expense.submitted_by],
            f"Expense {expense.expense_id} {expense.status.value}",
            f"Your expense of {expense.amount} {expense.currency} was {expense.status.value}.",
        )

    async def _send_in_app(self, user: str, subject: str):
        logger.info(f"[IN_APP] To {user}: {subject}")

    async def _send_email(self, user: str, subject: str, body: str):
        logger.info(f"[EMAIL] To {user} | Subject: {subject}")

notification_tool = NotificationTool()
