"""
Caller side of the approval engine: load, lock, run the engine, persist, notify.

One asyncio.Lock per expense serialises decisions inside this process; the
version check in ExpenseRepository.save_approval_state catches writers in
other processes. Nothing is saved when the engine raises.
"""
import asyncio
import logging
import weakref
from typing import Optional, Union

from approval_flow.database import db
from approval_flow.engine.flow_engine import ApprovalFlowEngine, approval_engine
from approval_flow.engine.progress import ApprovalProgress, approval_progress
from approval_flow.models.approval import DecisionState
from approval_flow.models.expense import Expense
from approval_flow.tools.notification_tool import notification_tool

logger = logging.getLogger(__name__)


class ExpenseNotFound(LookupError):
    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"Expense {expense_id} not found")


class ApprovalService:
    def __init__(self, engine: Optional[ApprovalFlowEngine] = None):
        self.engine = engine or approval_engine
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, expense_id: str) -> asyncio.Lock:
        lock = self._locks.get(expense_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[expense_id] = lock
        return lock

    async def _load(self, expense_id: str) -> Expense:
        expense = await db.expenses.get_by_expense_id(expense_id)
        if expense is None:
            raise ExpenseNotFound(expense_id)
        return expense

    async def submit_expense(self, expense_id: str) -> Expense:
        """Start the approval flow for a submitted expense."""
        async with self._lock_for(expense_id):
            expense = await self._load(expense_id)
            config = await db.config.get_approval_config(expense.company_id)
            directory = await db.users.build_directory(expense.company_id)

            self.engine.initialize(expense, config, directory)
            await db.expenses.save_approval_state(expense)

        if expense.is_terminal:
            await notification_tool.notify_submitter(expense)
        else:
            await notification_tool.notify_approvers(expense, expense.pending_entries())

        logger.info(f"Expense {expense_id} submitted, status {expense.status.value}")
        return expense

    async def decide(self, expense_id: str, approver_id: str,
                     decision: Union[DecisionState, str], comment: Optional[str] = None) -> Expense:
        """Record an approver's decision and persist the resulting transition."""
        async with self._lock_for(expense_id):
            expense = await self._load(expense_id)
            config = await db.config.get_approval_config(expense.company_id)
            directory = await db.users.build_directory(expense.company_id)

            before = len(expense.approval_flow)
            self.engine.record_decision(expense, approver_id, decision, config, directory, comment)
            await db.expenses.save_approval_state(expense)

        new_entries = expense.approval_flow[before:]
        if new_entries:
            await notification_tool.notify_approvers(expense, new_entries)
        elif expense.is_terminal:
            await notification_tool.notify_submitter(expense)

        return expense

    async def progress(self, expense_id: str) -> ApprovalProgress:
        expense = await self._load(expense_id)
        return approval_progress(expense)

    async def pending_count(self, approver_id: str) -> int:
        return await db.expenses.count_pending_for_approver(approver_id)


approval_service = ApprovalService()
