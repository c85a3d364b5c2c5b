"""
LedgerRepository - persisted totals and expense history.

Key layout:
- totalBreakdown: running breakdown per user
- totalDebt: running net balance per user
- x:<index>: one expense record, index zero-padded so key order is log order
"""

from decimal import Decimal
from typing import Dict, List, Optional

from rxledger.db.store import BalanceStore
from rxledger.models.expense import ExpenseRecord
from rxledger.models.ledger import LedgerTotals, RatioTable

TOTAL_BREAKDOWN_KEY = "totalBreakdown"
TOTAL_DEBT_KEY = "totalDebt"
HISTORY_PREFIX = "x:"
SINGLETON_KEYS = 2


def _dump_amounts(amounts: Dict[str, Decimal]) -> Dict[str, str]:
    return {user: str(value) for user, value in amounts.items()}


def _load_amounts(doc: Optional[Dict[str, str]]) -> Dict[str, Decimal]:
    if not doc:
        return {}
    return {user: Decimal(value) for user, value in doc.items()}


class HistoryLog:
    """Ordered append-only log of expense records."""

    def __init__(self, store: BalanceStore):
        self.store = store

    @staticmethod
    def key_for(index: int) -> str:
        return f"{HISTORY_PREFIX}{index:010d}"

    async def count(self) -> int:
        """Number of records; the two totals precede the log in the store."""
        return max(0, await self.store.count() - SINGLETON_KEYS)

    async def append(self, record: ExpenseRecord) -> int:
        index = await self.count()
        await self.store.set(self.key_for(index), record.model_dump(mode="json"))
        return index

    async def last_entry(self) -> Optional[ExpenseRecord]:
        n = await self.count()
        if n == 0:
            return None
        doc = await self.store.get(self.key_for(n - 1))
        if doc is None:
            return None
        return ExpenseRecord.model_validate(doc)

    async def remove_last(self) -> Optional[ExpenseRecord]:
        record = await self.last_entry()
        if record is None:
            return None
        n = await self.count()
        await self.store.delete(self.key_for(n - 1))
        return record

    async def entries(self) -> List[ExpenseRecord]:
        docs = await self.store.enumerate(HISTORY_PREFIX)
        return [ExpenseRecord.model_validate(doc) for doc in docs]


class LedgerRepository:
    """Repository for the running totals and the history log."""

    def __init__(self, store: BalanceStore):
        self.store = store
        self.history = HistoryLog(store)

    async def initialize(self, ratios: RatioTable) -> bool:
        """
        Write zero totals for every ratio user on an empty store.

        Returns True when the store was initialized.
        """
        async with self.store.transaction():
            if await self.store.count() > 0:
                return False
            await self.save_totals(LedgerTotals.zero(ratios.users))
            return True

    async def get_totals(self) -> LedgerTotals:
        return LedgerTotals(
            total_breakdown=_load_amounts(await self.store.get(TOTAL_BREAKDOWN_KEY)),
            total_debt=_load_amounts(await self.store.get(TOTAL_DEBT_KEY))
        )

    async def save_totals(self, totals: LedgerTotals) -> None:
        await self.store.set(TOTAL_BREAKDOWN_KEY, _dump_amounts(totals.total_breakdown))
        await self.store.set(TOTAL_DEBT_KEY, _dump_amounts(totals.total_debt))
