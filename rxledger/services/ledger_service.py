import json
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from rxledger.db.store import BalanceStore
from rxledger.models.expense import ExpenseEntry, ExpenseRecord
from rxledger.models.ledger import Ledger, RatioTable
from rxledger.models.settlement import Transfer
from rxledger.repositories.ledger_repo import LedgerRepository
from rxledger.services.expense_service import ExpenseProcessor
from rxledger.services.settlement_service import SettlementEngine

logger = logging.getLogger(__name__)


class LedgerService:
    """Runs each ledger command as one read-compute-write cycle on the store."""

    def __init__(self, store: BalanceStore, ratios: RatioTable):
        self.store = store
        self.ratios = ratios
        self.repo = LedgerRepository(store)

    async def read_totals(self) -> Dict[str, Decimal]:
        """Running contribution per user."""
        totals = await self.repo.get_totals()
        return totals.total_breakdown

    async def settlement_plan(self) -> Tuple[Dict[str, Decimal], List[Transfer]]:
        """Current net balances and the transfers that settle them."""
        async with self.store.transaction():
            totals = await self.repo.get_totals()
        return totals.total_debt, SettlementEngine.settle(totals.total_debt)

    async def record_expense(self, entry: ExpenseEntry) -> ExpenseRecord:
        async with self.store.transaction():
            totals = await self.repo.get_totals()
            record, new_totals = ExpenseProcessor.apply(Ledger(ratios=self.ratios, totals=totals), entry)

            await self.repo.save_totals(new_totals)
            index = await self.repo.history.append(record)

        logger.info("Recorded expense #%d: %s %s %s", index, record.date, record.narration, record.amount)
        return record

    async def undo_last(self) -> Optional[ExpenseRecord]:
        """Remove the newest record and reverse it; None on empty history."""
        async with self.store.transaction():
            record = await self.repo.history.last_entry()
            if record is None:
                return None

            totals = await self.repo.get_totals()
            await self.repo.history.remove_last()
            await self.repo.save_totals(ExpenseProcessor.undo(totals, record))

        logger.info("Undid expense: %s %s", record.date, record.narration)
        return record

    async def peek_last(self) -> Optional[ExpenseRecord]:
        return await self.repo.history.last_entry()

    async def export_history(self) -> List[ExpenseRecord]:
        return await self.repo.history.entries()

    async def render_export(self, pretty: bool = False) -> str:
        """Serialize the whole history as a JSON array."""
        docs = [record.model_dump(mode="json") for record in await self.export_history()]
        if pretty:
            return json.dumps(docs, indent="\t")
        return json.dumps(docs, separators=(",", ":"))
