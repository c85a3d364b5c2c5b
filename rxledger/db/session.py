import logging

from rxledger.core.config import settings
from rxledger.db.mongo import connect_to_mongo
from rxledger.db.store import BalanceStore, MemoryBalanceStore
from rxledger.models.ledger import RatioTable
from rxledger.repositories.ledger_repo import LedgerRepository
from rxledger.services.ledger_service import LedgerService
from rxledger.services.ratio_service import load_ratio_file

logger = logging.getLogger(__name__)


class LedgerContext:
    """Store connection and ratio table for the running application."""

    store: BalanceStore = None
    ratios: RatioTable = None

ledger_context = LedgerContext()


async def open_ledger():
    """Load the ratio table, connect the store and initialize empty totals."""
    ledger_context.ratios = load_ratio_file(settings.RATIO_FILE)

    if settings.STORE_BACKEND == "memory":
        ledger_context.store = MemoryBalanceStore()
        logger.info("Using in-memory ledger store")
    else:
        ledger_context.store = await connect_to_mongo(
            settings.MONGODB_URL,
            settings.DATABASE_NAME,
            settings.LEDGER_COLLECTION,
            use_transactions=settings.MONGODB_USE_TRANSACTIONS
        )

    if await LedgerRepository(ledger_context.store).initialize(ledger_context.ratios):
        logger.info("Initialized zero totals for %d users", len(ledger_context.ratios.ratios))


async def close_ledger():
    if ledger_context.store is not None:
        await ledger_context.store.close()
    ledger_context.store = None
    ledger_context.ratios = None


def get_store() -> BalanceStore:
    return ledger_context.store


def get_ratios() -> RatioTable:
    return ledger_context.ratios


def get_ledger_service() -> LedgerService:
    """Return a service bound to the active store and ratio table."""
    return LedgerService(get_store(), get_ratios())
