import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from rxledger.db.store import MemoryBalanceStore
from rxledger.models.ledger import Ledger, LedgerTotals
from rxledger.repositories.ledger_repo import LedgerRepository
from rxledger.services.ledger_service import LedgerService
from rxledger.services.ratio_service import load_ratio_rows

SAMPLE_RATIO_ROWS = [("a", "0.5"), ("b", "0.3"), ("c", "0.2")]


@pytest.fixture
def ratios():
    """A:0.5, B:0.3, C:0.2"""
    return load_ratio_rows(SAMPLE_RATIO_ROWS)


@pytest.fixture
def empty_ledger(ratios):
    return Ledger(ratios=ratios, totals=LedgerTotals.zero(ratios.users))


@pytest_asyncio.fixture
async def memory_store(ratios):
    """In-memory store with zero totals already written."""
    store = MemoryBalanceStore()
    await LedgerRepository(store).initialize(ratios)
    return store


@pytest_asyncio.fixture
async def ledger_service(memory_store, ratios):
    return LedgerService(memory_store, ratios)


@pytest.fixture
def test_client(tmp_path, monkeypatch):
    """FastAPI test client running on the memory backend."""
    ratio_file = tmp_path / "rx.tsv"
    ratio_file.write_text("".join(f"{user}\t{ratio}\n" for user, ratio in SAMPLE_RATIO_ROWS))

    from rxledger.core import config
    monkeypatch.setattr(config.settings, "RATIO_FILE", str(ratio_file))
    monkeypatch.setattr(config.settings, "STORE_BACKEND", "memory")

    from rxledger.main import app

    # Context manager runs the lifespan, loading ratios and the store
    with TestClient(app) as client:
        yield client
