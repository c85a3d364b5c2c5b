from fastapi import APIRouter, Depends

from rxledger.db.session import get_ledger_service, get_ratios
from rxledger.models.ledger import RatioTable
from rxledger.schemas.ledger import RatioResponse, TotalsResponse, user_amounts
from rxledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("/totals", response_model=TotalsResponse)
async def read_totals(service: LedgerService = Depends(get_ledger_service)):
    """Net contribution per user across all expenses"""
    totals = await service.read_totals()
    return TotalsResponse(totals=user_amounts(totals))


@router.get("/ratios", response_model=RatioResponse)
async def read_ratios(ratios: RatioTable = Depends(get_ratios)):
    """Ratio table loaded at startup"""
    return RatioResponse(ratios=dict(sorted(ratios.ratios.items())))
