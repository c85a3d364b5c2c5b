from fastapi import APIRouter, Depends, HTTPException, status

from rxledger.db.session import get_ledger_service
from rxledger.schemas.ledger import user_amounts
from rxledger.schemas.settlement import SettlementPlanResponse, TransferResponse
from rxledger.services.ledger_service import LedgerService
from rxledger.utils.ledger_validation import LedgerValidationError

router = APIRouter()


@router.get("/", response_model=SettlementPlanResponse)
async def get_settlement_plan(service: LedgerService = Depends(get_ledger_service)):
    """Balances and the minimal transfers that settle them"""
    try:
        balances, transfers = await service.settlement_plan()
    except LedgerValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_detail()
        )

    return SettlementPlanResponse(
        balances=user_amounts(balances),
        transfers=[TransferResponse.from_transfer(t) for t in transfers],
        lines=[t.render() for t in transfers]
    )
