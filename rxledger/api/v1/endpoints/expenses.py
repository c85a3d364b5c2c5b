from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from rxledger.core.config import settings
from rxledger.db.session import get_ledger_service
from rxledger.schemas.expense import ExpenseCreate, ExpenseResponse, UndoResponse
from rxledger.services.ledger_service import LedgerService
from rxledger.utils.ledger_validation import LedgerValidationError

router = APIRouter()


@router.post("/", response_model=ExpenseResponse)
async def create_expense(
    expense_in: ExpenseCreate,
    service: LedgerService = Depends(get_ledger_service)
):
    """Record a ratio split or an intra transfer"""
    try:
        record = await service.record_expense(expense_in.to_entry())
    except LedgerValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_detail()
        )
    return ExpenseResponse.from_record(record)


@router.get("/", response_model=List[ExpenseResponse])
async def list_expenses(service: LedgerService = Depends(get_ledger_service)):
    """Full history, oldest first"""
    records = await service.export_history()
    return [ExpenseResponse.from_record(record) for record in records]


@router.get("/export")
async def export_expenses(
    pretty: bool = Query(False, description="Tab-indented output"),
    service: LedgerService = Depends(get_ledger_service)
):
    """Download the history as a JSON file"""
    body = await service.render_export(pretty=pretty)
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{settings.EXPORT_FILENAME}"'}
    )


@router.get("/last", response_model=ExpenseResponse | None)
async def peek_last_expense(service: LedgerService = Depends(get_ledger_service)):
    """Most recent expense without changing anything"""
    record = await service.peek_last()
    if record is None:
        return None
    return ExpenseResponse.from_record(record)


@router.post("/undo", response_model=UndoResponse)
async def undo_last_expense(service: LedgerService = Depends(get_ledger_service)):
    """Reverse the most recent expense; no-op on empty history"""
    record = await service.undo_last()
    if record is None:
        return UndoResponse()
    return UndoResponse(undone=ExpenseResponse.from_record(record))
