import json

from fastapi import APIRouter, Depends, HTTPException, status

from rxledger.db.session import get_ledger_service
from rxledger.schemas.expense import CommandRequest, CommandResponse, ExpenseResponse
from rxledger.schemas.ledger import user_amounts
from rxledger.schemas.settlement import TransferResponse
from rxledger.services.ledger_service import LedgerService
from rxledger.utils.command_parser import USAGE, CommandName, parse_command
from rxledger.utils.ledger_validation import LedgerValidationError

router = APIRouter()


async def run_command(args, service: LedgerService) -> CommandResponse:
    """Dispatch one token command to the ledger service."""
    command = parse_command(args)
    name = command.name

    if name == CommandName.HELP:
        return CommandResponse(command=name.value, result=USAGE)

    if name == CommandName.READ:
        totals = await service.read_totals()
        return CommandResponse(
            command=name.value,
            result=[row.model_dump(mode="json") for row in user_amounts(totals)]
        )

    if name == CommandName.SETTLE:
        balances, transfers = await service.settlement_plan()
        return CommandResponse(
            command=name.value,
            result={
                "balances": [row.model_dump(mode="json") for row in user_amounts(balances)],
                "transfers": [TransferResponse.from_transfer(t).model_dump(mode="json") for t in transfers],
            }
        )

    if name in (CommandName.EXPORT, CommandName.EXPORT_PRETTY):
        body = await service.render_export(pretty=name == CommandName.EXPORT_PRETTY)
        return CommandResponse(command=name.value, result=json.loads(body))

    if name in (CommandName.UNDO, CommandName.PEEK_LAST):
        if name == CommandName.UNDO:
            record = await service.undo_last()
        else:
            record = await service.peek_last()
        result = None if record is None else ExpenseResponse.from_record(record).model_dump(mode="json")
        return CommandResponse(command=name.value, result=result)

    record = await service.record_expense(command.entry)
    return CommandResponse(
        command=name.value,
        result=ExpenseResponse.from_record(record).model_dump(mode="json")
    )


@router.post("/", response_model=CommandResponse)
async def execute_command(
    command_in: CommandRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """Run a command given as command-line tokens"""
    try:
        return await run_command(command_in.args, service)
    except LedgerValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_detail()
        )
