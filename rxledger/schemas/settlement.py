from decimal import Decimal
from typing import List
from pydantic import BaseModel

from rxledger.models.settlement import Transfer
from rxledger.schemas.ledger import UserAmount


class TransferResponse(BaseModel):
    debtor: str
    amount: Decimal
    display: str
    creditor: str

    @classmethod
    def from_transfer(cls, transfer: Transfer) -> "TransferResponse":
        return cls(
            debtor=transfer.debtor,
            amount=transfer.amount,
            display=str(transfer.display_amount()),
            creditor=transfer.creditor
        )


class SettlementPlanResponse(BaseModel):
    balances: List[UserAmount]
    transfers: List[TransferResponse]
    lines: List[str]
