from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from rxledger.models.expense import Contribution, ExpenseEntry, ExpenseRecord


class ContributionIn(BaseModel):
    user: str = Field(..., min_length=1)
    amount: Optional[Decimal] = None


class ExpenseCreate(BaseModel):
    """
    Request body for a new expense.

    Ratio split: contributions, with the amount omitted only for a single
    contributor paying in full. Direct transfer: narration "intra" plus
    payer and payee.
    """
    date: str = Field(..., min_length=1)
    narration: str = Field(..., min_length=1)
    amount: Decimal
    contributions: List[ContributionIn] = Field(default_factory=list)
    payer: Optional[str] = None
    payee: Optional[str] = None

    def to_entry(self) -> ExpenseEntry:
        return ExpenseEntry(
            date=self.date,
            narration=self.narration,
            amount=self.amount,
            contributions=[Contribution(user=c.user, amount=c.amount) for c in self.contributions],
            payer=self.payer,
            payee=self.payee
        )


class ExpenseResponse(BaseModel):
    date: str
    narration: str
    amount: Decimal
    breakdown: Dict[str, Decimal]
    debt: Dict[str, Dict[str, Decimal]]

    @classmethod
    def from_record(cls, record: ExpenseRecord) -> "ExpenseResponse":
        return cls(**record.model_dump())


class UndoResponse(BaseModel):
    """Removed expense, or null when history was empty."""
    undone: Optional[ExpenseResponse] = None


class CommandRequest(BaseModel):
    args: List[str] = Field(default_factory=list)


class CommandResponse(BaseModel):
    command: str
    result: Any = None
