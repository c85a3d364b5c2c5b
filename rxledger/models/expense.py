from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

TRANSFER_NARRATION = "intra"


def is_transfer_narration(narration: str) -> bool:
    return narration.strip().lower() == TRANSFER_NARRATION


class Contribution(BaseModel):
    """One contributor of a ratio split; amount is None for the implicit form."""
    user: str
    amount: Optional[Decimal] = None


class ExpenseEntry(BaseModel):
    """A new expense as entered, before validation against the ratio table."""
    date: str
    narration: str
    amount: Decimal
    contributions: List[Contribution] = Field(default_factory=list)
    payer: Optional[str] = None
    payee: Optional[str] = None

    @property
    def is_transfer(self) -> bool:
        return is_transfer_narration(self.narration)


class ExpenseRecord(BaseModel):
    """
    One history entry.

    debt maps creditor -> debtor -> amount for this expense only.
    """
    date: str
    narration: str
    amount: Decimal
    breakdown: Dict[str, Decimal] = Field(default_factory=dict)
    debt: Dict[str, Dict[str, Decimal]] = Field(default_factory=dict)
