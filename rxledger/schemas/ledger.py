from decimal import Decimal
from typing import Dict, List
from pydantic import BaseModel

from rxledger.models.settlement import CENTS


class UserAmount(BaseModel):
    """Exact amount plus the two decimal display value."""
    user: str
    amount: Decimal
    display: str


class TotalsResponse(BaseModel):
    totals: List[UserAmount]


class RatioResponse(BaseModel):
    ratios: Dict[str, Decimal]


def user_amounts(amounts: Dict[str, Decimal]) -> List[UserAmount]:
    """Sorted by user, as the tabular output is."""
    return [
        UserAmount(user=user.upper(), amount=value, display=str(value.quantize(CENTS)))
        for user, value in sorted(amounts.items())
    ]
