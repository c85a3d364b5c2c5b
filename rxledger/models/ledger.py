"""
Ledger model - ratio table and running totals.

Design principles:
- Ratios are exact decimals and sum to exactly 1
- The ratio table is loaded once and never mutated
- Totals are keyed by uppercase user id; a missing user reads as zero
- sum(total_debt) == 0 after every command
"""

from decimal import Decimal
from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field

from rxledger.utils.ledger_validation import exact_context

ZERO = Decimal(0)


class RatioTable(BaseModel):
    """Immutable per-user split ratios."""
    model_config = ConfigDict(frozen=True)

    ratios: Dict[str, Decimal]

    @property
    def users(self) -> List[str]:
        return sorted(self.ratios)

    def ratio(self, user: str) -> Decimal:
        return self.ratios[user]

    def __contains__(self, user: str) -> bool:
        return user in self.ratios

    def total(self) -> Decimal:
        with exact_context():
            return sum(self.ratios.values(), ZERO)


class LedgerTotals(BaseModel):
    """
    Running totals across the whole history.

    total_breakdown: sum of every breakdown delta per user.
    total_debt: net balance per user (positive = is owed money).
    """
    total_breakdown: Dict[str, Decimal] = Field(default_factory=dict)
    total_debt: Dict[str, Decimal] = Field(default_factory=dict)

    @classmethod
    def zero(cls, users: List[str]) -> "LedgerTotals":
        return cls(
            total_breakdown={user: ZERO for user in users},
            total_debt={user: ZERO for user in users}
        )

    def breakdown_of(self, user: str) -> Decimal:
        return self.total_breakdown.get(user, ZERO)

    def debt_of(self, user: str) -> Decimal:
        return self.total_debt.get(user, ZERO)

    def debt_sum(self) -> Decimal:
        with exact_context():
            return sum(self.total_debt.values(), ZERO)


class Ledger(BaseModel):
    """Ratio table plus current totals, passed explicitly to the processor."""
    ratios: RatioTable
    totals: LedgerTotals
