"""
ExpenseProcessor - turns one expense into a history record and new totals.

Algorithm (ratio split):
1. Build the breakdown from the contributors and check it sums to the amount
2. Fair share of every user = amount * ratio
3. Users who paid less than their fair share carry a shortfall
4. Each overpayer's surplus is spread over the shortfall users in proportion
   to their shortfall, recorded as debt[overpayer][debtor]
5. Totals move by the same amounts, so sum(total_debt) stays zero

Direct transfers (narration "intra") move the amount from payer to payee
without touching the ratios.

Everything except the share division runs in an exact decimal context; an
expense that would need rounding anywhere else is rejected with InvalidNumber.
"""

from decimal import Decimal, Inexact, InvalidOperation
from typing import Dict, Tuple

from rxledger.models.expense import ExpenseEntry, ExpenseRecord
from rxledger.models.ledger import Ledger, LedgerTotals, RatioTable, ZERO
from rxledger.utils.ledger_validation import (
    LEDGER_PRECISION,
    AmountMismatch,
    InvalidNumber,
    MalformedCommand,
    UnallocatableSurplus,
    UnknownUser,
    exact_context,
    normalize_user,
    rounding_allowed,
)

ALLOCATION_PLACES = 12
ALLOCATION_QUANTUM = Decimal(1).scaleb(-ALLOCATION_PLACES)


class ExpenseProcessor:
    @staticmethod
    def apply(ledger: Ledger, entry: ExpenseEntry) -> Tuple[ExpenseRecord, LedgerTotals]:
        """
        Apply one expense to the ledger.

        Returns the record to append and the new totals. The ledger passed in
        is never modified; any validation error is raised before anything is
        computed for persistence.
        """
        try:
            with exact_context():
                if entry.is_transfer:
                    return ExpenseProcessor._apply_transfer(ledger, entry)
                return ExpenseProcessor._apply_split(ledger, entry)
        except (Inexact, InvalidOperation):
            raise InvalidNumber(f"{entry.amount}: amounts exceed {LEDGER_PRECISION} digits of precision.")

    @staticmethod
    def undo(totals: LedgerTotals, record: ExpenseRecord) -> LedgerTotals:
        """Reverse the effect of a previously applied record on the totals."""
        restored = totals.model_copy(deep=True)

        try:
            with exact_context():
                for user, delta in record.breakdown.items():
                    restored.total_breakdown[user] = restored.breakdown_of(user) - delta

                for creditor, debtors in record.debt.items():
                    owed = ZERO
                    for debtor, share in debtors.items():
                        restored.total_debt[debtor] = restored.debt_of(debtor) + share
                        owed += share
                    restored.total_debt[creditor] = restored.debt_of(creditor) - owed
        except Inexact:
            raise InvalidNumber(f"{record.date} {record.narration}: totals exceed {LEDGER_PRECISION} digits of precision.")

        return restored

    # ===== PRIVATE HELPERS =====

    @staticmethod
    def _require_user(ratios: RatioTable, token: str) -> str:
        user = normalize_user(token)
        if user not in ratios:
            raise UnknownUser(f"{user}: user not found.")
        return user

    @staticmethod
    def _apply_transfer(ledger: Ledger, entry: ExpenseEntry) -> Tuple[ExpenseRecord, LedgerTotals]:
        if not entry.payer or not entry.payee:
            raise MalformedCommand("intra needs a payee and a payer.")

        payer = ExpenseProcessor._require_user(ledger.ratios, entry.payer)
        payee = ExpenseProcessor._require_user(ledger.ratios, entry.payee)
        if payer == payee:
            raise MalformedCommand(f"{payer}: payer and payee must differ.")

        amount = entry.amount
        breakdown = {payer: -amount, payee: amount}
        debt = {payee: {payer: amount}}

        totals = ledger.totals.model_copy(deep=True)
        for user, delta in breakdown.items():
            totals.total_breakdown[user] = totals.breakdown_of(user) + delta
            totals.total_debt[user] = totals.debt_of(user) + delta

        # The amount lives entirely in the breakdown for transfers.
        record = ExpenseRecord(
            date=entry.date,
            narration=entry.narration,
            amount=ZERO,
            breakdown=breakdown,
            debt=debt
        )
        return record, totals

    @staticmethod
    def _collect_breakdown(ratios: RatioTable, entry: ExpenseEntry) -> Dict[str, Decimal]:
        contributions = entry.contributions
        if not contributions:
            raise MalformedCommand("at least one contributor is required.")

        implicit = len(contributions) == 1 and contributions[0].amount is None
        breakdown: Dict[str, Decimal] = {}

        for contribution in contributions:
            user = ExpenseProcessor._require_user(ratios, contribution.user)
            if implicit:
                breakdown[user] = entry.amount
                continue
            if contribution.amount is None:
                raise MalformedCommand(f"{user}: contribution amount required.")
            breakdown[user] = breakdown.get(user, ZERO) + contribution.amount

        return breakdown

    @staticmethod
    def _allocate(diff: Decimal, shortfalls: Dict[str, Decimal], total_shortfall: Decimal) -> Dict[str, Decimal]:
        """
        Split diff across shortfall users proportionally.

        diff * shortfall / total equals diff * rx / n with rx = shortfall / amount.
        The last debtor takes the remainder so the shares sum to diff exactly.
        """
        debtors = sorted(shortfalls)
        allocation: Dict[str, Decimal] = {}
        allocated = ZERO

        for debtor in debtors[:-1]:
            weighted = diff * shortfalls[debtor]
            with rounding_allowed():
                share = weighted / total_shortfall
                if share.as_tuple().exponent < -ALLOCATION_PLACES:
                    share = share.quantize(ALLOCATION_QUANTUM)
            allocation[debtor] = share
            allocated += share

        allocation[debtors[-1]] = diff - allocated
        return allocation

    @staticmethod
    def _apply_split(ledger: Ledger, entry: ExpenseEntry) -> Tuple[ExpenseRecord, LedgerTotals]:
        ratios = ledger.ratios
        amount = entry.amount
        breakdown = ExpenseProcessor._collect_breakdown(ratios, entry)

        if sum(breakdown.values(), ZERO) != amount:
            raise AmountMismatch(f"amount != breakdown ({amount}).")

        shortfalls: Dict[str, Decimal] = {}
        for user in ratios.users:
            fair_share = amount * ratios.ratio(user)
            paid = breakdown.get(user, ZERO)
            if paid < fair_share:
                shortfalls[user] = fair_share - paid
        total_shortfall = sum(shortfalls.values(), ZERO)

        totals = ledger.totals.model_copy(deep=True)
        debt: Dict[str, Dict[str, Decimal]] = {}

        for user in sorted(breakdown):
            diff = breakdown[user] - amount * ratios.ratio(user)
            if diff <= ZERO:
                continue
            if total_shortfall == ZERO:
                raise UnallocatableSurplus(f"{user}: overpaid by {diff} with no shortfall to cover.")

            allocation = ExpenseProcessor._allocate(diff, shortfalls, total_shortfall)
            for debtor, share in allocation.items():
                totals.total_debt[debtor] = totals.debt_of(debtor) - share
            totals.total_debt[user] = totals.debt_of(user) + diff
            debt[user] = allocation

        for user, delta in breakdown.items():
            totals.total_breakdown[user] = totals.breakdown_of(user) + delta

        record = ExpenseRecord(
            date=entry.date,
            narration=entry.narration,
            amount=amount,
            breakdown=breakdown,
            debt=debt
        )
        return record, totals
