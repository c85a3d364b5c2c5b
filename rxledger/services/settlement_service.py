"""
SettlementEngine - greedy cash-flow minimization.

Algorithm:
1. Count debtors (balance < 0) and creditors (balance > 0); stop when none
2. Pick the most negative and the most positive user, ties going to the
   lexicographically smallest user id
3. With a single debtor or a single creditor left, pair it directly with
   every user on the other side and stop
4. Otherwise move min(|debtor|, creditor) and drop whoever reaches zero
5. Repeat

Produces at most (nonzero users - 1) transfers.
"""

import logging
from decimal import Decimal, Inexact
from typing import Dict, List, Mapping, Tuple

from rxledger.models.ledger import ZERO
from rxledger.models.settlement import Transfer
from rxledger.utils.ledger_validation import LEDGER_PRECISION, InvalidNumber, UnbalancedLedger, exact_context

logger = logging.getLogger(__name__)


class SettlementEngine:
    @staticmethod
    def settle(balances: Mapping[str, Decimal]) -> List[Transfer]:
        """Return the transfers that zero every balance, sorted by rendered text."""
        try:
            with exact_context():
                transfers = SettlementEngine._match(balances)
        except Inexact:
            raise InvalidNumber(f"balances exceed {LEDGER_PRECISION} digits of precision.")

        # Rendering rounds to cents, so it stays outside the exact context
        transfers.sort(key=lambda transfer: transfer.render())
        return transfers

    @staticmethod
    def _match(balances: Mapping[str, Decimal]) -> List[Transfer]:
        total = sum(balances.values(), ZERO)
        if total != ZERO:
            raise UnbalancedLedger(f"balances sum to {total}, expected 0.")

        working: Dict[str, Decimal] = {
            user: value for user, value in balances.items() if value != ZERO
        }
        n_debtors = sum(1 for value in working.values() if value < ZERO)
        n_creditors = sum(1 for value in working.values() if value > ZERO)

        transfers: List[Transfer] = []

        while n_debtors + n_creditors > 0:
            debtor, creditor = SettlementEngine._extremes(working)

            if n_debtors == 1 or n_creditors == 1:
                transfers.extend(SettlementEngine._pair_lone_user(working, n_debtors, debtor, creditor))
                break

            owed = -working[debtor]
            due = working[creditor]

            if owed > due:
                transfers.append(Transfer(debtor=debtor, amount=due, creditor=creditor))
                working[debtor] += due
                del working[creditor]
                n_creditors -= 1
            elif owed == due:
                transfers.append(Transfer(debtor=debtor, amount=due, creditor=creditor))
                del working[debtor]
                del working[creditor]
                n_debtors -= 1
                n_creditors -= 1
            else:
                transfers.append(Transfer(debtor=debtor, amount=owed, creditor=creditor))
                working[creditor] -= owed
                del working[debtor]
                n_debtors -= 1

            logger.debug("Settled %s -> %s, %d debtors and %d creditors left",
                         debtor, creditor, n_debtors, n_creditors)

        return transfers

    @staticmethod
    def _extremes(working: Mapping[str, Decimal]) -> Tuple[str, str]:
        debtor = min(working, key=lambda user: (working[user], user))
        creditor = min(working, key=lambda user: (-working[user], user))
        return debtor, creditor

    @staticmethod
    def _pair_lone_user(
        working: Mapping[str, Decimal],
        n_debtors: int,
        debtor: str,
        creditor: str
    ) -> List[Transfer]:
        if n_debtors == 1:
            return [
                Transfer(debtor=debtor, amount=value, creditor=user)
                for user, value in sorted(working.items())
                if value > ZERO
            ]
        return [
            Transfer(debtor=user, amount=-value, creditor=creditor)
            for user, value in sorted(working.items())
            if value < ZERO
        ]
