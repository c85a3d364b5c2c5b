import pytest
from decimal import Decimal

from rxledger.services.settlement_service import SettlementEngine
from rxledger.utils.ledger_validation import UnbalancedLedger


def apply_transfers(balances, transfers):
    result = dict(balances)
    for transfer in transfers:
        result[transfer.creditor] -= transfer.amount
        result[transfer.debtor] += transfer.amount
    return result


def d(**values):
    return {user: Decimal(value) for user, value in values.items()}


def test_one_creditor_two_debtors():
    transfers = SettlementEngine.settle(d(A="50", B="-30", C="-20"))

    assert [t.render() for t in transfers] == ["B\t30.00\tA", "C\t20.00\tA"]


def test_all_zero_balances():
    assert SettlementEngine.settle(d(A="0", B="0")) == []


def test_empty_balances():
    assert SettlementEngine.settle({}) == []


def test_unbalanced_input_rejected():
    with pytest.raises(UnbalancedLedger):
        SettlementEngine.settle(d(A="10", B="-9.99"))


def test_general_loop_greedy_pairing():
    balances = d(A="40", B="35", C="-50", D="-25")

    transfers = SettlementEngine.settle(balances)

    # C (-50) pays A 40 first, then the lone creditor B collects from C and D
    assert [t.render() for t in transfers] == ["C\t10.00\tB", "C\t40.00\tA", "D\t25.00\tB"]
    assert all(value == 0 for value in apply_transfers(balances, transfers).values())


def test_equal_extremes_remove_both():
    balances = d(A="30", B="20", C="-30", D="-20")

    transfers = SettlementEngine.settle(balances)

    assert [t.render() for t in transfers] == ["C\t30.00\tA", "D\t20.00\tB"]


def test_ties_break_on_user_id():
    balances = d(B="10", A="10", D="-10", C="-10")

    transfers = SettlementEngine.settle(balances)

    assert [(t.debtor, t.creditor) for t in transfers] == [("C", "A"), ("D", "B")]


def test_settle_is_deterministic():
    balances = d(E="12.5", A="-7.25", C="3", B="-20", D="11.75")

    first = SettlementEngine.settle(balances)
    second = SettlementEngine.settle(dict(reversed(list(balances.items()))))

    assert [t.render() for t in first] == [t.render() for t in second]


@pytest.mark.parametrize("balances", [
    d(A="50", B="-30", C="-20"),
    d(A="-50", B="30", C="20"),
    d(A="10.01", B="-3.33", C="-3.34", D="-3.34"),
    d(A="100", B="-20", C="-30", D="45", E="-95"),
    d(A="1", B="2", C="3", D="-1", E="-2", F="-3"),
])
def test_transfers_zero_all_balances(balances):
    transfers = SettlementEngine.settle(balances)

    assert all(value == 0 for value in apply_transfers(balances, transfers).values())
    nonzero = sum(1 for value in balances.values() if value != 0)
    assert len(transfers) <= nonzero - 1
    assert all(t.amount > 0 for t in transfers)


def test_input_is_not_mutated():
    balances = d(A="50", B="-30", C="-20")

    SettlementEngine.settle(balances)

    assert balances == d(A="50", B="-30", C="-20")


def test_display_amount_rounds_to_cents():
    transfers = SettlementEngine.settle({"A": Decimal("0.333333333333"), "B": Decimal("-0.333333333333")})

    assert transfers[0].render() == "B\t0.33\tA"
    assert transfers[0].amount == Decimal("0.333333333333")
