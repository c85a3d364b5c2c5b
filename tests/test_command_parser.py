import pytest
from decimal import Decimal

from rxledger.utils.command_parser import USAGE, CommandName, parse_command
from rxledger.utils.ledger_validation import InvalidNumber, MalformedCommand


@pytest.mark.parametrize("args, expected", [
    ([], CommandName.HELP),
    (["-h"], CommandName.HELP),
    (["--help"], CommandName.HELP),
    (["READ"], CommandName.READ),
    (["settle"], CommandName.SETTLE),
    (["wq"], CommandName.SETTLE),
    (["yy"], CommandName.EXPORT),
    (["export-pretty"], CommandName.EXPORT_PRETTY),
    (["yh"], CommandName.EXPORT_PRETTY),
    (["undo"], CommandName.UNDO),
    (["last"], CommandName.PEEK_LAST),
    (["peek-last"], CommandName.PEEK_LAST),
])
def test_single_word_commands(args, expected):
    command = parse_command(args)

    assert command.name == expected
    assert command.entry is None


def test_unknown_single_word():
    with pytest.raises(MalformedCommand) as exc:
        parse_command(["frobnicate"])
    assert str(exc.value) == "frobnicate: invalid command."


@pytest.mark.parametrize("args", [["2024-01-01", "rent"], ["2024-01-01", "rent", "100"]])
def test_too_few_tokens(args):
    with pytest.raises(MalformedCommand) as exc:
        parse_command(args)
    assert str(exc.value) == USAGE


def test_split_expense_tokens():
    command = parse_command(["2024-01-01", "rent", "100", "a:60", "b:40"])

    assert command.name == CommandName.EXPENSE
    entry = command.entry
    assert entry.amount == Decimal("100")
    assert [(c.user, c.amount) for c in entry.contributions] == [("a", Decimal("60")), ("b", Decimal("40"))]
    assert not entry.is_transfer


def test_implicit_contributor_token():
    entry = parse_command(["2024-01-01", "rent", "100", "a"]).entry

    assert entry.contributions[0].user == "a"
    assert entry.contributions[0].amount is None


def test_intra_tokens_are_payee_then_payer():
    entry = parse_command(["2024-01-01", "intra", "40", "y", "x"]).entry

    assert entry.is_transfer
    assert entry.payee == "y"
    assert entry.payer == "x"


@pytest.mark.parametrize("narration", [" intra", "INTRA ", "Intra"])
def test_intra_narration_ignores_case_and_padding(narration):
    entry = parse_command(["2024-01-01", narration, "40", "y", "x"]).entry

    assert entry.is_transfer
    assert entry.contributions == []
    assert entry.payee == "y"
    assert entry.payer == "x"


def test_intra_needs_two_users():
    with pytest.raises(MalformedCommand):
        parse_command(["2024-01-01", "intra", "40", "y"])


def test_bad_amount():
    with pytest.raises(InvalidNumber):
        parse_command(["2024-01-01", "rent", "ten", "a"])


def test_bad_contributor_amount():
    with pytest.raises(InvalidNumber):
        parse_command(["2024-01-01", "rent", "10", "a:ten"])


def test_contributor_with_extra_colon():
    with pytest.raises(MalformedCommand):
        parse_command(["2024-01-01", "rent", "10", "a:5:5"])
