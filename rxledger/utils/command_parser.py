"""Parser for the token command form: <date> <narration> <amount> <user>:<amount>..."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from rxledger.models.expense import Contribution, ExpenseEntry, is_transfer_narration
from rxledger.utils.ledger_validation import MalformedCommand, parse_decimal

USAGE = "usage: <date> <narration> <amount> <user>:<amount>..."


class CommandName(str, Enum):
    HELP = "help"
    READ = "read"
    SETTLE = "settle"
    EXPORT = "export"
    EXPORT_PRETTY = "export-pretty"
    UNDO = "undo"
    PEEK_LAST = "peek-last"
    EXPENSE = "expense"


COMMAND_ALIASES = {
    "-h": CommandName.HELP,
    "--help": CommandName.HELP,
    "help": CommandName.HELP,
    "read": CommandName.READ,
    "settle": CommandName.SETTLE,
    "wq": CommandName.SETTLE,
    "export": CommandName.EXPORT,
    "yy": CommandName.EXPORT,
    "export-pretty": CommandName.EXPORT_PRETTY,
    "yh": CommandName.EXPORT_PRETTY,
    "undo": CommandName.UNDO,
    "peek-last": CommandName.PEEK_LAST,
    "last": CommandName.PEEK_LAST,
}


class Command(BaseModel):
    name: CommandName
    entry: Optional[ExpenseEntry] = None


def parse_contribution(token: str) -> Contribution:
    parts = token.split(":")
    if len(parts) == 1:
        return Contribution(user=parts[0])
    if len(parts) != 2:
        raise MalformedCommand(USAGE)
    return Contribution(user=parts[0], amount=parse_decimal(parts[1]))


def parse_command(args: List[str]) -> Command:
    """
    Turn command-line style tokens into a Command.

    - no tokens or a help flag -> help
    - one token -> a named command
    - four or more tokens -> an expense; "intra" takes <payee> <payer>
    """
    if not args:
        return Command(name=CommandName.HELP)

    if len(args) == 1:
        cmd = args[0].lower()
        if cmd not in COMMAND_ALIASES:
            raise MalformedCommand(f"{cmd}: invalid command.")
        return Command(name=COMMAND_ALIASES[cmd])

    if len(args) < 4:
        raise MalformedCommand(USAGE)

    date, narration = args[0], args[1]
    amount = parse_decimal(args[2])

    if is_transfer_narration(narration):
        if len(args) < 5:
            raise MalformedCommand(USAGE)
        entry = ExpenseEntry(date=date, narration=narration, amount=amount, payee=args[3], payer=args[4])
    else:
        contributions = [parse_contribution(token) for token in args[3:]]
        entry = ExpenseEntry(date=date, narration=narration, amount=amount, contributions=contributions)

    return Command(name=CommandName.EXPENSE, entry=entry)
