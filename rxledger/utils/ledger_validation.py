"""Ledger validation errors and helpers."""
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    localcontext,
)

# Large enough that real ledgers never round; anything that would is rejected.
LEDGER_PRECISION = 200


class LedgerValidationError(Exception):
    """Base exception for every rejected ledger command."""
    kind = "LedgerValidationError"

    def to_detail(self) -> dict:
        return {"error": self.kind, "message": str(self)}


class MalformedRatioRow(LedgerValidationError):
    """A ratio source row does not have exactly two fields."""
    kind = "MalformedRatioRow"


class InvalidNumber(LedgerValidationError):
    """A token could not be parsed as an exact decimal."""
    kind = "InvalidNumber"


class RatioSumMismatch(LedgerValidationError):
    """The ratio table does not sum to exactly 1."""
    kind = "RatioSumMismatch"


class UnknownUser(LedgerValidationError):
    """A user token is not present in the ratio table."""
    kind = "UnknownUser"


class AmountMismatch(LedgerValidationError):
    """Contributor amounts do not add up to the expense amount."""
    kind = "AmountMismatch"


class MalformedCommand(LedgerValidationError):
    """A command or expense entry has the wrong shape."""
    kind = "MalformedCommand"


class UnallocatableSurplus(LedgerValidationError):
    """An overpayment exists but no user fell short of their share."""
    kind = "UnallocatableSurplus"


class UnbalancedLedger(LedgerValidationError):
    """Net balances do not sum to zero."""
    kind = "UnbalancedLedger"


def parse_decimal(token: str) -> Decimal:
    """
    Parse an exact, finite decimal.

    Raises InvalidNumber for anything Decimal rejects and for NaN/Infinity.
    """
    try:
        value = Decimal(token.strip())
    except (InvalidOperation, AttributeError):
        raise InvalidNumber(f"{token}: invalid number.")
    if not value.is_finite():
        raise InvalidNumber(f"{token}: invalid number.")
    return value


def normalize_user(token: str) -> str:
    return token.strip().upper()


def exact_context():
    """
    Decimal context for ledger arithmetic.

    Any operation whose result would be rounded raises decimal.Inexact
    instead of silently losing digits.
    """
    return localcontext(Context(
        prec=LEDGER_PRECISION,
        traps=[Inexact, InvalidOperation, DivisionByZero, Overflow]
    ))


def rounding_allowed():
    """Context for the deliberately inexact share division."""
    return localcontext(Context(
        prec=LEDGER_PRECISION,
        traps=[InvalidOperation, DivisionByZero, Overflow]
    ))
