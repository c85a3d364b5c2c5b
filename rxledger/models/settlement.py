from decimal import Decimal
from pydantic import BaseModel

CENTS = Decimal("0.01")


class Transfer(BaseModel):
    """debtor pays creditor amount."""
    debtor: str
    amount: Decimal
    creditor: str

    def display_amount(self) -> Decimal:
        return self.amount.quantize(CENTS)

    def render(self) -> str:
        return f"{self.debtor}\t{self.display_amount()}\t{self.creditor}"
