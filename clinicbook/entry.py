from dataclasses import dataclass, field

from .base import Amount, PostingValidationError
from .models import LedgerEntry


@dataclass
class Line:
    account_id: int
    debit: Amount = 0
    credit: Amount = 0
    description: str = ""


@dataclass
class Entry:
    """Set of ledger lines posted together under one reference id."""

    date: str
    reference_id: str | None = None
    description: str = ""
    lines: list[Line] = field(default_factory=list)
    _amount: Amount | None = None

    def amount(self, amount: Amount):
        """Set default amount for the following lines."""
        self._amount = amount
        return self

    def get_amount(self, amount: Amount | None = None) -> Amount:
        """Use provided amount, default amount or raise error if no data about amount."""
        if amount is None:
            if self._amount is None:
                raise PostingValidationError("Amount is not set.")
            return self._amount
        return amount

    @staticmethod
    def must_have_account(account_id: int | None, role: str) -> int:
        if account_id is None:
            raise PostingValidationError(f"No {role} account given.")
        return account_id

    def debit(self, account_id, amount=None, description=None):
        amount = self.get_amount(amount)
        account_id = self.must_have_account(account_id, "debit")
        self.lines.append(Line(account_id, debit=amount, description=self._text(description)))
        return self

    def credit(self, account_id, amount=None, description=None):
        amount = self.get_amount(amount)
        account_id = self.must_have_account(account_id, "credit")
        self.lines.append(Line(account_id, credit=amount, description=self._text(description)))
        return self

    def double(self, debit, credit, amount=None):
        self.debit(debit, amount)
        self.credit(credit, amount)
        return self

    def _text(self, description: str | None) -> str:
        return self.description if description is None else description

    @property
    def debits(self) -> Amount:
        return sum(line.debit for line in self.lines)

    @property
    def credits(self) -> Amount:
        return sum(line.credit for line in self.lines)

    def is_balanced(self) -> bool:
        return self.debits == self.credits

    def validate(self):
        if not self.is_balanced():
            raise PostingValidationError(
                f"Debits {self.debits} and credits {self.credits} "
                f"are not balanced for {self.reference_id}."
            )
        return self

    def to_rows(self) -> list[LedgerEntry]:
        return [
            LedgerEntry(
                date=self.date,
                description=line.description,
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                reference_id=self.reference_id,
            )
            for line in self.lines
        ]

    def __iter__(self):
        return iter(self.to_rows())
