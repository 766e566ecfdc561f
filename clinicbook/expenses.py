from .base import PostingValidationError
from .entry import Entry
from .models import Expense, Transfer
from .posting import Poster
from .store import Collection


class ExpensePoster(Poster[Expense]):
    collection = Collection.expenses
    model = Expense
    family = "expense"

    def prepare(self, event, changes):
        if event.expense_account_id is None or event.from_account_id is None:
            raise PostingValidationError("Expense needs expense and source accounts.")
        return event

    def entries(self, event):
        return (
            Entry(event.date, self.reference(event), event.description)
            .amount(event.amount)
            .debit(event.expense_account_id)
            .credit(event.from_account_id, description=f"Paid for: {event.description}")
        )


class TransferPoster(Poster[Transfer]):
    """Move money between two cash or bank accounts."""

    collection = Collection.transfers
    model = Transfer
    family = "transfer"

    def prepare(self, event, changes):
        if event.from_account_id is None or event.to_account_id is None:
            raise PostingValidationError("Transfer needs source and destination accounts.")
        if event.from_account_id == event.to_account_id:
            raise PostingValidationError("Cannot transfer to the same account.")
        return event

    def entries(self, event):
        text = event.description or "Funds transfer"
        return (
            Entry(event.date, self.reference(event))
            .amount(event.amount)
            .credit(event.from_account_id, description=f"Withdrawal: {text}")
            .debit(event.to_account_id, description=f"Deposit: {text}")
        )
