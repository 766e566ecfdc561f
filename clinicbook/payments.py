import logging

from .base import PostingValidationError
from .entry import Entry
from .models import (
    Direction,
    Invoice,
    PayableReceivable,
    Payment,
    Payslip,
    SettlementStatus,
)
from .posting import Changes, Context, Poster
from .store import Collection, Repository

logger = logging.getLogger(__name__)


class PaymentPoster(Poster[Payment]):
    """Cash moving in or out of a cash or bank account.

    A receipt linked to an invoice also credits the receivable account and
    adds to the invoice paid amount. A payment linked to a payslip or to a
    payable/receivable item marks that item paid.
    """

    collection = Collection.payments
    model = Payment
    family = "payment"

    def __init__(self, ctx: Context):
        super().__init__(ctx)
        self.invoices = Repository(ctx.store, Collection.invoices, Invoice)
        self.payslips = Repository(ctx.store, Collection.payslips, Payslip)
        self.items = Repository(ctx.store, Collection.payables_receivables, PayableReceivable)

    def prepare(self, event, changes):
        if event.account_id is None:
            raise PostingValidationError("Payment must name a cash or bank account.")
        if event.invoice_id is not None:
            if event.direction != Direction.receipt:
                raise PostingValidationError("Only a receipt can settle an invoice.")
            self.invoices.get(event.invoice_id)
        return event

    def entries(self, event):
        if event.direction == Direction.receipt:
            entry = Entry(event.date, self.reference(event), event.description or "Payment received")
            entry.debit(event.account_id, event.amount)
            if event.invoice_id is not None:
                entry.credit(
                    self.settings.receivable_account_id,
                    event.amount,
                    f"Settlement of invoice {event.invoice_id}",
                )
        else:
            entry = Entry(event.date, self.reference(event), event.description or "Payment made")
            entry.credit(event.account_id, event.amount)
        return entry

    def _add_to_invoice(self, event: Payment, amount: int, changes: Changes):
        invoice = self.invoices.find(event.invoice_id)
        if invoice is None:
            logger.warning("Payment %s refers to missing invoice %s", event.id, event.invoice_id)
            return
        invoice = self.invoices.save(invoice.with_paid_amount(invoice.paid_amount + amount))
        changes.save(Collection.invoices, invoice)

    def _mark(self, repository: Repository, key, event: Payment, changes: Changes, paid: bool):
        item = repository.find(key)
        if item is None:
            logger.warning("Payment %s refers to missing %s %s", event.id, repository.what, key)
            return
        if paid:
            update = dict(status=SettlementStatus.paid, payment_id=event.id)
        elif item.payment_id == event.id:
            update = dict(status=SettlementStatus.pending, payment_id=None)
        else:
            return
        item = repository.save(item.model_copy(update=update))
        changes.save(repository.collection, item)

    def apply(self, event, changes):
        if event.invoice_id is not None:
            self._add_to_invoice(event, event.amount, changes)
        if event.payslip_id is not None:
            self._mark(self.payslips, event.payslip_id, event, changes, paid=True)
        if event.payable_receivable_id is not None:
            self._mark(self.items, event.payable_receivable_id, event, changes, paid=True)

    def revert(self, event, changes):
        if event.invoice_id is not None:
            self._add_to_invoice(event, -event.amount, changes)
        if event.payslip_id is not None:
            self._mark(self.payslips, event.payslip_id, event, changes, paid=False)
        if event.payable_receivable_id is not None:
            self._mark(self.items, event.payable_receivable_id, event, changes, paid=False)

    def for_invoice(self, invoice_id: str) -> list[Payment]:
        return [p for p in self.events.all() if p.invoice_id == invoice_id]

    def paid_towards(self, invoice_id: str) -> int:
        """Sum of payments recorded against an invoice."""
        return sum(p.amount for p in self.for_invoice(invoice_id))
