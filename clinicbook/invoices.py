import logging
import time

from .base import ClinicBookError
from .inventory import Stock, stock_changes
from .models import Direction, IncomeRecord, Invoice, Payment
from .payments import PaymentPoster
from .posting import Changes, Context, Poster
from .store import Collection

logger = logging.getLogger(__name__)


class InvoicePoster(Poster[Invoice]):
    """Invoices post no ledger rows themselves; they move stock.

    Inventory lines are taken out of stock on create and put back on
    delete. Payments against the invoice are deleted with it.
    """

    collection = Collection.invoices
    model = Invoice

    def __init__(self, ctx: Context):
        super().__init__(ctx)
        self.stock = Stock(ctx.store)
        self.payments = PaymentPoster(ctx)

    def new_id(self) -> str:
        stamp = int(time.time() * 1000)
        while f"{self.settings.invoice_prefix}-{stamp}" in self.events:
            stamp += 1
        return f"{self.settings.invoice_prefix}-{stamp}"

    def prepare(self, event, changes):
        if event.id is None:
            event = event.model_copy(update={"id": self.new_id()})
        else:
            ClinicBookError.must_not_exist(self.events, event.id, "Invoice")
        return event.with_paid_amount(0)

    def carry_over(self, old, event, changes):
        # paid amount belongs to payments, status follows the new patient share
        return event.with_paid_amount(old.paid_amount)

    def apply(self, event, changes):
        changes.save_many(Collection.inventory, self.stock.take_out(event.items))

    def revert(self, event, changes):
        changes.save_many(Collection.inventory, self.stock.put_back(event.items))

    def update(self, event):
        with self.store.transaction():
            old = self.events.get(event.id)
            self.stock.check(stock_changes(old.items, event.items))
            return super().update(event)

    def children(self, event):
        return [(self.payments, payment.id) for payment in self.payments.for_invoice(event.id)]


class IncomeRecordPoster(Poster[IncomeRecord]):
    """Daily income booked without an invoice.

    Cash is recorded through a receipt payment owned by the record, and
    inventory lines are taken out of stock.
    """

    collection = Collection.income_records
    model = IncomeRecord

    def __init__(self, ctx: Context):
        super().__init__(ctx)
        self.stock = Stock(ctx.store)
        self.payments = PaymentPoster(ctx)

    def payment_for(self, record: IncomeRecord, payment_id: int | None = None) -> Payment:
        return Payment(
            id=payment_id,
            date=record.date,
            amount=record.total_amount,
            method=record.payment_method,
            direction=Direction.receipt,
            description=record.description or "Daily income",
            entity_id=self.settings.income_entity_id,
            account_id=record.payment_account_id,
        )

    def prepare(self, event, changes):
        self.stock.check(stock_changes([], event.items))
        payment_changes = self.payments.create(self.payment_for(event))
        changes.merge(payment_changes)
        return event.model_copy(update={"payment_id": payment_changes.event.id})  # type: ignore

    def carry_over(self, old, event, changes):
        if old.payment_id is None or old.payment_id not in self.payments.events:
            return self.prepare(event, changes)
        changes.merge(self.payments.update(self.payment_for(event, old.payment_id)))
        return event.model_copy(update={"payment_id": old.payment_id})

    def apply(self, event, changes):
        changes.save_many(Collection.inventory, self.stock.take_out(event.items))

    def revert(self, event, changes):
        changes.save_many(Collection.inventory, self.stock.put_back(event.items))

    def children(self, event):
        if event.payment_id is not None and event.payment_id in self.payments.events:
            return [(self.payments, event.payment_id)]
        return []
