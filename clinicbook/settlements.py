"""Posters for events settled after they are recorded.

Insurance claims post when they turn paid. Payslips and payable or
receivable items post nothing themselves; settling them records a payment
that marks them paid.
"""

import logging

from .base import PostingValidationError
from .entry import Entry
from .models import (
    ClaimStatus,
    Direction,
    InsuranceClaim,
    PayableReceivable,
    Payment,
    Payslip,
    SettlementStatus,
)
from .payments import PaymentPoster
from .posting import Changes, Context, Poster
from .store import Collection

logger = logging.getLogger(__name__)


class ClaimPoster(Poster[InsuranceClaim]):
    """Insurance claim: bank debit and receivable credit once it is paid.

    Rows are posted on the transition into paid and retired when the claim
    leaves paid. Saving a paid claim again with the same received amount,
    date and account posts nothing.
    """

    collection = Collection.claims
    model = InsuranceClaim
    family = "claim"

    @staticmethod
    def settlement(claim: InsuranceClaim) -> tuple | None:
        if claim.status != ClaimStatus.paid or not claim.received_amount:
            return None
        return claim.received_amount, claim.received_date, claim.deposit_account_id

    def entries(self, event):
        if self.settlement(event) is None:
            return None
        account_id = event.deposit_account_id or self.settings.bank_account_id
        return (
            Entry(event.received_date or self.ctx.today(), self.reference(event))
            .amount(event.received_amount)
            .debit(account_id, description=f"Insurance payment for claim #{event.id}")
            .credit(
                self.settings.receivable_account_id,
                description=f"Settlement of insurance claim #{event.id}",
            )
        )

    def update(self, event):
        with self.store.transaction():
            old = self.events.get(event.id)
            before = self.settlement(old)
            if before is not None and before == self.settlement(event):
                changes = Changes()
                changes.event = self._save(event, changes)
                logger.debug("Claim %s saved again, already posted", event.id)
                return changes
            return super().update(event)


class SettledByPayment(Poster):
    """Record that turns paid when a payment linked to it is recorded."""

    amount_field: str

    def __init__(self, ctx: Context):
        super().__init__(ctx)
        self.payments = PaymentPoster(ctx)

    def carry_over(self, old, event, changes):
        # status and payment link follow the linked payment only
        if old.status == SettlementStatus.paid and (
            getattr(event, self.amount_field) != getattr(old, self.amount_field)
        ):
            raise PostingValidationError(
                f"{self.events.what} {old.id} is paid, delete its payment to change the amount."
            )
        event = event.model_copy(update=dict(status=old.status, payment_id=old.payment_id))
        return self.prepare(event, changes)

    def record_payment(self, record, payment: Payment) -> Changes:
        if record.status == SettlementStatus.paid:
            raise PostingValidationError(f"{self.events.what} {record.id} is already paid.")
        changes = self.payments.create(payment)
        payment = changes.event
        changes.event = self.events.get(record.id)
        logger.info("%s %s paid with payment %s", self.events.what, record.id, payment.id)
        return changes

    def children(self, event):
        if event.payment_id is not None and event.payment_id in self.payments.events:
            return [(self.payments, event.payment_id)]
        return []


class PayslipPoster(SettledByPayment):
    collection = Collection.payslips
    model = Payslip
    amount_field = "net_payable"

    def pay(self, payslip_id: int, account_id: int, method: str = "", date: str | None = None) -> Changes:
        """Pay net amount of payslip from *account_id*."""
        with self.store.transaction():
            payslip = self.events.get(payslip_id)
            if payslip.net_payable <= 0:
                raise PostingValidationError(f"Payslip {payslip_id} has nothing to pay.")
            payment = Payment(
                date=date or self.ctx.today(),
                amount=payslip.net_payable,
                method=method,
                direction=Direction.disbursement,
                description=f"Salary {payslip.pay_period} to {payslip.employee_name}",
                entity_id=f"employee-{payslip.employee_id}",
                account_id=account_id,
                payslip_id=payslip.id,
            )
            return self.record_payment(payslip, payment)


class PayableReceivablePoster(SettledByPayment):
    collection = Collection.payables_receivables
    model = PayableReceivable
    amount_field = "amount"

    def settle(self, item_id: int, account_id: int, method: str = "", date: str | None = None) -> Changes:
        """Pay a payable or collect a receivable through *account_id*."""
        with self.store.transaction():
            item = self.events.get(item_id)
            payment = Payment(
                date=date or self.ctx.today(),
                amount=item.amount,
                method=method,
                direction=item.direction,
                description=f"Settlement: {item.description}",
                entity_id=item.entity_id,
                account_id=account_id,
                payable_receivable_id=item.id,
            )
            return self.record_payment(item, payment)
