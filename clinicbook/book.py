"""User-facing Book class: one method per business event."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from . import dates
from .balance import AccountTree, Balances, orphan_references
from .config import Settings
from .expenses import ExpensePoster, TransferPoster
from .inventory import Stock, StockDirection
from .invoices import IncomeRecordPoster, InvoicePoster
from .models import (
    Account,
    Expense,
    IncomeRecord,
    InsuranceClaim,
    Invoice,
    PayableReceivable,
    Payment,
    Payslip,
    Transfer,
)
from .payments import PaymentPoster
from .payroll import PayrollScheduler
from .posting import Changes, Context, Poster
from .reports import Aging, BalanceSheet, IncomeStatement, general_ledger, income_statement
from .settlements import ClaimPoster, PayableReceivablePoster, PayslipPoster
from .store import Collection, Key, MemoryStore, Repository, Store


class EventKind(Enum):
    """Events that carry tags."""

    payment = "payment"
    invoice = "invoice"
    expense = "expense"
    transfer = "transfer"
    payable_receivable = "payableReceivable"


@dataclass
class Book:
    store: Store = field(default_factory=MemoryStore)
    settings: Settings | None = None
    today: Callable[[], str] = dates.today

    def __post_init__(self):
        self.ctx = Context(self.store, self.settings, self.today)
        self.payments = PaymentPoster(self.ctx)
        self.invoices = InvoicePoster(self.ctx)
        self.income_records = IncomeRecordPoster(self.ctx)
        self.expenses = ExpensePoster(self.ctx)
        self.transfers = TransferPoster(self.ctx)
        self.claims = ClaimPoster(self.ctx)
        self.payslips = PayslipPoster(self.ctx)
        self.payables_receivables = PayableReceivablePoster(self.ctx)
        self.payroll = PayrollScheduler(self.ctx)
        self.stock = Stock(self.store)

    @property
    def ledger(self):
        return self.ctx.ledger

    @property
    def active_settings(self) -> Settings:
        """Settings passed to the book, else the record kept in the store."""
        return self.ctx.settings

    @property
    def posters(self) -> dict[EventKind, Poster]:
        return {
            EventKind.payment: self.payments,
            EventKind.invoice: self.invoices,
            EventKind.expense: self.expenses,
            EventKind.transfer: self.transfers,
            EventKind.payable_receivable: self.payables_receivables,
        }

    # Reference data

    def add_accounts(self, accounts: Iterable[Account]):
        repository = Repository(self.store, Collection.accounts, Account)
        for account in accounts:
            repository.save(account)
        return self

    @property
    def tree(self) -> AccountTree:
        return AccountTree.from_store(self.store)

    # Payments

    def add_payment(self, payment: Payment) -> Changes:
        return self.payments.create(payment)

    def update_payment(self, payment: Payment) -> Changes:
        return self.payments.update(payment)

    def delete_payment(self, payment_id: int) -> Changes:
        return self.payments.delete(payment_id)

    # Invoices and daily income

    def add_invoice(self, invoice: Invoice) -> Changes:
        return self.invoices.create(invoice)

    def update_invoice(self, invoice: Invoice) -> Changes:
        return self.invoices.update(invoice)

    def delete_invoice(self, invoice_id: str) -> Changes:
        return self.invoices.delete(invoice_id)

    def add_income_record(self, record: IncomeRecord) -> Changes:
        return self.income_records.create(record)

    def update_income_record(self, record: IncomeRecord) -> Changes:
        return self.income_records.update(record)

    def delete_income_record(self, record_id: int) -> Changes:
        return self.income_records.delete(record_id)

    # Expenses and transfers

    def add_expense(self, expense: Expense) -> Changes:
        return self.expenses.create(expense)

    def update_expense(self, expense: Expense) -> Changes:
        return self.expenses.update(expense)

    def delete_expense(self, expense_id: int) -> Changes:
        return self.expenses.delete(expense_id)

    def add_transfer(self, transfer: Transfer) -> Changes:
        return self.transfers.create(transfer)

    def update_transfer(self, transfer: Transfer) -> Changes:
        return self.transfers.update(transfer)

    def delete_transfer(self, transfer_id: int) -> Changes:
        return self.transfers.delete(transfer_id)

    # Insurance claims

    def add_claim(self, claim: InsuranceClaim) -> Changes:
        return self.claims.create(claim)

    def update_claim(self, claim: InsuranceClaim) -> Changes:
        return self.claims.update(claim)

    def delete_claim(self, claim_id: int) -> Changes:
        return self.claims.delete(claim_id)

    # Payroll

    def add_payslip(self, payslip: Payslip) -> Changes:
        return self.payslips.create(payslip)

    def delete_payslip(self, payslip_id: int) -> Changes:
        return self.payslips.delete(payslip_id)

    def pay_payslip(self, payslip_id: int, account_id: int, method: str = "") -> Changes:
        return self.payslips.pay(payslip_id, account_id, method)

    def generate_due_payslips(self, today: str | None = None) -> list[Payslip]:
        return self.payroll.generate_due(today).saved_in(Collection.payslips)

    # Payables and receivables

    def add_payable_receivable(self, item: PayableReceivable) -> Changes:
        return self.payables_receivables.create(item)

    def update_payable_receivable(self, item: PayableReceivable) -> Changes:
        return self.payables_receivables.update(item)

    def delete_payable_receivable(self, item_id: int) -> Changes:
        return self.payables_receivables.delete(item_id)

    def settle(self, item_id: int, account_id: int, method: str = "") -> Changes:
        return self.payables_receivables.settle(item_id, account_id, method)

    # Stock and tags

    def adjust_stock(self, item_id: int, delta: int, direction: StockDirection):
        with self.store.transaction():
            return self.stock.adjust(item_id, delta, direction)

    def retag(self, kind: EventKind, key: Key, tags: list[str]) -> Changes:
        """Replace tags of an event through its poster."""
        poster = self.posters[kind]
        event = poster.events.get(key)
        return poster.update(event.model_copy(update={"tags": list(tags)}))

    # Balances and reports

    def balances(self, skip_orphans: bool = False) -> Balances:
        skip = set(orphan_references(self.store, self.ledger)) if skip_orphans else set()
        return Balances(self.ledger, self.tree, skip)

    def balance(self, account_id: int, as_of: str | None = None) -> int:
        return self.balances().balance(account_id, as_of)

    def balance_with_descendants(self, account_id: int, as_of: str | None = None) -> int:
        return self.balances().balance_with_descendants(account_id, as_of)

    def income_statement(self, start: str, end: str) -> IncomeStatement:
        return income_statement(self.ledger, self.tree, start, end)

    def balance_sheet(self, as_of: str | None = None) -> BalanceSheet:
        return BalanceSheet.new(self.balances(), as_of)

    def aging(self, today: str | None = None) -> Aging:
        return Aging.new(self.invoices.events.all(), today or self.today())

    def general_ledger(self, start: str, end: str, account_id: int | None = None):
        return general_ledger(self.ledger, start, end, account_id)
