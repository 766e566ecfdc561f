"""Read-side reports built from ledger rows and the account tree."""

from collections import UserDict
from dataclasses import dataclass, field
from typing import Iterable

import simplejson as json  # type: ignore

from .balance import AccountTree, Balances
from .base import T5, Amount, SaveLoadMixin
from .dates import days_between, in_range, to_sortable
from .ledger import LedgerStore
from .models import Invoice, InvoiceStatus, LedgerEntry


class ReportDict(UserDict[str, Amount], SaveLoadMixin):
    @property
    def total(self) -> Amount:
        return sum(self.data.values())

    def model_dump_json(self, indent: int = 2, warnings: bool = False):
        return json.dumps(self.data, indent=indent, ensure_ascii=False)

    @classmethod
    def model_validate_json(cls, text: str):
        return cls(json.loads(text))


class Report:
    """Base class for financial reports."""


@dataclass
class IncomeStatement(Report):
    income: ReportDict
    expenses: ReportDict

    @classmethod
    def new(cls, rows: Iterable[LedgerEntry], tree: AccountTree):
        income, expenses = ReportDict(), ReportDict()
        for account in tree.by_type(T5.Income, detail_only=True):
            income[account.name] = 0
        for account in tree.by_type(T5.Expense, detail_only=True):
            expenses[account.name] = 0
        for row in rows:
            account = tree.get(row.account_id)
            if account is None or account.parent_id is None:
                continue
            if account.t == T5.Income:
                income[account.name] += row.credit - row.debit
            elif account.t == T5.Expense:
                expenses[account.name] += row.debit - row.credit
        return cls(income=income, expenses=expenses)

    @property
    def net_earnings(self) -> Amount:
        """Calculate net earnings as income less expenses."""
        return self.income.total - self.expenses.total


@dataclass
class BalanceSheet(Report):
    assets: ReportDict
    equity: ReportDict
    liabilities: ReportDict

    @classmethod
    def new(cls, balances: Balances, as_of: str | None = None, current_earnings: str = "current_earnings"):
        tree = balances.tree

        def fill(t: T5) -> ReportDict:
            result = ReportDict()
            for account in tree.by_type(t):
                amount = balances.signed(account.id, as_of)
                if amount or tree.is_leaf(account.id):
                    result[account.name] = amount
            return result

        equity = fill(T5.Equity)
        income = fill(T5.Income).total
        expenses = fill(T5.Expense).total
        equity[current_earnings] = income - expenses
        return cls(assets=fill(T5.Asset), equity=equity, liabilities=fill(T5.Liability))

    def is_balanced(self) -> bool:
        """Return True if assets equal liabilities plus equity."""
        return self.assets.total == (self.equity.total + self.liabilities.total)


BUCKETS = ("0-30", "31-60", "61-90", ">90")


def bucket(days: int) -> str:
    if days <= 30:
        return "0-30"
    if days <= 60:
        return "31-60"
    if days <= 90:
        return "61-90"
    return ">90"


@dataclass
class Aging(Report):
    """Unpaid patient share by recipient and days since invoice date."""

    rows: dict[str, ReportDict] = field(default_factory=dict)

    @classmethod
    def new(cls, invoices: Iterable[Invoice], today: str):
        report = cls()
        for invoice in invoices:
            if invoice.status == InvoiceStatus.paid or invoice.amount_due <= 0:
                continue
            if to_sortable(invoice.date) == 0:
                continue
            days = max(0, days_between(invoice.date, today))
            row = report.rows.setdefault(
                invoice.recipient_name, ReportDict({name: 0 for name in BUCKETS})
            )
            row[bucket(days)] += invoice.amount_due
        return report

    @property
    def totals(self) -> ReportDict:
        result = ReportDict({name: 0 for name in BUCKETS})
        for row in self.rows.values():
            for name in BUCKETS:
                result[name] += row[name]
        return result


def income_statement(ledger: LedgerStore, tree: AccountTree, start: str, end: str) -> IncomeStatement:
    rows = [row for row in ledger.list_all() if in_range(row.date, start, end)]
    return IncomeStatement.new(rows, tree)


def general_ledger(ledger: LedgerStore, start: str, end: str, account_id: int | None = None):
    rows = ledger.list_in_range(account_id, start, end)
    return sorted(rows, key=lambda row: (to_sortable(row.date), row.id))
