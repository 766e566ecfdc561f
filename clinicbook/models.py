"""Records kept in the store: accounts, ledger rows and business events."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import T5, Amount


class Record(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=False)


class Account(Record):
    id: int
    name: str
    t: T5
    code: str = ""
    parent_id: int | None = None


class LedgerEntry(Record):
    id: int | None = None
    date: str
    description: str = ""
    account_id: int
    debit: Amount = Field(default=0, ge=0)
    credit: Amount = Field(default=0, ge=0)
    reference_id: str | None = None

    @property
    def signed(self) -> Amount:
        return self.debit - self.credit


class Direction(str, Enum):
    receipt = "receipt"
    disbursement = "disbursement"


class Payment(Record):
    id: int | None = None
    date: str
    amount: Amount = Field(gt=0)
    method: str = ""
    direction: Direction
    description: str = ""
    entity_id: str = ""
    account_id: int | None = None
    invoice_id: str | None = None
    payable_receivable_id: int | None = None
    payslip_id: int | None = None
    tags: list[str] = []


class ItemType(str, Enum):
    service = "service"
    inventory = "inventory"
    template = "template"


class InvoiceItem(Record):
    type: ItemType
    id: int
    name: str = ""
    quantity: int = Field(default=1, gt=0)
    price: Amount = 0
    doctor_id: int | None = None


class InvoiceStatus(str, Enum):
    unpaid = "unpaid"
    partially_paid = "partially_paid"
    paid = "paid"


class Invoice(Record):
    id: str | None = None
    recipient_name: str = ""
    date: str
    items: list[InvoiceItem] = []
    total_amount: Amount = 0
    discount: Amount = 0
    insurance_share: Amount = 0
    patient_share: Amount = 0
    paid_amount: Amount = 0
    status: InvoiceStatus = InvoiceStatus.unpaid
    tariff_type: str = ""
    tags: list[str] = []

    @property
    def amount_due(self) -> Amount:
        return self.patient_share - self.paid_amount

    def with_paid_amount(self, paid_amount: Amount) -> "Invoice":
        """Copy of invoice with *paid_amount* and status derived from it."""
        if paid_amount <= 0:
            status = InvoiceStatus.unpaid
        elif paid_amount >= self.patient_share:
            status = InvoiceStatus.paid
        else:
            status = InvoiceStatus.partially_paid
        return self.model_copy(update=dict(paid_amount=paid_amount, status=status))


class Expense(Record):
    id: int | None = None
    date: str
    description: str = ""
    amount: Amount = Field(gt=0)
    expense_account_id: int | None = None
    from_account_id: int | None = None
    to_entity_id: str = ""
    tags: list[str] = []


class Transfer(Record):
    id: int | None = None
    date: str
    from_account_id: int | None = None
    to_account_id: int | None = None
    amount: Amount = Field(gt=0)
    description: str = ""
    tags: list[str] = []


class IncomeRecord(Record):
    id: int | None = None
    date: str
    items: list[InvoiceItem] = []
    total_amount: Amount = Field(gt=0)
    payment_method: str = ""
    payment_account_id: int | None = None
    description: str = ""
    payment_id: int | None = None


class ClaimStatus(str, Enum):
    ready = "ready"
    submitted = "submitted"
    in_review = "in_review"
    paid = "paid"
    rejected = "rejected"


class ClaimItem(Record):
    type: ItemType
    item_id: int
    description: str = ""
    quantity: int = 1
    unit_price: Amount = 0
    total_price: Amount = 0


class InsuranceClaim(Record):
    id: int | None = None
    insurance_company_id: int
    submission_date: str
    received_date: str | None = None
    items: list[ClaimItem] = []
    expected_amount: Amount = 0
    received_amount: Amount | None = None
    status: ClaimStatus = ClaimStatus.ready
    deposit_account_id: int | None = None
    notes: str = ""


class InventoryItem(Record):
    id: int | None = None
    name: str = ""
    quantity: int = 0
    reorder_point: int = 0
    purchase_price: Amount = 0
    sale_price: Amount = 0

    @property
    def needs_reorder(self) -> bool:
        return self.quantity <= self.reorder_point


class Employee(Record):
    id: int | None = None
    name: str
    role: str = ""
    salary_type: Literal["monthly", "hourly"] = "monthly"
    base_salary: Amount = 0
    default_monthly_hours: int | None = None
    housing_allowance: Amount = 0
    child_allowance: Amount = 0
    tax_rate: float = 0
    insurance_deduction: Amount = 0
    next_payment_date: str | None = None
    pay_day: int | None = None


class SettlementStatus(str, Enum):
    pending = "pending"
    paid = "paid"


class Payslip(Record):
    id: int | None = None
    employee_id: int
    employee_name: str = ""
    date: str
    pay_period: str
    base_salary: Amount = 0
    hours_worked: int | None = None
    housing_allowance: Amount = 0
    child_allowance: Amount = 0
    commission_total: Amount = 0
    other_allowances: Amount = 0
    total_earnings: Amount = 0
    tax_deduction: Amount = 0
    insurance_deduction: Amount = 0
    other_deductions: Amount = 0
    advance_deduction: Amount = 0
    total_deductions: Amount = 0
    net_payable: Amount = 0
    status: SettlementStatus = SettlementStatus.pending
    payment_id: int | None = None


class PayableReceivable(Record):
    id: int | None = None
    type: Literal["payable", "receivable"]
    entity_id: str = ""
    description: str = ""
    amount: Amount = Field(gt=0)
    issue_date: str = ""
    due_date: str = ""
    status: SettlementStatus = SettlementStatus.pending
    payment_id: int | None = None
    tags: list[str] = []

    @property
    def direction(self) -> Direction:
        if self.type == "payable":
            return Direction.disbursement
        return Direction.receipt
