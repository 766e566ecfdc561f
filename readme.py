from clinicbook import (
    T5,
    Account,
    Book,
    Collection,
    Entry,
    Expense,
    Invoice,
    InvoiceItem,
    InventoryItem,
    Payment,
    backup,
)
from clinicbook.log import setup_logging

setup_logging()

# Create chart of accounts
# fmt: off
book = Book(today=lambda: "1403/05/20").add_accounts([
    Account(id=1, name="Assets", t=T5.Asset, code="1"),
    Account(id=3, name="Equity", t=T5.Equity, code="3"),
    Account(id=5, name="Expenses", t=T5.Expense, code="5"),
    Account(id=1010, name="Cash box", t=T5.Asset, code="1010", parent_id=1),
    Account(id=1020, name="Bank", t=T5.Asset, code="1020", parent_id=1),
    Account(id=1030, name="Receivables", t=T5.Asset, code="1030", parent_id=1),
    Account(id=3010, name="Owner capital", t=T5.Equity, code="3010", parent_id=3),
    Account(id=5040, name="Supplies", t=T5.Expense, code="5040", parent_id=5),
])
# fmt: on
book.stock.items.save(InventoryItem(id=7, name="Syringe 5cc", quantity=10, reorder_point=5))

# Opening balance
opening = Entry("1403/05/01", description="Owner investment").amount(100_000)
book.ledger.post(opening.debit(1010).credit(3010))

# Invoice a patient, taking syringes out of stock
book.add_invoice(
    Invoice(
        id="INV-1",
        recipient_name="Ali Rezaei",
        date="1403/05/08",
        items=[InvoiceItem(type="inventory", id=7, name="Syringe 5cc", quantity=3, price=15000)],
        total_amount=45000,
        patient_share=45000,
    )
)
assert book.stock.items.get(7).quantity == 7

# Patient pays into the bank account
changes = book.add_payment(
    Payment(date="1403/05/08", amount=45000, direction="receipt", account_id=1020, invoice_id="INV-1")
)
print(changes.saved_in(Collection.invoices)[0].status)

# Buy supplies from the cash box
book.add_expense(
    Expense(
        date="1403/05/10",
        description="Gauze",
        amount=20000,
        expense_account_id=5040,
        from_account_id=1010,
    )
)

# Balances are always derived from ledger rows
assert book.balance(1020) == 45000
assert book.balance(1010) == 80000
assert book.balance_with_descendants(1) == 80000
assert book.balance_sheet().is_balanced()

# Reports
print(book.income_statement("1403/05/01", "1403/05/31"))
print(book.aging())

# Save everything to a JSON file in current folder
backup.save(book.store, "clinicbook.json", allow_overwrite=True)
