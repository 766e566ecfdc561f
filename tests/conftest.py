import pytest

from clinicbook import T5, Account, Book, Collection, InventoryItem, Invoice, MemoryStore

TODAY = "1403/05/20"


@pytest.fixture
def accounts():
    return [
        Account(id=1, name="Assets", t=T5.Asset, code="1"),
        Account(id=2, name="Liabilities", t=T5.Liability, code="2"),
        Account(id=3, name="Equity", t=T5.Equity, code="3"),
        Account(id=4, name="Income", t=T5.Income, code="4"),
        Account(id=5, name="Expenses", t=T5.Expense, code="5"),
        Account(id=10, name="Current assets", t=T5.Asset, code="10", parent_id=1),
        Account(id=1010, name="Cash box", t=T5.Asset, code="1010", parent_id=10),
        Account(id=1020, name="Bank", t=T5.Asset, code="1020", parent_id=10),
        Account(id=1030, name="Receivables", t=T5.Asset, code="1030", parent_id=10),
        Account(id=20, name="Current liabilities", t=T5.Liability, code="20", parent_id=2),
        Account(id=2010, name="Payables", t=T5.Liability, code="2010", parent_id=20),
        Account(id=2020, name="Salaries payable", t=T5.Liability, code="2020", parent_id=20),
        Account(id=3010, name="Owner capital", t=T5.Equity, code="3010", parent_id=3),
        Account(id=4010, name="Medical services", t=T5.Income, code="4010", parent_id=4),
        Account(id=4020, name="Goods sales", t=T5.Income, code="4020", parent_id=4),
        Account(id=5010, name="Salaries", t=T5.Expense, code="5010", parent_id=5),
        Account(id=5020, name="Rent", t=T5.Expense, code="5020", parent_id=5),
        Account(id=5040, name="Supplies", t=T5.Expense, code="5040", parent_id=5),
    ]


@pytest.fixture
def store(accounts):
    store = MemoryStore()
    for account in accounts:
        store.put(Collection.accounts, account.model_dump(mode="json"))
    for item in [
        InventoryItem(id=7, name="Syringe 5cc", quantity=10, reorder_point=5),
        InventoryItem(id=8, name="Sterile gauze", quantity=2, reorder_point=1),
    ]:
        store.put(Collection.inventory, item.model_dump(mode="json"))
    return store


@pytest.fixture
def book(store):
    return Book(store, today=lambda: TODAY)


@pytest.fixture
def invoice(book):
    return book.add_invoice(
        Invoice(
            id="INV-1",
            recipient_name="Ali Rezaei",
            date="1403/05/08",
            total_amount=140000,
            patient_share=140000,
        )
    ).event


@pytest.fixture
def stock_of(book):
    return lambda item_id: book.stock.items.get(item_id).quantity
