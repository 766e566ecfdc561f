import pytest

from clinicbook import Expense, NotFoundError, PostingValidationError, Transfer


@pytest.fixture
def expense(book):
    return book.add_expense(
        Expense(
            date="1403/04/08",
            description="Syringes",
            amount=2500000,
            expense_account_id=5040,
            from_account_id=1010,
        )
    ).event


def rows(book, reference_id):
    return book.ledger.find_by_reference(reference_id)


def test_expense_posts_two_rows(book, expense):
    assert [(r.account_id, r.debit, r.credit, r.description) for r in rows(book, "expense-1")] == [
        (5040, 2500000, 0, "Syringes"),
        (1010, 0, 2500000, "Paid for: Syringes"),
    ]
    assert book.balance(5040) == 2500000
    assert book.balance(1010) == -2500000


def test_expense_update_replaces_rows(book, expense):
    changes = book.update_expense(expense.model_copy(update={"amount": 3000000}))
    assert len(changes.deleted_ledger_ids) == 2
    assert len(rows(book, "expense-1")) == 2
    assert book.balance(5040) == 3000000
    assert book.balance(1010) == -3000000


def test_expense_delete(book, expense):
    book.delete_expense(expense.id)
    assert rows(book, "expense-1") == []
    assert book.balance(5040) == 0
    assert book.expenses.events.all() == []


def test_expense_same_update_is_neutral(book, expense):
    before = book.balances().all()
    book.update_expense(expense)
    assert book.balances().all() == before
    assert len(book.ledger.list_all()) == 2


def test_expense_needs_both_accounts(book):
    with pytest.raises(PostingValidationError):
        book.add_expense(Expense(date="1403/04/08", amount=10, expense_account_id=5040))
    assert book.expenses.events.all() == []


def test_update_missing_expense(book):
    with pytest.raises(NotFoundError):
        book.update_expense(
            Expense(id=5, date="1403/04/08", amount=10, expense_account_id=5040, from_account_id=1010)
        )


@pytest.fixture
def transfer(book):
    return book.add_transfer(
        Transfer(date="1403/05/01", from_account_id=1010, to_account_id=1020, amount=1000)
    ).event


def test_transfer_moves_money(book, transfer):
    assert book.balance(1010) == -1000
    assert book.balance(1020) == 1000
    assert book.balance_with_descendants(10) == 0
    descriptions = [r.description for r in rows(book, "transfer-1")]
    assert descriptions == ["Withdrawal: Funds transfer", "Deposit: Funds transfer"]


def test_transfer_update_and_delete(book, transfer):
    book.update_transfer(transfer.model_copy(update={"amount": 2000}))
    assert book.balance(1020) == 2000
    assert len(rows(book, "transfer-1")) == 2
    book.delete_transfer(transfer.id)
    assert book.ledger.list_all() == []


def test_transfer_to_same_account(book):
    with pytest.raises(PostingValidationError):
        book.add_transfer(
            Transfer(date="1403/05/01", from_account_id=1010, to_account_id=1010, amount=5)
        )


def test_transfer_needs_both_accounts(book):
    with pytest.raises(PostingValidationError):
        book.add_transfer(Transfer(date="1403/05/01", from_account_id=1010, amount=5))
