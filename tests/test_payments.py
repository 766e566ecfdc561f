import pytest

from clinicbook import Collection, Invoice, NotFoundError, Payment, PostingValidationError
from clinicbook.models import Direction, InvoiceStatus


def receipt(amount, invoice_id="INV-1", account_id=1020, **kwargs):
    return Payment(
        date="1403/05/08",
        amount=amount,
        direction="receipt",
        account_id=account_id,
        invoice_id=invoice_id,
        **kwargs,
    )


def get_invoice(book, key="INV-1"):
    return book.invoices.events.get(key)


def rows_of(book, payment):
    return book.ledger.find_by_reference(f"payment-{payment.id}")


def test_receipt_settles_invoice(book, invoice):
    changes = book.add_payment(receipt(140000))
    payment = changes.event
    assert get_invoice(book).paid_amount == 140000
    assert get_invoice(book).status == InvoiceStatus.paid
    assert [(r.account_id, r.debit, r.credit) for r in rows_of(book, payment)] == [
        (1020, 140000, 0),
        (1030, 0, 140000),
    ]
    assert len(changes.ledger_rows) == 2
    assert changes.saved_in(Collection.invoices)[0].status == InvoiceStatus.paid


def test_deleting_receipt_restores_invoice(book, invoice):
    payment = book.add_payment(receipt(140000)).event
    changes = book.delete_payment(payment.id)
    assert get_invoice(book).paid_amount == 0
    assert get_invoice(book).status == InvoiceStatus.unpaid
    assert rows_of(book, payment) == []
    assert len(changes.deleted_ledger_ids) == 2
    assert changes.deleted_from(Collection.payments) == [payment.id]


def test_partial_receipt(book, invoice):
    book.add_payment(receipt(40000))
    assert get_invoice(book).status == InvoiceStatus.partially_paid
    assert get_invoice(book).amount_due == 100000


def test_update_amount_reposts(book, invoice):
    payment = book.add_payment(receipt(40000)).event
    old_ids = [r.id for r in rows_of(book, payment)]
    changes = book.update_payment(payment.model_copy(update={"amount": 100000}))
    assert sorted(changes.deleted_ledger_ids) == sorted(old_ids)
    assert [r.debit for r in changes.ledger_rows] == [100000, 0]
    assert len(rows_of(book, payment)) == 2
    assert get_invoice(book).paid_amount == 100000


def test_update_moves_payment_to_other_invoice(book, invoice):
    book.add_invoice(Invoice(id="INV-2", date="1403/05/09", patient_share=90000))
    payment = book.add_payment(receipt(60000)).event
    book.update_payment(payment.model_copy(update={"invoice_id": "INV-2"}))
    assert get_invoice(book).paid_amount == 0
    assert get_invoice(book, "INV-2").paid_amount == 60000


def test_paid_amount_equals_sum_of_payments(book, invoice):
    p1 = book.add_payment(receipt(50000)).event
    p2 = book.add_payment(receipt(30000)).event
    book.update_payment(p1.model_copy(update={"amount": 60000}))
    book.delete_payment(p2.id)
    assert get_invoice(book).paid_amount == 60000
    assert book.payments.paid_towards("INV-1") == 60000


def test_same_update_changes_nothing_but_row_ids(book, invoice):
    payment = book.add_payment(receipt(40000)).event
    before = book.balances().all()
    book.update_payment(payment)
    assert book.balances().all() == before
    assert get_invoice(book).paid_amount == 40000
    assert len(rows_of(book, payment)) == 2


def test_disbursement_credits_account_only(book):
    payment = book.add_payment(
        Payment(date="1403/05/08", amount=700, direction="disbursement", account_id=1010)
    ).event
    rows = rows_of(book, payment)
    assert [(r.account_id, r.debit, r.credit) for r in rows] == [(1010, 0, 700)]
    assert rows[0].description == "Payment made"
    assert book.balance(1010) == -700


def test_receipt_without_invoice_debits_account_only(book):
    payment = book.add_payment(receipt(500, invoice_id=None, description="Walk-in")).event
    rows = rows_of(book, payment)
    assert [(r.account_id, r.debit, r.description) for r in rows] == [(1020, 500, "Walk-in")]


def test_payment_without_account_is_rejected(book, invoice):
    with pytest.raises(PostingValidationError):
        book.add_payment(receipt(100, account_id=None))
    assert book.payments.events.all() == []
    assert book.ledger.list_all() == []


def test_payment_to_unknown_invoice(book):
    with pytest.raises(NotFoundError):
        book.add_payment(receipt(100, invoice_id="INV-404"))


def test_disbursement_cannot_settle_invoice(book, invoice):
    payment = receipt(100).model_copy(update={"direction": Direction.disbursement})
    with pytest.raises(PostingValidationError):
        book.add_payment(payment)


def test_update_unknown_payment(book):
    with pytest.raises(NotFoundError):
        book.update_payment(receipt(100, invoice_id=None, id=42))


def test_delete_unknown_payment(book):
    with pytest.raises(NotFoundError):
        book.delete_payment(42)


def test_failed_apply_rolls_back(book, invoice, monkeypatch):
    def boom(event, changes):
        raise RuntimeError("disk full")

    monkeypatch.setattr(book.payments, "apply", boom)
    with pytest.raises(RuntimeError):
        book.add_payment(receipt(100))
    assert book.payments.events.all() == []
    assert book.ledger.list_all() == []
    assert book.ledger.references() == []
    assert get_invoice(book).paid_amount == 0
