import pytest

from clinicbook import Entry, PostingValidationError


def test_entry_rows_share_reference():
    entry = Entry("1403/05/01", "expense-1", "Rent").amount(10).debit(5020).credit(1010)
    rows = entry.to_rows()
    assert entry.is_balanced()
    assert [(r.account_id, r.debit, r.credit) for r in rows] == [(5020, 10, 0), (1010, 0, 10)]
    assert {r.reference_id for r in rows} == {"expense-1"}
    assert {r.description for r in rows} == {"Rent"}


def test_entry_line_description_overrides_default():
    entry = Entry("1403/05/01", description="Rent").debit(5020, 10, "Office rent")
    assert entry.lines[0].description == "Office rent"


def test_entry_without_amount_raises():
    with pytest.raises(PostingValidationError):
        Entry("1403/05/01").debit(5020)


def test_entry_without_account_raises():
    with pytest.raises(PostingValidationError):
        Entry("1403/05/01").amount(5).debit(None)


def test_single_sided_entry_is_not_balanced():
    entry = Entry("1403/05/01", "payment-1").credit(1010, 5)
    assert entry.debits == 0
    assert entry.credits == 5
    with pytest.raises(PostingValidationError):
        entry.validate()
