import pytest
from pydantic import ValidationError

from clinicbook import ClinicBookError, LedgerEntry, MemoryStore
from clinicbook.ledger import LedgerStore, reference, split_reference


@pytest.fixture
def ledger():
    ledger = LedgerStore(MemoryStore())
    ledger.post(
        [
            LedgerEntry(date="1403/05/01", account_id=1010, debit=100, reference_id="payment-1"),
            LedgerEntry(date="1403/05/01", account_id=1030, credit=100, reference_id="payment-1"),
            LedgerEntry(date="1403/05/10", account_id=5040, debit=30, reference_id="expense-1"),
            LedgerEntry(date="1403/05/10", account_id=1010, credit=30, reference_id="expense-1"),
            LedgerEntry(date="bad date", account_id=1010, debit=7),
        ]
    )
    return ledger


def test_reference():
    assert reference("payment", 12) == "payment-12"
    assert split_reference("payment-12") == ("payment", "12")


def test_post_assigns_ids(ledger):
    assert [row.id for row in ledger.list_all()] == [1, 2, 3, 4, 5]


def test_find_by_reference(ledger):
    rows = ledger.find_by_reference("payment-1")
    assert [row.account_id for row in rows] == [1010, 1030]
    assert ledger.find_by_reference("payment-2") == []


def test_retire_deletes_family(ledger):
    assert ledger.retire("payment-1") == [1, 2]
    assert ledger.find_by_reference("payment-1") == []
    assert [row.id for row in ledger.list_all()] == [3, 4, 5]
    assert ledger.retire("payment-1") == []


def test_references(ledger):
    assert sorted(ledger.references()) == ["expense-1", "payment-1"]


def test_list_in_range_filters_account_and_dates(ledger):
    rows = ledger.list_in_range(1010, "1403/05/05", "1403/05/31")
    assert [row.id for row in rows] == [4]


def test_list_in_range_leaves_out_malformed_dates(ledger):
    assert 5 not in [row.id for row in ledger.list_in_range()]


def test_negative_amount_is_rejected_by_model():
    with pytest.raises(ValidationError):
        LedgerEntry(date="1403/05/01", account_id=1010, debit=-1)


def test_append_rejects_negative_amount():
    row = LedgerEntry.model_construct(date="1403/05/01", account_id=1010, debit=-5, credit=0)
    with pytest.raises(ClinicBookError):
        LedgerStore(MemoryStore()).append(row)


def test_index_is_rebuilt_after_store_clear(ledger):
    assert ledger.find_by_reference("payment-1")
    ledger.store.clear("ledger")
    ledger.store.put(
        "ledger",
        {"date": "1403/06/01", "account_id": 1020, "debit": 9, "credit": 0, "reference_id": "claim-9"},
    )
    assert ledger.find_by_reference("payment-1") == []
    assert len(ledger.find_by_reference("claim-9")) == 1
