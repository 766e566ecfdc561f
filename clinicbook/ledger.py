"""Ledger store: dated debit and credit rows tagged by reference id.

Rows are appended by posters and deleted only when the event that owns
them is reversed. A reference family is the set of rows sharing one
``reference_id`` of the form ``<family>-<event id>``; `retire` deletes a
whole family at once.

The store keeps an index from reference id to row ids. The index is
dropped whenever the underlying store reports a new generation (a clear,
a restore or a rolled back transaction), so it never outlives the data
it was built from.
"""

import logging
from typing import Iterable

from .base import ClinicBookError
from .dates import in_range
from .models import LedgerEntry
from .store import Collection, Key, Repository, Store

logger = logging.getLogger(__name__)


def reference(family: str, event_id: Key) -> str:
    return f"{family}-{event_id}"


def split_reference(reference_id: str) -> tuple[str, str]:
    family, _, event_id = reference_id.partition("-")
    return family, event_id


class LedgerStore:
    def __init__(self, store: Store):
        self.store = store
        self.rows = Repository(store, Collection.ledger, LedgerEntry)
        self._index: dict[str, list[int]] | None = None
        self._generation = store.generation

    @property
    def index(self) -> dict[str, list[int]]:
        if self._index is None or self._generation != self.store.generation:
            self._index = {}
            for row in self.rows.all():
                if row.reference_id:
                    self._index.setdefault(row.reference_id, []).append(row.id)  # type: ignore
            self._generation = self.store.generation
        return self._index

    def append(self, entry: LedgerEntry) -> int:
        if entry.debit < 0 or entry.credit < 0:
            raise ClinicBookError(f"Negative amount in ledger row: {entry}")
        index = self.index
        saved = self.rows.save(entry.model_copy(update={"id": None}))
        if saved.reference_id:
            index.setdefault(saved.reference_id, []).append(saved.id)  # type: ignore
        return saved.id  # type: ignore

    def post(self, entries: Iterable[LedgerEntry]) -> list[LedgerEntry]:
        """Append rows and return them with assigned ids."""
        return [entry.model_copy(update={"id": self.append(entry)}) for entry in entries]

    def find_by_reference(self, reference_id: str) -> list[LedgerEntry]:
        rows = (self.rows.find(key) for key in self.index.get(reference_id, []))
        return [row for row in rows if row is not None]

    def delete_many(self, ids: Iterable[int]) -> None:
        index = self.index
        for key in ids:
            row = self.rows.find(key)
            if row is None:
                continue
            self.rows.delete(key)
            if row.reference_id in index:
                index[row.reference_id].remove(key)
                if not index[row.reference_id]:
                    del index[row.reference_id]

    def retire(self, reference_id: str) -> list[int]:
        """Delete every row of a reference family, return deleted row ids."""
        ids = [row.id for row in self.find_by_reference(reference_id)]
        self.delete_many(ids)  # type: ignore
        if ids:
            logger.debug("Retired %d ledger rows of %s", len(ids), reference_id)
        return ids  # type: ignore

    def list_all(self) -> list[LedgerEntry]:
        return self.rows.all()

    def list_in_range(
        self,
        account_id: int | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[LedgerEntry]:
        """Rows dated within [date_from, date_to], optionally for one account.

        Rows with malformed dates are left out.
        """
        return [
            row
            for row in self.list_all()
            if (account_id is None or row.account_id == account_id)
            and in_range(row.date, date_from, date_to)
        ]

    def references(self) -> list[str]:
        return list(self.index.keys())
