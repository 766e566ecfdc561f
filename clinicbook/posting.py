"""Transaction posters: one per kind of money-moving business event.

Each poster keeps three things consistent for its event: the event record,
the ledger rows tagged with the event's reference id, and any dependent
record the event changes (invoice paid amount, stock on hand, payslip or
payable status).

All posters follow one pattern:

- `create` saves the event, posts its ledger rows and applies the
  dependent change;
- `update` reverts the dependent change of the stored version, retires its
  ledger rows, saves the new version and posts it again, so the end state
  equals delete followed by create;
- `delete` deletes child events first, then reverts, retires and removes
  the event.

Every call runs in one store transaction and returns `Changes`, the records
saved and deleted per collection, so a caller can refresh its own copies
without reloading everything.
"""

import logging
from abc import ABC
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Type, TypeVar

from pydantic import BaseModel

from . import dates
from .config import Settings
from .entry import Entry
from .ledger import LedgerStore, reference
from .models import LedgerEntry
from .store import Collection, Key, Repository, Store

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class Context:
    """Collaborators shared by all posters of one book.

    Without *fixed_settings* the settings record is read from the store and
    read again after the store is bulk-replaced.
    """

    store: Store
    fixed_settings: Settings | None = None
    today: Callable[[], str] = dates.today
    ledger: LedgerStore = field(init=False)

    def __post_init__(self):
        self.ledger = LedgerStore(self.store)
        self._settings: Settings | None = None
        self._generation = self.store.generation

    @property
    def settings(self) -> Settings:
        if self.fixed_settings is not None:
            return self.fixed_settings
        if self._settings is None or self._generation != self.store.generation:
            self._settings = Settings.from_store(self.store)
            self._generation = self.store.generation
        return self._settings


@dataclass
class Changes:
    """Records saved and deleted by one poster call."""

    event: BaseModel | None = None
    saved: dict[Collection, list[BaseModel]] = field(default_factory=dict)
    deleted: dict[Collection, list[Key]] = field(default_factory=dict)

    def save(self, collection: Collection, record: BaseModel):
        """Remember saved record, replacing an earlier copy with the same id."""
        records = self.saved.setdefault(collection, [])
        key = getattr(record, "id", None)
        records[:] = [r for r in records if getattr(r, "id", None) != key]
        records.append(record)
        if key in self.deleted.get(collection, []):
            self.deleted[collection].remove(key)
        return self

    def save_many(self, collection: Collection, records: Iterable[BaseModel]):
        for record in records:
            self.save(collection, record)
        return self

    def delete(self, collection: Collection, key: Key):
        records = self.saved.get(collection, [])
        records[:] = [r for r in records if getattr(r, "id", None) != key]
        keys = self.deleted.setdefault(collection, [])
        if key not in keys:
            keys.append(key)
        return self

    def merge(self, other: "Changes"):
        for collection, keys in other.deleted.items():
            for key in keys:
                self.delete(collection, key)
        for collection, records in other.saved.items():
            self.save_many(collection, records)
        return self

    def saved_in(self, collection: Collection) -> list:
        return list(self.saved.get(collection, []))

    def deleted_from(self, collection: Collection) -> list[Key]:
        return list(self.deleted.get(collection, []))

    @property
    def ledger_rows(self) -> list[LedgerEntry]:
        return self.saved_in(Collection.ledger)

    @property
    def deleted_ledger_ids(self) -> list[int]:
        return self.deleted_from(Collection.ledger)  # type: ignore


class Poster(ABC, Generic[T]):
    """Base poster. Subclasses set the class attributes and override hooks."""

    collection: Collection
    model: Type[T]
    family: str | None = None

    def __init__(self, ctx: Context):
        self.ctx = ctx
        self.events: Repository[T] = Repository(ctx.store, self.collection, self.model)

    @property
    def store(self) -> Store:
        return self.ctx.store

    @property
    def settings(self) -> Settings:
        return self.ctx.settings

    @property
    def ledger(self) -> LedgerStore:
        return self.ctx.ledger

    def reference(self, event: T) -> str | None:
        if self.family is None:
            return None
        return reference(self.family, event.id)  # type: ignore

    # Hooks

    def prepare(self, event: T, changes: Changes) -> T:
        """Validate a new event before it is saved."""
        return event

    def carry_over(self, old: T, event: T, changes: Changes) -> T:
        """Validate an updated event, keeping stored fields it must not change."""
        return self.prepare(event, changes)

    def entries(self, event: T) -> Entry | None:
        """Ledger lines of the event, None if the event does not post."""
        return None

    def apply(self, event: T, changes: Changes) -> None:
        """Forward change of dependent records."""

    def revert(self, event: T, changes: Changes) -> None:
        """Inverse of `apply`."""

    def children(self, event: T) -> list[tuple["Poster", Key]]:
        """Events to delete before this one."""
        return []

    # Ledger

    def post(self, event: T, changes: Changes) -> list[LedgerEntry]:
        entry = self.entries(event)
        if entry is None or not entry.lines:
            return []
        if not entry.is_balanced():
            if self.settings.enforce_balanced_postings:
                entry.validate()
            logger.debug(
                "Unbalanced posting %s: debits %d, credits %d",
                entry.reference_id,
                entry.debits,
                entry.credits,
            )
        rows = self.ledger.post(entry.to_rows())
        changes.save_many(Collection.ledger, rows)
        logger.debug("Posted %d ledger rows for %s", len(rows), entry.reference_id)
        return rows

    def retire(self, event: T, changes: Changes) -> list[int]:
        reference_id = self.reference(event)
        if reference_id is None:
            return []
        ids = self.ledger.retire(reference_id)
        for key in ids:
            changes.delete(Collection.ledger, key)
        return ids

    def _save(self, event: T, changes: Changes) -> T:
        event = self.events.save(event)
        changes.save(self.collection, event)
        return event

    # Operations

    def create(self, event: T) -> Changes:
        with self.store.transaction():
            changes = Changes()
            event = self.prepare(event, changes)
            event = self._save(event, changes)
            self.post(event, changes)
            self.apply(event, changes)
            changes.event = self.events.get(event.id)  # type: ignore
            logger.debug("Created %s %s", self.events.what, event.id)  # type: ignore
            return changes

    def update(self, event: T) -> Changes:
        with self.store.transaction():
            changes = Changes()
            old = self.events.get(event.id)  # type: ignore
            self.revert(old, changes)
            self.retire(old, changes)
            event = self.carry_over(old, event, changes)
            event = self._save(event, changes)
            self.post(event, changes)
            self.apply(event, changes)
            changes.event = self.events.get(event.id)  # type: ignore
            logger.debug("Updated %s %s", self.events.what, event.id)  # type: ignore
            return changes

    def delete(self, key: Key) -> Changes:
        with self.store.transaction():
            changes = Changes()
            event = self.events.get(key)
            for poster, child_key in self.children(event):
                changes.merge(poster.delete(child_key))
            event = self.events.get(key)
            self.revert(event, changes)
            self.retire(event, changes)
            self.events.delete(key)
            changes.delete(self.collection, key)
            changes.event = event
            logger.debug("Deleted %s %s", self.events.what, key)
            return changes
