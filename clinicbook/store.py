"""Key-value persistence used by the posting engine.

`Store` is the abstract collaborator: a set of named collections holding
JSON-compatible dicts keyed by an autoincrement integer or a string.
`MemoryStore` keeps everything in process and supports transactions that
roll back on error. `Repository` gives typed access to one collection.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from copy import deepcopy
from enum import Enum
from typing import Generic, Iterator, Type, TypeVar

from pydantic import BaseModel

from .base import NotFoundError

Key = int | str


def _name(collection) -> str:
    return collection.value if isinstance(collection, Enum) else collection


class Collection(str, Enum):
    accounts = "accounts"
    ledger = "ledger"
    payments = "payments"
    invoices = "invoices"
    expenses = "expenses"
    transfers = "transfers"
    claims = "claims"
    payslips = "payslips"
    payables_receivables = "payablesReceivables"
    inventory = "inventory"
    employees = "employees"
    income_records = "incomeRecords"
    settings = "settings"


class Store(ABC):
    """Abstract store with get/put/delete/list operations per collection."""

    def __init__(self):
        self._lock = threading.RLock()

    @abstractmethod
    def get(self, collection: str, key: Key) -> dict | None:
        pass

    @abstractmethod
    def put(self, collection: str, value: dict, key: Key | None = None) -> Key:
        """Insert or replace *value*, assign autoincrement key if none given."""

    @abstractmethod
    def get_all(self, collection: str) -> list[dict]:
        pass

    @abstractmethod
    def delete(self, collection: str, key: Key) -> None:
        pass

    @abstractmethod
    def clear(self, collection: str) -> None:
        pass

    @property
    def generation(self) -> int:
        """Counter that changes whenever collections are bulk-replaced."""
        return 0

    @contextmanager
    def transaction(self) -> Iterator["Store"]:
        """Serialise writers. Subclasses may add rollback."""
        with self._lock:
            yield self


class MemoryStore(Store):
    def __init__(self):
        super().__init__()
        self._data: dict[str, dict[Key, dict]] = {}
        self._counters: dict[str, int] = {}
        self._generation = 0
        self._depth = 0

    def _collection(self, collection: str) -> dict[Key, dict]:
        return self._data.setdefault(_name(collection), {})

    def get(self, collection, key):
        value = self._collection(collection).get(key)
        return deepcopy(value) if value is not None else None

    def put(self, collection, value, key=None):
        name = _name(collection)
        if key is None:
            key = value.get("id")
        if key is None:
            key = self._counters.get(name, 1)
        if isinstance(key, int):
            self._counters[name] = max(self._counters.get(name, 1), key + 1)
        record = deepcopy(value)
        record["id"] = key
        self._collection(name)[key] = record
        return key

    def get_all(self, collection):
        return [deepcopy(value) for value in self._collection(collection).values()]

    def delete(self, collection, key):
        self._collection(collection).pop(key, None)

    def clear(self, collection):
        self._collection(collection).clear()
        self._counters.pop(_name(collection), None)
        self._generation += 1

    @property
    def generation(self) -> int:
        return self._generation

    @contextmanager
    def transaction(self):
        """Run block atomically: restore every collection if it raises.

        Nested transactions join the outermost one.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return
            snapshot = deepcopy(self._data), dict(self._counters)
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._data, self._counters = snapshot
                self._generation += 1
                raise
            finally:
                self._depth = 0


T = TypeVar("T", bound=BaseModel)


class Repository(Generic[T]):
    """Typed access to a single collection."""

    def __init__(self, store: Store, collection: Collection, model: Type[T]):
        self.store = store
        self.collection = collection
        self.model = model

    @property
    def what(self) -> str:
        return self.model.__name__

    def find(self, key: Key | None) -> T | None:
        if key is None:
            return None
        value = self.store.get(self.collection, key)
        return self.model.model_validate(value) if value is not None else None

    def get(self, key: Key) -> T:
        record = self.find(key)
        if record is None:
            raise NotFoundError(f"{self.what} {key} not found.")
        return record

    def all(self) -> list[T]:
        return [self.model.model_validate(v) for v in self.store.get_all(self.collection)]

    def save(self, record: T) -> T:
        """Persist *record*, returning a copy with the assigned id."""
        data = record.model_dump(mode="json")
        key = self.store.put(self.collection, data, data.get("id"))
        return record.model_copy(update={"id": key})

    def delete(self, key: Key) -> None:
        self.store.delete(self.collection, key)

    def __contains__(self, key) -> bool:
        return self.store.get(self.collection, key) is not None
