from enum import Enum
from pathlib import Path
from typing import Iterable

Amount = int


class ClinicBookError(Exception):
    """Custom error for the clinicbook project."""

    @staticmethod
    def must_exist(collection: Iterable, key, what: str = "Record"):
        if key not in collection:
            raise NotFoundError(f"{what} {key} not found.")

    @staticmethod
    def must_not_exist(collection: Iterable, key, what: str = "Record"):
        if key in collection:
            raise ClinicBookError(f"{what} {key} already exists.")


class NotFoundError(ClinicBookError):
    """Referenced entity is missing from the store."""


class InsufficientStockError(ClinicBookError):
    """Inventory out adjustment would drive quantity below zero."""


class PostingValidationError(ClinicBookError):
    """Event lacks a required linkage or cannot be posted in its state."""


class ReferenceIntegrityWarning(UserWarning):
    """Ledger row refers to an event that no longer exists."""


class T5(Enum):
    Asset = "asset"
    Liability = "liability"
    Equity = "equity"
    Income = "income"
    Expense = "expense"

    def __repr__(self):
        return self.value.capitalize()

    @property
    def is_debit_normal(self) -> bool:
        return self in {T5.Asset, T5.Expense}


class SaveLoadMixin:
    """A mix-in class for loading and saving pydantic models to files."""

    @classmethod
    def load(cls, filename: str | Path):
        return cls.model_validate_json(Path(filename).read_text())  # type: ignore

    def save(self, filename: str | Path, allow_overwrite: bool = False):
        if not allow_overwrite and Path(filename).exists():
            raise FileExistsError(f"File already exists: {filename}")
        content = self.model_dump_json(indent=2, warnings=False)  # type: ignore
        Path(filename).write_text(content)  # type: ignore
