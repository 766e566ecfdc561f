"""Settings of the books, saved to and loaded from plain JSON."""

from pydantic import BaseModel, ConfigDict

from .base import SaveLoadMixin
from .store import Collection, Store


class Settings(BaseModel, SaveLoadMixin):
    """Accounts the posters use by default and other switches."""

    model_config = ConfigDict(extra="ignore")

    cash_account_id: int = 1010
    bank_account_id: int = 1020
    receivable_account_id: int = 1030
    payable_account_id: int = 2010
    invoice_prefix: str = "F"
    default_monthly_hours: int = 160
    income_entity_id: str = "custom-income"
    enforce_balanced_postings: bool = False

    @classmethod
    def from_store(cls, store: Store, key: str = "config"):
        """Read settings record from store, defaults if there is none."""
        data = store.get(Collection.settings, key)
        return cls.model_validate(data) if data else cls()

    def to_store(self, store: Store, key: str = "config"):
        store.put(Collection.settings, self.model_dump(), key)
        return self
