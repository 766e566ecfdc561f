"""Account balances derived from ledger rows.

Balances are never stored. `Balances.balance` folds the rows of one account
as debit minus credit; `balance_with_descendants` adds the balances of all
child accounts in the account tree.
"""

import logging
import warnings
from collections import UserDict
from dataclasses import dataclass, field
from typing import Iterable

from .base import T5, Amount, ClinicBookError, ReferenceIntegrityWarning
from .dates import to_sortable
from .ledger import LedgerStore, split_reference
from .models import Account
from .store import Collection, Store

logger = logging.getLogger(__name__)

# Collections that own each reference family.
OWNERS = {
    "payment": Collection.payments,
    "expense": Collection.expenses,
    "transfer": Collection.transfers,
    "claim": Collection.claims,
}


class AccountTree(UserDict[int, Account]):
    """Accounts by id with parent pointers."""

    @classmethod
    def from_accounts(cls, accounts: Iterable[Account]):
        return cls({account.id: account for account in accounts})

    @classmethod
    def from_store(cls, store: Store):
        return cls.from_accounts(
            Account.model_validate(value) for value in store.get_all(Collection.accounts)
        )

    def children(self, account_id: int) -> list[Account]:
        return [a for a in self.data.values() if a.parent_id == account_id]

    def is_leaf(self, account_id: int) -> bool:
        return not self.children(account_id)

    def is_debit_account(self, account_id: int) -> bool:
        ClinicBookError.must_exist(self.data, account_id, "Account")
        return self.data[account_id].t.is_debit_normal

    def by_type(self, t: T5, detail_only: bool = False) -> list[Account]:
        return [
            a
            for a in self.data.values()
            if a.t == t and (not detail_only or a.parent_id is not None)
        ]

    def descendants(self, account_id: int) -> list[int]:
        """Ids of account and all accounts below it, each visited once."""
        seen: list[int] = []
        stack = [account_id]
        while stack:
            current = stack.pop()
            if current in seen:
                logger.warning("Account tree has a cycle through %s", current)
                continue
            seen.append(current)
            stack.extend(child.id for child in self.children(current))
        return seen


def orphan_references(store: Store, ledger: LedgerStore) -> list[str]:
    """Reference ids whose owning event is missing from the store."""
    orphans = []
    for reference_id in ledger.references():
        family, event_id = split_reference(reference_id)
        collection = OWNERS.get(family)
        if collection is None:
            continue
        key = int(event_id) if event_id.isdigit() else event_id
        if store.get(collection, key) is None:
            orphans.append(reference_id)
    for reference_id in orphans:
        message = f"Ledger rows refer to missing event {reference_id}"
        logger.warning(message)
        warnings.warn(message, ReferenceIntegrityWarning, stacklevel=2)
    return orphans


@dataclass
class Balances:
    ledger: LedgerStore
    tree: AccountTree = field(default_factory=AccountTree)
    skip_references: set[str] = field(default_factory=set)

    def balance(self, account_id: int, as_of: str | None = None) -> Amount:
        """Debit minus credit over rows of account dated on or before *as_of*."""
        limit = to_sortable(as_of) if as_of is not None else None
        total = 0
        for row in self.ledger.list_all():
            if row.account_id != account_id:
                continue
            if row.reference_id in self.skip_references:
                continue
            if limit is not None:
                value = to_sortable(row.date)
                if value == 0 or value > limit:
                    continue
            total += row.debit - row.credit
        return total

    def balance_with_descendants(self, account_id: int, as_of: str | None = None) -> Amount:
        return sum(self.balance(key, as_of) for key in self.tree.descendants(account_id))

    def signed(self, account_id: int, as_of: str | None = None) -> Amount:
        """Own balance of account, positive on its normal side."""
        amount = self.balance(account_id, as_of)
        return amount if self.tree.is_debit_account(account_id) else -amount

    def normal_balance(self, account_id: int, as_of: str | None = None) -> Amount:
        """Balance with sign of the account type: credit-normal accounts flip."""
        amount = self.balance_with_descendants(account_id, as_of)
        return amount if self.tree.is_debit_account(account_id) else -amount

    def all(self, as_of: str | None = None) -> dict[int, Amount]:
        return {account_id: self.balance(account_id, as_of) for account_id in self.tree}
