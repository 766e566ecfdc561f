import logging
from collections import Counter
from typing import Iterable, Literal

from .base import InsufficientStockError, PostingValidationError
from .models import InventoryItem, InvoiceItem, ItemType
from .store import Collection, Repository, Store

logger = logging.getLogger(__name__)

StockDirection = Literal["in", "out"]


def stock_lines(items: Iterable[InvoiceItem]) -> Counter:
    """Quantities per inventory item id, other line types ignored."""
    counts: Counter = Counter()
    for item in items:
        if item.type == ItemType.inventory:
            counts[item.id] += item.quantity
    return counts


def stock_changes(
    old_items: Iterable[InvoiceItem], new_items: Iterable[InvoiceItem]
) -> dict[int, int]:
    """Net signed change of stock when *old_items* are replaced by *new_items*.

    Positive values return goods to stock, negative values take them out.
    Items with no net change are left out.
    """
    old, new = stock_lines(old_items), stock_lines(new_items)
    changes = {}
    for item_id in list(old) + [k for k in new if k not in old]:
        delta = old[item_id] - new[item_id]
        if delta:
            changes[item_id] = delta
    return changes


class Stock:
    """Applies quantity changes to inventory items."""

    def __init__(self, store: Store):
        self.items = Repository(store, Collection.inventory, InventoryItem)

    def adjust(self, item_id: int, delta: int, direction: StockDirection) -> InventoryItem:
        if delta < 0:
            raise PostingValidationError(f"Stock adjustment must not be negative, got {delta}.")
        item = self.items.get(item_id)
        change = delta if direction == "in" else -delta
        if item.quantity + change < 0:
            raise InsufficientStockError(
                f"Cannot take {delta} of {item.name or item_id} out, "
                f"only {item.quantity} in stock."
            )
        updated = self.items.save(item.model_copy(update={"quantity": item.quantity + change}))
        logger.debug("Stock of item %s %s %d -> %d", item_id, direction, delta, updated.quantity)
        return updated

    def check(self, changes: dict[int, int]) -> None:
        """Raise if any negative change exceeds stock on hand."""
        for item_id, change in changes.items():
            item = self.items.get(item_id)
            if item.quantity + change < 0:
                raise InsufficientStockError(
                    f"Cannot take {-change} of {item.name or item_id} out, "
                    f"only {item.quantity} in stock."
                )

    def apply(self, changes: dict[int, int]) -> list[InventoryItem]:
        """Validate all changes first, then apply them."""
        self.check(changes)
        return [
            self.adjust(item_id, abs(change), "in" if change > 0 else "out")
            for item_id, change in changes.items()
        ]

    def take_out(self, items: Iterable[InvoiceItem]) -> list[InventoryItem]:
        return self.apply(stock_changes([], items))

    def put_back(self, items: Iterable[InvoiceItem]) -> list[InventoryItem]:
        return self.apply(stock_changes(items, []))
