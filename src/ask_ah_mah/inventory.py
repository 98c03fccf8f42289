"""
Inventory reconciliation: turns loosely described items into canonical,
de-duplicated rows for one user.
"""
from __future__ import annotations
import logging
from typing import Iterable, List

from .config import DEFAULT_QUANTITY, DEFAULT_UNIT
from .models import Inventory, InventoryItem, InventoryItemIn
from .storage import SqlStore, new_id, utcnow

logger = logging.getLogger(__name__)


def canonicalize_name(name: str) -> str:
    """First character upper-cased, the rest lower-cased ("cHICKEN wings" -> "Chicken wings").

    str.capitalize title-cases the first character, which keeps the result
    stable when applied twice (e.g. "ß" -> "Ss" rather than "SS").
    """
    return name.capitalize()


class InventoryReconciler:
    def __init__(self, store: SqlStore):
        self.store = store

    async def get(self, user_id: str) -> Inventory:
        items = await self.store.list_inventory(user_id)
        return Inventory(
            kitchenware_inventory=[i for i in items if i.type == "kitchenware"],
            ingredient_inventory=[i for i in items if i.type == "ingredient"],
        )

    async def add(self, items: Iterable[InventoryItemIn], user_id: str) -> None:
        # Each item commits on its own; a failure part way leaves earlier items saved.
        for raw in items:
            name = canonicalize_name(raw.name)
            quantity = raw.quantity or DEFAULT_QUANTITY
            unit = raw.unit or DEFAULT_UNIT
            now = utcnow()

            existing = await self.store.find_inventory_item(user_id, raw.type, name)
            if existing:
                await self.store.update_inventory_item(user_id, existing.id, quantity, unit, now)
                logger.debug("inventory_update user=%s name=%s qty=%s unit=%s", user_id, name, quantity, unit)
                continue

            await self.store.create_inventory_item(
                user_id,
                InventoryItem(
                    id=new_id(),
                    name=name,
                    type=raw.type,
                    quantity=quantity,
                    unit=unit,
                    date_added=now,
                    last_updated=now,
                ),
            )
            logger.debug("inventory_insert user=%s name=%s qty=%s unit=%s", user_id, name, quantity, unit)

    async def remove(self, item_names: Iterable[str], user_id: str) -> int:
        removed = 0
        for raw in item_names:
            removed += await self.store.delete_inventory_items(user_id, canonicalize_name(raw))
        return removed


def summarize_inventory(inventory: Inventory) -> str:
    """One-line, human readable counts for the model."""
    ingredients: List[InventoryItem] = inventory.ingredient_inventory
    kitchenware: List[InventoryItem] = inventory.kitchenware_inventory
    if not ingredients and not kitchenware:
        return "The inventory is empty."
    return (
        f"The user has {len(ingredients)} ingredient(s) and {len(kitchenware)} kitchenware item(s). "
        f"Ingredients: {_names(ingredients)}. Kitchenware: {_names(kitchenware)}."
    )


def _names(items: List[InventoryItem]) -> str:
    if not items:
        return "none"
    out = []
    for i in items:
        if i.type == "ingredient" and i.quantity is not None:
            out.append(f"{i.name} ({i.quantity:g} {i.unit or ''})".replace(" )", ")"))
        else:
            out.append(i.name)
    return ", ".join(out)
