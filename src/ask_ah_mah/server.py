from __future__ import annotations
from typing import Any, Dict, List
from mcp.server.fastmcp import FastMCP
from . import config
from .inventory import InventoryReconciler
from .models import InventoryItemIn, Recipe
from .storage import SqlStore
from .tools import InventoryTools

store = SqlStore(config.database_url())
tools = InventoryTools(InventoryReconciler(store), config.mcp_user_id())

mcp = FastMCP("ask-ah-mah")


@mcp.tool()
async def inventory_get() -> Dict[str, Any]:
    """
    Get the user's kitchen inventory: ingredients and kitchenware.

    Call this before suggesting recipes and whenever the user asks what they have.
    This is a READ-ONLY operation (no state changes).

    Returns:
      {content, inventory}: a short human readable summary plus
      inventory.ingredientInventory and inventory.kitchenwareInventory lists.
    """
    return await tools.get_inventory(None)


@mcp.tool()
async def inventory_add_items(items: List[InventoryItemIn]) -> str:
    """
    Add ingredients or kitchenware to the inventory (batch).

    Use this when the user says they bought or have something, e.g.
    "I bought chicken and 2 cans of coconut milk", "I have a wok".

    Args:
      items: List of items. Each has:
        - name (required)
        - type (required): "ingredient" or "kitchenware"
        - quantity (optional, defaults to 1)
        - unit (optional, defaults to "piece")

    Notes:
      - Names are stored capitalized ("chicken" -> "Chicken").
      - An item that already exists has its quantity and unit replaced, not added to.
    """
    result = await tools.call("addInventoryItem", {"items": [i.model_dump(by_alias=True) for i in items]})
    return result.get("error") or result["content"]


@mcp.tool()
async def inventory_remove_items(item_names: List[str]) -> str:
    """
    Remove items from the inventory by name (case-insensitive), whatever their type.

    Names that are not in the inventory are ignored.
    """
    result = await tools.call("removeInventoryItem", {"itemNames": item_names})
    return result.get("error") or result["content"]


@mcp.tool()
async def recipes_list() -> List[Recipe]:
    """
    List the recipes the user has saved from earlier chats.

    This is a READ-ONLY operation (no state changes).
    """
    return await store.list_recipes(tools.user_id)


async def _prepare() -> None:
    await store.init()
    # Pooled connections belong to this loop; mcp.run() starts its own
    await store.close()


def main() -> None:
    # Ensure DB schema exists before serving
    import asyncio
    asyncio.run(_prepare())
    mcp.run()


if __name__ == "__main__":
    main()
