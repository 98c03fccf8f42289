from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .inventory import InventoryReconciler, summarize_inventory
from .models import AddInventoryItems, RemoveInventoryItems

logger = logging.getLogger(__name__)


class NoArgs(BaseModel):
    pass


def _inline_refs(schema: Dict[str, Any]) -> Dict[str, Any]:
    # Local models (llama3.1 & co) cope badly with $ref, so expand $defs in place
    defs = schema.pop("$defs", {})

    def expand(node: Any) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if ref and ref.startswith("#/$defs/"):
                return expand(dict(defs[ref.split("/")[-1]]))
            return {k: expand(v) for k, v in node.items() if k != "title"}
        if isinstance(node, list):
            return [expand(v) for v in node]
        return node

    return expand(schema)


class InventoryTools:
    """The three inventory tools, bound to one user."""

    DESCRIPTIONS = {
        "getInventory": (
            "Get the user's current inventory of ingredients and kitchenware. "
            "ALWAYS call this before suggesting recipes and ALWAYS summarize the result for the user, even if empty."
        ),
        "addInventoryItem": (
            "Add items to the user's inventory. Each item needs name (string) and type "
            "('ingredient' or 'kitchenware'); quantity (number) and unit (string, e.g. 'g', 'cups', 'piece') "
            "are optional. Adding an item that already exists replaces its quantity and unit."
        ),
        "removeInventoryItem": (
            "Remove items from the user's inventory by name (e.g. 'eggs', 'frying pan'). "
            "Names are matched case-insensitively; unknown names are ignored."
        ),
    }

    def __init__(self, reconciler: InventoryReconciler, user_id: str):
        self.reconciler = reconciler
        self.user_id = user_id
        self._registry: Dict[str, tuple[Type[BaseModel], Callable[[Any], Awaitable[Dict[str, Any]]]]] = {
            "getInventory": (NoArgs, self.get_inventory),
            "addInventoryItem": (AddInventoryItems, self.add_inventory_item),
            "removeInventoryItem": (RemoveInventoryItems, self.remove_inventory_item),
        }

    @property
    def names(self) -> List[str]:
        return list(self._registry)

    def ollama_tools(self) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for name, (args_model, _) in self._registry.items():
            out.append(
                {
                    "type": "function",
                    "function": {
                        "name": name,
                        "description": self.DESCRIPTIONS[name],
                        "parameters": _inline_refs(args_model.model_json_schema(by_alias=True)),
                    },
                }
            )
        return out

    async def call(self, name: str, args: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Validate ``args`` and run the tool. Bad input comes back as an ``error`` result for the model."""
        entry = self._registry.get(name)
        if entry is None:
            return {"error": f"Unknown tool '{name}'. Available tools: {', '.join(self.names)}"}
        args_model, handler = entry
        try:
            parsed = args_model.model_validate(args or {})
        except ValidationError as e:
            logger.warning("tool_args_invalid name=%s errors=%s", name, e.errors(include_url=False))
            return {"error": f"Invalid arguments for {name}: {e.errors(include_url=False)}"}
        return await handler(parsed)

    async def get_inventory(self, _: NoArgs) -> Dict[str, Any]:
        inventory = await self.reconciler.get(self.user_id)
        return {
            "content": summarize_inventory(inventory),
            "inventory": inventory.model_dump(mode="json", by_alias=True),
        }

    async def add_inventory_item(self, args: AddInventoryItems) -> Dict[str, Any]:
        await self.reconciler.add(args.items, self.user_id)
        return {"content": "Item added to inventory"}

    async def remove_inventory_item(self, args: RemoveInventoryItems) -> Dict[str, Any]:
        await self.reconciler.remove(args.item_names, self.user_id)
        return {"content": "Items removed from inventory"}
