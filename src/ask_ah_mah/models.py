from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ItemType = Literal["ingredient", "kitchenware"]
Role = Literal["user", "assistant", "system"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- inventory ---


class InventoryItemIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: ItemType
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, max_length=32)


class InventoryItem(CamelModel):
    id: str
    name: str
    type: ItemType
    quantity: Optional[float] = None
    unit: Optional[str] = None
    date_added: datetime
    last_updated: datetime


class Inventory(CamelModel):
    kitchenware_inventory: List[InventoryItem] = []
    ingredient_inventory: List[InventoryItem] = []


class AddInventoryItems(CamelModel):
    items: List[InventoryItemIn]


class RemoveInventoryItems(CamelModel):
    item_names: List[str]


class AddInventoryRequest(AddInventoryItems):
    user_id: Optional[str] = None


class RemoveInventoryRequest(RemoveInventoryItems):
    user_id: Optional[str] = None


# --- messages ---


class Message(CamelModel):
    id: str
    user_id: str
    role: Role
    content: str
    created_at: datetime


class MessageRequest(CamelModel):
    user_id: Optional[str] = None
    content: Optional[str] = None
    role: Optional[Role] = None


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class UIMessage(BaseModel):
    """Model-ready chat message: the shape the chat UI submits and the assembler emits."""

    id: str
    role: Role
    parts: List[TextPart] = Field(..., min_length=1)

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts)


# --- recipes ---


class Recipe(CamelModel):
    id: str
    user_id: str
    name: str
    instructions: str
    tags: List[str] = []
    recipe_id: Optional[str] = None
    created_at: datetime


class RecipeIn(CamelModel):
    user_id: Optional[str] = None
    name: Optional[str] = Field(default=None, max_length=200)
    instructions: str = Field(..., min_length=1)
    tags: List[str] = []
    recipe_id: Optional[str] = None


class DeleteRecipeRequest(CamelModel):
    user_id: Optional[str] = None
    recipe_id: Optional[str] = None


# --- chat ---


class ChatRequest(CamelModel):
    user_id: Optional[str] = None
    messages: List[UIMessage] = Field(..., min_length=1)


class ToolInvocation(BaseModel):
    name: str
    args: dict = {}


class ChatResponse(CamelModel):
    content: str
    tool_calls: List[ToolInvocation] = []
    retryable: Optional[bool] = None
