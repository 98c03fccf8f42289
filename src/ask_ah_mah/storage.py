from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional
import json
import uuid
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, async_sessionmaker
from sqlalchemy import text
from .models import InventoryItem, ItemType, Message, Recipe


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class SqlStore:
    """Persistence for inventory items, chat messages and saved recipes.

    Every query is scoped by ``user_id``; nothing here knows about name
    canonicalization or context windows.
    """

    def __init__(self, db_url: str):
        self.engine: AsyncEngine = create_async_engine(db_url, future=True)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    async def init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(text("""
                CREATE TABLE IF NOT EXISTS inventory_items (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    quantity REAL,
                    unit TEXT,
                    date_added TEXT NOT NULL,
                    last_updated TEXT NOT NULL
                )
            """))
            await conn.execute(text(
                "CREATE INDEX IF NOT EXISTS ix_inventory_user ON inventory_items (user_id, type, name)"
            ))
            await conn.execute(text("""
                CREATE TABLE IF NOT EXISTS messages (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    role TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """))
            await conn.execute(text(
                "CREATE INDEX IF NOT EXISTS ix_messages_user ON messages (user_id, created_at)"
            ))
            await conn.execute(text("""
                CREATE TABLE IF NOT EXISTS recipes (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    instructions TEXT NOT NULL,
                    tags_json TEXT NOT NULL DEFAULT '[]',
                    recipe_id TEXT,
                    created_at TEXT NOT NULL
                )
            """))

    async def close(self) -> None:
        await self.engine.dispose()

    # --- inventory ---
    async def list_inventory(self, user_id: str, item_type: Optional[ItemType] = None) -> List[InventoryItem]:
        sql = "SELECT * FROM inventory_items WHERE user_id = :user_id"
        params: dict = {"user_id": user_id}
        if item_type:
            sql += " AND type = :type"
            params["type"] = item_type
        sql += " ORDER BY date_added, rowid"
        async with self.session_factory() as s:
            res = await s.execute(text(sql), params)
            rows = res.mappings().all()
        return [InventoryItem.model_validate(dict(r)) for r in rows]

    async def find_inventory_item(self, user_id: str, item_type: ItemType, name: str) -> Optional[InventoryItem]:
        async with self.session_factory() as s:
            res = await s.execute(
                text("SELECT * FROM inventory_items WHERE user_id = :user_id AND type = :type AND name = :name"),
                {"user_id": user_id, "type": item_type, "name": name},
            )
            row = res.mappings().first()
        if not row:
            return None
        return InventoryItem.model_validate(dict(row))

    async def create_inventory_item(self, user_id: str, item: InventoryItem) -> None:
        async with self.session_factory() as s:
            await s.execute(
                text("""
                    INSERT INTO inventory_items (id, user_id, name, type, quantity, unit, date_added, last_updated)
                    VALUES (:id, :user_id, :name, :type, :quantity, :unit, :date_added, :last_updated)
                """),
                {
                    "id": item.id,
                    "user_id": user_id,
                    "name": item.name,
                    "type": item.type,
                    "quantity": item.quantity,
                    "unit": item.unit,
                    "date_added": item.date_added.isoformat(),
                    "last_updated": item.last_updated.isoformat(),
                },
            )
            await s.commit()

    async def update_inventory_item(
        self, user_id: str, item_id: str, quantity: Optional[float], unit: Optional[str], last_updated: datetime
    ) -> None:
        async with self.session_factory() as s:
            await s.execute(
                text("""
                    UPDATE inventory_items SET quantity = :quantity, unit = :unit, last_updated = :last_updated
                    WHERE id = :id AND user_id = :user_id
                """),
                {
                    "id": item_id,
                    "user_id": user_id,
                    "quantity": quantity,
                    "unit": unit,
                    "last_updated": last_updated.isoformat(),
                },
            )
            await s.commit()

    async def delete_inventory_items(self, user_id: str, name: str) -> int:
        """Delete every item of this user called ``name``, whatever its type. Returns rows deleted."""
        async with self.session_factory() as s:
            res = await s.execute(
                text("DELETE FROM inventory_items WHERE user_id = :user_id AND name = :name"),
                {"user_id": user_id, "name": name},
            )
            await s.commit()
            return res.rowcount

    # --- messages ---
    async def list_messages(self, user_id: str) -> List[Message]:
        async with self.session_factory() as s:
            res = await s.execute(
                text("SELECT * FROM messages WHERE user_id = :user_id ORDER BY created_at, rowid"),
                {"user_id": user_id},
            )
            rows = res.mappings().all()
        return [Message.model_validate(dict(r)) for r in rows]

    async def create_message(self, user_id: str, content: str, role: str) -> Message:
        message = Message(id=new_id(), user_id=user_id, role=role, content=content, created_at=utcnow())
        async with self.session_factory() as s:
            await s.execute(
                text("""
                    INSERT INTO messages (id, user_id, role, content, created_at)
                    VALUES (:id, :user_id, :role, :content, :created_at)
                """),
                {
                    "id": message.id,
                    "user_id": user_id,
                    "role": message.role,
                    "content": content,
                    "created_at": message.created_at.isoformat(),
                },
            )
            await s.commit()
        return message

    # --- recipes ---
    async def list_recipes(self, user_id: str) -> List[Recipe]:
        async with self.session_factory() as s:
            res = await s.execute(
                text("SELECT * FROM recipes WHERE user_id = :user_id ORDER BY created_at, rowid"),
                {"user_id": user_id},
            )
            rows = res.mappings().all()
        return [_recipe_from_row(r) for r in rows]

    async def save_recipe(
        self,
        user_id: str,
        name: str,
        instructions: str,
        tags: Optional[List[str]] = None,
        recipe_id: Optional[str] = None,
    ) -> Recipe:
        recipe = Recipe(
            id=new_id(),
            user_id=user_id,
            name=name,
            instructions=instructions,
            tags=tags or [],
            recipe_id=recipe_id,
            created_at=utcnow(),
        )
        async with self.session_factory() as s:
            await s.execute(
                text("""
                    INSERT INTO recipes (id, user_id, name, instructions, tags_json, recipe_id, created_at)
                    VALUES (:id, :user_id, :name, :instructions, :tags_json, :recipe_id, :created_at)
                """),
                {
                    "id": recipe.id,
                    "user_id": user_id,
                    "name": name,
                    "instructions": instructions,
                    "tags_json": json.dumps(recipe.tags),
                    "recipe_id": recipe_id,
                    "created_at": recipe.created_at.isoformat(),
                },
            )
            await s.commit()
        return recipe

    async def delete_recipe(self, recipe_id: str, user_id: str) -> bool:
        """Delete a saved recipe by id. Returns True if deleted, False if not found."""
        async with self.session_factory() as s:
            res = await s.execute(
                text("DELETE FROM recipes WHERE id = :id AND user_id = :user_id"),
                {"id": recipe_id, "user_id": user_id},
            )
            await s.commit()
            return res.rowcount > 0


def _recipe_from_row(row) -> Recipe:
    data = dict(row)
    data["tags"] = json.loads(data.pop("tags_json") or "[]")
    return Recipe.model_validate(data)
