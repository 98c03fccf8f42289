"""
HTTP API for Ask Ah Mah.
Inventory, message and recipe CRUD plus POST /api/chat for one assistant turn.
"""
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from ask_ah_mah import config
from ask_ah_mah.context import ContextValidationError, assemble_context, to_model_messages
from ask_ah_mah.inventory import InventoryReconciler
from ask_ah_mah.models import (
    AddInventoryRequest,
    ChatRequest,
    ChatResponse,
    DeleteRecipeRequest,
    Inventory,
    Message,
    MessageRequest,
    Recipe,
    RecipeIn,
    RemoveInventoryRequest,
    ToolInvocation,
)
from ask_ah_mah.recipes import extract_recipe_block, normalize_tags
from ask_ah_mah.storage import SqlStore
from ask_ah_mah.tools import InventoryTools
from ollama_host import ChatFn, answer, ollama_chat

logger = logging.getLogger(__name__)

app = FastAPI(title="Ask Ah Mah API")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.on_event("startup")
async def _startup() -> None:
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    store = SqlStore(config.database_url())
    await store.init()
    app.state.store = store


@app.on_event("shutdown")
async def _shutdown() -> None:
    store: Optional[SqlStore] = getattr(app.state, "store", None)
    if store is not None:
        await store.close()


# --- Dependencies ---


def get_store(request: Request) -> SqlStore:
    return request.app.state.store


def get_reconciler(store: SqlStore = Depends(get_store)) -> InventoryReconciler:
    return InventoryReconciler(store)


def get_chat_fn() -> ChatFn:
    return ollama_chat


def require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return user_id


NO_CACHE = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


# --- Inventory ---


@app.get("/api/inventory", response_model=Inventory)
async def get_inventory(
    response: Response,
    user_id: Optional[str] = Query(None, alias="userId"),
    reconciler: InventoryReconciler = Depends(get_reconciler),
) -> Inventory:
    user_id = require_user(user_id)
    try:
        inventory = await reconciler.get(user_id)
    except SQLAlchemyError:
        logger.exception("Failed to fetch inventory for user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch inventory")
    response.headers.update(NO_CACHE)
    return inventory


@app.post("/api/inventory")
async def add_inventory(body: AddInventoryRequest, reconciler: InventoryReconciler = Depends(get_reconciler)) -> dict:
    user_id = require_user(body.user_id)
    try:
        await reconciler.add(body.items, user_id)
    except SQLAlchemyError:
        logger.exception("Failed to update inventory for user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to update inventory")
    return {"success": True, "message": "Inventory updated"}


@app.delete("/api/inventory")
async def remove_inventory(
    body: RemoveInventoryRequest, reconciler: InventoryReconciler = Depends(get_reconciler)
) -> dict:
    user_id = require_user(body.user_id)
    try:
        await reconciler.remove(body.item_names, user_id)
    except SQLAlchemyError:
        logger.exception("Failed to update inventory for user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to update inventory")
    return {"success": True, "message": "Inventory updated"}


# --- Messages ---


@app.get("/api/message", response_model=List[Message])
async def get_messages(
    user_id: Optional[str] = Query(None, alias="userId"), store: SqlStore = Depends(get_store)
) -> List[Message]:
    user_id = require_user(user_id)
    try:
        return await store.list_messages(user_id)
    except SQLAlchemyError:
        logger.exception("Failed to fetch messages for user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch messages")


@app.post("/api/message")
async def create_message(body: MessageRequest, store: SqlStore = Depends(get_store)) -> dict:
    if not body.user_id or not body.content or not body.role:
        raise HTTPException(status_code=400, detail="userId, content, and role are required")
    try:
        message = await store.create_message(body.user_id, body.content, body.role)
    except SQLAlchemyError:
        logger.exception("Failed to save message for user=%s", body.user_id)
        raise HTTPException(status_code=500, detail="Failed to save message")
    return {"message": message.model_dump(mode="json", by_alias=True)}


# --- Recipes ---


@app.get("/api/recipe", response_model=List[Recipe])
async def get_recipes(
    user_id: Optional[str] = Query(None, alias="userId"), store: SqlStore = Depends(get_store)
) -> List[Recipe]:
    user_id = require_user(user_id)
    try:
        return await store.list_recipes(user_id)
    except SQLAlchemyError:
        logger.exception("Failed to fetch recipes for user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch recipes")


@app.post("/api/recipe", response_model=Recipe)
async def save_recipe(body: RecipeIn, store: SqlStore = Depends(get_store)) -> Recipe:
    user_id = require_user(body.user_id)
    name = (body.name or "").strip()
    instructions = body.instructions
    if not name:
        block = extract_recipe_block(instructions)
        if block is None:
            raise HTTPException(
                status_code=400, detail="Recipe name is required when the text has no '## Name' heading"
            )
        name, instructions = block
    try:
        return await store.save_recipe(user_id, name, instructions, normalize_tags(body.tags), body.recipe_id)
    except SQLAlchemyError:
        logger.exception("Failed to save recipe for user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to save recipe")


@app.delete("/api/recipe")
async def delete_recipe(body: DeleteRecipeRequest, store: SqlStore = Depends(get_store)) -> dict:
    user_id = require_user(body.user_id)
    if not body.recipe_id:
        raise HTTPException(status_code=400, detail="recipeId is required")
    try:
        deleted = await store.delete_recipe(body.recipe_id, user_id)
    except SQLAlchemyError:
        logger.exception("Failed to delete recipe=%s for user=%s", body.recipe_id, user_id)
        raise HTTPException(status_code=500, detail="Failed to delete recipe")
    return {"success": True, "deleted": deleted}


# --- Chat ---


@app.post("/api/chat", response_model=ChatResponse)
async def api_chat(
    body: ChatRequest,
    store: SqlStore = Depends(get_store),
    chat_fn: ChatFn = Depends(get_chat_fn),
) -> ChatResponse:
    """Run one assistant turn over the saved history plus the submitted message(s)."""
    user_id = require_user(body.user_id)
    try:
        history = await store.list_messages(user_id)
        context = assemble_context(history, body.messages, config.context_window())
        tools = InventoryTools(InventoryReconciler(store), user_id)
        result = await answer(to_model_messages(context), tools, chat_fn)
    except ContextValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Chat turn failed on storage for user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to process chat")
    return ChatResponse(
        content=result.content,
        tool_calls=[ToolInvocation(**tc) for tc in result.tool_calls],
        retryable=result.retryable,
    )


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok"}
