import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests

from ask_ah_mah import config
from ask_ah_mah.prompts import ERROR_REPLY, FATAL_ERROR_REPLY, SYSTEM_PROMPT
from ask_ah_mah.tools import InventoryTools

logger = logging.getLogger(__name__)

ChatFn = Callable[[List[Dict[str, Any]], List[Dict[str, Any]]], Dict[str, Any]]

RETRYABLE_STATUS = {429, 502, 503, 504}


def ollama_chat(messages: List[Dict[str, Any]], tools: List[Dict[str, Any]]) -> Dict[str, Any]:
    payload = {
        "model": config.ollama_model(),
        "stream": False,
        "messages": messages,
    }
    if tools:
        payload["tools"] = tools
    r = requests.post(config.ollama_chat_url(), json=payload, timeout=config.ollama_timeout())
    r.raise_for_status()
    return r.json()


def normalize_tool_arguments(args: Any) -> Dict[str, Any]:
    # Ollama sometimes returns arguments as a JSON string
    if args is None:
        return {}
    if isinstance(args, str):
        return json.loads(args) if args.strip() else {}
    if isinstance(args, dict):
        return args
    return dict(args)


def _tool_result_preview(content: Any, max_len: int = 120) -> str:
    """Short summary of tool result for logs (avoid huge payloads)."""
    if content is None:
        return "null"
    if isinstance(content, dict) and "content" in content:
        content = content["content"]
    if isinstance(content, (str, int, float, bool)):
        s = str(content)
        return s[:max_len] + "..." if len(s) > max_len else s
    s = json.dumps(content, default=str)[:max_len]
    return s + "..." if len(s) >= max_len else s


def is_retryable(exc: BaseException) -> bool:
    """Transient upstream trouble (connection, timeout, 429/5xx gateway) is worth retrying."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code in RETRYABLE_STATUS
    return False


@dataclass
class ChatTurnResult:
    content: str
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    retryable: Optional[bool] = None


async def run_chat_turn(
    messages: List[Dict[str, Any]],
    tools: InventoryTools,
    chat_fn: ChatFn = ollama_chat,
    max_tool_steps: Optional[int] = None,
) -> ChatTurnResult:
    """Run one assistant turn: model -> tools -> model ... Mutates messages.

    At most ``max_tool_steps`` replies may ask for tools; after that the model
    is called once more without tools so the turn always ends in text.
    """
    steps = config.max_tool_steps() if max_tool_steps is None else max_tool_steps
    ollama_tools = tools.ollama_tools()
    record: List[Dict[str, Any]] = []

    for _ in range(steps):
        resp = await asyncio.to_thread(chat_fn, messages, ollama_tools)
        msg = resp.get("message", {})
        tool_calls = msg.get("tool_calls") or []
        content = (msg.get("content") or "").strip()
        if not tool_calls:
            return ChatTurnResult(content=content or "(no content)", tool_calls=record)
        messages.append(msg)
        await _run_tool_calls(tool_calls, tools, messages, record)

    logger.info("tool_budget_exhausted steps=%d, asking for a final answer", steps)
    resp = await asyncio.to_thread(chat_fn, messages, [])
    content = ((resp.get("message") or {}).get("content") or "").strip()
    return ChatTurnResult(content=content or "(no content)", tool_calls=record)


async def _run_tool_calls(
    tool_calls: List[Dict[str, Any]],
    tools: InventoryTools,
    messages: List[Dict[str, Any]],
    record: List[Dict[str, Any]],
) -> None:
    for tc in tool_calls:
        fn = tc.get("function", {})
        tool_name = fn.get("name")
        if not tool_name:
            continue
        try:
            tool_args = normalize_tool_arguments(fn.get("arguments"))
        except json.JSONDecodeError:
            tool_args = None
        if tool_args is None:
            result: Dict[str, Any] = {"error": "Tool arguments were not valid JSON"}
        else:
            logger.info("tool_call name=%s args=%s", tool_name, json.dumps(tool_args, default=str))
            record.append({"name": tool_name, "args": tool_args})
            result = await tools.call(tool_name, tool_args)
        logger.info("tool_result name=%s -> %s", tool_name, _tool_result_preview(result))
        messages.append(
            {
                "role": "tool",
                "name": tool_name,
                "content": json.dumps(result, default=str),
            }
        )


async def answer(
    context: List[Dict[str, Any]],
    tools: InventoryTools,
    chat_fn: ChatFn = ollama_chat,
) -> ChatTurnResult:
    """System prompt + context through the tool loop; upstream model failures become an in-persona reply."""
    messages: List[Dict[str, Any]] = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend(context)
    try:
        return await run_chat_turn(messages, tools, chat_fn)
    except requests.RequestException as e:
        retryable = is_retryable(e)
        logger.warning("model_call_failed retryable=%s error=%s", retryable, e)
        return ChatTurnResult(content=ERROR_REPLY if retryable else FATAL_ERROR_REPLY, retryable=retryable)
