from __future__ import annotations
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[2]
DATA_DIR = BASE_DIR / "data"

DEFAULT_UNIT = "piece"
DEFAULT_QUANTITY = 1.0


def database_url() -> str:
    url = os.getenv("ASK_AH_MAH_DB_URL")
    if url:
        return url
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{(DATA_DIR / 'ask_ah_mah.db').as_posix()}"


def ollama_chat_url() -> str:
    return os.getenv("OLLAMA_CHAT_URL", "http://localhost:11434/api/chat")


def ollama_model() -> str:
    return os.getenv("OLLAMA_MODEL", "llama3.1")


def ollama_timeout() -> float:
    return float(os.getenv("OLLAMA_TIMEOUT", "120"))


def context_window() -> int:
    # How many persisted messages are replayed to the model per turn
    return int(os.getenv("CONTEXT_WINDOW", "15"))


def max_tool_steps() -> int:
    return int(os.getenv("MAX_TOOL_STEPS", "5"))


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def mcp_user_id() -> str:
    return os.getenv("ASK_AH_MAH_USER_ID", "local")
