"""
Pytest configuration and fixtures for Ask Ah Mah tests.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from ask_ah_mah.inventory import InventoryReconciler
from ask_ah_mah.storage import SqlStore


class FakeModel:
    """Stands in for the Ollama chat call: replays scripted replies and records every request."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def __call__(self, messages, tools):
        self.calls.append({"messages": [dict(m) for m in messages], "tools": tools})
        if not self.replies:
            return {"message": {"role": "assistant", "content": "Done lah."}}
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def tool_call(name, arguments):
    return {"message": {"role": "assistant", "content": "", "tool_calls": [{"function": {"name": name, "arguments": arguments}}]}}


def text_reply(content):
    return {"message": {"role": "assistant", "content": content}}


@pytest.fixture
def db_url(tmp_path):
    # A file, not :memory:, so every pooled connection sees the same database
    return f"sqlite+aiosqlite:///{(tmp_path / 'test.db').as_posix()}"


@pytest_asyncio.fixture
async def store(db_url):
    s = SqlStore(db_url)
    await s.init()
    yield s
    await s.close()


@pytest.fixture
def reconciler(store):
    return InventoryReconciler(store)


@pytest.fixture
def client(db_url, monkeypatch):
    """Test client on a fresh database; startup/shutdown run inside the context manager."""
    monkeypatch.setenv("ASK_AH_MAH_DB_URL", db_url)
    from chat_api import app

    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
