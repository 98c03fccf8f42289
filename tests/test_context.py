from datetime import datetime, timedelta, timezone

import pytest

from ask_ah_mah.context import (
    ContextValidationError,
    assemble_context,
    to_model_messages,
    to_ui_message,
    window_history,
)
from ask_ah_mah.models import Message

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


def history(n, user_id="user-123"):
    return [
        Message(
            id=f"msg-{i}",
            user_id=user_id,
            role="user" if i % 2 == 0 else "assistant",
            content=f"message {i}",
            created_at=T0 + timedelta(minutes=i),
        )
        for i in range(n)
    ]


def ui(id, text, role="user"):
    return {"id": id, "role": role, "parts": [{"type": "text", "text": text}]}


@pytest.mark.parametrize("size, window", [(0, 15), (3, 15), (15, 15), (20, 15), (7, 1)])
def test_window_keeps_last_min_h_w(size, window):
    msgs = history(size)
    windowed = window_history(msgs, window)
    assert len(windowed) == min(size, window)
    assert windowed == msgs[len(msgs) - len(windowed):]


def test_convert_is_lossless_for_text():
    m = history(1)[0]
    converted = to_ui_message(m)
    assert converted.model_dump() == {
        "id": "msg-0",
        "role": "user",
        "parts": [{"type": "text", "text": "message 0"}],
    }


def test_twenty_messages_window_fifteen_ends_with_new_turn():
    context = assemble_context(history(20), [ui("msg-new", "What can I cook?")], 15)

    assert len(context) == 15
    assert context[-1].id == "msg-new"
    assert context[-1].text == "What can I cook?"
    # msg-0..msg-5 fall outside the window
    assert context[0].id == "msg-6"


def test_saved_copy_of_new_turn_is_not_repeated():
    msgs = history(4)
    msgs.append(Message(id="db-id", user_id="user-123", role="user", content="I have eggs", created_at=T0 + timedelta(hours=1)))

    context = assemble_context(msgs, [ui("client-id", "I have eggs")], 15)

    texts = [m.text for m in context]
    assert texts.count("I have eggs") == 1
    assert context[-1].id == "client-id"
    assert [m.id for m in context[:-1]] == ["msg-0", "msg-1", "msg-2", "msg-3"]


def test_saved_copy_matched_by_id():
    msgs = history(3)
    msgs.append(Message(id="same-id", user_id="user-123", role="user", content="hello", created_at=T0 + timedelta(hours=1)))

    context = assemble_context(msgs, [ui("same-id", "hello")], 15)

    assert [m.id for m in context] == ["msg-0", "msg-1", "msg-2", "same-id"]


def test_unsaved_turn_does_not_drop_real_history():
    msgs = history(3)

    context = assemble_context(msgs, [ui("msg-new", "something else")], 15)

    assert [m.id for m in context] == ["msg-0", "msg-1", "msg-2", "msg-new"]


def test_empty_history():
    context = assemble_context([], [ui("m1", "First message")], 15)
    assert [m.id for m in context] == ["m1"]


def test_composed_length_never_exceeds_window():
    incoming = [ui("a", "one"), ui("b", "two", role="assistant"), ui("c", "three")]
    context = assemble_context(history(30), incoming, 4)

    assert len(context) == 4
    assert [m.id for m in context] == ["msg-29", "a", "b", "c"]


def test_malformed_message_fails_validation():
    with pytest.raises(ContextValidationError):
        assemble_context(history(2), [{"id": "x", "role": "user", "parts": []}], 15)

    with pytest.raises(ContextValidationError):
        assemble_context(history(2), [{"id": "x", "role": "robot", "parts": [{"type": "text", "text": "hi"}]}], 15)


def test_no_incoming_messages_is_invalid():
    with pytest.raises(ContextValidationError):
        assemble_context(history(2), [], 15)


def test_to_model_messages_joins_parts():
    context = assemble_context(
        history(1),
        [{"id": "n", "role": "user", "parts": [{"type": "text", "text": "I have "}, {"type": "text", "text": "rice"}]}],
        15,
    )
    assert to_model_messages(context) == [
        {"role": "user", "content": "message 0"},
        {"role": "user", "content": "I have rice"},
    ]
