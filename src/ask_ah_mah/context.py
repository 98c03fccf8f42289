"""
Chat context assembly: persisted history + the client's new turn -> the
ordered message list handed to the model.
"""
from __future__ import annotations
from typing import Any, Dict, List, Sequence

from pydantic import ValidationError

from .models import Message, TextPart, UIMessage


class ContextValidationError(ValueError):
    """The assembled message list is not something the model can be given."""


def window_history(history: Sequence[Message], window: int) -> List[Message]:
    """Last ``window`` persisted messages, oldest first."""
    if window <= 0:
        return []
    return list(history[-window:])


def to_ui_message(message: Message) -> UIMessage:
    return UIMessage(id=message.id, role=message.role, parts=[TextPart(text=message.content)])


def splice(history: List[UIMessage], incoming: Sequence[UIMessage], window: int) -> List[UIMessage]:
    """Append ``incoming`` to ``history`` without repeating a message.

    The client saves the user's message before asking for a reply, so the
    history tail is normally a copy of the first incoming message. Copies are
    matched by id, or failing that by role and text of the tail. The oldest
    history is trimmed so the result never exceeds ``window``.
    """
    incoming = list(incoming)
    incoming_ids = {m.id for m in incoming}
    kept = [m for m in history if m.id not in incoming_ids]
    if incoming and kept and len(kept) == len(history):
        tail, first = kept[-1], incoming[0]
        if tail.role == first.role and tail.text == first.text:
            kept = kept[:-1]

    room = max(window - len(incoming), 0)
    kept = kept[len(kept) - room:] if room else []
    return kept + incoming[-max(window, 1):]


def validate_messages(messages: Sequence[Any]) -> List[UIMessage]:
    out: List[UIMessage] = []
    for idx, m in enumerate(messages):
        try:
            out.append(UIMessage.model_validate(m.model_dump() if isinstance(m, UIMessage) else m))
        except ValidationError as e:
            raise ContextValidationError(f"message {idx} is malformed: {e.errors()[0]['msg']}") from e
    if not out:
        raise ContextValidationError("no messages to send")
    return out


def assemble_context(history: Sequence[Message], incoming: Sequence[Any], window: int) -> List[UIMessage]:
    """Window, convert, splice and validate; oldest first, newest user turn last."""
    new_turn = validate_messages(incoming)
    converted = [to_ui_message(m) for m in window_history(history, window)]
    return validate_messages(splice(converted, new_turn, window))


def to_model_messages(messages: Sequence[UIMessage]) -> List[Dict[str, Any]]:
    """UI messages -> Ollama chat messages ({role, content})."""
    return [{"role": m.role, "content": m.text} for m in messages]
