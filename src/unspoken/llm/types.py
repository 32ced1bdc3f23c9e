from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, get_args

from unspoken.llm.errors import ParseError

Role = Literal["system", "user", "assistant"]

ROLES: frozenset[str] = frozenset(get_args(Role))


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: Role
    content: str


def message_to_wire(message: ChatMessage) -> dict[str, str]:
    return {"role": message.role, "content": message.content}


def message_from_wire(data: Any) -> ChatMessage:
    """Build a ChatMessage from a `{"role", "content"}` mapping, as found in API payloads."""
    if not isinstance(data, dict):
        raise ParseError(f"message must be an object, got {type(data).__name__}")
    role = data.get("role")
    if role not in ROLES:
        raise ParseError(f"unknown message role: {role!r}")
    content = data.get("content")
    if not isinstance(content, str):
        raise ParseError(f"message content must be a string, got {type(content).__name__}")
    return ChatMessage(role=role, content=content)
