from __future__ import annotations

from unspoken.llm.client import ChatClient, ChatClientConfig
from unspoken.llm.errors import ApiError, ChatError, NetworkError, ParseError
from unspoken.llm.types import ChatMessage, message_from_wire, message_to_wire

__all__ = [
    "ApiError",
    "ChatClient",
    "ChatClientConfig",
    "ChatError",
    "ChatMessage",
    "NetworkError",
    "ParseError",
    "message_from_wire",
    "message_to_wire",
]
