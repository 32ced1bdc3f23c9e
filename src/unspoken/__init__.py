from __future__ import annotations

from unspoken.llm import (
    ApiError,
    ChatClient,
    ChatClientConfig,
    ChatError,
    ChatMessage,
    NetworkError,
    ParseError,
)

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ChatClient",
    "ChatClientConfig",
    "ChatError",
    "ChatMessage",
    "NetworkError",
    "ParseError",
    "__version__",
]
