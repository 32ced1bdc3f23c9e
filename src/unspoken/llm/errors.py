"""Errors raised by the chat client."""
from __future__ import annotations


class ChatError(Exception):
    """Base class for chat client failures."""


class NetworkError(ChatError):
    """The request never produced an HTTP response (connect, read, timeout)."""


class ApiError(ChatError):
    """The remote service answered with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"API error {status_code}: {message}")


class ParseError(ChatError):
    """The response body does not match the chat-completion schema."""
