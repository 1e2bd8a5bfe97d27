"""Notification ports — abstract interfaces for outbound messages.

Core modules depend on these protocols, never on a specific provider.
"""

from __future__ import annotations

from typing import Protocol


class DispatchError(Exception):
    """Raised when a provider rejects or fails to deliver a message."""


class EmailPort(Protocol):
    """Abstract email transport used by the dispatcher."""

    async def send_email(self, to: str, subject: str, html: str) -> dict: ...


class ChatPort(Protocol):
    """Abstract chat-push transport used by the dispatcher."""

    async def send_chat(self, token: str, title: str, content: str) -> dict: ...
