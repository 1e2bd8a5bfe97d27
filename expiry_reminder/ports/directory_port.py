"""Directory port — abstract interface for reading assets and owners.

Rows come back as plain dicts exactly as the backing store returns them;
validation happens in core.loader, not in adapters.
"""

from __future__ import annotations

from typing import Protocol


class DirectoryError(Exception):
    """Raised when assets, accounts or profiles cannot be loaded."""


class DirectoryPort(Protocol):
    """Abstract read-only directory used by the check run."""

    async def list_assets(self) -> list[dict]: ...

    async def list_accounts(self) -> list[dict]: ...

    async def list_profiles(self) -> list[dict]: ...
