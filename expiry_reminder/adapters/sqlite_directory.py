"""SQLite directory adapter — implements DirectoryPort.

Reads the local stores in data/db.py. sqlite3 is synchronous, so each
read runs in a worker thread via asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import sqlite3

from expiry_reminder.data.db import AccountDB, AssetDB, ProfileDB
from expiry_reminder.ports.directory_port import DirectoryError


class SQLiteDirectory:
    """SQLite implementation of DirectoryPort."""

    def __init__(self, db_path: str) -> None:
        self.assets = AssetDB(db_path)
        self.accounts = AccountDB(db_path)
        self.profiles = ProfileDB(db_path)

    async def list_assets(self) -> list[dict]:
        return await self._read(self.assets.list_assets)

    async def list_accounts(self) -> list[dict]:
        return await self._read(self.accounts.list_accounts)

    async def list_profiles(self) -> list[dict]:
        return await self._read(self.profiles.list_profiles)

    @staticmethod
    async def _read(fn) -> list[dict]:
        try:
            return await asyncio.to_thread(fn)
        except sqlite3.Error as exc:
            raise DirectoryError(f"SQLite read failed: {exc}") from exc
