"""Supabase directory adapter — implements DirectoryPort over REST.

Reads the `assets` and `profiles` tables through PostgREST and the account
list (id → email) through the Auth admin API. Requires the service-role
key; rows are returned untouched for validation by the loader.
"""

from __future__ import annotations

import logging

import httpx

from expiry_reminder.ports.directory_port import DirectoryError

logger = logging.getLogger(__name__)

_USERS_PAGE_SIZE = 1000


class SupabaseDirectory:
    """Supabase implementation of DirectoryPort."""

    def __init__(self, url: str, service_role_key: str, timeout: float = 10.0) -> None:
        if not url or not service_role_key:
            raise DirectoryError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required")
        self._base_url = url.rstrip("/")
        self._headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
        }
        self._timeout = timeout

    async def _get(self, path: str, params: dict | None = None) -> object:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, headers=self._headers, timeout=self._timeout,
            ) as client:
                resp = await client.get(path, params=params)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            raise DirectoryError(
                f"GET {path} returned {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise DirectoryError(f"GET {path} failed: {exc}") from exc

    async def _get_table(self, table: str) -> list[dict]:
        rows = await self._get(f"/rest/v1/{table}", params={"select": "*"})
        if not isinstance(rows, list):
            raise DirectoryError(f"Unexpected response for table {table!r}")
        return rows

    async def list_assets(self) -> list[dict]:
        return await self._get_table("assets")

    async def list_profiles(self) -> list[dict]:
        return await self._get_table("profiles")

    async def list_accounts(self) -> list[dict]:
        """Page through the Auth admin user list, keeping id and email."""
        accounts: list[dict] = []
        page = 1
        while True:
            data = await self._get(
                "/auth/v1/admin/users",
                params={"page": page, "per_page": _USERS_PAGE_SIZE},
            )
            users = data.get("users", []) if isinstance(data, dict) else []
            accounts.extend({"id": u.get("id"), "email": u.get("email")} for u in users)
            if len(users) < _USERS_PAGE_SIZE:
                break
            page += 1
        logger.debug("Fetched %d accounts from Supabase", len(accounts))
        return accounts
