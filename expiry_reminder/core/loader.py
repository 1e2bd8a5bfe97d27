"""Record loader — validates directory rows at the load boundary.

Fetches assets, accounts and profiles through the DirectoryPort and turns
them into typed models. A row that fails validation is quarantined: it is
left out of the run, logged, and reported as a SkippedRecord.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import ValidationError

from expiry_reminder.data.models import DEFAULT_NOTIFY_DAYS, SkippedRecord
from expiry_reminder.data.records import (
    AccountRecord,
    AssetRecord,
    ProfileRecord,
    build_owner,
)
from expiry_reminder.ports.directory_port import DirectoryError

if TYPE_CHECKING:
    from expiry_reminder.core.run_log import RunLog
    from expiry_reminder.data.models import Asset, OwnerPreferences
    from expiry_reminder.ports.directory_port import DirectoryPort

logger = logging.getLogger(__name__)


@dataclass
class LoadedDirectory:
    """Everything one check run needs, already validated."""

    assets: list[Asset] = field(default_factory=list)
    owners: dict[str, OwnerPreferences] = field(default_factory=dict)
    skipped: list[SkippedRecord] = field(default_factory=list)


def _describe(exc: ValidationError) -> str:
    """Compact one-line summary of a pydantic validation error."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def _row_id(row: object) -> str:
    if isinstance(row, dict):
        return str(row.get("id", "?"))
    return "?"


async def load_directory(
    directory: DirectoryPort,
    run_log: RunLog,
    default_notify_days: tuple[int, ...] = DEFAULT_NOTIFY_DAYS,
) -> LoadedDirectory:
    """Load and validate assets and owner preferences.

    Raises:
        DirectoryError: if any of the three fetches fails. Invalid rows
            never raise; they are quarantined.
    """
    loaded = LoadedDirectory()

    # 1. Assets
    try:
        asset_rows = await directory.list_assets()
    except Exception as exc:
        run_log.error(f"Error fetching assets: {exc}")
        raise DirectoryError(str(exc)) from exc
    run_log.info(f"Fetched {len(asset_rows)} assets")

    for row in asset_rows:
        try:
            loaded.assets.append(AssetRecord.model_validate(row).to_asset())
        except ValidationError as exc:
            reason = _describe(exc)
            run_log.warning(f"Quarantined asset {_row_id(row)}: {reason}")
            loaded.skipped.append(SkippedRecord("asset", _row_id(row), reason))

    # 2. Accounts (id → email)
    try:
        account_rows = await directory.list_accounts()
    except Exception as exc:
        run_log.error(f"Error fetching users: {exc}")
        raise DirectoryError(str(exc)) from exc
    run_log.info(f"Fetched {len(account_rows)} users")

    accounts: list[AccountRecord] = []
    for row in account_rows:
        try:
            accounts.append(AccountRecord.model_validate(row))
        except ValidationError as exc:
            reason = _describe(exc)
            run_log.warning(f"Quarantined account {_row_id(row)}: {reason}")
            loaded.skipped.append(SkippedRecord("account", _row_id(row), reason))

    # 3. Profiles (chat token, notify days)
    try:
        profile_rows = await directory.list_profiles()
    except Exception as exc:
        run_log.error(f"Error fetching profiles: {exc}")
        raise DirectoryError(str(exc)) from exc

    profiles: dict[str, ProfileRecord] = {}
    for row in profile_rows:
        try:
            profile = ProfileRecord.model_validate(row)
        except ValidationError as exc:
            reason = _describe(exc)
            run_log.warning(f"Quarantined profile {_row_id(row)}: {reason}")
            loaded.skipped.append(SkippedRecord("profile", _row_id(row), reason))
            continue
        profiles[profile.id] = profile

    for account in accounts:
        loaded.owners[account.id] = build_owner(
            account, profiles.get(account.id), default_notify_days,
        )

    logger.debug(
        "Directory loaded: %d assets, %d owners, %d quarantined",
        len(loaded.assets), len(loaded.owners), len(loaded.skipped),
    )
    return loaded
