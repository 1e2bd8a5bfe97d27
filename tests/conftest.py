"""Shared test fixtures and configuration.

Sets up fake environment variables before expiry_reminder.config is
imported, and provides temp-file SQLite stores and in-memory fakes for
the directory port.
"""

import os

# Patch env vars BEFORE any expiry_reminder imports
os.environ.setdefault("RESEND_API_KEY", "")
os.environ.setdefault("DIRECTORY_PROVIDER", "sqlite")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "Asia/Shanghai")
os.environ.setdefault("MESSAGE_LOCALE", "zh")
os.environ.setdefault("DEDUPE_SAME_DAY", "false")

from datetime import date

import pytest

from expiry_reminder.config import Settings


class FakeDirectory:
    """In-memory DirectoryPort returning canned rows."""

    def __init__(self, assets=None, accounts=None, profiles=None, fail_on=None):
        self.assets = assets or []
        self.accounts = accounts or []
        self.profiles = profiles or []
        self.fail_on = fail_on

    async def list_assets(self):
        if self.fail_on == "assets":
            raise RuntimeError("assets table unavailable")
        return self.assets

    async def list_accounts(self):
        if self.fail_on == "accounts":
            raise RuntimeError("admin API unavailable")
        return self.accounts

    async def list_profiles(self):
        if self.fail_on == "profiles":
            raise RuntimeError("profiles table unavailable")
        return self.profiles


@pytest.fixture
def today():
    return date(2026, 3, 15)


@pytest.fixture
def settings():
    """Settings with no email key and zero send spacing."""
    return Settings(EMAIL_SEND_INTERVAL_SECONDS=0, TIMEZONE="Asia/Shanghai")


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_assets.db")


@pytest.fixture
def asset_db(tmp_db_path):
    from expiry_reminder.data.db import AssetDB
    return AssetDB(tmp_db_path)


@pytest.fixture
def account_db(tmp_db_path):
    from expiry_reminder.data.db import AccountDB
    return AccountDB(tmp_db_path)


@pytest.fixture
def profile_db(tmp_db_path):
    from expiry_reminder.data.db import ProfileDB
    return ProfileDB(tmp_db_path)


@pytest.fixture
def ledger(tmp_db_path):
    from expiry_reminder.data.db import NotificationLogDB
    return NotificationLogDB(tmp_db_path)


@pytest.fixture
def make_directory():
    """Return the FakeDirectory class for building canned directories."""
    return FakeDirectory


def make_asset(**overrides):
    """Build a typed Asset with sensible defaults."""
    from expiry_reminder.data.models import Asset

    fields = {
        "id": "asset-1",
        "owner_id": "user-1",
        "name": "Domain X",
        "expiry_date": date(2026, 3, 22),
        "notification_enabled": True,
    }
    fields.update(overrides)
    return Asset(**fields)


def make_owner(**overrides):
    """Build typed OwnerPreferences with sensible defaults."""
    from expiry_reminder.data.models import OwnerPreferences

    fields = {
        "owner_id": "user-1",
        "email": "a@b.com",
        "chat_token": None,
        "notify_days": (30, 7, 1),
    }
    fields.update(overrides)
    return OwnerPreferences(**fields)


@pytest.fixture
def asset_factory():
    return make_asset


@pytest.fixture
def owner_factory():
    return make_owner
