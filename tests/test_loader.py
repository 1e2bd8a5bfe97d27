"""Tests for expiry_reminder.core.loader — directory loading and quarantine."""

import pytest

from expiry_reminder.core.loader import load_directory
from expiry_reminder.core.run_log import RunLog
from expiry_reminder.ports.directory_port import DirectoryError


ASSETS = [
    {"id": "a1", "user_id": "u1", "name": "U盾", "expiry_date": "2026-03-22"},
    {"id": "a2", "user_id": "u1", "name": "Broken", "expiry_date": "not-a-date"},
]
ACCOUNTS = [
    {"id": "u1", "email": "a@b.com"},
    {"id": "u2", "email": None},
]
PROFILES = [
    {"id": "u1", "wechat_webhook": "tok_abcdef", "notify_days": [14, 1]},
    {"id": "u2", "notify_days": "oops"},
]


class TestLoadDirectory:
    @pytest.mark.asyncio
    async def test_valid_rows_loaded(self, make_directory):
        directory = make_directory(ASSETS, ACCOUNTS, PROFILES)
        loaded = await load_directory(directory, RunLog())

        assert [a.id for a in loaded.assets] == ["a1"]
        owner = loaded.owners["u1"]
        assert owner.email == "a@b.com"
        assert owner.chat_token == "tok_abcdef"
        assert owner.notify_days == (14, 1)

    @pytest.mark.asyncio
    async def test_invalid_rows_quarantined(self, make_directory):
        run_log = RunLog()
        loaded = await load_directory(make_directory(ASSETS, ACCOUNTS, PROFILES), run_log)

        kinds = {(s.kind, s.record_id) for s in loaded.skipped}
        assert kinds == {("asset", "a2"), ("profile", "u2")}
        assert any("Quarantined asset a2" in line for line in run_log.lines)

    @pytest.mark.asyncio
    async def test_owner_without_profile_gets_defaults(self, make_directory):
        loaded = await load_directory(
            make_directory(ASSETS, ACCOUNTS, []), RunLog(), default_notify_days=(30, 7, 1),
        )
        assert loaded.owners["u2"].email is None
        assert loaded.owners["u2"].notify_days == (30, 7, 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("table", ["assets", "accounts", "profiles"])
    async def test_fetch_failure_raises_directory_error(self, make_directory, table):
        run_log = RunLog()
        directory = make_directory(ASSETS, ACCOUNTS, PROFILES, fail_on=table)

        with pytest.raises(DirectoryError):
            await load_directory(directory, run_log)

        assert any("Error fetching" in line for line in run_log.lines)

    @pytest.mark.asyncio
    async def test_counts_logged(self, make_directory):
        run_log = RunLog()
        await load_directory(make_directory(ASSETS, ACCOUNTS, PROFILES), run_log)
        assert "Fetched 2 assets" in run_log.lines
        assert "Fetched 2 users" in run_log.lines
