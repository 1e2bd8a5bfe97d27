"""Tests for expiry_reminder.data.records — load-boundary validation."""

from datetime import date

import pytest
from pydantic import ValidationError

from expiry_reminder.data.records import (
    AccountRecord,
    AssetRecord,
    ProfileRecord,
    build_owner,
)


def _asset_row(**overrides):
    row = {
        "id": "a1",
        "user_id": "u1",
        "name": "阿里云域名",
        "expiry_date": "2026-01-20",
        "notification_enabled": True,
    }
    row.update(overrides)
    return row


class TestAssetRecord:
    def test_valid_row(self):
        asset = AssetRecord.model_validate(_asset_row()).to_asset()
        assert asset.id == "a1"
        assert asset.owner_id == "u1"
        assert asset.expiry_date == date(2026, 1, 20)
        assert asset.notification_enabled is True
        assert asset.notify_days_override is None

    def test_timestamp_truncated_to_day(self):
        asset = AssetRecord.model_validate(
            _asset_row(expiry_date="2026-01-20T23:59:00+08:00")
        ).to_asset()
        assert asset.expiry_date == date(2026, 1, 20)

    def test_unparseable_date_rejected(self):
        with pytest.raises(ValidationError):
            AssetRecord.model_validate(_asset_row(expiry_date="next tuesday"))

    def test_missing_date_rejected(self):
        row = _asset_row()
        del row["expiry_date"]
        with pytest.raises(ValidationError):
            AssetRecord.model_validate(row)

    def test_null_enabled_means_enabled(self):
        asset = AssetRecord.model_validate(_asset_row(notification_enabled=None)).to_asset()
        assert asset.notification_enabled is True

    def test_false_enabled_is_kept(self):
        asset = AssetRecord.model_validate(_asset_row(notification_enabled=False)).to_asset()
        assert asset.notification_enabled is False

    def test_override_sorted_descending_and_deduped(self):
        asset = AssetRecord.model_validate(
            _asset_row(notify_advance_days=[1, 15, 7, 15])
        ).to_asset()
        assert asset.notify_days_override == (15, 7, 1)

    def test_override_accepts_chinese_commas(self):
        asset = AssetRecord.model_validate(
            _asset_row(notify_advance_days="10，3, 1")
        ).to_asset()
        assert asset.notify_days_override == (10, 3, 1)

    def test_empty_override_is_none(self):
        asset = AssetRecord.model_validate(_asset_row(notify_advance_days=[])).to_asset()
        assert asset.notify_days_override is None

    def test_negative_override_days_dropped(self):
        asset = AssetRecord.model_validate(
            _asset_row(notify_advance_days=[7, -1])
        ).to_asset()
        assert asset.notify_days_override == (7,)

    def test_only_negative_override_falls_back(self):
        asset = AssetRecord.model_validate(
            _asset_row(notify_advance_days=[-3])
        ).to_asset()
        assert asset.notify_days_override is None

    def test_negative_profile_days_dropped(self):
        profile = ProfileRecord.model_validate({"id": "u1", "notify_days": "30, -2, 7"})
        assert profile.notify_days == [30, 7]

    def test_integer_ids_stringified(self):
        asset = AssetRecord.model_validate(_asset_row(id=12, user_id=3)).to_asset()
        assert asset.id == "12"
        assert asset.owner_id == "3"

    def test_extra_fields(self):
        asset = AssetRecord.model_validate(
            _asset_row(
                type="Domain",
                websites=["www.yy.com", " "],
                renewal_method="在线续费",
                images=["x.png"],
            )
        ).to_asset()
        assert asset.asset_type == "Domain"
        assert asset.websites == ("www.yy.com",)
        assert asset.renewal_method == "在线续费"


class TestProfileAndAccount:
    def test_blank_webhook_is_none(self):
        assert ProfileRecord.model_validate({"id": "u1", "wechat_webhook": "  "}).wechat_webhook is None

    def test_blank_email_is_none(self):
        assert AccountRecord.model_validate({"id": "u1", "email": ""}).email is None

    def test_build_owner_with_profile(self):
        account = AccountRecord(id="u1", email="a@b.com")
        profile = ProfileRecord(id="u1", wechat_webhook="tok", notify_days=[1, 30])
        owner = build_owner(account, profile, (30, 7, 1))
        assert owner.email == "a@b.com"
        assert owner.chat_token == "tok"
        assert owner.notify_days == (30, 1)

    def test_build_owner_without_profile_uses_defaults(self):
        owner = build_owner(AccountRecord(id="u1", email="a@b.com"), None, (30, 7, 1))
        assert owner.chat_token is None
        assert owner.notify_days == (30, 7, 1)

    def test_build_owner_empty_profile_days_uses_defaults(self):
        profile = ProfileRecord(id="u1", notify_days=[])
        owner = build_owner(AccountRecord(id="u1", email="a@b.com"), profile, (14,))
        assert owner.notify_days == (14,)
